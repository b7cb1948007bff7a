from __future__ import annotations

import argparse
import logging
import os
import sys

import uvicorn

from luthier.config.settings import settings


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger(__name__)

    parser = argparse.ArgumentParser(
        description="Luthier Workbench server"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Interface to bind"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to listen on"
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Gemini API Key (overrides environment variable)"
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the offline mock collaborators"
    )

    args = parser.parse_args()

    if args.api_key:
        os.environ[settings.GEMINI_API_KEY_ENV] = args.api_key

    if args.mock:
        settings.USE_MOCK_CLIENT = True
    elif not os.getenv(settings.GEMINI_API_KEY_ENV):
        logger.error(
            f"{settings.GEMINI_API_KEY_ENV} is not set. Please provide it via --api-key or environment variable."
        )
        sys.exit(1)

    logger.info(f"Starting Luthier Workbench on {args.host}:{args.port}")
    uvicorn.run("luthier.server:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
