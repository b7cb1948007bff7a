from __future__ import annotations

import base64
import binascii
import logging
import re
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from luthier.config.settings import settings
from luthier.schema.input_schema import ImagePayload


logger = logging.getLogger(__name__)

_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


class InvalidImageError(ValueError):
    pass


def split_data_uri(value: str) -> Tuple[Optional[str], str]:
    """Return (mime_type, base64_data); mime_type is None for plain base64."""
    match = _DATA_URI_PATTERN.match(value.strip())
    if match:
        return match.group("mime"), match.group("data")
    return None, value.strip()


class ImageLoader:
    def sniff_mime_type(self, data: bytes) -> Optional[str]:
        try:
            with Image.open(BytesIO(data)) as image:
                return Image.MIME.get(image.format)
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Could not identify uploaded image format: {e}")
            return None

    def load(self, data: bytes, mime_type: Optional[str] = None) -> ImagePayload:
        """Wrap uploaded bytes, keeping the browser's MIME type when it sent one."""
        if not data:
            raise InvalidImageError("Uploaded image is empty")
        resolved = mime_type or self.sniff_mime_type(data) or settings.DEFAULT_IMAGE_MIME
        return ImagePayload(data=data, mime_type=resolved)

    def load_base64(self, encoded: str, mime_type: Optional[str] = None) -> ImagePayload:
        uri_mime, payload = split_data_uri(encoded)
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidImageError(f"Image is not valid base64: {e}") from e
        return self.load(data, mime_type or uri_mime)
