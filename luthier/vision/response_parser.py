from __future__ import annotations

import json
import re
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from luthier.schema.output_schema import AnalysisResult, DetectedSpecs
from luthier.vision.errors import MalformedResponseError


logger = logging.getLogger(__name__)


def clean_json_string(raw_text: str) -> str:
    """Extract JSON from raw text, handling markdown code blocks."""
    markdown_pattern = r"```(?:json)?\s*(\{.*?\})\s*```"
    match = re.search(markdown_pattern, raw_text, re.DOTALL)
    if match:
        return match.group(1)

    json_pattern = r"\{.*\}"
    match = re.search(json_pattern, raw_text, re.DOTALL)
    if match:
        return match.group(0)

    raise ValueError("No valid JSON object found in raw text")


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    text = str(value).strip()
    return text or None


def _detected_specs(raw: Any) -> DetectedSpecs:
    if raw is None:
        return DetectedSpecs()
    if not isinstance(raw, dict):
        raise MalformedResponseError(f"detectedSpecs must be an object, got {type(raw).__name__}")

    cleaned: Dict[str, Optional[str]] = {key: _as_text(value) for key, value in raw.items()}
    return DetectedSpecs.model_validate(cleaned)


def parse_analysis_response(raw_text: Optional[str]) -> AnalysisResult:
    """
    Parse the analysis collaborator's JSON answer.

    Unlike the per-field leniency inside detectedSpecs, the envelope itself must
    be valid JSON: anything unparseable is a hard failure.

    Raises:
        MalformedResponseError: If no JSON object can be recovered
    """
    if not raw_text or not raw_text.strip():
        raise MalformedResponseError("No analysis received")

    try:
        cleaned = clean_json_string(raw_text)
        data = json.loads(cleaned)
    except (ValueError, json.JSONDecodeError) as e:
        logger.error(f"Analysis JSON parsing failed: {e}")
        raise MalformedResponseError(f"Unparseable analysis response: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Analysis response is not a JSON object")

    try:
        return AnalysisResult(
            detected_specs=_detected_specs(data.get("detectedSpecs", data.get("detected_specs"))),
            luthier_notes=_as_text(data.get("luthierNotes", data.get("luthier_notes"))) or "",
        )
    except ValidationError as e:
        logger.error(f"Failed to construct analysis result: {e}")
        raise MalformedResponseError(f"Invalid analysis response: {e}") from e
