from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from luthier.schema.enums import ChatRole, WorkbenchTab
from luthier.schema.specification import GuitarSpecification, SpecSummary


class DetectedSpecs(BaseModel):
    """Best-effort reading of the uploaded instrument. Any field may be missing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    body_wood: Optional[str] = Field(default=None, alias="bodyWood")
    neck_profile: Optional[str] = Field(default=None, alias="neckProfile")
    fretboard: Optional[str] = None
    bridge: Optional[str] = None
    pickups: Optional[str] = None
    scale_length: Optional[str] = Field(default=None, alias="scaleLength")
    fretboard_radius: Optional[str] = Field(default=None, alias="fretboardRadius")
    notes: Optional[str] = None
    construction: Optional[str] = None
    philosophy: Optional[str] = None


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    detected_specs: DetectedSpecs = Field(default_factory=DetectedSpecs, alias="detectedSpecs")
    luthier_notes: str = Field(default="", alias="luthierNotes")


class GenerationResult(BaseModel):
    technical_prompt: str
    image_url: str


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: ChatRole
    text: str


class ChatEvent(BaseModel):
    """One line of the streamed advisory response."""

    type: str  # fragment | interrupted | done
    text: str = ""


class WorkbenchView(BaseModel):
    """What the browser needs to redraw the workbench."""

    session_id: str
    active_tab: WorkbenchTab
    specs: GuitarSpecification
    summary: SpecSummary
    original_image: Optional[str] = None
    analysis: Optional[AnalysisResult] = None
    generated_prompt: Optional[str] = None
    generated_image: Optional[str] = None
    error: Optional[str] = None
    is_analyzing: bool = False
    is_generating: bool = False
    is_chatting: bool = False
    chat_available: bool = False
    transcript: List[ChatMessage] = []
    descriptions: Dict[str, str] = {}
