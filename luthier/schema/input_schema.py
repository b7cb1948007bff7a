from __future__ import annotations

import base64
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from luthier.schema.enums import (
    BodyWood,
    NeckProfile,
    FretboardMaterial,
    BridgeSystem,
    PickupConfig,
    WorkbenchTab,
)


class ImagePayload(BaseModel):
    """Raw image bytes with the MIME type they were uploaded or rendered as."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str

    @field_serializer("data", when_used="json")
    def _serialize_data(self, data: bytes) -> str:
        return base64.b64encode(data).decode("utf-8")

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class ImageUploadRequest(BaseModel):
    # Plain base64 or a full data: URI
    image: str
    mime_type: Optional[str] = None


class TabRequest(BaseModel):
    tab: WorkbenchTab


class SpecUpdateRequest(BaseModel):
    body_wood: Optional[BodyWood] = None
    neck_profile: Optional[NeckProfile] = None
    fretboard: Optional[FretboardMaterial] = None
    bridge: Optional[BridgeSystem] = None
    pickups: Optional[PickupConfig] = None
    scale_length: Optional[str] = None
    fretboard_radius: Optional[str] = None
    notes: Optional[str] = None
    construction: Optional[str] = None
    philosophy: Optional[str] = None


class ChatRequest(BaseModel):
    message: str
