from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from luthier.schema.enums import (
    BodyWood,
    NeckProfile,
    FretboardMaterial,
    BridgeSystem,
    PickupConfig,
)


class GuitarSpecification(BaseModel):
    """Target configuration for the instrument. Updates return a new record."""

    model_config = ConfigDict(frozen=True)

    body_wood: BodyWood = BodyWood.alder
    neck_profile: NeckProfile = NeckProfile.modern_c
    fretboard: FretboardMaterial = FretboardMaterial.rosewood
    bridge: BridgeSystem = BridgeSystem.tune_o_matic
    pickups: PickupConfig = PickupConfig.hh
    scale_length: str = '24.75"'
    fretboard_radius: str = '12"'
    notes: str = ""
    construction: Optional[str] = None
    philosophy: Optional[str] = None

    def set_field(self, field: str, value: Any) -> GuitarSpecification:
        return self.update({field: value})

    def update(self, changes: Mapping[str, Any]) -> GuitarSpecification:
        """Validate and apply several field changes in one step."""
        unknown = [name for name in changes if name not in type(self).model_fields]
        if unknown:
            raise ValueError(f"Unknown specification field(s): {', '.join(unknown)}")
        return type(self).model_validate({**self.model_dump(), **changes})

    def apply_preset(self, name: str) -> GuitarSpecification:
        if name not in PRESETS:
            raise KeyError(f"Unknown preset: {name}")
        return self.update(PRESETS[name])


FRANKENSTRAT_NOTES = (
    "Custom Shop 'Frankenstein' mod. Gibson style Humbucker in bridge. "
    "Heavy relic aged Nitrocellulose finish. High performance hybrid aesthetic."
)

PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType({
    "frankenstrat": MappingProxyType({
        "bridge": BridgeSystem.floyd_rose,
        "pickups": PickupConfig.hss,
        "body_wood": BodyWood.ash,
        "notes": FRANKENSTRAT_NOTES,
    }),
})


class SpecSummary(BaseModel):
    scale_length: str
    fretboard_radius: str
    weight_relief: str
    sustain_profile: str


def summarize(spec: GuitarSpecification) -> SpecSummary:
    return SpecSummary(
        scale_length=spec.scale_length,
        fretboard_radius=spec.fretboard_radius,
        weight_relief="CHAMBERED" if spec.body_wood == BodyWood.mahogany else "SOLID",
        sustain_profile="HIGH / DAMPED" if spec.bridge == BridgeSystem.floyd_rose else "MAXIMUM / DIRECT",
    )


def preset_catalog() -> Dict[str, Dict[str, str]]:
    return {
        name: {field: getattr(value, "value", value) for field, value in fields.items()}
        for name, fields in PRESETS.items()
    }
