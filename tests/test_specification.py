"""
Tests for the specification record and presets.
"""

import pytest
from pydantic import ValidationError

from luthier.schema.enums import BodyWood, BridgeSystem, FretboardMaterial, NeckProfile, PickupConfig
from luthier.schema.specification import (
    FRANKENSTRAT_NOTES,
    GuitarSpecification,
    preset_catalog,
    summarize,
)


def test_defaults():
    spec = GuitarSpecification()
    assert spec.body_wood == BodyWood.alder
    assert spec.neck_profile == NeckProfile.modern_c
    assert spec.fretboard == FretboardMaterial.rosewood
    assert spec.bridge == BridgeSystem.tune_o_matic
    assert spec.pickups == PickupConfig.hh
    assert spec.scale_length == '24.75"'
    assert spec.fretboard_radius == '12"'
    assert spec.notes == ""


def test_set_field_returns_new_record():
    spec = GuitarSpecification()
    updated = spec.set_field("body_wood", "Koa")
    assert updated.body_wood == BodyWood.koa
    assert spec.body_wood == BodyWood.alder


def test_set_field_validates_enum_membership():
    with pytest.raises(ValidationError):
        GuitarSpecification().set_field("bridge", "Bigsby")


def test_set_field_rejects_unknown_field():
    with pytest.raises(ValueError):
        GuitarSpecification().set_field("headstock", "reverse")


def test_free_text_accepts_anything():
    spec = GuitarSpecification().set_field("scale_length", "27 inch baritone")
    assert spec.scale_length == "27 inch baritone"


def test_records_are_immutable():
    with pytest.raises(ValidationError):
        GuitarSpecification().body_wood = BodyWood.maple


@pytest.mark.parametrize("start", [
    GuitarSpecification(),
    GuitarSpecification(
        body_wood=BodyWood.mahogany,
        bridge=BridgeSystem.evertune,
        pickups=PickupConfig.p90,
        notes="gold hardware",
    ),
])
def test_frankenstrat_preset_is_always_the_same(start):
    spec = start.apply_preset("frankenstrat")
    assert spec.bridge == BridgeSystem.floyd_rose
    assert spec.pickups == PickupConfig.hss
    assert spec.body_wood == BodyWood.ash
    assert spec.notes == FRANKENSTRAT_NOTES
    assert "hybrid" in spec.notes
    # untouched fields survive
    assert spec.neck_profile == start.neck_profile
    assert spec.fretboard == start.fretboard


def test_unknown_preset():
    with pytest.raises(KeyError):
        GuitarSpecification().apply_preset("telecaster")


def test_preset_catalog_uses_display_values():
    catalog = preset_catalog()
    assert catalog["frankenstrat"]["bridge"] == "Floyd Rose (Double Locking)"


def test_summary_stats():
    summary = summarize(GuitarSpecification())
    assert summary.weight_relief == "SOLID"
    assert summary.sustain_profile == "MAXIMUM / DIRECT"

    summary = summarize(GuitarSpecification(body_wood=BodyWood.mahogany, bridge=BridgeSystem.floyd_rose))
    assert summary.weight_relief == "CHAMBERED"
    assert summary.sustain_profile == "HIGH / DAMPED"
