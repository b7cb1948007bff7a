from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Type

from luthier.schema.enums import (
    BodyWood,
    NeckProfile,
    FretboardMaterial,
    BridgeSystem,
    PickupConfig,
)


WOOD_CHARACTERISTICS: Mapping[BodyWood, str] = MappingProxyType({
    BodyWood.mahogany: "High density, warm lows/mids, slow decay. Visually porous grain, often reddish-brown.",
    BodyWood.ash: "Lightweight, scooped mids, pronounced 'twang' and high-end snap. Distinctive, bold grain patterns.",
    BodyWood.alder: "Balanced weight and frequency response. The neutral standard for bolt-on bodies. Closed grain.",
    BodyWood.maple: "Extreme density, very bright attack, heavy weight. Tight grain, often figured (flame/quilt).",
    BodyWood.basswood: "Soft, lightweight, neutral tone with strong fundamental. Minimal grain definition.",
    BodyWood.koa: "Medium density, crisp highs that warm up over time. Exotic, highly figured golden/brown grain.",
})

NECK_CHARACTERISTICS: Mapping[NeckProfile, str] = MappingProxyType({
    NeckProfile.modern_c: "Oval ergonomic profile, standard for contemporary playability.",
    NeckProfile.vintage_50s: "Thick 'Baseball Bat' profile, maximizes mechanical coupling and sustain.",
    NeckProfile.slim_taper: "Flat 'D' shape, low mass, favored for faster playing styles.",
    NeckProfile.wizard: "Ultra-thin, flat radius, reinforced with volute or multi-ply for stability.",
})

FRETBOARD_RESPONSE: Mapping[FretboardMaterial, str] = MappingProxyType({
    FretboardMaterial.ebony: "Extreme hardness, glass-like surface, immediate transient attack.",
    FretboardMaterial.maple: "Finished surface, bright snap, distinct separation of notes.",
    FretboardMaterial.rosewood: "Oily open pore, warm attack, attenuates harsh high frequencies.",
    FretboardMaterial.pau_ferro: "Harder than rosewood, snappy attack, tight grain structure.",
})

BRIDGE_MECHANICS: Mapping[BridgeSystem, str] = MappingProxyType({
    BridgeSystem.tune_o_matic: "Fixed bridge, sharp break angle, maximizes body resonance transfer.",
    BridgeSystem.hardtail: "String-through body, high tuning stability, direct vibration transfer.",
    BridgeSystem.synchronized_tremolo: "Vintage vibrato fulcrum, relies on spring claw tension.",
    BridgeSystem.floyd_rose: "Double locking nut/bridge, infinite sustain, dive-bomb capability.",
    BridgeSystem.evertune: "Mechanical spring modules per saddle, constant tension, zero pitch drift.",
})

PICKUP_VOICING: Mapping[PickupConfig, str] = MappingProxyType({
    PickupConfig.sss: "Three single coils, glassy highs and quacky in-between positions, some hum.",
    PickupConfig.hss: "Humbucker in the bridge for gain, single coils at neck and middle for clarity.",
    PickupConfig.hh: "Two humbuckers, thick hum-free output with strong mids and sustain.",
    PickupConfig.p90: "Wide single coils, gritty midrange bark between single coil and humbucker.",
})

# Keyed by enum class: members of different taxonomies can share a value ("Maple")
_TABLES: Dict[Type[Enum], Mapping] = {
    BodyWood: WOOD_CHARACTERISTICS,
    NeckProfile: NECK_CHARACTERISTICS,
    FretboardMaterial: FRETBOARD_RESPONSE,
    BridgeSystem: BRIDGE_MECHANICS,
    PickupConfig: PICKUP_VOICING,
}

TAXONOMY_KEYS: Dict[str, Type[Enum]] = {
    "body_wood": BodyWood,
    "neck_profile": NeckProfile,
    "fretboard": FretboardMaterial,
    "bridge": BridgeSystem,
    "pickups": PickupConfig,
}


def describe(value: Enum, brief: bool = False) -> str:
    """
    Return the descriptive sentence for a vocabulary value.

    Args:
        value: A member of one of the vocabulary enums
        brief: Only return the first comma-separated clause

    Raises:
        KeyError: If the value does not belong to a known vocabulary
    """
    table = _TABLES.get(type(value))
    if table is None:
        raise KeyError(f"{value!r} is not a vocabulary value")
    text = table[value]
    if brief:
        return text.split(",")[0]
    return text


def vocabulary() -> Dict[str, List[Dict[str, str]]]:
    """Every taxonomy with its options, for populating selectors."""
    return {
        key: [{"value": member.value, "description": describe(member)} for member in enum_cls]
        for key, enum_cls in TAXONOMY_KEYS.items()
    }
