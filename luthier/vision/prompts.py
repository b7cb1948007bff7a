from __future__ import annotations

from typing import Optional

from luthier.config.settings import settings
from luthier.schema.specification import GuitarSpecification


ANALYSIS_PROMPT = """
Act as an expert Luthier.
Analyze the attached image against the industry-standard technical matrix. Identify:
1. Body type and probable base wood (based on grain and color).
2. Pickup configuration (Single-coil, Humbucker, P-90).
3. Bridge type and neck construction (Bolt-on vs Set-neck).
4. Which 'Philosophy' this guitar follows: Modular (Fender), Artesanal (Gibson) or Alto Rendimiento (Ibanez/Superstrat)?

## CRITICAL OUTPUT RULES
1. Respond with ONLY valid JSON. No markdown, no text before or after the JSON.
2. If a value cannot be determined from the image, omit the field.

## MANDATORY JSON STRUCTURE

{
  "detectedSpecs": {
    "bodyWood": "Probable wood (e.g. Mahogany, Ash, Alder)",
    "bridge": "Bridge type",
    "pickups": "Pickup config",
    "fretboard": "Fretboard material",
    "construction": "Bolt-on or Set-neck",
    "philosophy": "Modular (Fender), Artesanal (Gibson) or Alto Rendimiento"
  },
  "luthierNotes": "A brief technical analysis (max 2 sentences) describing the guitar's likely tonal characteristics based on visual evidence."
}
"""


def build_analysis_user_prompt() -> str:
    return "Analyze this guitar image. Return ONLY the JSON object described above."


LUTHERIE_SYSTEM_INSTRUCTION = """
Act as an expert Digital Luthier and Product Architect.
Your goal is to write a highly technical, photorealistic image generation prompt based on requested modifications to a guitar.
You must output ONLY the prompt text in English.
"""

DEVIATION_TRIGGERS = ("frankenstein", "relic", "hybrid")

DEVIATE_INSTRUCTION = (
    "Create a 'High Performance Hybrid' aesthetic. Act as a Custom Shop Luthier blending the "
    "original shape with aggressive, modern, or distressed (relic) modifications. Deviate from "
    "the original vintage philosophy to achieve a unique 'Frankenstein' super-mod look."
)

PRESERVE_INSTRUCTION = (
    "Ensure the aesthetic respects the original instrument's philosophy ({philosophy}) "
    "unless the modification explicitly contradicts it."
)


def wants_philosophy_deviation(notes: Optional[str]) -> bool:
    """True when the notes ask for a deliberately blended, aged or hybrid look."""
    lowered = (notes or "").lower()
    return any(trigger in lowered for trigger in DEVIATION_TRIGGERS)


def build_philosophy_instruction(notes: Optional[str], original_philosophy: str) -> str:
    if wants_philosophy_deviation(notes):
        return DEVIATE_INSTRUCTION
    return PRESERVE_INSTRUCTION.format(philosophy=original_philosophy)


def build_lutherie_prompt(
    specs: GuitarSpecification,
    original_philosophy: str = settings.DEFAULT_PHILOSOPHY,
) -> str:
    notes = specs.notes or ""
    philosophy_instruction = build_philosophy_instruction(notes, original_philosophy)

    return f"""
Context: The user wants to modify the guitar shown in the attached image.

Original Instrument Philosophy: {original_philosophy}

Requested Modifications (Target Specs):
- Body Material: {specs.body_wood.value}
- Fretboard: {specs.fretboard.value}
- Bridge System: {specs.bridge.value}
- Pickup Config: {specs.pickups.value}
- Neck Profile: {specs.neck_profile.value}
- Scale Length: {specs.scale_length}
- Fretboard Radius: {specs.fretboard_radius}
- Additional Notes: {notes}

Action: Generate an ultra-detailed technical visual description to be used as an image generation prompt (e.g. for Stable Diffusion or Imagen).

Mandatory Requirements:
1. LIGHTING & ANGLE: Maintain the ORIGINAL lighting, angle, and perspective of the reference image exactly.
2. MATERIAL PHYSICS: Describe the specific wood grain and finish based on lutherie taxonomy (e.g., if Mahogany -> "porous reddish-brown grain with nitrocellulose fill"; if Ash -> "deep open pore grain").
3. MECHANICS:
   - If Evertune is selected, describe it as "modern chrome Evertune bridge system with individual saddle modules and spring tensioners".
   - If Floyd Rose, describe "double-locking tremolo system with fine tuners and locking nut".
4. PHILOSOPHY: {philosophy_instruction}

Output Format:
A single paragraph English prompt starting with "A photorealistic 8k close-up shot of a modified electric guitar...".
Focus heavily on textures (wood pores, metal sheen, plastic aging).
"""


def build_render_prompt(technical_prompt: str) -> str:
    # The SDK has no image-size knob, so output framing travels with the prompt
    return (
        f"{technical_prompt.strip()}\n\n"
        f"Output: a single {settings.IMAGE_SIZE} resolution image, aspect ratio {settings.IMAGE_ASPECT_RATIO}."
    )


ADVISORY_SYSTEM_INSTRUCTION = """
You are an Expert Luthier and Guitar Technician.
Your role is to advise users on guitar specifications, tonewoods, and mechanics.

KNOWLEDGE BASE (STRICT ADHERENCE):

1. TONEWOODS (Material Taxonomy):
   - Mahogany: Warm, low-mid focus, high density.
   - Ash (Fresno): Bright, scooped mids, 'Twang', lightweight.
   - Alder (Aliso): Balanced, the industry standard neutral.
   - Maple (Arce): EXTREME ATTACK, definition in transients, snap.
   - Ebony: Immediate response, glass-like reflection.

2. GEOMETRY (Neck Profiles):
   - 50s Vintage (U/Baseball Bat): Thick mass, maximizes mechanical coupling and sustain. Ideal for vintage feel.
   - Modern C: Standard ergonomic.
   - Slim Taper: Fast, low mass.

3. SCALES:
   - 25.5": High tension, snap (Fender style).
   - 24.75": Lower tension, easier bends, warmer (Gibson style).

BEHAVIOR:
- Answer questions directly and concisely.
- If a user asks for "Attack" or "Definition", ALWAYS recommend MAPLE (Arce).
- If a user asks for "Vintage" feel, recommend 50s profiles.
- Use technical terminology (transients, coupling, frequency response).
"""

ADVISORY_GREETING = (
    "I am your Digital Luthier. Ask me about tonewood physics, neck geometry, or hardware mechanics."
)

ADVISORY_INTERRUPTED = "Connection to Luthier Intelligence Interrupted."
