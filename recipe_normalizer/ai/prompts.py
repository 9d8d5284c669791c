"""
Prompts for recipe extraction.
"""
from __future__ import annotations

EXTRACTION_PROMPT = """
Extract recipe information from the provided text in any language (English, German, Danish, etc.).

Use these extraction classes, in the order they appear in the text:
- title: the recipe title
- description: a short description or introduction of the dish, if present
- servings: the number of servings/portions. Look for patterns like
  "Serves 4", "Yield: 4", "Für 4 Portionen", "Makes 12 cookies".
  Put ONLY the number in the "count" attribute.
- prep_time, cook_time, total_time: preparation, cooking and total time.
  Put the duration in whole minutes in the "minutes" attribute.
- ingredient: one ingredient line exactly as written, including quantity and unit
- section: the heading of a group of instructions (e.g. "For the sauce", "Teig")
- step: one instruction step exactly as written
- keyword: a tag, category or cuisine mentioned for the recipe

CRITICAL RULES:
- DO NOT TRANSLATE anything. Keep every extraction in its ORIGINAL LANGUAGE as written.
- Extract EVERY ingredient from the ingredient list, even without quantity or unit.
- Extract each ingredient ONLY ONCE. Do not extract ingredients mentioned inside steps.
- Extract EVERY instruction step in order. Do not merge or summarize steps.
- Only extract a section when the instructions are visibly grouped under headings;
  every step that follows a section belongs to it until the next section.
- If an ingredient line contains BOTH metric and imperial measurements
  (e.g. "1.75kg/ 3.5lb"), keep the whole line as one ingredient.
- Ignore navigation, comments, advertisements and unrelated recipes.
"""

ALLERGY_SKIP_INSTRUCTION = (
    "Skip allergy/dietary tag detection. Do not add any tags for allergens."
)


def build_allergy_instruction(allergies: list[str] | None, strict: bool = False) -> str:
    """Build the allergen detection part of a prompt.

    Args:
        allergies: Allergens to detect, e.g. ["gluten", "dairy"]
        strict: Restrict keywords to the allergen list only

    Returns:
        Prompt fragment
    """
    if not allergies:
        return ALLERGY_SKIP_INSTRUCTION

    allergen_list = ", ".join(allergies)
    instruction = (
        f"Allergen detection: Only detect these specific allergens: {allergen_list}. "
        "If the recipe contains one of them, add it as a keyword using exactly the name "
        "from this list."
    )
    if strict:
        instruction += (
            " STRICT MODE: keywords MUST contain ONLY items from this list. "
            "NEVER add additional keywords."
        )
    return instruction


def build_extraction_prompt(allergies: list[str] | None = None, strict: bool = False,
                            url: str | None = None) -> str:
    """Build the full LangExtract prompt description."""
    parts = [EXTRACTION_PROMPT.strip()]
    if url:
        parts.append(f"The recipe was found at {url}.")
    parts.append(build_allergy_instruction(allergies, strict))
    return "\n\n".join(parts)


def build_video_text(transcript: str, title: str | None = None, description: str | None = None,
                     uploader: str | None = None, duration: float | None = None) -> str:
    """Combine a video transcript and its metadata into extraction input."""
    parts = []
    if title:
        parts.append(f"VIDEO TITLE: {title}")
    if uploader:
        parts.append(f"UPLOADER: {uploader}")
    if duration:
        parts.append(f"DURATION: {round(duration)} seconds")
    if description and description.strip():
        parts.append(f"VIDEO DESCRIPTION:\n{description.strip()}")
    if transcript and transcript.strip():
        parts.append(f"VIDEO TRANSCRIPT:\n{transcript.strip()}")
    return "\n\n".join(parts)


IMAGE_EXTRACTION_PROMPT = """
The images show one recipe (a cookbook page, a handwritten card or a screenshot).
Extract it as a single Schema.org Recipe JSON-LD object with these fields:
  "name": string,
  "description": string or null,
  "recipeYield": string or null,
  "prepTime", "cookTime", "totalTime": ISO-8601 durations like "PT30M" or null,
  "recipeIngredient": array of ingredient lines exactly as written,
  "recipeInstructions": array of HowToStep objects {"@type": "HowToStep", "text": ...},
      grouped in HowToSection objects {"@type": "HowToSection", "name": ..., "itemListElement": [...]}
      when the recipe has headed groups of steps,
  "keywords": array of strings.
Do not translate. Return valid JSON only.
"""


def build_image_prompt(allergies: list[str] | None = None) -> str:
    """Build the prompt for image based extraction."""
    return "\n\n".join([IMAGE_EXTRACTION_PROMPT.strip(), build_allergy_instruction(allergies)])
