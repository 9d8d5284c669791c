"""
AI-based Recipe Parser using LangExtract.

This module handles AI-powered extraction of recipe data from unstructured
text using Google's LangExtract library with Gemini models, and from images
using the Gemini API directly. Extractions are folded into a Schema.org
Recipe node so the same normalizers as the structured paths apply.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import google.generativeai as genai
import langextract as lx
from langextract import tokenizer

from ..const import (
    AI_DISABLED,
    DEFAULT_MAX_AI_INPUT_LENGTH,
    DEFAULT_MAX_IMAGES,
    DEFAULT_MODEL,
    DEFAULT_VISION_MODEL,
    RATE_LIMIT,
    TIMEOUT,
    UNKNOWN_ERROR,
    VALIDATION_ERROR,
)
from ..extractors.scraper import extract_image_candidates, sanitize_html_for_ai
from ..models.recipe import RecipeDTO
from ..normalize import normalize_recipe_from_json
from ..parsers.duration import parse_human_duration
from ..parsers.steps import collect_steps
from ..parsers.tags import sort_tags_with_allergy_priority
from ..units import UnitDictionary
from .examples import RECIPE_EXAMPLES
from .prompts import build_extraction_prompt, build_image_prompt

if TYPE_CHECKING:
    from ..storage import RecipeStorage

_LOGGER = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 100

_TIME_KEYS = {
    "prep_time": "prepTime",
    "cook_time": "cookTime",
    "total_time": "totalTime",
}

ERROR_MESSAGES = {
    AI_DISABLED: "AI features are disabled",
    VALIDATION_ERROR: "AI returned an incomplete recipe",
    RATE_LIMIT: "AI rate limit reached, please try again later",
    TIMEOUT: "AI request timed out",
    UNKNOWN_ERROR: "AI extraction failed",
}


@dataclass
class AIResult:
    """Outcome of an AI extraction. Errors are reported, never raised."""

    success: bool
    data: RecipeDTO | None = None
    error: str | None = None
    code: str | None = None

    @classmethod
    def failure(cls, code: str, error: str | None = None) -> AIResult:
        return cls(success=False, error=error or ERROR_MESSAGES[code], code=code)


def _attribute(extraction: Any, key: str) -> Any:
    attrs = getattr(extraction, "attributes", None) or {}
    return attrs.get(key)


def _minutes(extraction: Any, text: str) -> int | None:
    value = _attribute(extraction, "minutes")
    if value is not None:
        try:
            minutes = int(float(value))
        except (TypeError, ValueError):
            minutes = None
        if minutes and minutes > 0:
            return minutes
    return parse_human_duration(text)


def extractions_to_jsonld(extractions: list[Any]) -> dict[str, Any]:
    """Fold LangExtract extractions into a Schema.org Recipe node.

    Steps following a 'section' extraction are nested into a HowToSection,
    other steps become top-level HowToSteps.
    """
    node: dict[str, Any] = {
        "@type": "Recipe",
        "recipeIngredient": [],
        "recipeInstructions": [],
        "keywords": [],
    }
    current_section: dict[str, Any] | None = None

    for extraction in extractions:
        kind = (extraction.extraction_class or "").lower()
        text = (extraction.extraction_text or "").strip()
        if not text:
            continue

        if kind == "title":
            node.setdefault("name", text)
        elif kind == "description":
            node.setdefault("description", text)
        elif kind == "servings":
            count = _attribute(extraction, "count")
            node.setdefault("recipeYield", str(count) if count is not None else text)
        elif kind in _TIME_KEYS:
            minutes = _minutes(extraction, text)
            if minutes:
                node.setdefault(_TIME_KEYS[kind], f"PT{minutes}M")
        elif kind == "ingredient":
            node["recipeIngredient"].append(text)
        elif kind == "section":
            current_section = {"@type": "HowToSection", "name": text, "itemListElement": []}
            node["recipeInstructions"].append(current_section)
        elif kind == "step":
            step = {"@type": "HowToStep", "text": text}
            if current_section is not None:
                current_section["itemListElement"].append(step)
            else:
                node["recipeInstructions"].append(step)
        elif kind == "keyword":
            if text.lower() not in (k.lower() for k in node["keywords"]):
                node["keywords"].append(text)
        else:
            _LOGGER.debug("Ignoring extraction of class %s", kind)

    return node


def validate_recipe_json(data: Any) -> str | None:
    """Check that an AI result is a usable recipe.

    Returns:
        An error message, or None if the recipe has a name, at least one
        ingredient and at least one step
    """
    if not isinstance(data, dict):
        return "AI returned no recipe data"
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        return "AI recipe is missing a name"
    ingredients = data.get("recipeIngredient")
    if not ingredients or not any(isinstance(i, str) and i.strip() for i in ingredients):
        return "AI recipe has no ingredients"
    if not collect_steps(data.get("recipeInstructions")):
        return "AI recipe has no instructions"
    return None


def map_error_to_code(error: BaseException) -> str:
    """Map a provider exception to an AI result code."""
    message = f"{type(error).__name__} {error}".lower()
    if any(s in message for s in ("429", "rate limit", "ratelimit", "quota", "resourceexhausted",
                                  "resource exhausted")):
        return RATE_LIMIT
    if isinstance(error, TimeoutError) or any(
            s in message for s in ("timeout", "timed out", "deadline")):
        return TIMEOUT
    return UNKNOWN_ERROR


def _image_mime_type(data: bytes) -> str:
    if data.startswith(b"\x89PNG"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


class AIRecipeParser:
    """Extracts recipe data from unstructured text or images using AI."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL,
                 vision_model: str = DEFAULT_VISION_MODEL) -> None:
        """Initialize the AI recipe parser.

        Args:
            api_key: API key for the language model
            model: The model to use for text extraction
            vision_model: The model to use for image extraction

        Raises:
            ValueError: If API key is empty
        """
        if not api_key or not api_key.strip():
            raise ValueError("API key cannot be empty")

        self.api_key = api_key
        self.model = model
        self.vision_model = vision_model
        # Use UnicodeTokenizer for multi-language support
        self.tokenizer = tokenizer.UnicodeTokenizer()
        _LOGGER.debug("Initialized AIRecipeParser with model %s", model)

    def extract_json(self, text: str, allergies: list[str] | None = None,
                     strict_allergies: bool = False, url: str | None = None) -> dict[str, Any] | None:
        """Extract a Recipe node from text.

        Args:
            text: The raw recipe text
            allergies: Allergens to tag when present
            strict_allergies: Restrict keywords to the allergen list
            url: Source URL, mentioned in the prompt

        Returns:
            A JSON-LD shaped Recipe node, or None if nothing was extracted
        """
        if not text or len(text.strip()) < MIN_TEXT_LENGTH:
            _LOGGER.warning(
                "Text too short for extraction: %d characters", len(text) if text else 0)
            return None

        _LOGGER.info("Extracting recipe from %d characters of text using AI", len(text))
        _LOGGER.debug("Calling LangExtract with model %s", self.model)

        result = lx.extract(
            text_or_documents=text,
            prompt_description=build_extraction_prompt(allergies, strict_allergies, url),
            model_id=self.model,
            examples=RECIPE_EXAMPLES,
            tokenizer=self.tokenizer,
            api_key=self.api_key
        )

        if not result or not getattr(result, "extractions", None):
            _LOGGER.warning("No extractions found in LangExtract result")
            return None

        node = extractions_to_jsonld(result.extractions)
        _LOGGER.debug("AI extracted %d ingredients and %d instruction nodes",
                      len(node["recipeIngredient"]), len(node["recipeInstructions"]))
        return node

    def extract_json_from_images(self, images: list[bytes],
                                 allergies: list[str] | None = None) -> dict[str, Any] | None:
        """Extract a Recipe node from one or more images of the same recipe."""
        if not images:
            return None

        _LOGGER.info("Extracting recipe from %d images using %s", len(images), self.vision_model)

        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.vision_model)
        parts: list[Any] = [build_image_prompt(allergies)]
        parts.extend({"mime_type": _image_mime_type(img), "data": img} for img in images)

        response = model.generate_content(
            parts,
            generation_config=genai.types.GenerationConfig(
                temperature=0.1,
                response_mime_type="application/json",
            ),
        )

        text = (response.text or "").strip()
        # Some models still wrap JSON in a markdown fence
        text = re.sub(r"^```(?:json)?\s*|\s*```$", "", text)
        data = json.loads(text)
        if isinstance(data, list):
            data = next((d for d in data if isinstance(d, dict)), None)
        return data


def extract_recipe_with_ai(
    parser: AIRecipeParser | None,
    *,
    units: UnitDictionary,
    html: str | None = None,
    text: str | None = None,
    images: list[bytes] | None = None,
    recipe_id: str | None = None,
    url: str | None = None,
    allergies: list[str] | None = None,
    strict_allergies: bool = False,
    image_url: str | None = None,
    storage: RecipeStorage | None = None,
    max_images: int = DEFAULT_MAX_IMAGES,
    max_input_length: int = DEFAULT_MAX_AI_INPUT_LENGTH,
) -> AIResult:
    """Extract and normalize a recipe with AI.

    Exactly one of ``html``, ``text`` or ``images`` is used, in that order of
    preference. HTML is sanitized first; HTML and text are truncated to
    ``max_input_length``. This function never raises: every failure is
    returned as an AIResult with an error code.

    Args:
        parser: The AI parser, or None when AI is disabled
        units: Unit dictionary for ingredient parsing
        html: Page HTML
        text: Plain text or a JSON-LD fragment
        images: Image bytes of one recipe
        recipe_id: Recipe ID for media storage
        url: Source URL, recorded on the result
        allergies: Allergens to tag; matching tags are sorted first
        strict_allergies: Restrict keywords to the allergen list
        image_url: Image to use instead of page image candidates
        storage: Storage for images
        max_images: Maximum number of images
        max_input_length: Maximum number of characters sent to the model

    Returns:
        AIResult with the normalized recipe or an error code
    """
    if parser is None:
        _LOGGER.info("AI features are disabled, skipping extraction")
        return AIResult.failure(AI_DISABLED)

    try:
        if html:
            data = parser.extract_json(sanitize_html_for_ai(html, max_input_length),
                                       allergies, strict_allergies, url)
        elif text:
            data = parser.extract_json(text[:max_input_length], allergies, strict_allergies, url)
        elif images:
            data = parser.extract_json_from_images(images, allergies)
        else:
            return AIResult.failure(VALIDATION_ERROR, "No input for AI extraction")

        error = validate_recipe_json(data)
        if error:
            _LOGGER.error("AI extraction failed validation: %s", error)
            return AIResult.failure(VALIDATION_ERROR, error)

        node = dict(data)
        if image_url:
            node["image"] = image_url
        elif html and not node.get("image"):
            node["image"] = extract_image_candidates(html, url, max_images)

        recipe = normalize_recipe_from_json(node, recipe_id, units=units, storage=storage,
                                            max_images=max_images)
        if recipe is None:
            return AIResult.failure(VALIDATION_ERROR, "Failed to normalize recipe data")

        update: dict[str, Any] = {"url": url} if url else {}
        if allergies:
            update["tags"] = sort_tags_with_allergy_priority(recipe.tags, allergies)
        recipe = recipe.model_copy(update=update)

        _LOGGER.info("AI extracted recipe '%s' with %d ingredients and %d steps",
                     recipe.name, len(recipe.recipe_ingredients), len(recipe.steps))
        return AIResult(success=True, data=recipe)

    except Exception as e:
        code = map_error_to_code(e)
        _LOGGER.error("Failed to extract recipe with AI (%s): %s", code, e, exc_info=True)
        message = ERROR_MESSAGES[code]
        if code == UNKNOWN_ERROR:
            message = f"{message}: {e}"
        return AIResult.failure(code, message)
