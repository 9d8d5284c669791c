"""
Instruction tree walker.

Schema.org recipeInstructions may be a plain string, a list of strings, or a
tree of HowToSection / HowToStep / HowToDirection / ListItem nodes. The
walker flattens any of these into an ordered list of step strings where
section names become '# Heading' markers placed before their children.
"""
from __future__ import annotations

import html
import logging
from typing import Any

from ..models.recipe import MeasurementSystem, Step

_LOGGER = logging.getLogger(__name__)

_STEP_TYPES = ("howtostep", "howtodirection", "listitem")
_SECTION_TYPES = ("howtosection",)


def _node_type(node: dict[str, Any]) -> str:
    """Lowercased @type of a node; list types are joined with commas."""
    node_type = node.get("@type", node.get("type"))
    if isinstance(node_type, list):
        return ",".join(str(t).lower() for t in node_type)
    return node_type.lower() if isinstance(node_type, str) else ""


def _is_step_type(node_type: str) -> bool:
    return any(t in node_type for t in _STEP_TYPES)


def _is_section_type(node_type: str) -> bool:
    return any(t in node_type for t in _SECTION_TYPES)


def _clean(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return html.unescape(value).strip()


def _extract_text(node: dict[str, Any]) -> str:
    """Build the text of a step node.

    ``text`` and ``name`` are read from the node, falling back to a nested
    ``item`` object. When both are present the step becomes
    '**name:** text'.
    """
    item = node.get("item") if isinstance(node.get("item"), dict) else {}

    text = _clean(node["text"]) if isinstance(node.get("text"), str) else _clean(item.get("text"))
    name = _clean(node["name"]) if isinstance(node.get("name"), str) else _clean(item.get("name"))

    if name and text:
        return f"**{name}:** {text}"
    return text or name


def collect_steps(node: Any) -> list[str]:
    """Flatten an instruction tree into step strings.

    Plain strings are HTML-decoded and split on newlines.

    Args:
        node: The recipeInstructions value (string, list, or node dict)

    Returns:
        Step strings in document order, section names as '# Name'
    """
    raw_steps: list[str] = []

    def visit(current: Any) -> None:
        if not current:
            return

        if isinstance(current, str):
            raw_steps.extend(
                line.strip() for line in html.unescape(current).splitlines() if line.strip())
            return

        if isinstance(current, list):
            for child in current:
                visit(child)
            return

        if not isinstance(current, dict):
            return

        node_type = _node_type(current)

        if _is_section_type(node_type):
            section_name = _clean(current.get("name"))
            if section_name:
                raw_steps.append(f"# {section_name}")
        else:
            text = _extract_text(current)
            # Containers only contribute their children
            has_children = bool(current.get("itemListElement") or current.get("item"))
            if text and (_is_step_type(node_type) or not has_children):
                raw_steps.append(text)

        visit(current.get("itemListElement"))
        visit(current.get("item"))

    visit(node)
    return raw_steps


def deduplicate_steps(raw_steps: list[str]) -> list[str]:
    """Drop empty and repeated steps, keeping the first occurrence.

    Comparison is case-insensitive. Headings (starting with '#') are never
    dropped as duplicates since a heading may legitimately repeat.
    """
    seen: set[str] = set()
    result = []
    for step in raw_steps:
        trimmed = step.strip() if isinstance(step, str) else ""
        if not trimmed:
            continue
        if trimmed.startswith("#"):
            result.append(trimmed)
            continue
        key = trimmed.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(trimmed)

    if len(result) != len(raw_steps):
        _LOGGER.debug("Deduplicated %d raw steps to %d", len(raw_steps), len(result))
    return result


def parse_steps(instructions: Any, system_used: MeasurementSystem | None = None) -> list[Step]:
    """Parse recipeInstructions into Step models.

    Args:
        instructions: The recipeInstructions field
        system_used: Measurement system to tag each step with

    Returns:
        Steps with dense 1-based order
    """
    texts = deduplicate_steps(collect_steps(instructions))
    return [
        Step(step=text, system_used=system_used, order=i + 1)
        for i, text in enumerate(texts)
    ]
