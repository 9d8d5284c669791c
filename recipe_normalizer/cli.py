"""
Recipe Normalizer - import recipes from the command line

Imports a recipe from a URL (web page or video) or a Mela/Paprika archive
and prints the normalized recipe(s) as JSON.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .exceptions import RecipeImportError
from .services.recipe_service import ARCHIVE_IMPORTERS, RecipeImportService

_LOGGER = logging.getLogger(__name__)


def _split_allergies(value: str | None) -> list[str] | None:
    if not value:
        return None
    allergies = [a.strip() for a in value.split(",") if a.strip()]
    return allergies or None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-normalizer",
        description="Import recipes from websites, videos and recipe-app archives as JSON",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON settings file (overrides environment variables)"
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the JSON result to this file instead of stdout"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    url_parser = subparsers.add_parser("url", help="Import a recipe from a URL")
    url_parser.add_argument("url", help="Recipe page or video URL")
    url_parser.add_argument("--recipe-id", help="Recipe ID used for stored media")
    url_parser.add_argument(
        "--force-ai",
        action="store_true",
        default=None,
        help="Skip structured data and extract with AI only"
    )
    url_parser.add_argument(
        "--allergies",
        help="Comma separated allergens to tag, e.g. 'gluten,dairy'"
    )

    import_parser = subparsers.add_parser("import", help="Import a recipe-app archive")
    import_parser.add_argument("kind", choices=sorted(ARCHIVE_IMPORTERS), help="Archive format")
    import_parser.add_argument("path", type=Path, help="Path to the archive")

    return parser


async def _run(args: argparse.Namespace) -> Any:
    service = RecipeImportService.from_config(args.config)

    if args.command == "url":
        result = await service.parse_recipe_from_url(
            args.url,
            recipe_id=args.recipe_id,
            allergies=_split_allergies(args.allergies),
            force_ai=args.force_ai,
        )
        _LOGGER.info("Imported '%s' (AI: %s)", result.recipe.name, result.used_ai)
        return result.model_dump()

    result = await service.import_archive(args.path, args.kind)
    return {
        "imported": result.imported,
        "recipes": [r.model_dump() for r in result.recipes],
        "errors": [e.model_dump() for e in result.errors],
    }


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the recipe normalizer."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        data = asyncio.run(_run(args))
    except (RecipeImportError, ValueError) as e:
        _LOGGER.error("Import failed: %s", e)
        return 1

    output = json.dumps(data, indent=2, ensure_ascii=False)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output + "\n", encoding="utf-8")
        _LOGGER.info("Saved result to %s", args.output)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
