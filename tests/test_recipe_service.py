import asyncio
import io
import json
import zipfile

import pytest

from recipe_normalizer.config import ImportSettings
from recipe_normalizer.const import RATE_LIMIT
from recipe_normalizer.exceptions import (
    AIExtractionError,
    FeatureDisabledError,
    NotARecipePageError,
    RecipeFetchError,
    RecipeParseError,
)
from recipe_normalizer.services.recipe_service import RecipeImportService, _jsonld_fragment

from .fakes import FakeAIParser, FakeVideoClient, jsonld_page, recipe_node

URL = "https://www.example.com/recipes/pancakes"
VIDEO_URL = "https://www.youtube.com/watch?v=abc123"

PLAIN_RECIPE_PAGE = """
<html><body><article>
  <h1>Grandma's Pancakes</h1>
  <h2>Ingredients</h2><ul><li>200 g flour</li><li>2 eggs</li></ul>
  <h2>Instructions</h2><p>Whisk and fry.</p>
</article></body></html>
"""


def make_service(tmp_path, page, ai_parser=None, **settings):
    settings.setdefault("uploads_dir", str(tmp_path / "uploads"))
    return RecipeImportService(
        ImportSettings(**settings),
        fetcher=lambda url: page,
        ai_parser=ai_parser,
    )


def with_ai(**settings):
    return dict(settings, ai_enabled=True, ai_api_key="key")


def test_jsonld_recipe_is_used_without_ai(tmp_path):
    parser = FakeAIParser()
    service = make_service(tmp_path, jsonld_page(recipe_node()), parser, **with_ai())

    result = asyncio.run(service.parse_recipe_from_url(URL, recipe_id="r1"))

    assert not result.used_ai
    assert result.recipe.name == "Pancakes"
    assert result.recipe.id == "r1"
    assert result.recipe.url == URL
    assert parser.calls == []


def test_recipe_id_is_generated(tmp_path):
    service = make_service(tmp_path, jsonld_page(recipe_node()))

    result = asyncio.run(service.parse_recipe_from_url(URL))

    assert result.recipe.id


def test_page_without_recipe_markers_is_rejected(tmp_path):
    parser = FakeAIParser()
    service = make_service(tmp_path, "<html><body>About us</body></html>", parser, **with_ai())

    with pytest.raises(NotARecipePageError) as exc_info:
        asyncio.run(service.parse_recipe_from_url(URL))

    assert exc_info.value.url == URL
    assert parser.calls == []


def test_fetch_errors_propagate(tmp_path):
    def fail(url):
        raise RecipeFetchError(url, "HTTP 503")

    service = RecipeImportService(ImportSettings(uploads_dir=str(tmp_path)), fetcher=fail)

    with pytest.raises(RecipeFetchError, match="HTTP 503"):
        asyncio.run(service.parse_recipe_from_url(URL))


def test_incomplete_structured_data_without_ai(tmp_path):
    service = make_service(tmp_path, jsonld_page(recipe_node(recipeIngredient=[])))

    with pytest.raises(RecipeParseError, match="Cannot parse recipe."):
        asyncio.run(service.parse_recipe_from_url(URL))


def test_ai_fallback_for_pages_without_structured_data(tmp_path):
    parser = FakeAIParser([recipe_node(name="Grandma's Pancakes")])
    service = make_service(tmp_path, PLAIN_RECIPE_PAGE, parser, **with_ai())

    result = asyncio.run(service.parse_recipe_from_url(URL, recipe_id="r1"))

    assert result.used_ai
    assert result.recipe.name == "Grandma's Pancakes"
    assert "Whisk and fry." in parser.calls[0]


def test_ai_parser_is_ignored_when_ai_is_not_configured(tmp_path):
    parser = FakeAIParser()
    service = make_service(tmp_path, PLAIN_RECIPE_PAGE, parser, ai_enabled=True)

    with pytest.raises(RecipeParseError):
        asyncio.run(service.parse_recipe_from_url(URL))
    assert parser.calls == []


def test_force_ai_requires_ai(tmp_path):
    service = make_service(tmp_path, jsonld_page(recipe_node()))

    with pytest.raises(FeatureDisabledError) as exc_info:
        asyncio.run(service.parse_recipe_from_url(URL, force_ai=True))

    assert exc_info.value.feature == "ai"


def test_force_ai_sends_every_jsonld_recipe_first(tmp_path):
    parser = FakeAIParser()
    page = jsonld_page(recipe_node(name="Crepes"), recipe_node(name="Galettes"))
    service = make_service(tmp_path, page, parser, **with_ai())

    result = asyncio.run(service.parse_recipe_from_url(URL, recipe_id="r1", force_ai=True))

    assert result.used_ai
    assert len(parser.calls) == 1
    assert [n["name"] for n in json.loads(parser.calls[0])] == ["Crepes", "Galettes"]


def test_always_use_ai_setting(tmp_path):
    parser = FakeAIParser()
    service = make_service(tmp_path, jsonld_page(recipe_node()), parser,
                           **with_ai(always_use_ai=True))

    assert asyncio.run(service.parse_recipe_from_url(URL)).used_ai
    assert not asyncio.run(service.parse_recipe_from_url(URL, force_ai=False)).used_ai


def test_ai_only_failure_keeps_the_error_code(tmp_path):
    parser = FakeAIParser(error=RuntimeError("429 Too Many Requests"))
    service = make_service(tmp_path, jsonld_page(recipe_node()), parser, **with_ai())

    with pytest.raises(RecipeParseError, match="AI extraction failed") as exc_info:
        asyncio.run(service.parse_recipe_from_url(URL, force_ai=True))

    cause = exc_info.value.__cause__
    assert isinstance(cause, AIExtractionError)
    assert cause.code == RATE_LIMIT
    # JSON-LD fragment, then the page HTML
    assert len(parser.calls) == 2


def test_video_urls_need_video_enabled(tmp_path):
    service = make_service(tmp_path, "", FakeAIParser(), **with_ai())

    with pytest.raises(FeatureDisabledError) as exc_info:
        asyncio.run(service.parse_recipe_from_url(VIDEO_URL))

    assert exc_info.value.feature == "video"


def test_video_url_goes_through_the_video_pipeline(tmp_path):
    fetched = []
    client = FakeVideoClient(tmp_path / "work")
    service = RecipeImportService(
        ImportSettings(uploads_dir=str(tmp_path / "uploads"), video_enabled=True, **with_ai()),
        fetcher=fetched.append,
        ai_parser=FakeAIParser(),
        video_client=client,
    )

    result = asyncio.run(service.parse_recipe_from_url(VIDEO_URL, recipe_id="r1"))

    assert result.used_ai
    assert result.recipe.url == VIDEO_URL
    assert result.recipe.video_filename.endswith(".mp4")
    assert fetched == []
    assert "transcribe" in client.calls


def test_import_archive(tmp_path):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("tea.melarecipe", json.dumps({
            "title": "Tea",
            "ingredients": "1 cup water",
            "instructions": "Boil water",
        }))
    service = make_service(tmp_path, "")

    result = asyncio.run(service.import_archive(buffer.getvalue(), "Mela"))

    assert result.imported == 1
    assert result.recipes[0].name == "Tea"


def test_import_archive_rejects_unknown_kind(tmp_path):
    service = make_service(tmp_path, "")

    with pytest.raises(ValueError, match="Unknown archive kind"):
        asyncio.run(service.import_archive(b"", "evernote"))


def test_jsonld_fragment_takes_the_first_image_of_any_recipe():
    page = jsonld_page(recipe_node(name="A"),
                       recipe_node(name="B", image={"url": "https://cdn.example/b.jpg"}))

    text, image_url = _jsonld_fragment(page, URL)

    assert [n["name"] for n in json.loads(text)] == ["A", "B"]
    assert image_url == "https://cdn.example/b.jpg"
    assert _jsonld_fragment("<html></html>", URL) is None
