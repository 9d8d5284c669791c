"""
Web page fetching and cleaning.

This module fetches recipe pages with anti-bot protection, decides whether a
page is likely to contain a recipe, and prepares page HTML for AI input.
"""
from __future__ import annotations

import ipaddress
import logging
import time
from collections.abc import Iterable
from urllib.parse import urljoin, urlparse

import cloudscraper
import requests
from bs4 import BeautifulSoup

from ..const import (
    DEFAULT_CONTENT_INDICATORS,
    DEFAULT_MAX_AI_INPUT_LENGTH,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE,
    DEFAULT_SCHEMA_INDICATORS,
    DEFAULT_TIMEOUT,
    MIN_CONTENT_INDICATOR_HITS,
)
from ..exceptions import RecipeFetchError

_LOGGER = logging.getLogger(__name__)

_NOISE_TAGS = ["script", "style", "nav", "header", "footer", "aside",
               "iframe", "noscript", "svg", "form", "button"]

_NOISE_PATTERNS = ['advertisement', 'social-share', 'comment',
                   'navigation', 'sidebar', 'newsletter',
                   'cookie-banner', 'popup', 'modal']


def validate_url(url: str) -> None:
    """Allow only public HTTP(S) URLs.

    Raises:
        ValueError: For other schemes or private, loopback or link-local IPs
    """
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        raise ValueError("Only HTTP/HTTPS protocols allowed")
    if not parsed.hostname:
        raise ValueError("URL has no host")

    try:
        ip = ipaddress.ip_address(parsed.hostname)
    except ValueError:
        # Hostname is not an IP
        return
    if ip.is_private or ip.is_loopback or ip.is_link_local:
        raise ValueError("Cannot access internal IP addresses")


def _fetch_with_retry(session: requests.Session, url: str, max_retries: int = 3) -> bytes:
    """Fetch URL with exponential backoff retry logic.

    Args:
        session: Requests session to use
        url: URL to fetch
        max_retries: Maximum number of retry attempts

    Returns:
        Response content as bytes

    Raises:
        requests.exceptions.RequestException: If all retries fail
        ValueError: If response is too large or invalid content type
    """
    for attempt in range(max_retries):
        try:
            _LOGGER.debug("Fetching %s (attempt %d/%d)",
                          url, attempt + 1, max_retries)
            response = session.get(
                url,
                timeout=DEFAULT_TIMEOUT,
                allow_redirects=True,
                stream=True
            )
            response.raise_for_status()

            content_type = response.headers.get('content-type', '').lower()
            if content_type and not ('text/html' in content_type
                                     or 'application/xhtml' in content_type
                                     or 'application/xml' in content_type):
                _LOGGER.warning(
                    "Invalid content type for %s: %s", url, content_type)
                raise ValueError(
                    f"Invalid content type: {content_type}. Only HTML/XHTML content is allowed.")

            content_length = response.headers.get('content-length')
            if content_length and int(content_length) > DEFAULT_MAX_RESPONSE_SIZE:
                _LOGGER.warning(
                    "Response too large for %s: %s bytes", url, content_length)
                raise ValueError(
                    f"Response size ({content_length} bytes) exceeds maximum allowed size ({DEFAULT_MAX_RESPONSE_SIZE} bytes)")

            content = b''
            for chunk in response.iter_content(chunk_size=8192):
                content += chunk
                if len(content) > DEFAULT_MAX_RESPONSE_SIZE:
                    _LOGGER.warning(
                        "Response exceeded size limit while downloading from %s", url)
                    raise ValueError(
                        f"Response size exceeds maximum allowed size ({DEFAULT_MAX_RESPONSE_SIZE} bytes)")

            return content
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (403, 429) and attempt < max_retries - 1:
                wait_time = 2 ** attempt
                _LOGGER.warning(
                    "Got %s for %s, retrying after %ds", status, url, wait_time)
                time.sleep(wait_time)
                continue
            raise
        except requests.exceptions.RequestException as e:
            if attempt < max_retries - 1:
                wait_time = 2 ** attempt
                _LOGGER.warning(
                    "Error fetching %s: %s, retrying after %ds", url, e, wait_time)
                time.sleep(wait_time)
                continue
            raise

    raise requests.exceptions.RequestException(
        f"Failed to fetch {url} after {max_retries} attempts")


def create_session() -> requests.Session:
    """Create a cloudscraper session for better anti-bot protection."""
    session = cloudscraper.create_scraper(
        browser={
            'browser': 'chrome',
            'platform': 'windows',
            'desktop': True
        }
    )
    session.max_redirects = DEFAULT_MAX_REDIRECTS
    return session


def fetch_page(url: str, session: requests.Session | None = None) -> str:
    """Fetch the HTML of a recipe page.

    Args:
        url: The URL of the recipe website
        session: Optional session; a cloudscraper session is created if None

    Returns:
        The page HTML

    Raises:
        RecipeFetchError: If the URL is invalid, fetching fails or the page is empty
    """
    if not url or not url.strip():
        raise RecipeFetchError(url, "URL cannot be empty")

    try:
        validate_url(url)
    except ValueError as e:
        raise RecipeFetchError(url, str(e)) from e

    _LOGGER.info("Fetching recipe page %s", url)

    try:
        content = _fetch_with_retry(session or create_session(), url)
    except (requests.exceptions.RequestException, ValueError) as e:
        _LOGGER.error("Failed to fetch %s: %s", url, e)
        raise RecipeFetchError(url, str(e)) from e

    html = content.decode('utf-8', errors='replace')
    if not html.strip():
        raise RecipeFetchError(url, "empty page")

    _LOGGER.debug("Successfully fetched %d bytes from %s", len(content), url)
    return html


def is_page_likely_recipe(html: str,
                          schema_indicators: Iterable[str] = DEFAULT_SCHEMA_INDICATORS,
                          content_indicators: Iterable[str] = DEFAULT_CONTENT_INDICATORS) -> bool:
    """Cheap check whether a page is worth parsing as a recipe.

    A page qualifies if it contains any schema indicator, or at least two
    content indicators. Matching is case-insensitive.
    """
    if not html:
        return False

    lower = html.lower()
    if any(indicator.lower() in lower for indicator in schema_indicators):
        return True

    hits = sum(1 for indicator in content_indicators if indicator.lower() in lower)
    _LOGGER.debug("Page has %d content indicator hits", hits)
    return hits >= MIN_CONTENT_INDICATOR_HITS


def sanitize_html_for_ai(html: str, max_length: int = DEFAULT_MAX_AI_INPUT_LENGTH) -> str:
    """Reduce page HTML to readable body text for AI extraction.

    Scripts, styles, navigation and other page furniture are removed, the
    text is collapsed line by line and truncated to ``max_length``.
    """
    soup = BeautifulSoup(html, features="html.parser")

    recipe_container = None
    for selector in ['[itemtype*="Recipe"]', '.recipe', '#recipe', 'article']:
        recipe_container = soup.select_one(selector)
        if recipe_container:
            break

    root = recipe_container or soup.body or soup

    for element in root(_NOISE_TAGS):
        element.extract()

    patterns = list(_NOISE_PATTERNS)
    if not recipe_container:
        patterns.extend(['related', 'recommendation'])

    for pattern in patterns:
        for element in root.find_all(class_=lambda x: x and pattern in x.lower()):
            element.extract()
        for element in root.find_all(id=lambda x: x and pattern in x.lower()):
            element.extract()

    text = root.get_text(separator='\n')
    lines = (line.strip() for line in text.splitlines())
    chunks = (phrase.strip() for line in lines for phrase in line.split("  "))
    text = '\n'.join(chunk for chunk in chunks if chunk)

    if len(text) > max_length:
        _LOGGER.debug("Truncating text from %d to %d characters", len(text), max_length)
        text = text[:max_length]
    return text


def extract_image_candidates(html: str, base_url: str | None = None, limit: int = 10) -> list[str]:
    """Collect likely recipe image URLs from page HTML.

    Open Graph and Twitter card images come first, then <img> sources.
    Relative URLs are resolved against ``base_url``; data URIs are skipped.
    """
    soup = BeautifulSoup(html, features="html.parser")
    candidates: list[str] = []

    for prop in ("og:image", "og:image:url", "twitter:image"):
        for meta in soup.find_all("meta", attrs={"property": prop}) + soup.find_all(
                "meta", attrs={"name": prop}):
            if meta.get("content"):
                candidates.append(meta["content"])

    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src")
        if src:
            candidates.append(src)

    urls = []
    for src in candidates:
        src = src.strip()
        if not src or src.startswith("data:"):
            continue
        url = urljoin(base_url, src) if base_url else src
        if url.startswith(("http://", "https://")) and url not in urls:
            urls.append(url)
        if len(urls) >= limit:
            break
    return urls
