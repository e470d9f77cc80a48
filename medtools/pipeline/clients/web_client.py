"""Fetch web pages for the URL-based tools and reduce them to readable text."""

from __future__ import annotations

import logging
import re
from html.parser import HTMLParser
from typing import Optional
from urllib.parse import urlparse

import httpx

from medtools.pipeline.core.config import (
    WEB_CONTENT_MAX_CHARS,
    WEB_FETCH_MAX_REDIRECTS,
    WEB_FETCH_TIMEOUT_SECONDS,
)
from medtools.pipeline.core.exceptions import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = "Invalid URL format. Please enter a valid URL including http:// or https://"
FETCH_FAILED_MESSAGE = "Failed to retrieve content from the URL. Please check the URL and try again."

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Upgrade-Insecure-Requests": "1",
}

_SKIP_TAGS = {"script", "style", "noscript", "template", "svg", "head"}
_BLOCK_TAGS = {
    "p", "div", "section", "article", "br", "li", "tr", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "footer", "nav", "ul", "ol", "table", "blockquote", "pre",
}


def validate_url(url: str) -> str:
    """Return the trimmed URL or raise the user-facing format error."""
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(message=INVALID_URL_MESSAGE, field="url")
    return url


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._skip_depth = 0
        self.parts: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in _SKIP_TAGS:
            self._skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_endtag(self, tag):
        if tag in _SKIP_TAGS and self._skip_depth:
            self._skip_depth -= 1
        elif tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_data(self, data):
        if not self._skip_depth:
            self.parts.append(data)


def html_to_text(html: str, max_chars: int = WEB_CONTENT_MAX_CHARS) -> str:
    """Strip markup, scripts and styles; collapse blank space."""
    parser = _TextExtractor()
    parser.feed(html)
    parser.close()
    text = "".join(parser.parts)
    text = re.sub(r"[ \t\r\f\v]+", " ", text)
    text = re.sub(r"\s*\n\s*", "\n", text).strip()
    return text[:max_chars]


async def fetch_page_text(
    url: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Download a page and return its readable text.

    Raises:
        ExternalServiceError: If the page cannot be retrieved
    """
    async with httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=WEB_FETCH_MAX_REDIRECTS,
        timeout=WEB_FETCH_TIMEOUT_SECONDS,
        headers=BROWSER_HEADERS,
        transport=transport,
    ) as client:
        try:
            response = await client.get(url)
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                "WEB", "timeout", message=FETCH_FAILED_MESSAGE, details={"url": url}
            ) from e
        except httpx.RequestError as e:
            raise ExternalServiceError(
                "WEB", "unavailable", message=FETCH_FAILED_MESSAGE, details={"url": url, "reason": str(e)}
            ) from e

    if response.status_code != 200:
        logger.warning(
            "Page fetch returned non-200 status",
            extra={"service": "WEB", "http_status": response.status_code},
        )
        raise ExternalServiceError(
            "WEB", "http", message=FETCH_FAILED_MESSAGE, details={"url": url, "http_code": response.status_code}
        )

    content_type = response.headers.get("content-type", "")
    if "html" in content_type or not content_type:
        text = html_to_text(response.text)
    else:
        text = response.text.strip()[:WEB_CONTENT_MAX_CHARS]

    if not text:
        raise ExternalServiceError("WEB", "empty", message=FETCH_FAILED_MESSAGE, details={"url": url})
    return text
