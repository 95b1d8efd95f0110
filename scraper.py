import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse, urlunparse

import requests
from bs4 import BeautifulSoup

from config import USER_AGENT
from errors import FetchError

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Title"
MAX_ARTICLE_CHARS = 15000

# Compared after spaces become underscores and case is folded.
SKIP_SECTIONS = frozenset(
    s.lower()
    for s in (
        "See_also",
        "References",
        "External_links",
        "Notes",
        "Further_reading",
        "Bibliography",
    )
)

CITATION_RE = re.compile(r"\[\d+\]")
WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class Article:
    html: str
    text: str
    title: str
    sections: List[str] = field(default_factory=list)


def _mobile_url(url: str) -> Optional[str]:
    parts = urlparse(url)
    host = parts.hostname or ""
    if ".m.wikipedia.org" in host or not host.endswith("wikipedia.org"):
        return None
    lang = host[: -len("wikipedia.org")].rstrip(".")
    mobile_host = f"{lang}.m.wikipedia.org" if lang else "m.wikipedia.org"
    return urlunparse(parts._replace(netloc=mobile_host))


def _normalize_heading(text: str) -> str:
    return WHITESPACE_RE.sub("_", text.strip()).lower()


def extract_title(soup: BeautifulSoup) -> str:
    title_el = soup.find(id="firstHeading")
    if title_el is None:
        return UNKNOWN_TITLE
    title = WHITESPACE_RE.sub(" ", title_el.get_text(" ", strip=True)).strip()
    return title or UNKNOWN_TITLE


def extract_sections(content) -> List[str]:
    """
    Level-2 headings in document order, minus the boilerplate ones.

    Handles both the classic ``<h2><span class="mw-headline">`` markup and
    the newer ``<div class="mw-heading2"><h2>`` wrapper.
    """
    sections = []
    for heading in content.find_all("h2"):
        headline = heading.find("span", class_="mw-headline")
        if headline is not None:
            name = headline.get_text(" ", strip=True)
        else:
            parent = heading.parent
            classes = parent.get("class", []) if parent is not None else []
            if "mw-heading2" not in classes:
                continue
            name = heading.get_text(" ", strip=True)
        name = WHITESPACE_RE.sub(" ", name).strip()
        if not name or _normalize_heading(name) in SKIP_SECTIONS:
            continue
        sections.append(name)
    return sections


def extract_text(content, max_chars: int = MAX_ARTICLE_CHARS) -> str:
    for tag in content.find_all(["script", "style", "noscript"]):
        tag.decompose()
    text = content.get_text(" ")
    text = CITATION_RE.sub("", text)
    text = WHITESPACE_RE.sub(" ", text).strip()
    return text[:max_chars]


def parse_article(html: str, max_chars: int = MAX_ARTICLE_CHARS) -> Article:
    """Derive title, sections and plain text from raw article markup."""
    soup = BeautifulSoup(html or "", "html.parser")
    title = extract_title(soup)

    content = soup.find(id="mw-content-text")
    if content is None:
        # Page layout changed; fall back to the whole document
        content = soup

    sections = extract_sections(content)
    text = extract_text(content, max_chars)
    return Article(html=html, text=text, title=title, sections=sections)


class WikipediaScraper:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 20.0,
        max_chars: int = MAX_ARTICLE_CHARS,
        user_agent: str = USER_AGENT,
    ):
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.timeout = timeout
        self.max_chars = max_chars

    def _fetch(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            logger.warning("Fetching %s failed: %s", url, e)
            raise FetchError() from e
        if not 200 <= resp.status_code < 300:
            raise FetchError(resp.status_code)
        return resp.text

    def fetch_html(self, url: str) -> str:
        """Fetch article markup; on 403/429 retry once against the mobile site."""
        try:
            return self._fetch(url)
        except FetchError as e:
            mobile_url = _mobile_url(url)
            if e.status_code not in (403, 429) or mobile_url is None:
                raise
            logger.info("Desktop fetch returned %s, retrying %s", e.status_code, mobile_url)
            return self._fetch(mobile_url)

    def scrape(self, url: str) -> Article:
        logger.info("Scraping Wikipedia URL: %s", url)
        html = self.fetch_html(url)
        article = parse_article(html, self.max_chars)
        logger.info(
            "Extracted %d chars, %d sections from %r",
            len(article.text),
            len(article.sections),
            article.title,
        )
        return article
