"""Rendered HTML -> condensed, heading-segmented text for summarization."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

MIN_SEGMENT_CHARS = 100

STRIP_SELECTORS = (
    "style, script, noscript, head, footer, aside, img, iframe, nav, button, "
    ".ad, .advertisement, .promo, .sidebar, .comments",
    ".testimonial, .like-share, .like_share, .related-blog, .related_blog, "
    ".related-news, .related_news, .share-buttons, .share_buttons, "
    ".share-section, .share_section, .related-articles, .related_articles, "
    ".related-posts, .related_posts, .newsletter-signup, .newsletter_signup, "
    ".social-media, .social_media",
)

SEGMENT_HEADINGS = ("h2", "h3", "h4")

_CSS_RULE_RE = re.compile(r"\.css-[a-zA-Z0-9_-]+\{[^}]+\}")
_HEADING_MARKER_RE = re.compile(r"\[h[23]\]")
_LIST_NUMBER_RE = re.compile(r"^\d+\. ", re.MULTILINE)
_WHITESPACE_RE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text.replace("\xa0", " ")).strip()


def _normalize_text(text: str) -> str:
    text = text.replace("\xa0", " ")
    text = re.sub(r"\r\n?", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _heading_level(node: Tag) -> int | None:
    name = node.name or ""
    if len(name) == 2 and name[0] == "h" and name[1] in "123456":
        return int(name[1])
    return None


def _clean_heading(text: str) -> str:
    text = _CSS_RULE_RE.sub("", text)
    text = _HEADING_MARKER_RE.sub("", text)
    text = _LIST_NUMBER_RE.sub("", text)
    return _collapse(text)


def _strip_boilerplate(soup: BeautifulSoup) -> None:
    for selector in STRIP_SELECTORS:
        for node in soup.select(selector):
            node.decompose()


def _flatten(node: Tag) -> str:
    if node.has_attr("style"):
        del node["style"]
    for styled in node.find_all(style=True):
        del styled["style"]
    for link in node.find_all("a"):
        link.unwrap()
    return node.get_text(" ", strip=True)


def _collect_segment(heading: Tag, level: int) -> str:
    """Text of the siblings after ``heading`` up to the next heading at ``level`` or above."""
    parts: list[str] = []
    for sibling in heading.next_siblings:
        if isinstance(sibling, Tag):
            sibling_level = _heading_level(sibling)
            if sibling_level is not None and sibling_level <= level:
                break
            parts.append(_flatten(sibling))
        elif isinstance(sibling, NavigableString) and not isinstance(sibling, Comment):
            parts.append(str(sibling))
    return _collapse(" ".join(parts))


def extract_segments(soup: BeautifulSoup) -> list[tuple[int, str, str]]:
    """Return ``(level, heading, text)`` for every heading segment long enough to keep."""
    segments: list[tuple[int, str, str]] = []
    for heading in soup.find_all(SEGMENT_HEADINGS):
        level = _heading_level(heading) or 2
        text = _collect_segment(heading, level)
        if len(text) > MIN_SEGMENT_CHARS:
            segments.append((level, _clean_heading(heading.get_text(" ")), text))
    return segments


def clean_html(markup: str) -> str:
    """Condense rendered markup into Markdown-style headed sections.

    Falls back to the whole document's flattened text when no heading
    segment survives.
    """
    if not markup or not markup.strip():
        return ""

    soup = BeautifulSoup(markup, "html.parser")
    _strip_boilerplate(soup)

    segments = extract_segments(soup)
    if segments:
        blocks = [f"{'#' * level} {heading}\n{text}" for level, heading, text in segments]
        return _normalize_text("\n\n".join(blocks))

    root = soup.body or soup
    return _collapse(root.get_text(" "))


def count_words(text: str) -> int:
    return len(text.split())
