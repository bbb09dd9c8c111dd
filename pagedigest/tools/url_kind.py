"""URL -> ContentKind classification.

The kind decides both how a page is fetched and which prompt/backend
summarizes it.
"""

from __future__ import annotations

from pagedigest.models.content import ContentKind
from pagedigest.tools.web_utils import domain_matches, extract_domain

DISCUSSION_DOMAINS = frozenset({"reddit.com", "redd.it"})

SOCIAL_MEDIA_DOMAINS = frozenset(
    {
        "twitter.com",
        "x.com",
        "t.co",
        "facebook.com",
        "fb.com",
        "instagram.com",
        "tiktok.com",
        "threads.net",
    }
)


def classify(url: str) -> ContentKind:
    """Classify a URL by its host. Never raises; unknown or malformed is GENERIC."""
    if not isinstance(url, str):
        return ContentKind.GENERIC
    host = extract_domain(url)
    if domain_matches(host, SOCIAL_MEDIA_DOMAINS):
        return ContentKind.SOCIAL_MEDIA
    if domain_matches(host, DISCUSSION_DOMAINS):
        return ContentKind.DISCUSSION_POST
    return ContentKind.GENERIC
