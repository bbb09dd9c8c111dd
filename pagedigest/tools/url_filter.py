from __future__ import annotations

from collections.abc import Iterable

from pagedigest.models.content import CandidateURL, ContentKind
from pagedigest.tools.url_kind import classify

MAX_CANDIDATE_URLS = 5


def filter_candidates(candidates: Iterable[CandidateURL], *, limit: int) -> list[str]:
    """Drop social-media hits, dedupe by exact URL and keep the first ``limit``.

    Retriever order is preserved.
    """
    selected: list[str] = []
    seen: set[str] = set()
    cap = max(int(limit), 0)
    for candidate in candidates:
        if len(selected) >= cap:
            break
        url = candidate.url
        if not url or url in seen:
            continue
        if classify(url) is ContentKind.SOCIAL_MEDIA:
            continue
        seen.add(url)
        selected.append(url)
    return selected
