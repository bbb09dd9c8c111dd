from __future__ import annotations

import pytest

from pagedigest.models.content import CandidateURL, ContentKind
from pagedigest.tools.url_filter import filter_candidates
from pagedigest.tools.url_kind import classify


def _candidate(url: str) -> CandidateURL:
    return CandidateURL(url=url, title=f"title {url}", source_domain="")


def test_filter_excludes_social_media_and_preserves_order():
    candidates = [
        _candidate("https://example.com/1"),
        _candidate("https://twitter.com/a/status/1"),
        _candidate("https://example.org/2"),
        _candidate("https://x.com/b"),
        _candidate("https://www.reddit.com/r/x/comments/1/"),
    ]

    urls = filter_candidates(candidates, limit=5)

    assert urls == [
        "https://example.com/1",
        "https://example.org/2",
        "https://www.reddit.com/r/x/comments/1/",
    ]


def test_filter_dedupes_before_applying_cap():
    candidates = [_candidate("https://example.com/same")] * 4 + [
        _candidate(f"https://example.com/{i}") for i in range(3)
    ]

    urls = filter_candidates(candidates, limit=3)

    assert urls == [
        "https://example.com/same",
        "https://example.com/0",
        "https://example.com/1",
    ]


@pytest.mark.parametrize("size", [0, 1, 4, 5, 6, 12])
def test_filter_cap_invariant(size):
    candidates = []
    for i in range(size):
        if i % 3 == 0:
            candidates.append(_candidate(f"https://twitter.com/u/status/{i}"))
        else:
            candidates.append(_candidate(f"https://example.com/{i}"))

    urls = filter_candidates(candidates, limit=5)

    assert len(urls) <= min(size, 5)
    assert all(classify(url) is not ContentKind.SOCIAL_MEDIA for url in urls)
    assert len(urls) == len(set(urls))


def test_filter_skips_empty_urls():
    assert filter_candidates([_candidate(""), _candidate("https://a.com")], limit=5) == ["https://a.com"]
