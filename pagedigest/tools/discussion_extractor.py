"""Structured scrape of a rendered discussion thread (post + comments)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from pagedigest.models.failures import SignalQualityReject
from pagedigest.tools.content_cleaner import count_words

MIN_POST_CHARS = 100
MIN_COMMENTS_CHARS = 100

REMOVED_TITLES = frozenset({"[deleted by user]", "[removed]", "[deleted]"})

POST_SELECTORS = ("div.text-neutral-content", '[slot="text-body"]')
COMMENT_TAG = "shreddit-comment"

_AUTHOR_LINE_RE = re.compile(r"\w+\n•\n\d+\w* ago\n")
_REPLY_RE = re.compile(r"\b[Rr]eply\b")


@dataclass(frozen=True, slots=True)
class DiscussionThread:
    title: str
    post: str
    comments: str

    def as_text(self) -> str:
        return f"PostTitle : {self.title}\n\nPost : {self.post}\n\nComments : {self.comments}"

    @property
    def word_count(self) -> int:
        return count_words(self.title) + count_words(self.post) + count_words(self.comments)


def _inner_text(node: Tag) -> str:
    return node.get_text("\n", strip=True)


def _scrub(text: str) -> str:
    return _REPLY_RE.sub("", _AUTHOR_LINE_RE.sub("", text)).strip()


def _comment_body(comment: Tag) -> str:
    body = comment.find(attrs={"slot": "comment"}, recursive=False)
    return _inner_text(body if isinstance(body, Tag) else comment)


def extract_thread(markup: str) -> DiscussionThread:
    """Pull title, main post and comments out of rendered thread markup.

    Raises SignalQualityReject when the thread was removed or either the
    post or the comment section is too short to summarize.
    """
    soup = BeautifulSoup(markup or "", "html.parser")

    title_node = soup.find("h1")
    if not isinstance(title_node, Tag):
        raise SignalQualityReject("thread title not found")
    title = _inner_text(title_node)
    if title.lower() in REMOVED_TITLES:
        raise SignalQualityReject(f"thread removed: {title}")

    post_node = None
    for selector in POST_SELECTORS:
        post_node = soup.select_one(selector)
        if post_node is not None:
            break
    if post_node is None:
        raise SignalQualityReject("main post not found")
    post_text = _inner_text(post_node)
    if len(post_text) < MIN_POST_CHARS:
        raise SignalQualityReject(f"main post too short ({len(post_text)} chars)")

    comments = ""
    for i, comment in enumerate(soup.find_all(COMMENT_TAG), start=1):
        comments += f"Comment{i} \n {_scrub(_comment_body(comment))} \n"
    if len(comments) < MIN_COMMENTS_CHARS:
        raise SignalQualityReject(f"comments too short ({len(comments)} chars)")

    return DiscussionThread(
        title=title.strip(),
        post=_scrub(post_text),
        comments=_REPLY_RE.sub("", comments),
    )
