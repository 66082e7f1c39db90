"""
droidscope/detectors/url_detector.py
Finds http(s) links in message bodies and flags known spam domains.
"""

import logging
import re
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from droidscope.models.record import Message, UrlFinding

logger = logging.getLogger(__name__)

# Pre-filter: bodies that look like they carry a link at all
LINK_HINT   = re.compile(r'http://|https://|www\.', re.IGNORECASE)
URL_PATTERN = re.compile(r'(?:http|https)://\S+')

DEFAULT_SPAM_PATTERNS: Tuple[str, ...] = (
    r'example-spam-domain\.com',
    r'another-spam-site\.net',
)


def compile_spam_patterns(patterns: Optional[Iterable[str]] = None) -> List[Pattern]:
    return [re.compile(p) for p in (patterns if patterns is not None else DEFAULT_SPAM_PATTERNS)]


def has_link(body: Optional[str]) -> bool:
    return bool(body) and LINK_HINT.search(body) is not None


def extract_urls(text: Optional[str]) -> List[str]:
    return URL_PATTERN.findall(text or '')


def is_spam_url(url: str, spam_patterns: Sequence[Pattern]) -> bool:
    return any(p.search(url) for p in spam_patterns)


def analyze_urls(
    messages:      Iterable[Message],
    spam_patterns: Optional[Sequence[Pattern]] = None,
) -> Tuple[List[UrlFinding], List[UrlFinding]]:
    """
    Returns (spam, non_spam) findings for every message with a link hint.
    A message is spam when any of its URLs matches a spam pattern.
    Bare 'www.' bodies land in non_spam with an empty url list.
    """
    patterns = spam_patterns if spam_patterns is not None else compile_spam_patterns()
    spam:     List[UrlFinding] = []
    non_spam: List[UrlFinding] = []

    for msg in messages:
        if not has_link(msg.body):
            continue
        urls    = extract_urls(msg.body)
        finding = UrlFinding(
            sender  = msg.address,
            date    = msg.date,
            body    = msg.body,
            urls    = urls,
            is_spam = any(is_spam_url(u, patterns) for u in urls),
        )
        (spam if finding.is_spam else non_spam).append(finding)

    logger.info(f"URL analysis: {len(spam)} spam / {len(non_spam)} other message(s) with links")
    return spam, non_spam
