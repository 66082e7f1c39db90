"""
droidscope/detectors/risk_classifier.py
Keyword + regex risk classification for SMS bodies. Pure Python, offline.

Each category detector fires when a keyword equals one of the message's
lowercase word tokens, or the category pattern matches the raw text.
Multi-word keywords ('money laundering') never equal a single token, so
they only fire through a pattern. Known limitation, kept as data.

Category priority (first match wins):
    fraud > criminal > cyberbullying > threat > negative_sentiment > normal
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Pattern, Tuple

from droidscope.detectors.sentiment import is_negative, score_sentiment, sentiment_emoji
from droidscope.models.record import (
    CRIMINAL,
    CYBERBULLYING,
    FRAUD,
    NEGATIVE_SENTIMENT,
    NORMAL,
    THREAT,
)

# ── KEYWORD TABLES ───────────────────────────────────────────

KEYWORD_MAP: Dict[str, List[str]] = {

    FRAUD: [
        'fraud', 'scam', 'money laundering', 'tax evasion', 'illegal transaction',
        'advance fee', 'phishing', 'investment scheme', 'fake lottery', 'unclaimed prize',
        'giveaway', 'credit card fraud', 'identity theft', 'wire transfer',
        'account verification', 'personal information', 'confidentiality',
        'guaranteed win', 'earn money fast', 'risk-free',
    ],

    CRIMINAL: [
        'crime', 'theft', 'robbery', 'murder', 'assault', 'terrorism', 'drug trafficking',
        'illegal possession', 'kidnapping', 'extortion', 'arson', 'stolen goods',
        'gang violence', 'underworld', 'mafia', 'hitman', 'warrant', 'crime scene',
        'criminal record', 'dakati', 'qatal', 'dhoka', 'bomb', 'explosive', 'attack',
        'violence', 'assassin',
    ],

    CYBERBULLYING: [
        'bully', 'harass', 'threaten', 'abuse', 'victim', 'cyberstalk', 'intimidate',
        'insult', 'demean', 'humiliate', 'shame', 'mock', 'belittle', 'coerce',
        'blackmail', 'derogatory', 'malicious', 'discriminate', 'targeted attack',
        'online harassment',
    ],

    THREAT: [
        'explosive', 'bomb', 'attack', 'threat', 'danger', 'hazard', 'weapon',
        'assassinate', 'kidnap', 'hostage', 'terror', 'risk', 'emergency',
        'unsafe', 'explosive device', 'chemical weapon', 'biological weapon',
    ],
}

PATTERN_MAP: Dict[str, Pattern] = {
    FRAUD: re.compile(
        r'buy now|limited time offer|guaranteed|risk-free|call now|exclusive deal'
        r'|free gift|act now|urgent|cash prize',
        re.IGNORECASE,
    ),
    CRIMINAL: re.compile(
        r'criminal|felony|law enforcement|arrest|warrant|wanted|gang|drug deal'
        r'|illegal|offender|explosive|attack|violence',
        re.IGNORECASE,
    ),
    CYBERBULLYING: re.compile(
        r'bully|harassment|intimidation|abuse|stalker|humiliate|shame|mock|insult'
        r'|derogatory',
        re.IGNORECASE,
    ),
    THREAT: re.compile(
        r'bomb|explosive|attack|danger|threat|risk|terror|unsafe',
        re.IGNORECASE,
    ),
}

_WORD = re.compile(r'\w+')


@dataclass
class Classification:
    is_suspicious:   bool
    category:        str
    sentiment_score: int
    sentiment_emoji: str


def tokenize(text: str) -> List[str]:
    return _WORD.findall((text or '').lower())


def _matches(category: str, text: str) -> bool:
    words = set(tokenize(text))
    if any(kw in words for kw in KEYWORD_MAP[category]):
        return True
    return PATTERN_MAP[category].search(text or '') is not None


def detect_fraud(text: str) -> bool:
    return _matches(FRAUD, text)


def detect_criminal(text: str) -> bool:
    return _matches(CRIMINAL, text)


def detect_cyberbullying(text: str) -> bool:
    return _matches(CYBERBULLYING, text)


def detect_threat(text: str) -> bool:
    return _matches(THREAT, text)


# Priority order, highest first
DETECTORS: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    (FRAUD,         detect_fraud),
    (CRIMINAL,      detect_criminal),
    (CYBERBULLYING, detect_cyberbullying),
    (THREAT,        detect_threat),
)


def assign_category(signals: Dict[str, bool]) -> str:
    """
    First true signal in priority order wins. `signals` maps each of the
    four detector categories plus NEGATIVE_SENTIMENT to a bool.
    """
    for category, _ in DETECTORS:
        if signals.get(category):
            return category
    if signals.get(NEGATIVE_SENTIMENT):
        return NEGATIVE_SENTIMENT
    return NORMAL


def classify(text: str) -> Classification:
    text  = text or ''
    score = score_sentiment(text)

    signals = {category: detect(text) for category, detect in DETECTORS}
    signals[NEGATIVE_SENTIMENT] = is_negative(score)

    return Classification(
        is_suspicious   = any(signals.values()),
        category        = assign_category(signals),
        sentiment_score = score,
        sentiment_emoji = sentiment_emoji(score),
    )
