"""
droidscope/detectors/sentiment.py
Lexicon polarity scoring for message bodies.

Score = sum of word valences from the AFINN-165 English word list (-5..+5),
as shipped with the `afinn` package. Multi-word entries are not matched;
scoring is per token. A word directly after a negator ("not", "don't", ...)
contributes its inverted valence.
Score < -2 counts as negative sentiment for risk classification.
"""

import re
from typing import Dict, List

from afinn import Afinn

NEGATIVE_THRESHOLD = -2

AFINN_WORDLIST = 'AFINN-en-165.txt'


def load_lexicon(filename: str = AFINN_WORDLIST) -> Dict[str, int]:
    """Single-word entries of an AFINN word list bundled with `afinn`."""
    afinn = Afinn(language='en')
    words = Afinn.read_word_file(afinn.full_filename(filename))
    return {word: valence for word, valence in words.items() if ' ' not in word}


LEXICON: Dict[str, int] = load_lexicon()

NEGATORS = frozenset({
    "not", "no", "never", "don't", "dont", "doesn't", "doesnt", "didn't",
    "didnt", "isn't", "isnt", "aren't", "arent", "wasn't", "wasnt",
    "won't", "wont", "can't", "cant", "cannot", "shouldn't", "shouldnt",
    "wouldn't", "wouldnt", "couldn't", "couldnt", "ain't", "aint", "neither",
    "nor", "nothing", "nobody",
})

ANGRY_EMOJI      = '\U0001F621'  # 😡
SAD_EMOJI        = '\U0001F61E'  # 😞
NEUTRAL_EMOJI    = '\U0001F610'  # 😐
HAPPY_EMOJI      = '\U0001F60A'  # 😊
VERY_HAPPY_EMOJI = '\U0001F60D'  # 😍

_TOKEN = re.compile(r"[a-z0-9']+")


def tokenize(text: str) -> List[str]:
    return _TOKEN.findall((text or '').lower())


def score_sentiment(text: str) -> int:
    tokens = tokenize(text)
    score  = 0
    for i, token in enumerate(tokens):
        valence = LEXICON.get(token)
        if not valence:
            continue
        if i > 0 and tokens[i - 1] in NEGATORS:
            valence = -valence
        score += valence
    return score


def is_negative(score: int) -> bool:
    return score < NEGATIVE_THRESHOLD


def sentiment_emoji(score: int) -> str:
    if score < NEGATIVE_THRESHOLD:
        return ANGRY_EMOJI
    if score < 0:
        return SAD_EMOJI
    if score == 0:
        return NEUTRAL_EMOJI
    if score <= 2:
        return HAPPY_EMOJI
    return VERY_HAPPY_EMOJI
