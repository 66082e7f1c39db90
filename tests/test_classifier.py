"""
tests/test_classifier.py
Risk classifier, sentiment scorer and URL detector.
"""

import pytest

from droidscope.detectors.risk_classifier import (
    assign_category,
    classify,
    detect_criminal,
    detect_cyberbullying,
    detect_fraud,
    detect_threat,
)
from droidscope.detectors.sentiment import (
    ANGRY_EMOJI,
    HAPPY_EMOJI,
    LEXICON,
    NEUTRAL_EMOJI,
    SAD_EMOJI,
    VERY_HAPPY_EMOJI,
    score_sentiment,
    sentiment_emoji,
)
from droidscope.detectors.url_detector import analyze_urls, extract_urls, has_link
from droidscope.models.record import Message


# ── DETECTORS ────────────────────────────────────────────────

class TestDetectors:

    def test_fraud_keyword(self):
        assert detect_fraud('this is a SCAM')

    def test_fraud_pattern(self):
        assert detect_fraud('Limited time offer, act now!')

    def test_multi_word_keyword_needs_pattern(self):
        # 'identity theft' is never a single token; nothing in the fraud
        # pattern matches either
        assert not detect_fraud('worried about identity loss')

    def test_criminal_pattern_substring(self):
        assert detect_criminal('He was ARRESTED yesterday')

    def test_cyberbullying(self):
        assert detect_cyberbullying('stop trying to intimidate me')

    def test_threat(self):
        assert detect_threat('there is danger ahead')

    def test_benign(self):
        text = 'See you at the park tomorrow'
        assert not any(d(text) for d in (detect_fraud, detect_criminal, detect_cyberbullying, detect_threat))


class TestClassify:

    def test_fraud_beats_criminal(self):
        result = classify('fraud and crime everywhere')
        assert result.category == 'fraud'
        assert result.is_suspicious

    def test_criminal_beats_threat(self):
        # 'bomb' is in both the criminal and threat lists
        assert classify('a bomb at the station').category == 'criminal'

    def test_threat_only(self):
        assert classify('I see danger ahead').category == 'threat'

    def test_negative_sentiment(self):
        result = classify('I hate this, it is terrible and awful')
        assert result.category == 'negative_sentiment'
        assert result.is_suspicious
        assert result.sentiment_emoji == ANGRY_EMOJI

    def test_normal_iff_not_suspicious(self):
        for text in ('See you at the park tomorrow', 'this is a scam', '', 'I am sorry'):
            result = classify(text)
            assert (result.category == 'normal') == (not result.is_suspicious)

    def test_empty_body_is_normal(self):
        result = classify(None)
        assert result.category == 'normal'
        assert result.sentiment_emoji == NEUTRAL_EMOJI

    def test_assign_category_priority(self):
        signals = {'fraud': False, 'criminal': True, 'cyberbullying': True,
                   'threat': True, 'negative_sentiment': True}
        assert assign_category(signals) == 'criminal'
        assert assign_category({}) == 'normal'


# ── SENTIMENT ────────────────────────────────────────────────

class TestSentiment:

    def test_score_sum(self):
        assert score_sentiment('good, great day') == 6

    def test_negation_flips(self):
        assert score_sentiment('I am happy') == 3
        assert score_sentiment('I am not happy') == -3

    def test_unknown_words_score_zero(self):
        assert score_sentiment('the quick brown fox') == 0

    @pytest.mark.parametrize('text, score', [
        ('I am so disappointed and heartbroken, this is horrific', -8),
        ('this is miserable, I feel hopeless and devastated',     -7),
        ('you are a pathetic coward, disgraceful and despicable', -4),
    ])
    def test_full_afinn_vocabulary(self, text, score):
        result = classify(text)
        assert result.sentiment_score == score
        assert result.category == 'negative_sentiment'
        assert result.is_suspicious

    def test_multi_word_entries_not_matched(self):
        assert 'no fun' not in LEXICON
        # 'no' scores -1 on its own and negates 'fun' (+4)
        assert score_sentiment('no fun') == -5

    @pytest.mark.parametrize('score, emoji', [
        (-3, ANGRY_EMOJI),
        (-2, SAD_EMOJI),
        (-1, SAD_EMOJI),
        (0,  NEUTRAL_EMOJI),
        (2,  HAPPY_EMOJI),
        (3,  VERY_HAPPY_EMOJI),
    ])
    def test_emoji_bands(self, score, emoji):
        assert sentiment_emoji(score) == emoji

    def test_threshold_is_exclusive(self):
        # -2 is sad but not negative enough to flag
        result = classify('I feel sad')
        assert result.sentiment_score == -2
        assert result.category == 'normal'
        assert result.sentiment_emoji == SAD_EMOJI


# ── URLS ─────────────────────────────────────────────────────

class TestUrlDetector:

    def test_has_link(self):
        assert has_link('go to WWW.example.org')
        assert has_link('https://x.y')
        assert not has_link('no links here')
        assert not has_link(None)

    def test_extract_urls(self):
        text = 'see http://a.com/x and https://b.net/y?z=1 now'
        assert extract_urls(text) == ['http://a.com/x', 'https://b.net/y?z=1']

    def test_www_only_has_no_urls(self):
        assert extract_urls('visit www.example.org') == []

    def test_analyze_splits_spam(self):
        messages = [
            Message(address='+1', date=None, direction='received',
                    body='claim at http://example-spam-domain.com/p'),
            Message(address='+2', date=None, direction='received',
                    body='docs at https://python.org'),
            Message(address='+3', date=None, direction='received', body='no link'),
        ]
        spam, non_spam = analyze_urls(messages)
        assert [f.sender for f in spam] == ['+1']
        assert [f.sender for f in non_spam] == ['+2']
        assert spam[0].urls == ['http://example-spam-domain.com/p']
        assert spam[0].is_spam
