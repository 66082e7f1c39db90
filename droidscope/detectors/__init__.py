"""
droidscope/detectors — risk, sentiment and link classification.
"""

from droidscope.detectors.risk_classifier import Classification, classify
from droidscope.detectors.sentiment import score_sentiment, sentiment_emoji
from droidscope.detectors.url_detector import analyze_urls, extract_urls

__all__ = [
    "Classification",
    "analyze_urls",
    "classify",
    "extract_urls",
    "score_sentiment",
    "sentiment_emoji",
]
