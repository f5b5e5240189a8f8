from .analyzer import SentimentAnalyzer, parse_score_reply

__all__ = ["SentimentAnalyzer", "parse_score_reply"]
