"""
Social Signal Monitor
=====================

Watches X/Twitter for watchlisted keywords and accounts, scores new posts
for bullish sentiment, and alerts when a weighted threshold is crossed.
"""

__version__ = "1.0.0"
