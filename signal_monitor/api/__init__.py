from .twitter import TwitterClient

__all__ = ["TwitterClient"]
