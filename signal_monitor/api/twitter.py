"""
X (Twitter) API v2 Client

Single responsibility: fetch recent posts for keyword searches and accounts.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from ..config import config
from ..errors import ConfigurationError, NotFoundError, SourceError
from ..models import ContentItem, EngagementMetrics

logger = logging.getLogger(__name__)

TWEET_FIELDS = "created_at,public_metrics,author_id"

# Smallest page the API accepts for each endpoint
SEARCH_MIN_RESULTS = 10
TIMELINE_MIN_RESULTS = 5


class TwitterClient:
    """
    Async read-only client for the X API v2.

    Handles:
    - Recent search by query
    - Recent posts of an account (handle -> id lookup first)
    - Rate limiting (429) with exponential backoff

    Non-2xx responses raise SourceError; the caller decides whether a
    failure on one watchlist entry matters.
    """

    def __init__(
        self,
        bearer_token: str = None,
        base_url: str = None,
        max_results: int = None,
        max_retries: int = None,
        backoff_sec: float = None,
        request_timeout: float = None,
        session: aiohttp.ClientSession = None,
    ):
        self.bearer_token = bearer_token if bearer_token is not None else config.twitter_bearer_token
        self.base_url = (base_url or config.twitter_api_url).rstrip("/")
        self.max_results = max_results or config.twitter_max_results
        self.max_retries = max_retries if max_retries is not None else config.max_retries
        self.backoff_sec = backoff_sec if backoff_sec is not None else config.rate_limit_backoff_sec
        self.request_timeout = (
            request_timeout if request_timeout is not None else config.request_timeout_sec
        )
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Create session if needed."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def close(self):
        """Close the HTTP session (only if this client created it)."""
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None

    def can_read(self) -> bool:
        """True if read credentials are configured."""
        return bool(self.bearer_token)

    async def _request(self, path: str, params: Dict[str, Any] = None) -> Dict[str, Any]:
        """
        GET an API endpoint with retry on rate limiting.

        Args:
            path: Endpoint path below the base URL (e.g. "/tweets/search/recent")
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            ConfigurationError: No bearer token configured
            SourceError: Non-2xx status, transport failure, or malformed JSON
        """
        if not self.can_read():
            raise ConfigurationError("TWITTER_BEARER_TOKEN is not configured")

        await self._ensure_session()
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.bearer_token}"}

        for attempt in range(self.max_retries + 1):
            try:
                async with self._session.get(url, params=params, headers=headers) as response:
                    body = await response.text()

                    if response.status == 429 and attempt < self.max_retries:
                        # Rate limited - back off
                        backoff = self.backoff_sec * (2 ** attempt)
                        logger.warning(f"X API rate limited on {path}, backing off {backoff}s")
                        await asyncio.sleep(backoff)
                        continue

                    if not 200 <= response.status < 300:
                        raise SourceError(response.status, body)

            except aiohttp.ClientError as e:
                raise SourceError(None, f"Request to {path} failed: {e}") from e
            except asyncio.TimeoutError as e:
                raise SourceError(None, f"Request to {path} timed out") from e

            try:
                return json.loads(body) if body else {}
            except ValueError as e:
                raise SourceError(None, f"Malformed JSON from {path}: {e}") from e

        # Unreachable: the final attempt either returns or raises
        raise SourceError(429, "rate limited")

    def _page_size(self, limit: int, minimum: int) -> int:
        return max(minimum, min(limit, self.max_results))

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------

    async def search_by_query(self, query: str, limit: int) -> List[ContentItem]:
        """
        Recent posts matching a search query.

        Args:
            query: Search expression (keyword, cashtag, ...)
            limit: Maximum posts to return (clamped to the API maximum)

        Returns:
            List of ContentItem (empty if nothing matched)
        """
        limit = min(limit, self.max_results)
        if limit <= 0:
            return []

        response = await self._request("/tweets/search/recent", {
            "query": query,
            "max_results": self._page_size(limit, SEARCH_MIN_RESULTS),
            "tweet.fields": TWEET_FIELDS,
            "expansions": "author_id",
            "user.fields": "username",
        })

        users = {
            user.get("id"): user.get("username", "")
            for user in response.get("includes", {}).get("users", [])
        }
        items = self._parse_tweets(response.get("data") or [], users)
        return items[:limit]

    async def list_by_account(self, handle: str, limit: int) -> List[ContentItem]:
        """
        Recent posts by an account.

        Args:
            handle: Account handle (with or without leading @)
            limit: Maximum posts to return (clamped to the API maximum)

        Returns:
            List of ContentItem (empty if the account has no recent posts)

        Raises:
            NotFoundError: The handle does not resolve to an account
        """
        handle = handle.lstrip("@")
        limit = min(limit, self.max_results)
        if limit <= 0:
            return []

        user_id = await self._resolve_user_id(handle)

        response = await self._request(f"/users/{user_id}/tweets", {
            "max_results": self._page_size(limit, TIMELINE_MIN_RESULTS),
            "tweet.fields": TWEET_FIELDS,
        })

        items = self._parse_tweets(
            response.get("data") or [], {user_id: handle}, default_author_id=user_id
        )
        return items[:limit]

    # -------------------------------------------------------------------------
    # Private Helpers
    # -------------------------------------------------------------------------

    async def _resolve_user_id(self, handle: str) -> str:
        try:
            response = await self._request(f"/users/by/username/{quote(handle, safe='')}")
        except SourceError as e:
            if e.status == 404:
                raise NotFoundError(handle) from e
            raise

        user_id = (response.get("data") or {}).get("id")
        if not user_id:
            raise NotFoundError(handle)
        return str(user_id)

    def _parse_tweets(
        self,
        tweets: List[dict],
        users: Dict[str, str],
        default_author_id: str = "",
    ) -> List[ContentItem]:
        """Parse API tweet objects into ContentItems."""
        items = []
        for tweet in tweets:
            try:
                author_id = str(tweet.get("author_id") or default_author_id)
                metrics = tweet.get("public_metrics")
                items.append(ContentItem(
                    id=str(tweet["id"]),
                    text=tweet.get("text", ""),
                    author_id=author_id,
                    author_handle=users.get(author_id, "unknown"),
                    created_at=tweet.get("created_at"),
                    metrics=EngagementMetrics(
                        likes=int(metrics.get("like_count", 0)),
                        retweets=int(metrics.get("retweet_count", 0)),
                        replies=int(metrics.get("reply_count", 0)),
                    ) if metrics else None,
                ))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed tweet object: {e}")
                continue
        return items
