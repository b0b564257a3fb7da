"""Hacker News API client — cached item fetches, comment trees and linked articles."""

from __future__ import annotations

import json
import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor

import httpx

from hnterm.cache import Cache
from hnterm.config import NetworkConfig
from hnterm.errors import FetchError, HNError, RequestCancelled
from hnterm.htmltext import parse_article
from hnterm.models import Article, Comment, CommentRow, Story, StoryListType

logger = logging.getLogger(__name__)

HN_API_BASE_URL = "https://hacker-news.firebaseio.com/v0/"
USER_AGENT = "hnterm/0.1 (terminal Hacker News reader)"

STORY_TTL = 300  # 5 minutes
COMMENT_TTL = 300
ARTICLE_TTL = 900  # 15 minutes
ARTICLE_TIMEOUT = 10
MAX_COMMENTS = 100


def hn_item_url(item_id: int, base_url: str = HN_API_BASE_URL) -> str:
    return f"{base_url}item/{item_id}.json"


def story_list_url(list_type: StoryListType, base_url: str = HN_API_BASE_URL) -> str:
    return f"{base_url}{list_type.api_name}.json"


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise RequestCancelled()


class ApiService:
    """Fetches stories, comments and articles, memoised through per-resource caches.

    Each cache is handed in (or created) at construction; the service follows
    get-or-fetch on every item: look in the cache, fetch on a miss, store the
    result. When a fetch fails and an expired copy is still held, the stale
    copy is served instead of an error.

    Concurrent requests for the same URL share one HTTP round trip.
    """

    def __init__(
        self,
        network_config: NetworkConfig | None = None,
        enable_performance_metrics: bool = False,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        story_cache: Cache[int, Story] | None = None,
        comment_cache: Cache[int, Comment] | None = None,
        article_cache: Cache[str, Article] | None = None,
    ) -> None:
        self.network = network_config or NetworkConfig()
        self.enable_performance_metrics = enable_performance_metrics
        self.base_url = base_url or HN_API_BASE_URL
        self.client = client or httpx.Client(
            follow_redirects=True, headers={"User-Agent": USER_AGENT}
        )
        self.story_cache = (
            story_cache if story_cache is not None
            else Cache.with_metrics(STORY_TTL, enable_performance_metrics)
        )
        self.comment_cache = (
            comment_cache if comment_cache is not None
            else Cache.with_metrics(COMMENT_TTL, enable_performance_metrics)
        )
        self.article_cache = (
            article_cache if article_cache is not None
            else Cache.with_metrics(ARTICLE_TTL, enable_performance_metrics)
        )
        permits = max(1, math.ceil(self.network.rate_limit_per_second))
        self._rate_limiter = threading.BoundedSemaphore(permits)
        self._inflight: dict[str, Future] = {}
        self._inflight_lock = threading.Lock()

    def __enter__(self) -> ApiService:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def _debug(self, msg: str, *args) -> None:
        if self.enable_performance_metrics:
            logger.debug(msg, *args)

    # Transport

    def fetch_raw(self, url: str) -> str:
        """GET ``url`` and return the body, retrying connect errors and timeouts."""
        start = time.monotonic()
        delay = self.network.initial_retry_delay_ms
        attempt = 0
        while True:
            attempt += 1
            with self._rate_limiter:
                try:
                    resp = self.client.get(url, timeout=self.network.timeout)
                    resp.raise_for_status()
                except httpx.TimeoutException as exc:
                    error: httpx.HTTPError = exc
                    should_retry = self.network.retry_on_timeout
                except httpx.ConnectError as exc:
                    error = exc
                    should_retry = True
                except httpx.HTTPStatusError as exc:
                    raise FetchError(
                        f"GET {url} returned {exc.response.status_code}", url
                    ) from exc
                except httpx.HTTPError as exc:
                    raise FetchError(f"failed to send GET request to {url}: {exc}", url) from exc
                else:
                    self._debug(
                        "GET %s ok attempt=%d elapsed=%.1fms",
                        url, attempt, (time.monotonic() - start) * 1000,
                    )
                    return resp.text

            if not should_retry or attempt > self.network.max_retries:
                self._debug("GET %s failed (final) attempt=%d: %s", url, attempt, error)
                raise FetchError(f"failed to send GET request to {url}: {error}", url) from error

            logger.warning(
                "Request to %s failed (attempt %d/%d): %s. Retrying in %dms...",
                url, attempt, self.network.max_retries + 1, error, delay,
            )
            time.sleep(delay / 1000)
            delay = min(delay * 2, self.network.max_retry_delay_ms)

    def get_json(self, url: str):
        """GET and decode JSON; callers asking for a URL already in flight share its result."""
        with self._inflight_lock:
            future = self._inflight.get(url)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[url] = future

        if owner:
            try:
                future.set_result(self.fetch_raw(url))
            except BaseException as exc:
                future.set_exception(exc)
            finally:
                with self._inflight_lock:
                    self._inflight.pop(url, None)
        else:
            self._debug("Deduplicated request joined: %s", url)

        body = future.result()
        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise FetchError(f"failed to parse JSON response from {url}", url) from exc

    # Stories

    def fetch_story_ids(
        self, list_type: StoryListType, cancel: threading.Event | None = None
    ) -> list[int]:
        """Fetch the ids of one of the HN story lists (top, new, ...)."""
        _check_cancelled(cancel)
        url = story_list_url(list_type, self.base_url)
        try:
            ids = self.get_json(url)
        except FetchError as exc:
            raise FetchError(f"fetch_story_ids failed for list {list_type.value}: {exc}", url) from exc
        _check_cancelled(cancel)
        if not isinstance(ids, list):
            raise FetchError(f"unexpected payload for list {list_type.value}", url)
        self._debug("Fetched %d story ids", len(ids))
        return ids

    def _fetch_item(self, item_id: int) -> dict:
        url = hn_item_url(item_id, self.base_url)
        data = self.get_json(url)
        if not isinstance(data, dict):
            raise FetchError(f"item {item_id} not found", url)
        return data

    def fetch_story_content(self, story_id: int) -> Story:
        story = self.story_cache.get(story_id)
        if story is not None:
            logger.debug("Cache hit for story %d", story_id)
            return story
        self._debug("Cache miss for story %d", story_id)

        try:
            story = Story.from_json(self._fetch_item(story_id))
        except FetchError:
            stale = self.story_cache.get_stale(story_id)
            if stale is not None:
                logger.warning("Network failed for story %d, serving stale content", story_id)
                return stale
            raise

        self.story_cache.set(story_id, story)
        return story

    def fetch_stories_concurrent(
        self,
        ids: list[int],
        limit: int = 8,
        cancel: threading.Event | None = None,
    ) -> list[Story | HNError]:
        """Fetch many stories at once; each slot holds the Story or the error it hit."""
        if cancel is not None and cancel.is_set():
            logger.warning("Request cancelled before starting story fetch")
            return [RequestCancelled() for _ in ids]
        if not ids:
            return []

        def fetch_one(story_id: int) -> Story | HNError:
            try:
                _check_cancelled(cancel)
                return self.fetch_story_content(story_id)
            except HNError as exc:
                return exc

        with ThreadPoolExecutor(max_workers=max(1, limit)) as pool:
            results = list(pool.map(fetch_one, ids))

        failed = sum(1 for r in results if isinstance(r, HNError))
        logger.info(
            "Fetched %d stories (successful: %d, failed: %d)",
            len(results), len(results) - failed, failed,
        )
        return results

    # Comments

    def fetch_comment_content(self, comment_id: int) -> Comment:
        comment = self.comment_cache.get(comment_id)
        if comment is not None:
            logger.debug("Cache hit for comment %d", comment_id)
            return comment
        self._debug("Cache miss for comment %d", comment_id)

        try:
            comment = Comment.from_json(self._fetch_item(comment_id))
        except FetchError:
            stale = self.comment_cache.get_stale(comment_id)
            if stale is not None:
                logger.warning("Network failed for comment %d, serving stale content", comment_id)
                return stale
            raise

        self.comment_cache.set(comment_id, comment)
        return comment

    def fetch_comment_tree(
        self, root_ids: list[int], cancel: threading.Event | None = None
    ) -> list[CommentRow]:
        """Walk a thread depth-first and return it flattened, capped at MAX_COMMENTS."""
        rows: list[CommentRow] = []
        for comment_id in root_ids:
            if len(rows) >= MAX_COMMENTS:
                break
            _check_cancelled(cancel)
            self._walk_comments(comment_id, 0, None, rows, cancel)
        return rows

    def _walk_comments(
        self,
        comment_id: int,
        depth: int,
        parent_id: int | None,
        rows: list[CommentRow],
        cancel: threading.Event | None,
    ) -> None:
        if len(rows) >= MAX_COMMENTS or (cancel is not None and cancel.is_set()):
            return
        try:
            comment = self.fetch_comment_content(comment_id)
        except HNError as exc:
            # A missing comment drops its whole subtree.
            logger.debug("Skipping comment %d: %s", comment_id, exc)
            return
        rows.append(CommentRow(comment=comment, depth=depth, parent_id=parent_id))
        for kid in comment.kids or []:
            self._walk_comments(kid, depth + 1, comment_id, rows, cancel)

    # Articles

    def fetch_article_content(
        self, url: str, cancel: threading.Event | None = None
    ) -> Article:
        """Download a story's linked page and parse it into readable blocks."""
        article = self.article_cache.get(url)
        if article is not None:
            logger.debug("Cache hit for article %s", url)
            return article
        self._debug("Cache miss for article %s", url)
        _check_cancelled(cancel)

        try:
            resp = self.client.get(url, timeout=ARTICLE_TIMEOUT)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            stale = self.article_cache.get_stale(url)
            if stale is not None:
                logger.warning("Network failed for article %s, serving stale content", url)
                return stale
            raise FetchError(f"Failed to fetch article: {exc}", url) from exc

        _check_cancelled(cancel)
        article = parse_article(resp.text)
        self.article_cache.set(url, article)
        return article

    def cleanup_caches(self) -> int:
        """Purge expired entries from every cache; returns the total removed."""
        return (
            self.story_cache.cleanup_expired()
            + self.comment_cache.cleanup_expired()
            + self.article_cache.cleanup_expired()
        )
