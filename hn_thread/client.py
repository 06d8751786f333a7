from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from hn_thread.config import ClientConfig
from hn_thread.exceptions import FetchError, MalformedRecord
from hn_thread.models import Comment, StoryItem, StoryPageData
from hn_thread.rate_limiter import RateLimiter
from hn_thread.tree import abuild_comment_tree, build_comment_tree

log = logging.getLogger(__name__)


def _parse_story_ids(data: Any, limit: Optional[int]) -> list[int]:
    if not isinstance(data, list):
        log.warning("Unexpected response for topstories: %r", data)
        return []

    ids: list[int] = []
    for raw in data:
        try:
            ids.append(int(raw))
        except (TypeError, ValueError):
            continue
    return ids if limit is None else ids[:limit]


def _parse_comment(comment_id: int, data: Optional[dict]) -> Optional[Comment]:
    if data is None:
        return None
    try:
        return Comment.from_dict(data)
    except MalformedRecord as exc:
        log.warning("Comment %s is malformed: %s", comment_id, exc)
        return None


def _parse_story(story_id: int, data: Optional[dict]) -> StoryItem:
    if data is None:
        raise FetchError(f"Story {story_id} is not available")
    return StoryItem.from_dict(data)


class HackerNewsClient:
    """
    Blocking client for the official Hacker News Firebase API.

    Network failures on individual items are logged and reported as a
    missing item, so one bad comment never breaks a whole page. Records that
    come back but cannot be parsed raise MalformedRecord for stories and are
    skipped for comments.

    fetch_comment doubles as the resolver passed to build_comment_tree.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self.config.timeout,
            follow_redirects=True,
            headers=self.config.headers,
        )
        self.rate_limiter = RateLimiter(min_interval_ms=self.config.min_interval_ms)

    def __enter__(self) -> HackerNewsClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _get_json(self, url: str) -> Any:
        self.rate_limiter.wait_if_needed()
        log.debug("GET %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            log.warning("Could not load %s: %s", url, exc)
            return None
        try:
            return response.json()
        except ValueError as exc:
            log.warning("Invalid JSON from %s: %s", url, exc)
            return None

    def fetch_top_story_ids(self, limit: Optional[int] = None) -> list[int]:
        url = self.config.top_stories_url()
        log.info("Loading top stories ids from %s", url)
        return _parse_story_ids(self._get_json(url), limit)

    def fetch_item(self, item_id: int) -> Optional[dict]:
        """Raw item JSON, or None when the API has nothing for this id."""
        data = self._get_json(self.config.item_url(item_id))
        return data if isinstance(data, dict) else None

    def fetch_story(self, story_id: int) -> StoryItem:
        return _parse_story(story_id, self.fetch_item(story_id))

    def fetch_comment(self, comment_id: int) -> Optional[Comment]:
        return _parse_comment(comment_id, self.fetch_item(comment_id))

    def fetch_top_stories(self, limit: int = 30) -> list[StoryItem]:
        stories: list[StoryItem] = []
        for story_id in self.fetch_top_story_ids(limit=limit):
            try:
                stories.append(self.fetch_story(story_id))
            except (FetchError, MalformedRecord) as exc:
                log.warning("Skip story %s: %s", story_id, exc)
        return stories

    def fetch_story_page(self, story_id: int) -> StoryPageData:
        story = self.fetch_story(story_id)
        log.info("Resolving %s comments for '%s'", len(story.kids), story.title)
        comments = build_comment_tree(story.kids, self.fetch_comment)
        return StoryPageData(item=story, comments=comments)


class AsyncHackerNewsClient:
    """
    asyncio flavour of HackerNewsClient.

    Sibling comments are fetched concurrently, capped by
    config.max_concurrency; the resulting tree has the same order as the
    blocking client would produce.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=True,
            headers=self.config.headers,
        )
        self.rate_limiter = RateLimiter(min_interval_ms=self.config.min_interval_ms)

    async def __aenter__(self) -> AsyncHackerNewsClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, url: str) -> Any:
        await self.rate_limiter.wait_if_needed_async()
        log.debug("GET %s", url)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            log.warning("Could not load %s: %s", url, exc)
            return None
        try:
            return response.json()
        except ValueError as exc:
            log.warning("Invalid JSON from %s: %s", url, exc)
            return None

    async def fetch_top_story_ids(self, limit: Optional[int] = None) -> list[int]:
        url = self.config.top_stories_url()
        log.info("Loading top stories ids from %s", url)
        return _parse_story_ids(await self._get_json(url), limit)

    async def fetch_item(self, item_id: int) -> Optional[dict]:
        data = await self._get_json(self.config.item_url(item_id))
        return data if isinstance(data, dict) else None

    async def fetch_story(self, story_id: int) -> StoryItem:
        return _parse_story(story_id, await self.fetch_item(story_id))

    async def fetch_comment(self, comment_id: int) -> Optional[Comment]:
        return _parse_comment(comment_id, await self.fetch_item(comment_id))

    async def fetch_top_stories(self, limit: int = 30) -> list[StoryItem]:
        story_ids = await self.fetch_top_story_ids(limit=limit)
        results = await asyncio.gather(
            *(self.fetch_story(story_id) for story_id in story_ids),
            return_exceptions=True,
        )

        stories: list[StoryItem] = []
        for story_id, result in zip(story_ids, results):
            if isinstance(result, (FetchError, MalformedRecord)):
                log.warning("Skip story %s: %s", story_id, result)
                continue
            if isinstance(result, BaseException):
                raise result
            stories.append(result)
        return stories

    async def fetch_story_page(self, story_id: int) -> StoryPageData:
        story = await self.fetch_story(story_id)
        log.info("Resolving %s comments for '%s'", len(story.kids), story.title)
        comments = await abuild_comment_tree(
            story.kids,
            self.fetch_comment,
            max_concurrency=self.config.max_concurrency,
        )
        return StoryPageData(item=story, comments=comments)
