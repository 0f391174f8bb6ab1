"""Reddit provider using the public JSON search endpoints (no API key required)."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any, Final

import httpx

from travel_content.content.base import (
    ContentProvider,
    SearchOptions,
    TravelContent,
    clamp_score,
    detect_language,
)

logger = logging.getLogger(__name__)

TRAVEL_SUBREDDITS: Final[tuple[str, ...]] = (
    "travel",
    "solotravel",
    "backpacking",
    "TravelHacks",
    "JapanTravel",
    "chinatravel",
    "digitalnomad",
    "TravelNoPics",
    "Shoestring",
)

MIN_SELFTEXT_LENGTH: Final[int] = 100
MIN_QUALITY_UPVOTES: Final[int] = 50
MIN_QUALITY_CONTENT_LENGTH: Final[int] = 200
_REMOVED_MARKERS: Final[frozenset[str]] = frozenset({"[removed]", "[deleted]"})


class RedditProvider(ContentProvider):
    """Forum provider: searches a fixed set of travel subreddits concurrently."""

    platform = "reddit"

    def __init__(
        self,
        user_agent: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
        subreddits: tuple[str, ...] = TRAVEL_SUBREDDITS,
    ) -> None:
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport
        self.subreddits = subreddits

    async def search(self, options: SearchOptions) -> list[TravelContent]:
        logger.info(f"Searching Reddit for '{options.query}'")
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                results = await asyncio.gather(
                    *(
                        self._search_subreddit(client, subreddit, options.query, options.limit)
                        for subreddit in self.subreddits
                    ),
                    return_exceptions=True,
                )
        except Exception as e:
            logger.error(f"Reddit search failed. Error: {e}")
            return []

        posts: list[TravelContent] = []
        for subreddit, result in zip(self.subreddits, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"Search of r/{subreddit} failed. Error: {result}")
                continue
            posts.extend(result)

        high_quality = [post for post in posts if self.is_high_quality(post)]
        high_quality.sort(key=self.calculate_engagement_score, reverse=True)

        logger.info(f"Found {len(high_quality)} high-quality Reddit posts")
        return high_quality[: options.limit]

    def calculate_engagement_score(self, content: TravelContent) -> int:
        # Upvotes typically land in the 10-10k range
        normalized_upvotes = min(content.likes / 10, 1000)
        normalized_comments = min(content.comments / 5, 1000)
        normalized_awards = min(content.shares * 100, 1000)
        return clamp_score((normalized_upvotes + normalized_comments + normalized_awards) / 3)

    def is_high_quality(self, content: TravelContent) -> bool:
        return (
            content.likes >= MIN_QUALITY_UPVOTES
            and len(content.content) >= MIN_QUALITY_CONTENT_LENGTH
        )

    async def _search_subreddit(
        self, client: httpx.AsyncClient, subreddit: str, query: str, limit: int
    ) -> list[TravelContent]:
        url = f"https://www.reddit.com/r/{subreddit}/search.json"
        params = {
            "q": query,
            "limit": limit,
            "sort": "relevance",
            "restrict_sr": 1,
        }
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Failed to search r/{subreddit}: {e.response.status_code}")
            return []
        except (httpx.RequestError, ValueError) as e:
            logger.warning(f"Error searching r/{subreddit}. Error: {e}")
            return []

        children = (data.get("data") or {}).get("children") if isinstance(data, dict) else None
        if not children:
            return []

        posts: list[TravelContent] = []
        for child in children:
            post = child.get("data") or {}
            if not self._is_usable_post(post):
                continue
            try:
                posts.append(self._map_post(post, subreddit))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed post in r/{subreddit}. Error: {e}")
        return posts

    @staticmethod
    def _is_usable_post(post: dict[str, Any]) -> bool:
        selftext = post.get("selftext") or ""
        return (
            not post.get("removed_by_category")
            and len(selftext) > MIN_SELFTEXT_LENGTH
            and selftext not in _REMOVED_MARKERS
        )

    def _map_post(self, post: dict[str, Any], subreddit: str) -> TravelContent:
        created_utc = post.get("created_utc")
        return TravelContent(
            platform="reddit",
            platform_post_id=str(post["id"]),
            title=post.get("title") or "",
            content=post["selftext"],
            content_lang=detect_language(post["selftext"]),
            images=self._extract_images(post),
            tags=self._extract_tags(post, subreddit),
            author_name=post.get("author") or "[deleted]",
            author_id=post.get("author") or "[deleted]",
            likes=int(post.get("ups") or 0),
            comments=int(post.get("num_comments") or 0),
            shares=int(post.get("total_awards_received") or 0),
            post_url=f"https://reddit.com{post.get('permalink', '')}",
            published_at=datetime.fromtimestamp(created_utc, tz=UTC) if created_utc else None,
            platform_meta={
                "subreddit": post.get("subreddit"),
                "flair": post.get("link_flair_text"),
                "gilded": post.get("gilded"),
                "upvote_ratio": post.get("upvote_ratio"),
            },
        )

    @staticmethod
    def _extract_images(post: dict[str, Any]) -> list[str]:
        images: list[str] = []

        thumbnail = post.get("thumbnail") or ""
        if thumbnail.startswith("http") and (post.get("thumbnail_width") or 0) > 140:
            images.append(thumbnail)

        for image in (post.get("preview") or {}).get("images", []):
            source_url = (image.get("source") or {}).get("url")
            if source_url:
                # Preview URLs come HTML-escaped
                images.append(source_url.replace("&amp;", "&"))

        if post.get("post_hint") == "image" and post.get("url"):
            images.append(post["url"])

        return images

    @staticmethod
    def _extract_tags(post: dict[str, Any], subreddit: str) -> list[str]:
        tags = [subreddit]
        if post.get("link_flair_text"):
            tags.append(post["link_flair_text"])
        if post.get("post_hint"):
            tags.append(post["post_hint"])
        return tags
