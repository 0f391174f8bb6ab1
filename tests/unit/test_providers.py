"""Unit tests for the platform content providers."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from tests.fakes import FakeLLMClient, make_content
from travel_content.content.base import SearchOptions, detect_language
from travel_content.content.providers import (
    AIAgentProvider,
    RedditProvider,
    XiaohongshuProvider,
    build_enabled_providers,
)
from travel_content.content.providers.ai_agent import ai_post_id
from travel_content.core.config import settings
from travel_content.llm import GeneratedActivity, LLMInvalidResponseError

OPTIONS = SearchOptions(query="Kyoto temples", destination="Kyoto", activity_type="sightseeing")


def _reddit_post(post_id: str, ups: int, selftext_length: int = 400, **extra: Any) -> dict[str, Any]:
    post: dict[str, Any] = {
        "id": post_id,
        "title": f"Trip report {post_id}",
        "selftext": "Kyoto temples at dawn are quiet. " * (selftext_length // 32 + 1),
        "author": "wanderer",
        "ups": ups,
        "num_comments": 40,
        "total_awards_received": 1,
        "permalink": f"/r/travel/comments/{post_id}/",
        "created_utc": 1_700_000_000,
        "subreddit": "travel",
    }
    post.update(extra)
    return {"data": post}


def _reddit_transport(children: list[dict[str, Any]], status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/search.json")
        assert request.url.params["q"] == "Kyoto temples"
        return httpx.Response(status_code, json={"data": {"children": children}})

    return httpx.MockTransport(handler)


class TestRedditProvider:
    """Test Reddit search, filtering and scoring."""

    @pytest.mark.asyncio
    async def test_search_keeps_high_quality_posts_sorted(self) -> None:
        """Test that low-upvote and short posts are dropped and the rest sorted."""
        # Arrange
        transport = _reddit_transport(
            [
                _reddit_post("low", ups=10),
                _reddit_post("mid", ups=200),
                _reddit_post("top", ups=5000),
                _reddit_post("short", ups=900, selftext_length=50),
                _reddit_post("removed", ups=900, removed_by_category="moderator"),
            ]
        )
        provider = RedditProvider("test-agent", transport=transport, subreddits=("travel",))

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert [item.platform_post_id for item in results] == ["top", "mid"]
        assert results[0].post_url == "https://reddit.com/r/travel/comments/top/"
        assert results[0].tags[0] == "travel"
        assert results[0].published_at is not None

    @pytest.mark.asyncio
    async def test_search_survives_failing_subreddit(self) -> None:
        """Test that one failing subreddit does not drop the others."""

        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            if "/r/broken/" in request.url.path:
                return httpx.Response(503)
            return httpx.Response(
                200, json={"data": {"children": [_reddit_post("ok", ups=100)]}}
            )

        provider = RedditProvider(
            "test-agent", transport=httpx.MockTransport(handler), subreddits=("broken", "travel")
        )

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert [item.platform_post_id for item in results] == ["ok"]

    @pytest.mark.asyncio
    async def test_search_returns_empty_on_network_error(self) -> None:
        """Test that connection errors resolve to an empty list."""

        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        provider = RedditProvider("test-agent", transport=httpx.MockTransport(handler))

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert results == []

    def test_engagement_score_is_clamped(self) -> None:
        """Test that huge engagement never exceeds the scale maximum."""
        # Arrange
        provider = RedditProvider("test-agent")
        viral = make_content(likes=10_000_000, comments=10_000_000, shares=10_000)
        quiet = make_content(likes=0, comments=0, shares=0)

        # Act & Assert
        assert provider.calculate_engagement_score(viral) == 1000
        assert provider.calculate_engagement_score(quiet) == 0

    def test_engagement_score_averages_components(self) -> None:
        """Test the upvote, comment and award weighting."""
        # Arrange
        provider = RedditProvider("test-agent")
        item = make_content(likes=1000, comments=50, shares=2)

        # Act
        score = provider.calculate_engagement_score(item)

        # Assert: (100 + 10 + 200) / 3
        assert score == 103


INITIAL_STATE = {
    "note": {
        "noteDetailMap": {
            "abc": {
                "noteId": "abc",
                "title": "京都寺庙攻略",
                "desc": "清水寺的日出非常美丽",
                "user": {"userId": "u1", "nickname": "小红", "avatar": "https://img/a.png"},
                "interactInfo": {"likedCount": "2300", "commentCount": "88"},
                "imageList": [{"url": "https://img/1.jpg"}],
                "tagList": [{"name": "京都"}],
                "time": 1_700_000_000_000,
                "ipLocation": "日本",
            }
        }
    }
}


def _xhs_html(state: dict[str, Any]) -> str:
    body = json.dumps(state, ensure_ascii=False).replace('"ipLocation": "日本"', '"ipLocation": undefined')
    return f"<html><script>window.__INITIAL_STATE__={body}</script></html>"


class TestXiaohongshuProvider:
    """Test Xiaohongshu scraping and the sample fallback."""

    def test_parse_html_reads_initial_state(self) -> None:
        """Test that notes are pulled from the embedded state, undefined tolerated."""
        # Act
        notes = XiaohongshuProvider.parse_html(_xhs_html(INITIAL_STATE))

        # Assert
        assert len(notes) == 1
        note = notes[0]
        assert note["note_id"] == "abc"
        assert note["image_list"] == ["https://img/1.jpg"]
        assert note["tag_list"] == ["京都"]
        assert note["location"] is None
        assert note["note_url"] == "https://www.xiaohongshu.com/explore/abc"

    def test_parse_html_without_state_returns_empty(self) -> None:
        """Test that pages without embedded state yield no notes."""
        assert XiaohongshuProvider.parse_html("<html><body>captcha</body></html>") == []

    @pytest.mark.asyncio
    async def test_search_maps_scraped_notes(self) -> None:
        """Test that scraped notes become Chinese-language content."""
        # Arrange
        html = _xhs_html(INITIAL_STATE)
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=html))
        provider = XiaohongshuProvider("test-agent", transport=transport)

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert len(results) == 1
        item = results[0]
        assert item.platform == "xiaohongshu"
        assert item.content_lang == "zh"
        assert item.likes == 2300
        assert item.comments == 88
        assert item.author_name == "小红"
        assert item.published_at is not None
        assert item.published_at.year == 2023

    @pytest.mark.asyncio
    async def test_search_falls_back_to_sample_notes(self) -> None:
        """Test that a blocked scrape still returns destination-tagged notes."""
        # Arrange
        transport = httpx.MockTransport(lambda request: httpx.Response(403))
        provider = XiaohongshuProvider("test-agent", transport=transport)

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert len(results) == 3
        assert all(item.location == "Kyoto" for item in results)
        assert all(item.platform_post_id.startswith("sample-kyoto-") for item in results)
        assert all(0 <= provider.calculate_engagement_score(item) <= 1000 for item in results)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "state",
        [
            {"note": [1]},
            {
                "note": {
                    "noteDetailMap": {
                        "bad": {**INITIAL_STATE["note"]["noteDetailMap"]["abc"], "user": {"avatar": 42}}
                    }
                }
            },
        ],
        ids=["unexpected-state-shape", "unmappable-note"],
    )
    async def test_search_falls_back_when_page_is_malformed(self, state: dict[str, Any]) -> None:
        """Test that unusable embedded state is replaced by the sample notes."""
        # Arrange
        html = _xhs_html(state)
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=html))
        provider = XiaohongshuProvider("test-agent", transport=transport)

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert len(results) == 3
        assert all(item.platform_post_id.startswith("sample-kyoto-") for item in results)

    @pytest.mark.asyncio
    async def test_search_accepts_numeric_user_ids(self) -> None:
        # Arrange
        note = {**INITIAL_STATE["note"]["noteDetailMap"]["abc"], "user": {"userId": 12345}}
        html = _xhs_html({"note": {"noteDetailMap": {"abc": note}}})
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=html))
        provider = XiaohongshuProvider("test-agent", transport=transport)

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert len(results) == 1
        assert results[0].author_id == "12345"
        assert results[0].author_name == "User"

    @pytest.mark.asyncio
    async def test_sample_notes_are_stable_per_destination(self) -> None:
        """Test that repeated fallbacks produce the same cache keys."""
        # Arrange
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        provider = XiaohongshuProvider("test-agent", transport=transport)

        # Act
        first = await provider.search(OPTIONS)
        second = await provider.search(OPTIONS)

        # Assert
        assert [item.cache_key for item in first] == [item.cache_key for item in second]

    def test_quality_gate(self) -> None:
        """Test the likes and comments thresholds."""
        provider = XiaohongshuProvider("test-agent")
        assert provider.is_high_quality(make_content("xiaohongshu", likes=1000, comments=50))
        assert not provider.is_high_quality(make_content("xiaohongshu", likes=999, comments=500))
        assert not provider.is_high_quality(make_content("xiaohongshu", likes=5000, comments=49))


class TestAIAgentProvider:
    """Test the language model acting as a content source."""

    @pytest.mark.asyncio
    async def test_search_maps_generated_activities(self) -> None:
        """Test that generated activities become zero-engagement content."""
        # Arrange
        llm = FakeLLMClient()
        llm.generated = [
            GeneratedActivity(
                title="Fushimi Inari Hike",
                description="Walk the torii gate trail.",
                duration="3 hours",
                tips=["Start early"],
                photo_keywords="torii gates",
            )
        ]
        provider = AIAgentProvider(llm)

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert len(results) == 1
        item = results[0]
        assert item.platform == "ai-agent"
        assert item.platform_post_id == ai_post_id("Kyoto", "Fushimi Inari Hike")
        assert item.location == "Kyoto"
        assert item.post_url == ""
        assert item.platform_meta["ai_generated"] is True
        assert item.platform_meta["tips"] == ["Start early"]
        assert provider.calculate_engagement_score(item) == 0
        assert provider.is_high_quality(item)

    @pytest.mark.asyncio
    async def test_search_returns_empty_on_llm_failure(self) -> None:
        """Test that LLM errors resolve to an empty list."""
        # Arrange
        llm = FakeLLMClient()
        llm.generate_error = LLMInvalidResponseError("LLM returned invalid JSON.")
        provider = AIAgentProvider(llm)

        # Act
        results = await provider.search(OPTIONS)

        # Assert
        assert results == []

    def test_post_id_ignores_case(self) -> None:
        """Test that the stable id does not depend on letter case."""
        assert ai_post_id("Kyoto", "Tea Ceremony") == ai_post_id("KYOTO", "tea ceremony")
        assert ai_post_id("Kyoto", "Tea Ceremony") != ai_post_id("Kyoto", "Zen Garden")


def test_build_enabled_providers_follows_switches(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that only switched-on platforms are built, in a fixed order."""
    # Arrange
    monkeypatch.setattr(settings, "enable_platform_xiaohongshu", True)
    monkeypatch.setattr(settings, "enable_platform_reddit", False)
    monkeypatch.setattr(settings, "enable_platform_ai_agent", True)

    # Act
    providers = build_enabled_providers(settings, FakeLLMClient())

    # Assert
    assert [provider.platform for provider in providers] == ["xiaohongshu", "ai-agent"]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("The temples were lovely", "en"),
        ("京都的寺庙非常漂亮", "zh"),
        ("きょうとのおてらはきれいです", "ja"),
        ("", "en"),
    ],
)
def test_detect_language(text: str, expected: str) -> None:
    """Test script-share language detection."""
    assert detect_language(text) == expected
