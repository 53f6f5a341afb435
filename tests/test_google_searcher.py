"""Tests for GoogleSearcher."""

import json
from typing import Any

import httpx
import pytest

from eventscope.errors import ConfigurationError
from eventscope.search.google import GoogleSearcher, decode_json_body, is_image_link


def _json_response(data: Any, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=json.dumps(data))


def _item(n: int, **extra: Any) -> dict[str, Any]:
    return {
        "title": f"Result {n}",
        "link": f"https://site{n}.com/story",
        "snippet": f"Snippet {n}",
        "displayLink": f"site{n}.com",
        **extra,
    }


class TestGoogleSearcher:
    """Tests for web, image and recent search."""

    @pytest.fixture
    def searcher(self) -> GoogleSearcher:
        return GoogleSearcher(
            api_key="test-key",
            search_engine_id="test-cx",
            pages=2,
            page_size=10,
            page_delay_seconds=0,
        )

    def test_init_uses_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOGLE_API_KEY", "env-key")
        monkeypatch.setenv("GOOGLE_SEARCH_ENGINE_ID", "env-cx")
        searcher = GoogleSearcher()
        assert searcher._api_key == "env-key"
        assert searcher.has_credentials

    async def test_search_web_requires_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_SEARCH_ENGINE_ID", raising=False)
        calls: list[dict] = []

        async def mock_get(self, url, params=None, **kwargs):
            calls.append(params)
            return _json_response({"items": []})

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        with pytest.raises(ConfigurationError):
            await GoogleSearcher().search_web("query")
        assert calls == []

    async def test_search_web_paginates_sequentially(
        self, searcher: GoogleSearcher, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        starts: list[int] = []

        async def mock_get(self, url, params=None, **kwargs):
            starts.append(params["start"])
            assert params["num"] == 10
            assert params["q"] == "factory fire"
            offset = params["start"]
            return _json_response({"items": [_item(offset), _item(offset + 1)]})

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        results, usage = await searcher.search_web("factory fire")
        assert starts == [1, 11]
        assert [r.title for r in results] == ["Result 1", "Result 2", "Result 11", "Result 12"]
        assert results[0].display_domain == "site1.com"
        assert usage.search_requests == 2

    async def test_failed_page_is_skipped(
        self, searcher: GoogleSearcher, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def mock_get(self, url, params=None, **kwargs):
            if params["start"] == 1:
                return httpx.Response(200, text="<!DOCTYPE html><html>quota page</html>")
            return _json_response({"items": [_item(2)]})

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        results, usage = await searcher.search_web("q")
        assert [r.url for r in results] == ["https://site2.com/story"]
        assert usage.search_requests == 2

    async def test_error_payload_and_transport_errors_are_skipped(
        self, searcher: GoogleSearcher, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def mock_get(self, url, params=None, **kwargs):
            if params["start"] == 1:
                return _json_response({"error": {"code": 429, "message": "rate limited"}})
            raise httpx.ConnectTimeout("timeout")

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        results, _ = await searcher.search_web("q")
        assert results == []

    async def test_search_images_filters_and_caps(self, monkeypatch: pytest.MonkeyPatch) -> None:
        searcher = GoogleSearcher(api_key="k", search_engine_id="cx", max_images=2)
        seen_params: dict = {}

        async def mock_get(self, url, params=None, **kwargs):
            seen_params.update(params)
            return _json_response(
                {
                    "items": [
                        {"link": "https://cdn.com/favicon.png"},
                        {"link": "https://cdn.com/photo1.jpg"},
                        {"link": "https://cdn.com/static/logo.png"},
                        {"link": "https://cdn.com/page.html"},
                        {"link": "https://cdn.com/photo2.webp"},
                        {"link": "https://cdn.com/photo3.jpeg"},
                    ]
                }
            )

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        images, usage = await searcher.search_images("fire")
        assert images == ["https://cdn.com/photo1.jpg", "https://cdn.com/photo2.webp"]
        assert seen_params["searchType"] == "image"
        assert seen_params["safe"] == "active"
        assert seen_params["imgSize"] == "medium"
        assert usage.image_requests == 1

    async def test_search_images_without_credentials_is_empty(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_SEARCH_ENGINE_ID", raising=False)
        images, usage = await GoogleSearcher().search_images("fire")
        assert images == []
        assert usage.image_requests == 0

    async def test_search_images_failure_is_empty(
        self, searcher: GoogleSearcher, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def mock_get(self, url, params=None, **kwargs):
            return httpx.Response(500, text="server error")

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)
        images, _ = await searcher.search_images("fire")
        assert images == []

    async def test_search_recent_uses_date_restriction(
        self, searcher: GoogleSearcher, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        seen_params: dict = {}

        async def mock_get(self, url, params=None, **kwargs):
            seen_params.update(params)
            return _json_response(
                {
                    "items": [
                        _item(
                            1,
                            pagemap={
                                "metatags": [
                                    {
                                        "og:updated_time": "2024-01-02T00:00:00Z",
                                        "article:published_time": "2024-01-01T00:00:00Z",
                                    }
                                ]
                            },
                        ),
                        _item(2, pagemap={"newsarticle": [{"datepublished": "2024-01-03"}]}),
                        _item(3),
                        {"title": "", "link": "https://empty.com", "snippet": "no title"},
                    ]
                }
            )

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        results, usage = await searcher.search_recent("fire", days=3)
        assert seen_params["sort"] == "date"
        assert seen_params["dateRestrict"] == "d3"
        assert [r.published_at for r in results] == [
            "2024-01-01T00:00:00Z",
            "2024-01-03",
            None,
        ]
        assert usage.search_requests == 1

    async def test_search_recent_requires_credentials(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_SEARCH_ENGINE_ID", raising=False)
        with pytest.raises(ConfigurationError):
            await GoogleSearcher().search_recent("fire", days=1)


def test_decode_json_body_rejects_html_and_garbage() -> None:
    assert decode_json_body("<html><body>Error</body></html>") is None
    assert decode_json_body("  <!doctype html><html></html>") is None
    assert decode_json_body("not json") is None
    assert decode_json_body("[1, 2]") is None
    assert decode_json_body('{"items": []}') == {"items": []}


def test_is_image_link() -> None:
    assert is_image_link("https://cdn.com/a.JPG")
    assert is_image_link("https://cdn.com/image?id=3")
    assert not is_image_link("https://site.com/favicon.ico")
    assert not is_image_link("https://site.com/icon/a.png")
    assert not is_image_link("https://site.com/article")
