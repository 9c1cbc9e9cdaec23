import json
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

import backend.main as main_module
from backend.app.config import Settings
from backend.app.services.video_aggregator import VideoAggregator
from backend.app.services.youtube_client import YouTubeAPIError
from backend.tests.fakes import FakeYouTube, make_channel, make_video


@pytest.fixture
def fake_youtube(monkeypatch, settings):
    now = datetime.now(timezone.utc)
    fake = FakeYouTube(
        videos=[
            make_video("short", "PT3M", channel_id="UC_BIG", now=now),
            make_video("long", "PT45M", channel_id="UC_BIG", now=now),
            make_video("small", "PT3M", channel_id="UC_SMALL", now=now),
        ],
        channels=[make_channel("UC_BIG", 25000), make_channel("UC_SMALL", 10)],
        next_page_token="NEXT",
        page_info={"totalResults": 500, "resultsPerPage": 50},
    )
    monkeypatch.setattr(main_module, "aggregator", VideoAggregator(settings, fake))
    return fake


@pytest.fixture
def client():
    return TestClient(main_module.app)


def test_health():
    assert main_module.health() == {"ok": True}


def test_ai_tools_videos_happy_path(client, fake_youtube):
    response = client.get("/api/ai-tools-videos")
    assert response.status_code == 200
    payload = response.json()

    assert set(payload) == {"videos", "nextPageToken", "pageInfo", "totalResults", "message"}
    assert [v["id"] for v in payload["videos"]] == ["short"]
    assert payload["nextPageToken"] == "NEXT"
    assert payload["pageInfo"] == {"totalResults": 500, "resultsPerPage": 50}
    assert payload["totalResults"] == 1
    assert payload["message"] is None

    video = payload["videos"][0]
    assert video["durationSeconds"] == 180
    assert video["subscriberCount"] == 25000
    assert video["thumbnailUrl"] == "https://img/short.jpg"
    assert video["channelId"] == "UC_BIG"


def test_query_parameters_reach_the_pipeline(client, fake_youtube):
    response = client.get(
        "/api/ai-tools-videos",
        params={"maxDuration": 3600, "minSubscribers": 0, "page": "CDIQAA", "lastHours": 24},
    )
    assert response.status_code == 200
    ids = [v["id"] for v in response.json()["videos"]]
    assert ids == ["short", "long", "small"]

    query = fake_youtube.calls[0][1]
    assert query.page_token == "CDIQAA"
    assert query.published_after is not None


def test_empty_search_returns_message(client, monkeypatch, settings):
    fake = FakeYouTube(videos=[])
    monkeypatch.setattr(main_module, "aggregator", VideoAggregator(settings, fake))

    payload = client.get("/api/ai-tools-videos", params={"lastHours": 3}).json()
    assert payload["videos"] == []
    assert payload["totalResults"] == 0
    assert payload["message"] == "No videos found in the last 3 hours"


def test_upstream_error_returns_500_without_videos(client, monkeypatch, fake_youtube):
    monkeypatch.setattr(main_module, "SETTINGS", Settings(youtube_api_key="k", app_env="production"))
    fake_youtube.fail_on = "channels"
    fake_youtube.error = YouTubeAPIError("YouTube API returned 503: backendError", 503)

    response = client.get("/api/ai-tools-videos")
    assert response.status_code == 500
    payload = response.json()
    assert payload["error"] == "Failed to fetch videos"
    assert "backendError" in payload["message"]
    assert "videos" not in payload
    assert "stack" not in payload


def test_stack_is_included_outside_production(monkeypatch, fake_youtube):
    monkeypatch.setattr(main_module, "SETTINGS", Settings(youtube_api_key="k", app_env="development"))
    fake_youtube.fail_on = "search"
    fake_youtube.error = YouTubeAPIError("network down")

    response = main_module.ai_tools_videos(lastHours=None)
    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["message"] == "network down"
    assert "YouTubeAPIError" in body["stack"]


def test_invalid_integer_parameter_is_rejected(client, fake_youtube):
    response = client.get("/api/ai-tools-videos", params={"maxDuration": "ten"})
    assert response.status_code == 422
    assert fake_youtube.calls == []
