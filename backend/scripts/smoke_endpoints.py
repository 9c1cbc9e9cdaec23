from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("YOUTUBE_API_KEY", "smoke-key")

import backend.main as main_module
from backend.app.services.youtube_client import YouTubeAPIError


def make_video(video_id: str, hours_ago: int, duration: str, channel_id: str) -> dict:
    published_at = (datetime.now(timezone.utc) - timedelta(hours=hours_ago)).isoformat().replace("+00:00", "Z")
    return {
        "id": video_id,
        "snippet": {
            "title": f"Video {video_id}",
            "description": "Smoke description",
            "channelId": channel_id,
            "channelTitle": "Smoke Channel",
            "publishedAt": published_at,
            "thumbnails": {
                "high": {"url": f"https://img/{video_id}.jpg", "width": 480, "height": 360},
            },
        },
        "statistics": {"viewCount": "1234"},
        "contentDetails": {"duration": duration},
    }


SEARCH_PAYLOAD = {
    "items": [{"id": {"videoId": vid}} for vid in ("s1", "s2", "s3")],
    "nextPageToken": "NEXT_TOKEN",
    "pageInfo": {"totalResults": 300, "resultsPerPage": 50},
}
VIDEOS_PAYLOAD = {
    "items": [
        make_video("s1", 2, "PT4M10S", "UC_SMOKE_BIG"),
        make_video("s2", 3, "PT1H", "UC_SMOKE_BIG"),
        make_video("s3", 5, "PT50S", "UC_SMOKE_SMALL"),
    ]
}
CHANNELS_PAYLOAD = {
    "items": [
        {"id": "UC_SMOKE_BIG", "statistics": {"subscriberCount": "120000"}},
        {"id": "UC_SMOKE_SMALL", "statistics": {"subscriberCount": "12"}},
    ]
}


def assert_true(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def test_health() -> None:
    payload = main_module.health()
    assert_true(payload.get("ok") is True, "/health should return ok=true")


def test_pipeline_filters() -> None:
    youtube = main_module.aggregator.client
    with (
        patch.object(youtube, "search_videos", return_value=SEARCH_PAYLOAD),
        patch.object(youtube, "list_videos", return_value=VIDEOS_PAYLOAD) as list_videos,
        patch.object(youtube, "list_channels", return_value=CHANNELS_PAYLOAD) as list_channels,
    ):
        payload = main_module.ai_tools_videos(lastHours=24)

    ids = [v["id"] for v in payload.get("videos", [])]
    assert_true(ids == ["s1"], f"/api/ai-tools-videos should keep only s1, got {ids}")
    assert_true(payload.get("nextPageToken") == "NEXT_TOKEN", "nextPageToken should pass through")
    assert_true(list_videos.call_count == 1, "video details should be fetched in one batch")
    assert_true(list_channels.call_count == 1, "channel details should be fetched in one batch")


def test_empty_search() -> None:
    youtube = main_module.aggregator.client
    with (
        patch.object(youtube, "search_videos", return_value={"items": []}),
        patch.object(youtube, "list_videos") as list_videos,
    ):
        payload = main_module.ai_tools_videos(lastHours=1)

    assert_true(payload.get("totalResults") == 0, "empty search should report totalResults=0")
    assert_true(bool(payload.get("message")), "empty search should carry a message")
    assert_true(list_videos.call_count == 0, "empty search should not fetch video details")


def test_upstream_failure() -> None:
    youtube = main_module.aggregator.client
    with patch.object(youtube, "search_videos", side_effect=YouTubeAPIError("quota", 403)):
        response = main_module.ai_tools_videos(lastHours=None)

    assert_true(response.status_code == 500, "upstream failure should return 500")


def run() -> int:
    checks = [
        ("health", test_health),
        ("pipeline filters", test_pipeline_filters),
        ("empty search", test_empty_search),
        ("upstream failure", test_upstream_failure),
    ]
    failures = []

    for check_name, check_fn in checks:
        try:
            check_fn()
            print(f"[PASS] {check_name}")
        except Exception as exc:  # pragma: no cover - smoke script output path
            failures.append((check_name, str(exc)))
            print(f"[FAIL] {check_name}: {exc}")

    if failures:
        print(f"\nSmoke checks failed: {len(failures)}")
        for check_name, message in failures:
            print(f"- {check_name}: {message}")
        return 1

    print("\nAll smoke checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
