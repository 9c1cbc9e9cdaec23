import logging
from typing import Any, Iterable

import requests

from backend.app.schemas import SearchQuery
from backend.app.services.parsing import format_rfc3339

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_LIST = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_VIDEOS_LIST = "https://www.googleapis.com/youtube/v3/videos"
YOUTUBE_CHANNELS_LIST = "https://www.googleapis.com/youtube/v3/channels"


class YouTubeAPIError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class YouTubeQuotaExceededError(YouTubeAPIError):
    pass


def is_quota_exceeded_response(status_code: int, body: str) -> bool:
    lowered = (body or "").lower()
    return status_code in {403, 429} and (
        "quotaexceeded" in lowered or "quota exceeded" in lowered or "youtube.quota" in lowered
    )


def _error_reason(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.reason or f"HTTP {response.status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.reason or f"HTTP {response.status_code}"


class YouTubeClient:
    """
    Thin wrapper over the three YouTube Data API v3 list calls the pipeline needs.
    Holds only the key and timeout; each call opens its own connection, so one
    instance is shared across threadpool workers.
    """

    def __init__(self, api_key: str, timeout: float = 15):
        self.api_key = api_key
        self.timeout = timeout

    def _get(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        merged = dict(params)
        merged["key"] = self.api_key
        logger.debug("YouTube GET %s part=%s", url, params.get("part"))
        try:
            response = requests.get(url, params=merged, timeout=self.timeout)
        except requests.RequestException as exc:
            raise YouTubeAPIError(f"YouTube request failed: {exc}") from exc

        if response.status_code != 200:
            if is_quota_exceeded_response(response.status_code, response.text):
                raise YouTubeQuotaExceededError("YouTube API quota exceeded", response.status_code)
            raise YouTubeAPIError(
                f"YouTube API returned {response.status_code}: {_error_reason(response)}",
                response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise YouTubeAPIError("YouTube API returned a non-JSON body", response.status_code) from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise YouTubeAPIError("YouTube API response is missing an items list", response.status_code)
        return payload

    def search_videos(self, query: SearchQuery) -> dict[str, Any]:
        params: dict[str, Any] = {
            "part": "snippet",
            "q": query.text,
            "type": "video",
            "maxResults": query.max_results_per_page,
            "pageToken": query.page_token or "",
            "order": "date",
        }
        if query.published_after is not None:
            params["publishedAfter"] = format_rfc3339(query.published_after)
        return self._get(YOUTUBE_SEARCH_LIST, params)

    def list_videos(self, video_ids: Iterable[str]) -> dict[str, Any]:
        return self._get(
            YOUTUBE_VIDEOS_LIST,
            {
                "part": "contentDetails,snippet,statistics",
                "id": ",".join(video_ids),
            },
        )

    def list_channels(self, channel_ids: Iterable[str]) -> dict[str, Any]:
        return self._get(
            YOUTUBE_CHANNELS_LIST,
            {
                "part": "statistics",
                "id": ",".join(channel_ids),
            },
        )
