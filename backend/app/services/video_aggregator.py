import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from backend.app.config import Settings
from backend.app.schemas import FilterParams, ResultEnvelope, SearchQuery, VideoCandidate
from backend.app.services.parsing import iso8601_duration_to_seconds, parse_iso8601_datetime

logger = logging.getLogger(__name__)


class VideoSource(Protocol):
    def search_videos(self, query: SearchQuery) -> dict[str, Any]: ...

    def list_videos(self, video_ids: list[str]) -> dict[str, Any]: ...

    def list_channels(self, channel_ids: list[str]) -> dict[str, Any]: ...


class SkipVideo(Exception):
    """Raised while building a single candidate; drops that video only."""


def search_video_ids(search_payload: dict[str, Any]) -> list[str]:
    ids = []
    for item in search_payload.get("items", []):
        video_id = ((item or {}).get("id") or {}).get("videoId")
        if video_id:
            ids.append(video_id)
    return ids


def empty_window_message(last_hours: int | None, min_subscribers: int | None = None) -> str:
    message = "No videos found"
    if last_hours is not None:
        message += f" in the last {last_hours} hours"
    if min_subscribers is not None:
        message += f" with {min_subscribers}+ subscribers"
    return message


def build_candidate(
    video: dict[str, Any],
    max_duration: int,
    cutoff: datetime | None,
) -> VideoCandidate | None:
    """
    Turns one videos.list item into a candidate.

    Returns None when the video is well formed but filtered out (too long or
    older than the cutoff). Raises SkipVideo when it can't be evaluated.
    """
    video_id = video.get("id")
    details = video.get("contentDetails") or {}
    duration = details.get("duration")
    seconds = iso8601_duration_to_seconds(duration)
    if seconds is None:
        raise SkipVideo(f"couldn't parse duration {duration!r}")

    snippet = video["snippet"]
    published_at = snippet.get("publishedAt")
    if cutoff is not None:
        published = parse_iso8601_datetime(published_at)
        if published is None:
            raise SkipVideo(f"couldn't parse publishedAt {published_at!r}")
        if published < cutoff:
            return None

    if seconds > max_duration:
        return None

    view_count = video["statistics"].get("viewCount")
    return VideoCandidate(
        id=video_id,
        title=snippet.get("title"),
        description=snippet.get("description"),
        thumbnail_url=snippet["thumbnails"]["high"]["url"],
        channel_id=snippet["channelId"],
        channel_title=snippet.get("channelTitle"),
        published_at=published_at,
        duration=duration,
        duration_seconds=seconds,
        view_count=int(view_count) if view_count is not None else None,
    )


def build_subscriber_map(channels_payload: dict[str, Any]) -> dict[str, int]:
    subscribers: dict[str, int] = {}
    for channel in channels_payload.get("items", []):
        channel_id = (channel or {}).get("id")
        if not channel_id:
            continue
        raw = (channel.get("statistics") or {}).get("subscriberCount")
        try:
            subscribers[channel_id] = int(raw)
        except (TypeError, ValueError):
            # hidden subscriber counts come back without the field
            subscribers[channel_id] = 0
    return subscribers


class VideoAggregator:
    def __init__(self, settings: Settings, client: VideoSource):
        self.settings = settings
        self.client = client

    def fetch_filtered_videos(self, params: FilterParams, now: datetime | None = None) -> ResultEnvelope:
        now = now or datetime.now(timezone.utc)
        last_hours = params.last_hours
        cutoff = now - timedelta(hours=last_hours) if last_hours is not None else None

        query = SearchQuery(
            text=self.settings.search_query,
            page_token=params.page or "",
            published_after=cutoff,
        )
        if cutoff is not None:
            logger.info("Searching for videos after: %s", cutoff.isoformat())

        search_payload = self.client.search_videos(query)
        video_ids = search_video_ids(search_payload)
        logger.info("Found %d videos in search", len(video_ids))

        if not video_ids:
            return ResultEnvelope(
                videos=[],
                next_page_token=None,
                page_info={"totalResults": 0, "resultsPerPage": 0},
                total_results=0,
                message=empty_window_message(last_hours),
            )

        next_page_token = search_payload.get("nextPageToken") or None
        page_info = search_payload.get("pageInfo")

        details_payload = self.client.list_videos(video_ids)

        candidates: list[VideoCandidate] = []
        channel_ids: list[str] = []
        skipped = 0
        for video in details_payload.get("items", []):
            try:
                candidate = build_candidate(video, params.max_duration, cutoff)
            except SkipVideo as exc:
                skipped += 1
                logger.info("Skipping video %s - %s", (video or {}).get("id"), exc)
                continue
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                skipped += 1
                logger.warning("Error processing video %s: %r", (video or {}).get("id"), exc)
                continue
            if candidate is None:
                continue
            candidates.append(candidate)
            if candidate.channel_id not in channel_ids:
                channel_ids.append(candidate.channel_id)

        if skipped:
            logger.info("Skipped %d videos with unusable metadata", skipped)
        logger.info("Filtered to %d videos after duration check", len(candidates))

        if not channel_ids:
            return ResultEnvelope(
                videos=candidates,
                next_page_token=next_page_token,
                page_info=page_info,
                total_results=len(candidates),
                message=empty_window_message(last_hours) if not candidates else None,
            )

        subscribers = build_subscriber_map(self.client.list_channels(channel_ids))

        final_videos = []
        for candidate in candidates:
            candidate.subscriber_count = subscribers.get(candidate.channel_id, 0)
            if candidate.subscriber_count >= params.min_subscribers:
                final_videos.append(candidate)

        logger.info("Final result: %d videos after subscriber check", len(final_videos))

        message = None
        if not final_videos:
            message = empty_window_message(last_hours, params.min_subscribers)
        return ResultEnvelope(
            videos=final_videos,
            next_page_token=next_page_token,
            page_info=page_info,
            total_results=len(final_videos),
            message=message,
        )
