import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.config import Settings, load_settings
from backend.app.logging_config import configure_logging
from backend.app.schemas import ErrorBody, FilterParams
from backend.app.services.video_aggregator import VideoAggregator
from backend.app.services.youtube_client import YouTubeClient

logger = logging.getLogger(__name__)


def error_response(exc: Exception, settings: Settings) -> JSONResponse:
    body = ErrorBody(
        error="Failed to fetch videos",
        message=str(exc) or type(exc).__name__,
        stack=None if settings.is_production else "".join(traceback.format_exception(exc)),
    )
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


# ---------------------------
# App setup
# ---------------------------

SETTINGS = load_settings()
configure_logging(SETTINGS.log_level)

youtube = YouTubeClient(api_key=SETTINGS.youtube_api_key, timeout=SETTINGS.youtube_timeout_seconds)
aggregator = VideoAggregator(SETTINGS, youtube)

app = FastAPI(title="AI Tools Videos")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=SETTINGS.cors_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(exc, SETTINGS)


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/api/ai-tools-videos")
def ai_tools_videos(
    maxResults: int = 10,
    maxDuration: int = 1200,
    minSubscribers: int = 1000,
    page: str = "",
    lastHours: int | None = None,
):
    """
    Short videos about new AI tools from channels with enough subscribers.
    Pagination tokens come straight from YouTube search; a page may hold fewer
    than 50 videos once filters are applied.
    """
    params = FilterParams(
        max_results=maxResults,
        max_duration=maxDuration,
        min_subscribers=minSubscribers,
        page=page or "",
        last_hours=lastHours,
    )
    try:
        envelope = aggregator.fetch_filtered_videos(params)
    except Exception as exc:
        logger.exception("Error fetching AI tool videos")
        return error_response(exc, SETTINGS)
    return envelope.model_dump(by_alias=True)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=SETTINGS.port)


if __name__ == "__main__":
    run()
