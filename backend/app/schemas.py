from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

SEARCH_PAGE_SIZE = 50


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FilterParams(CamelModel):
    # max_results is accepted for compatibility with existing clients but never truncates output
    max_results: int = 10
    max_duration: int = 1200
    min_subscribers: int = 1000
    page: str = ""
    last_hours: int | None = None


class SearchQuery(BaseModel):
    text: str
    max_results_per_page: int = SEARCH_PAGE_SIZE
    page_token: str = ""
    published_after: datetime | None = None


class VideoCandidate(CamelModel):
    id: str
    title: str | None = None
    description: str | None = None
    thumbnail_url: str | None = None
    channel_id: str
    channel_title: str | None = None
    published_at: str | None = None
    duration: str
    duration_seconds: int
    view_count: int | None = None
    subscriber_count: int | None = None

    @model_serializer(mode="wrap")
    def _omit_unchecked_subscribers(self, handler):
        # subscriber_count stays unset until the channel lookup runs
        data = handler(self)
        if self.subscriber_count is None:
            data.pop("subscriberCount", None)
            data.pop("subscriber_count", None)
        return data


class ResultEnvelope(CamelModel):
    videos: list[VideoCandidate] = Field(default_factory=list)
    next_page_token: str | None = None
    page_info: dict[str, Any] | None = None
    total_results: int = 0
    message: str | None = None


class ErrorBody(BaseModel):
    error: str
    message: str
    stack: str | None = None
