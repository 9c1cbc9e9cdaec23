import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_log_level(raw_level: str | None) -> int:
    normalized = (raw_level or "").strip().upper()
    resolved = getattr(logging, normalized, None)
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def configure_logging(level: str | None) -> None:
    logging.basicConfig(
        level=resolve_log_level(level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # requests logs every connection at DEBUG, including the api key in the url
    logging.getLogger("urllib3").setLevel(logging.WARNING)
