"""Structured logging helpers (PII-safe)."""

import logging
from typing import Any
from urllib.parse import urlsplit

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for API and worker processes."""
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def build_log_context(
    *,
    user_id: str | None = None,
    job_id: str | None = None,
    worker_id: int | str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if job_id:
        context["job_id"] = job_id
    if worker_id is not None and worker_id != "":
        context["worker_id"] = worker_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context


def safe_url(url: str | None) -> str:
    """Strip query string and fragment (signatures, tokens) from a URL for logging."""
    if not url:
        return ""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}"
