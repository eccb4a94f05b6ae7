"""HTTP adapters that record rate-limit metrics and log round trips."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import requests
from requests.adapters import BaseAdapter, HTTPAdapter

from .logsetup import resolve_level

__all__ = [
    "HEADER_RATE_LIMIT",
    "HEADER_RATE_LIMIT_REMAINING",
    "HEADER_FROM_CACHE",
    "Gauge",
    "RATE_LIMIT",
    "RATE_LIMIT_REMAINING",
    "parse_response",
    "log_round_trip",
    "MetricsAdapter",
    "LoggingAdapter",
]

HEADER_RATE_LIMIT = "X-RateLimit-Limit"
HEADER_RATE_LIMIT_REMAINING = "X-RateLimit-Remaining"
HEADER_FROM_CACHE = "X-From-Cache"

_INTEGER = re.compile(r"[+-]?[0-9]+")

_V3 = resolve_level("-3")
_V4 = resolve_level("-4")


@dataclass
class Gauge:
    """A named metric holding the last value set."""

    name: str
    help: str
    value: float | None = None

    def set(self, value: float) -> None:
        self.value = float(value)


RATE_LIMIT = Gauge(
    "github_rate_limit",
    "The maximum number of requests you're permitted to make per hour",
)
RATE_LIMIT_REMAINING = Gauge(
    "github_rate_limit_remaining",
    "The number of requests remaining in the current rate limit window",
)


def _parse_int(text: str | None) -> int | None:
    if text is None or not _INTEGER.fullmatch(text):
        return None
    return int(text)


def parse_response(response: requests.Response) -> None:
    """Update the rate-limit gauges from the response headers.

    Headers that are missing or not integers leave their gauge unchanged.
    """
    limit = _parse_int(response.headers.get(HEADER_RATE_LIMIT))
    if limit is not None:
        RATE_LIMIT.set(limit)
    remaining = _parse_int(response.headers.get(HEADER_RATE_LIMIT_REMAINING))
    if remaining is not None:
        RATE_LIMIT_REMAINING.set(remaining)


def _emit(logger: logging.Logger, level: int, message: str, fields: dict) -> None:
    rendered = " ".join(f"{key}={value}" for key, value in fields.items())
    logger.log(level, "%s %s", message, rendered, extra={"fields": fields})


def log_round_trip(
    request: requests.PreparedRequest,
    response: requests.Response,
    logger: logging.Logger | None,
) -> None:
    """Log a completed request at trace levels.

    Records carry their key/value pairs in a ``fields`` attribute.  The
    rate-limit count is left out for responses served from a cache, and the
    full exchange including the body is logged at the most verbose level.
    """
    if logger is None:
        return

    from_cache = response.headers.get(HEADER_FROM_CACHE) == "1"
    fields = {"from_cache": from_cache, "method": request.method, "url": request.url}
    if not from_cache:
        fields["ratelimit_remaining"] = response.headers.get(HEADER_RATE_LIMIT_REMAINING, "")

    if logger.isEnabledFor(_V4):
        body = ""
        try:
            body = response.text
        except (requests.RequestException, OSError) as exc:
            _emit(logger, _V3, "unable to copy http response", {"error": exc})
        _emit(
            logger,
            _V4,
            "Logging HTTP round-trip",
            {
                "method": request.method,
                "requestHeader": dict(request.headers),
                "statusCode": response.status_code,
                "responseHeader": dict(response.headers),
                "responseBody": body,
            },
        )

    _emit(logger, _V3, "Seen HTTP response", fields)


class MetricsAdapter(BaseAdapter):
    """Adapter that records rate-limit gauges from every response."""

    def __init__(self, transport: BaseAdapter | None = None):
        super().__init__()
        self.transport = transport if transport is not None else HTTPAdapter()

    def send(self, request, **kwargs):
        response = self.transport.send(request, **kwargs)
        if response is not None:
            parse_response(response)
        return response

    def close(self):
        self.transport.close()


class LoggingAdapter(BaseAdapter):
    """Adapter that logs every round trip to ``logger``."""

    def __init__(
        self,
        transport: BaseAdapter | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__()
        self.transport = transport if transport is not None else HTTPAdapter()
        self.logger = logger

    def send(self, request, **kwargs):
        response = self.transport.send(request, **kwargs)
        if response is not None:
            log_round_trip(request, response, self.logger)
        return response

    def close(self):
        self.transport.close()