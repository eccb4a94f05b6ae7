"""An in-memory stand-in for the self-hosted runners API."""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterable
from urllib.parse import urlsplit

__all__ = ["GitHubRunner", "RunnersList"]

_log = logging.getLogger(__name__)

_LIST_ROUTES = (
    re.compile(r"/repos/[^/]+/[^/]+/actions/runners"),
    re.compile(r"/orgs/[^/]+/actions/runners"),
)
_REMOVE_ROUTES = (
    re.compile(r"/repos/[^/]+/[^/]+/actions/runners/(?P<id>[^/]+)"),
    re.compile(r"/orgs/[^/]+/actions/runners/(?P<id>[^/]+)"),
)


@dataclass
class GitHubRunner:
    """A runner as the API reports it."""

    name: str
    id: int | None = None
    os: str | None = None
    status: str | None = None
    busy: bool | None = None

    def to_json(self) -> dict:
        fields = {"id": self.id, "name": self.name, "os": self.os, "status": self.status, "busy": self.busy}
        return {key: value for key, value in fields.items() if value is not None}


class _Server:
    """A running fake API server; close it when done."""

    def __init__(self, httpd: ThreadingHTTPServer):
        self._httpd = httpd
        self._thread = threading.Thread(target=httpd.serve_forever, daemon=True)
        self._thread.start()

    @property
    def url(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    def close(self) -> None:
        self._httpd.shutdown()
        self._httpd.server_close()
        self._thread.join()

    def __enter__(self) -> "_Server":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class RunnersList:
    """A list of runners unique by name, served over HTTP on demand."""

    def __init__(self) -> None:
        self._runners: list[GitHubRunner] = []
        self._lock = threading.Lock()

    @property
    def runners(self) -> list[GitHubRunner]:
        with self._lock:
            return list(self._runners)

    def _add(self, runner: GitHubRunner) -> None:
        if all(existing.name != runner.name for existing in self._runners):
            self._runners.append(runner)

    def add(self, runner: GitHubRunner) -> None:
        """Add ``runner`` unless one with the same name is already listed."""
        with self._lock:
            self._add(runner)

    def remove(self, runner_id) -> None:
        """Remove every runner whose id matches ``runner_id``."""
        wanted = str(runner_id)
        with self._lock:
            self._runners = [
                r for r in self._runners if r.id is None or str(r.id) != wanted
            ]

    def list_payload(self) -> dict:
        """Return the list response body as a mapping."""
        with self._lock:
            return {
                "total_count": len(self._runners),
                "runners": [r.to_json() for r in self._runners],
            }

    def sync(self, names: Iterable[str]) -> None:
        """Replace the list with idle online runners of the given names."""
        with self._lock:
            self._runners = []
            for index, name in enumerate(names):
                self._add(GitHubRunner(name=name, id=index, os="linux", status="online", busy=False))

    def add_offline(self, names: Iterable[str]) -> None:
        """Add idle offline runners of the given names, numbered from 1000."""
        with self._lock:
            for index, name in enumerate(names):
                self._add(
                    GitHubRunner(name=name, id=1000 + index, os="linux", status="offline", busy=False)
                )

    def serve(self) -> _Server:
        """Start serving the list and removal endpoints on a local port."""
        runners = self

        class Handler(BaseHTTPRequestHandler):
            def _dispatch(self) -> None:
                path = urlsplit(self.path).path
                if any(route.fullmatch(path) for route in _LIST_ROUTES):
                    body = json.dumps(runners.list_payload()).encode("utf-8")
                    self.send_response(200)
                    self.send_header("Content-Length", str(len(body)))
                    self.end_headers()
                    self.wfile.write(body)
                    return
                for route in _REMOVE_ROUTES:
                    match = route.fullmatch(path)
                    if match:
                        runners.remove(match.group("id"))
                        self.send_response(200)
                        self.send_header("Content-Length", "0")
                        self.end_headers()
                        return
                body = b"404 page not found\n"
                self.send_response(404)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _dispatch

            def log_message(self, format, *args):  # noqa: A002 - base class signature
                _log.debug("%s - " + format, self.address_string(), *args)

        return _Server(ThreadingHTTPServer(("127.0.0.1", 0), Handler))