"""Client for the service that turns an uploaded CSV into report payloads.

The service computes per-customer metrics remotely and answers
``POST {api_url}/upload`` with ``{"data": [...], "orders": [...]}`` or,
on failure, with an ``{"error": "..."}`` body.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Protocol

import requests
import structlog

from ltv_report.errors import UploadError

logger = structlog.get_logger(__name__)

UPLOAD_ENDPOINT = "/upload"


class Uploader(Protocol):
    """Anything that can send a file and return the decoded response body."""

    async def upload(self, path: Path) -> Any: ...


def _error_message(response: requests.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class HttpUploader:
    """Multipart upload over HTTP using ``requests``.

    The blocking request runs in a worker thread so the caller's event loop
    is never blocked.
    """

    def __init__(
        self,
        api_url: str,
        timeout: float = 60.0,
        session: requests.Session | None = None,
    ):
        self.url = api_url.rstrip("/") + UPLOAD_ENDPOINT
        self.timeout = timeout
        self._session = session or requests.Session()

    async def upload(self, path: Path) -> Any:
        return await asyncio.to_thread(self._post, Path(path))

    def _post(self, path: Path) -> Any:
        logger.info("upload_started", url=self.url, file=path.name)
        with path.open("rb") as fh:
            try:
                response = self._session.post(
                    self.url,
                    files={"file": (path.name, fh, "text/csv")},
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                # No response means no server message; the generic one is used.
                logger.warning("upload_transport_error", url=self.url, error=str(exc))
                raise UploadError() from exc

        if not response.ok:
            message = _error_message(response)
            logger.warning(
                "upload_rejected", status_code=response.status_code, error=message
            )
            raise UploadError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise UploadError("Upload response was not valid JSON") from exc
        logger.info("upload_finished", url=self.url, status_code=response.status_code)
        return body
