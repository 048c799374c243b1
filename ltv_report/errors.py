"""Error taxonomy for the LTV report engine.

Field-level parse problems never raise; they degrade to fallback values.
The classes below cover the conditions a caller has to react to.
"""

from __future__ import annotations

DEFAULT_UPLOAD_ERROR = "Upload failed"
NOTHING_TO_EXPORT = "There is no data to export."


class LTVReportError(Exception):
    """Base class for every error raised by this package."""


class PayloadError(LTVReportError, ValueError):
    """Upload response payload has the wrong shape or duplicate customers."""


class UploadError(LTVReportError):
    """Transport or server-side failure while uploading a file.

    The message is the server supplied ``error`` text when there is one,
    otherwise :data:`DEFAULT_UPLOAD_ERROR`.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or DEFAULT_UPLOAD_ERROR
        self.status_code = status_code
        super().__init__(self.message)


class NothingToExportError(LTVReportError):
    """The filtered view is empty so there is nothing to write."""

    def __init__(self, message: str = NOTHING_TO_EXPORT):
        super().__init__(message)


class ExportError(LTVReportError):
    """Rendering or writing an export artifact failed."""


class ExportInProgressError(ExportError):
    """A document export was requested while another one is still running."""
