"""
Scan pipeline errors.

Only ScanInputError is meant to reach the HTTP caller. Capture and analysis
errors are absorbed by the pipeline and surface as a scan status.
"""
import enum


class ScanError(Exception):
    """Base class for scan pipeline errors."""


class ScanInputError(ScanError, ValueError):
    """Missing or invalid URL / caller, raised before any scan record exists."""


class CaptureFailure(str, enum.Enum):
    PAGE_UNREACHABLE = "PageUnreachable"


class CaptureError(ScanError):
    def __init__(self, reason: CaptureFailure, message: str = ""):
        self.reason = reason
        super().__init__(f"{reason.value}: {message}" if message else reason.value)


class AnalysisFailure(str, enum.Enum):
    NO_JSON_FOUND = "NoJsonFound"
    EMPTY_RESPONSE = "EmptyResponse"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"


class AnalysisError(ScanError):
    def __init__(self, reason: AnalysisFailure, message: str = ""):
        self.reason = reason
        super().__init__(f"{reason.value}: {message}" if message else reason.value)
