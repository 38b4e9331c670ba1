from __future__ import annotations

from typing import Optional


class OutageMonitorError(Exception):
    """Base error. ``cause`` keeps the underlying exception for diagnostics."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        detail = str(self.cause) or type(self.cause).__name__
        return f"{self.message}: {detail}"


class ProbeError(OutageMonitorError):
    """A reachability check failed. Never fatal."""


class StorageError(OutageMonitorError):
    pass


class StorageInitError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class StorageReadError(StorageError):
    pass


class MalformedRecordError(StorageReadError):
    """A persisted timestamp is not a valid timezone-aware instant."""

    def __init__(
        self,
        message: str,
        row_id: Optional[int] = None,
        value: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.row_id = row_id
        self.value = value


class ConfigError(OutageMonitorError):
    pass
