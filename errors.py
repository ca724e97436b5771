"""
Error taxonomy for timeline reconstruction.
All errors abort the current pull request (or the whole run for FetchFailed); none are defaulted away.
"""
from typing import Optional


class TimelineError(Exception):
    """Base class for every error the pipeline raises on purpose."""


class ConfigError(TimelineError):
    """Run configuration is incomplete or invalid."""


class FetchFailed(TimelineError):
    """The remote data source failed or returned a response without the expected fields."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RecordError(TimelineError):
    """A raw record could not be turned into a timeline.

    `record` describes where the bad data came from (e.g. "pull request #12, timeline item 3")
    and is filled in by the caller that knows the context.
    """

    def __init__(self, message: str, record: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.record = record

    def __str__(self):
        if self.record:
            return f"{self.record}: {self.message}"
        return self.message


class MissingField(RecordError):
    def __init__(self, field: str, record: Optional[str] = None):
        super().__init__(f"missing required field '{field}'", record)
        self.field = field


class InvalidTimestamp(RecordError):
    def __init__(self, value, field: str = 'timestamp', record: Optional[str] = None):
        super().__init__(f"invalid timestamp {value!r} in field '{field}'", record)
        self.value = value
        self.field = field


class UnrecognizedEventKind(RecordError):
    def __init__(self, kind: str, record: Optional[str] = None):
        super().__init__(f"unrecognized timeline event kind {kind!r}", record)
        self.kind = kind


class UnrecognizedReviewState(RecordError):
    def __init__(self, state: str, record: Optional[str] = None):
        super().__init__(f"unrecognized review state {state!r}", record)
        self.state = state


__all__ = [
    "TimelineError",
    "ConfigError",
    "FetchFailed",
    "RecordError",
    "MissingField",
    "InvalidTimestamp",
    "UnrecognizedEventKind",
    "UnrecognizedReviewState",
]
