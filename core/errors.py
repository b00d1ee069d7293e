from __future__ import annotations


class MentionTrackerError(Exception):
    """Base class for every error the pipeline raises on purpose."""


class ConfigurationError(MentionTrackerError):
    """Operator configuration is missing something a run needs."""


class CollectionError(MentionTrackerError):
    """One upstream source failed; the rest of the run carries on."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(message)
        self.source = source
        self.message = message

    def __str__(self) -> str:
        return self.message


class SinkError(MentionTrackerError):
    """A spreadsheet write failed."""


class SignatureError(MentionTrackerError):
    """A webhook push failed signature verification."""
