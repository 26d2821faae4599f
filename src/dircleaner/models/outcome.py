"""Deletion outcome dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutcomeStatus(str, Enum):
    """Final disposition of a match."""

    KEPT = "kept"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DeletionOutcome:
    """What happened to one match at the end of a session.

    ``reason`` is only set for ``FAILED`` outcomes.
    """

    status: OutcomeStatus
    reason: str = ""

    @classmethod
    def kept(cls) -> DeletionOutcome:
        return cls(OutcomeStatus.KEPT)

    @classmethod
    def deleted(cls) -> DeletionOutcome:
        return cls(OutcomeStatus.DELETED)

    @classmethod
    def failed(cls, reason: str) -> DeletionOutcome:
        return cls(OutcomeStatus.FAILED, reason)

    @property
    def is_failure(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    def __str__(self) -> str:
        if self.reason:
            return f"{self.status.value} ({self.reason})"
        return self.status.value
