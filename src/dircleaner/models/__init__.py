"""dircleaner data models."""

from dircleaner.models.file_match import FileMatch, ScanResult, ScanWarning
from dircleaner.models.outcome import DeletionOutcome, OutcomeStatus

__all__ = [
    "DeletionOutcome",
    "FileMatch",
    "OutcomeStatus",
    "ScanResult",
    "ScanWarning",
]
