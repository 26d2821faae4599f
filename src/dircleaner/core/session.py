"""Interactive keep/delete session over a set of matches."""

from __future__ import annotations

import errno
import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Sequence

from dircleaner.models.file_match import FileMatch
from dircleaner.models.outcome import DeletionOutcome

log = logging.getLogger(__name__)

Remover = Callable[[Path], None]
MatchOutcome = tuple[FileMatch, DeletionOutcome]


class SessionError(Exception):
    """Raised when a session is misused."""


class SessionState(str, Enum):
    START = "start"
    PRESENTING = "presenting"
    CONFIRMING = "confirming"
    PER_MATCH_DECISION = "per_match_decision"
    DELETING = "deleting"
    DONE = "done"


class DecisionSource(ABC):
    """Answers the questions a DeletionSession asks, one at a time.

    Implementations may prompt on a console, replay scripted answers or
    act as test doubles.  Only ``keep_all`` and ``keep`` are required;
    the remaining hooks let a presentation layer follow along.
    """

    @abstractmethod
    def keep_all(self, matches: Sequence[FileMatch]) -> bool:
        """Return True to keep every match and end the session."""

    @abstractmethod
    def keep(self, match: FileMatch, position: int, total: int) -> bool:
        """Return True to keep *match*, False to delete it.

        *position* is 1-based.
        """

    def present(self, matches: Sequence[FileMatch]) -> None:
        """Show the full list of matches before any question is asked."""

    def no_matches(self) -> None:
        """Called instead of any question when there is nothing to decide."""

    def outcome(self, match: FileMatch, outcome: DeletionOutcome) -> None:
        """Called once per match as soon as its outcome is final."""


class ScriptedDecisions(DecisionSource):
    """Replays a fixed list of answers.

    ``keep_all_answer`` answers the first question; ``answers`` are
    consumed in order by the per-match questions.  Running out of answers
    raises SessionError.
    """

    def __init__(self, keep_all_answer: bool, answers: Iterable[bool] = ()) -> None:
        self.keep_all_answer = keep_all_answer
        self._answers = list(answers)
        self.asked: list[FileMatch] = []
        self.presented: list[FileMatch] = []
        self.outcomes: list[tuple[FileMatch, DeletionOutcome]] = []
        self.reported_empty = False

    def keep_all(self, matches: Sequence[FileMatch]) -> bool:
        return self.keep_all_answer

    def keep(self, match: FileMatch, position: int, total: int) -> bool:
        if len(self.asked) >= len(self._answers):
            raise SessionError(f"No scripted answer for {match.relative_path}")
        answer = self._answers[len(self.asked)]
        self.asked.append(match)
        return answer

    def present(self, matches: Sequence[FileMatch]) -> None:
        self.presented = list(matches)

    def no_matches(self) -> None:
        self.reported_empty = True

    def outcome(self, match: FileMatch, outcome: DeletionOutcome) -> None:
        self.outcomes.append((match, outcome))


class DeletionSession:
    """Drives one keep/delete round over a scan result.

    Matches are handled strictly in input order.  A session runs once;
    create a new one for every scan.
    """

    def __init__(self, source: DecisionSource, remove: Remover | None = None) -> None:
        self.source = source
        self._remove = remove or _unlink
        self.state = SessionState.START
        self.decisions: dict[int, bool] = {}

    def run(self, matches: Iterable[FileMatch]) -> list[MatchOutcome]:
        """Ask about *matches*, delete what the user gave up and report.

        Returns one ``(match, outcome)`` pair per input match, in input
        order.  An exception raised by the decision source propagates
        before anything is deleted; decisions made so far stay available
        in ``decisions`` (keyed by 0-based index, True meaning keep).
        """
        if self.state is not SessionState.START:
            raise SessionError("A deletion session can only run once")

        matches = list(matches)
        if not matches:
            log.info("No matches, nothing to decide")
            self.source.no_matches()
            self._move(SessionState.DONE)
            return []

        self._move(SessionState.PRESENTING)
        self.source.present(matches)

        self._move(SessionState.CONFIRMING)
        if self.source.keep_all(matches):
            kept = [(m, DeletionOutcome.kept()) for m in matches]
            for match, outcome in kept:
                self.source.outcome(match, outcome)
            self._move(SessionState.DONE)
            return kept

        self._move(SessionState.PER_MATCH_DECISION)
        total = len(matches)
        for index, match in enumerate(matches):
            self.decisions[index] = bool(self.source.keep(match, index + 1, total))

        self._move(SessionState.DELETING)
        results: list[MatchOutcome] = []
        for index, match in enumerate(matches):
            if self.decisions[index]:
                outcome = DeletionOutcome.kept()
            else:
                outcome = self._delete(match)
            results.append((match, outcome))
            self.source.outcome(match, outcome)

        self._move(SessionState.DONE)
        return results

    def _delete(self, match: FileMatch) -> DeletionOutcome:
        try:
            self._remove(match.path)
        except OSError as e:
            reason = failure_reason(e)
            log.warning("Could not delete %s: %s", match.path, reason)
            return DeletionOutcome.failed(reason)
        log.info("Deleted %s", match.path)
        return DeletionOutcome.deleted()

    def _move(self, state: SessionState) -> None:
        log.debug("Session %s -> %s", self.state.value, state.value)
        self.state = state


def failure_reason(error: OSError) -> str:
    """Short, stable description of why a removal failed."""
    if isinstance(error, FileNotFoundError):
        return "not found"
    if isinstance(error, IsADirectoryError):
        return "is a directory"
    if isinstance(error, PermissionError):
        return "permission denied"
    return error.strerror or str(error)


def _unlink(path: Path) -> None:
    # unlink() refuses directories on Linux but macOS reports EPERM.
    if path.is_dir() and not path.is_symlink():
        raise IsADirectoryError(errno.EISDIR, "Is a directory", str(path))
    path.unlink()
