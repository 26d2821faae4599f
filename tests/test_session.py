"""Tests for the interactive deletion session."""

from __future__ import annotations

from pathlib import Path

import pytest

from dircleaner.core.scanner import scan
from dircleaner.core.session import (
    DecisionSource,
    DeletionSession,
    ScriptedDecisions,
    SessionError,
    SessionState,
    failure_reason,
)
from dircleaner.models.outcome import DeletionOutcome, OutcomeStatus


@pytest.fixture
def three_copies(tmp_path):
    root = tmp_path / "tree"
    for folder in ("one", "two", "three"):
        (root / folder).mkdir(parents=True)
        (root / folder / "copy.bin").write_bytes(folder.encode())
    return scan(root, "copy.bin")


class InterruptingDecisions(DecisionSource):
    """Answers 'delete' once, then fails as if the user hit Ctrl-C."""

    def __init__(self) -> None:
        self.calls = 0

    def keep_all(self, matches):
        return False

    def keep(self, match, position, total):
        self.calls += 1
        if self.calls > 1:
            raise KeyboardInterrupt
        return False


class TestDeletionSession:
    def test_no_matches_ends_immediately(self, tmp_path):
        source = ScriptedDecisions(keep_all_answer=False)
        session = DeletionSession(source)

        results = session.run(scan(tmp_path, "missing"))

        assert results == []
        assert source.reported_empty
        assert source.presented == []
        assert source.asked == []
        assert session.state is SessionState.DONE

    def test_keep_all(self, sample_tree):
        matches = scan(sample_tree, "dup.txt")
        source = ScriptedDecisions(keep_all_answer=True)

        results = DeletionSession(source).run(matches)

        assert [o.status for _, o in results] == [OutcomeStatus.KEPT, OutcomeStatus.KEPT]
        assert source.asked == []
        assert source.presented == list(matches)
        assert all(m.path.exists() for m in matches)
        assert scan(sample_tree, "dup.txt") == matches

    def test_keep_all_twice_is_a_no_op(self, sample_tree):
        matches = scan(sample_tree, "dup.txt")

        for _ in range(2):
            results = DeletionSession(ScriptedDecisions(keep_all_answer=True)).run(matches)
            assert all(o == DeletionOutcome.kept() for _, o in results)

        assert scan(sample_tree, "dup.txt") == matches

    def test_keeping_each_match_individually(self, sample_tree):
        matches = scan(sample_tree, "dup.txt")
        source = ScriptedDecisions(keep_all_answer=False, answers=[True, True])

        results = DeletionSession(source).run(matches)

        assert [o.status for _, o in results] == [OutcomeStatus.KEPT, OutcomeStatus.KEPT]
        assert source.asked == list(matches)
        assert all(m.path.exists() for m in matches)

    def test_deletes_only_rejected_matches(self, sample_tree):
        matches = scan(sample_tree, "dup.txt")
        source = ScriptedDecisions(keep_all_answer=False, answers=[False, True])

        results = DeletionSession(source).run(matches)

        assert results[0] == (matches[0], DeletionOutcome.deleted())
        assert results[1] == (matches[1], DeletionOutcome.kept())
        assert not (sample_tree / "a" / "dup.txt").exists()
        assert (sample_tree / "b" / "c" / "dup.txt").exists()
        assert (sample_tree / "dup2.txt").exists()

    def test_outcomes_follow_input_order(self, three_copies):
        source = ScriptedDecisions(keep_all_answer=False, answers=[False, True, False])

        results = DeletionSession(source).run(three_copies)

        assert len(results) == len(three_copies)
        assert [m for m, _ in results] == list(three_copies)
        assert source.outcomes == results
        assert [o.status for _, o in results] == [
            OutcomeStatus.DELETED,
            OutcomeStatus.KEPT,
            OutcomeStatus.DELETED,
        ]

    def test_failure_does_not_block_other_deletions(self, three_copies):
        failing = three_copies[1].path

        def remove(path: Path) -> None:
            if path == failing:
                raise PermissionError(13, "Permission denied", str(path))
            path.unlink()

        source = ScriptedDecisions(keep_all_answer=False, answers=[False, False, False])
        results = DeletionSession(source, remove=remove).run(three_copies)

        assert results[0][1] == DeletionOutcome.deleted()
        assert results[1][1] == DeletionOutcome.failed("permission denied")
        assert results[2][1] == DeletionOutcome.deleted()
        assert not three_copies[0].path.exists()
        assert failing.exists()
        assert not three_copies[2].path.exists()

    def test_file_already_gone(self, sample_tree):
        matches = scan(sample_tree, "dup.txt")
        matches[0].path.unlink()

        source = ScriptedDecisions(keep_all_answer=False, answers=[False, False])
        results = DeletionSession(source).run(matches)

        assert results[0][1] == DeletionOutcome.failed("not found")
        assert results[1][1] == DeletionOutcome.deleted()

    def test_file_replaced_by_directory(self, sample_tree):
        matches = scan(sample_tree, "dup.txt")
        matches[0].path.unlink()
        matches[0].path.mkdir()

        source = ScriptedDecisions(keep_all_answer=False, answers=[False, True])
        results = DeletionSession(source).run(matches)

        assert results[0][1] == DeletionOutcome.failed("is a directory")
        assert matches[0].path.is_dir()

    def test_interrupted_decisions_delete_nothing(self, sample_tree):
        matches = scan(sample_tree, "dup.txt")
        session = DeletionSession(InterruptingDecisions())

        with pytest.raises(KeyboardInterrupt):
            session.run(matches)

        assert session.decisions == {0: False}
        assert session.state is SessionState.PER_MATCH_DECISION
        assert all(m.path.exists() for m in matches)

    def test_runs_only_once(self, sample_tree):
        session = DeletionSession(ScriptedDecisions(keep_all_answer=True))
        session.run(scan(sample_tree, "dup.txt"))

        with pytest.raises(SessionError):
            session.run(scan(sample_tree, "dup.txt"))

    def test_accepts_plain_list(self, sample_tree):
        matches = list(scan(sample_tree, "dup.txt"))
        results = DeletionSession(ScriptedDecisions(keep_all_answer=True)).run(matches)
        assert [m for m, _ in results] == matches

    def test_decision_source_is_abstract(self):
        with pytest.raises(TypeError):
            DecisionSource()


class TestScriptedDecisions:
    def test_running_out_of_answers(self, sample_tree):
        source = ScriptedDecisions(keep_all_answer=False, answers=[True])

        with pytest.raises(SessionError, match="No scripted answer"):
            DeletionSession(source).run(scan(sample_tree, "dup.txt"))


class TestFailureReason:
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (FileNotFoundError(2, "No such file or directory"), "not found"),
            (IsADirectoryError(21, "Is a directory"), "is a directory"),
            (PermissionError(13, "Permission denied"), "permission denied"),
            (OSError(30, "Read-only file system"), "Read-only file system"),
        ],
    )
    def test_reasons(self, error, expected):
        assert failure_reason(error) == expected
