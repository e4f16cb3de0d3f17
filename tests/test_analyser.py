"""Tests for commit analysis functionality."""

from pathlib import Path, PurePosixPath
from unittest.mock import patch

import pytest

from git_next_tag.analyser import (
    ConventionalCommit,
    MalformedCommit,
    analyse_commits,
    classification_key,
    classify_commit,
    parse_commit_message,
    relative_sub_path,
    touches_path,
)
from git_next_tag.config import ReleaseRules
from git_next_tag.git import CommitRecord
from git_next_tag.version import ChangeType


@pytest.fixture
def rules():
    """Default rules: feat is minor, fix is patch."""
    return ReleaseRules()


def make_commits(*messages: str, root_last: bool = False) -> list[CommitRecord]:
    """Build commit records, newest first."""
    commits = []
    for index, message in enumerate(messages):
        is_last = index == len(messages) - 1
        parents = () if root_last and is_last else (f"parent{index}",)
        commits.append(CommitRecord(sha=f"sha{index}", message=message, parents=parents))
    return commits


class TestParseCommitMessage:
    """Tests for parse_commit_message function."""

    def test_simple_commit(self):
        """Test parsing a simple conventional commit."""
        result = parse_commit_message("feat: add new feature")
        assert result == ConventionalCommit(
            type="feat", scope="", breaking=False, description="add new feature"
        )

    def test_commit_with_scope(self):
        """Test parsing a commit with scope."""
        result = parse_commit_message("fix(api): resolve bug")
        assert isinstance(result, ConventionalCommit)
        assert result.type == "fix"
        assert result.scope == "api"
        assert result.description == "resolve bug"
        assert result.breaking is False

    def test_breaking_change_with_exclamation(self):
        """Test parsing a breaking change with ! indicator."""
        result = parse_commit_message("feat!: breaking change")
        assert isinstance(result, ConventionalCommit)
        assert result.type == "feat"
        assert result.breaking is True

    def test_breaking_change_with_scope(self):
        """Test parsing a breaking change with scope."""
        result = parse_commit_message("feat(api)!: breaking API change")
        assert isinstance(result, ConventionalCommit)
        assert result.scope == "api"
        assert result.breaking is True

    def test_breaking_change_footer(self):
        """Test detecting a breaking change in the commit body."""
        result = parse_commit_message("feat: test\n\nBREAKING CHANGE: this breaks things")
        assert isinstance(result, ConventionalCommit)
        assert result.breaking is True

    def test_body_does_not_affect_subject(self):
        """Test that only the first line is parsed as the subject."""
        result = parse_commit_message("fix: subject\n\nsome: other text")
        assert isinstance(result, ConventionalCommit)
        assert result.description == "subject"
        assert result.breaking is False

    @pytest.mark.parametrize(
        "message",
        ["some random commit message", "feat add thing", "feat:", "feat:add", "", "(api): no type"],
    )
    def test_malformed_commits(self, message):
        """Test that non-conventional messages yield a parse failure."""
        assert isinstance(parse_commit_message(message), MalformedCommit)


class TestClassification:
    """Tests for classification_key and classify_commit."""

    @pytest.mark.parametrize(
        "message,key",
        [
            ("feat: x", "feat"),
            ("feat(api): x", "feat(api)"),
            ("feat!: x", "feat!"),
            ("fix(api)!: x", "fix(api)!"),
        ],
    )
    def test_classification_key(self, message, key):
        """Test key construction from type, scope and breaking marker."""
        assert classification_key(parse_commit_message(message)) == key

    def test_breaking_flag_forces_major(self, rules):
        """Test that breaking commits are major regardless of configured types."""
        commit = parse_commit_message("chore!: drop support")
        assert classify_commit(commit, rules) is ChangeType.MAJOR

    def test_major_types(self):
        """Test configured major types."""
        rules = ReleaseRules(major=frozenset({"perf"}))
        assert classify_commit(parse_commit_message("perf: faster"), rules) is ChangeType.MAJOR

    def test_scoped_types(self):
        """Test that scoped keys must be configured explicitly."""
        rules = ReleaseRules(minor=frozenset({"feat(api)"}), patch=frozenset())
        assert classify_commit(parse_commit_message("feat(api): x"), rules) is ChangeType.MINOR
        assert classify_commit(parse_commit_message("feat(cli): x"), rules) is ChangeType.NONE

    def test_unconfigured_type(self, rules):
        """Test that unknown types do not bump."""
        assert classify_commit(parse_commit_message("docs: readme"), rules) is ChangeType.NONE


class TestAnalyseCommits:
    """Tests for analyse_commits function."""

    def test_empty_commits(self, rules, tmp_path):
        """Test with no commits."""
        result = analyse_commits([], rules, tmp_path)
        assert result.change is ChangeType.NONE
        assert result.commits_checked == 0

    def test_patch_commits_only(self, rules, tmp_path):
        """Test with only patch-level commits."""
        result = analyse_commits(make_commits("fix: a", "fix: b"), rules, tmp_path)
        assert result.change is ChangeType.PATCH

    def test_minor_dominates_patch(self, rules, tmp_path):
        """Test that minor wins over patch regardless of order."""
        result = analyse_commits(make_commits("fix: a", "feat: b"), rules, tmp_path)
        assert result.change is ChangeType.MINOR

    def test_major_dominates(self, rules, tmp_path):
        """Test that a breaking change produces a major classification."""
        commits = make_commits("fix: a", "feat!: breaking", "feat: b")
        result = analyse_commits(commits, rules, tmp_path)
        assert result.change is ChangeType.MAJOR

    def test_major_stops_walk(self, rules, tmp_path):
        """Test that no commit after the first major one is inspected."""
        commits = make_commits("feat!: breaking change", "feat: older", "fix: oldest")
        result = analyse_commits(iter(commits), rules, tmp_path)
        assert result.change is ChangeType.MAJOR
        assert result.commits_checked == 1
        assert result.summary == {"feat!": 1}

    def test_malformed_commits_skipped(self, rules, tmp_path, log_messages):
        """Test that malformed messages are skipped with a warning."""
        result = analyse_commits(make_commits("random message", "fix: valid"), rules, tmp_path)
        assert result.change is ChangeType.PATCH
        assert result.commits_checked == 2
        assert any("sha0" in message for message in log_messages)

    def test_only_unknown_commits(self, rules, tmp_path):
        """Test with only unconfigured commit types."""
        result = analyse_commits(make_commits("docs: a", "chore: b"), rules, tmp_path)
        assert result.change is ChangeType.NONE
        assert result.summary == {"docs": 1, "chore": 1}

    def test_unbounded_walk_stops_after_root(self, rules, tmp_path):
        """Test that the full-history walk ends at the first root commit."""
        commits = make_commits("fix: a", "feat: root", root_last=True)
        commits.append(CommitRecord(sha="other", message="feat!: unrelated", parents=()))
        result = analyse_commits(commits, rules, tmp_path, bounded=False)
        assert result.change is ChangeType.MINOR
        assert result.commits_checked == 2

    def test_bounded_walk_continues_past_root(self, rules, tmp_path):
        """Test that root commits do not cut a bounded walk short."""
        commits = make_commits("fix: a", "feat: root", root_last=True)
        commits.append(CommitRecord(sha="other", message="feat!: unrelated", parents=()))
        result = analyse_commits(commits, rules, tmp_path, bounded=True)
        assert result.change is ChangeType.MAJOR


class TestPathFilter:
    """Tests for path filtering during analysis."""

    def test_touches_path(self):
        """Test path containment on component boundaries."""
        sub_path = PurePosixPath("services/api")
        assert touches_path(["services/api/main.py"], sub_path)
        assert touches_path(["services/api"], sub_path)
        assert not touches_path(["services/api2/main.py"], sub_path)
        assert not touches_path(["README.md"], sub_path)
        assert not touches_path([], sub_path)

    def test_relative_sub_path(self, tmp_path):
        """Test sub-path derivation from the scoped path."""
        assert relative_sub_path(tmp_path, tmp_path) is None
        assert relative_sub_path(tmp_path / "a" / "b", tmp_path) == PurePosixPath("a/b")

    def test_commit_outside_path_is_ignored(self, rules, tmp_path):
        """Test that a breaking commit outside the sub-path has no effect."""
        commits = make_commits("feat!: unrelated breaking", "fix: in scope")
        changes = {"sha0": ["other/file.py"], "sha1": ["api/file.py"]}

        with patch(
            "git_next_tag.analyser.changed_files",
            side_effect=lambda sha, cwd, root=False: changes[sha],
        ):
            result = analyse_commits(
                commits, rules, tmp_path, sub_path=PurePosixPath("api")
            )

        assert result.change is ChangeType.PATCH
        assert result.summary == {"fix": 1}

    def test_merge_commits_not_filtered(self, rules, tmp_path):
        """Test that merge commits are classified without diffing."""
        commits = [CommitRecord(sha="merge", message="fix: merge", parents=("a", "b"))]
        with patch("git_next_tag.analyser.changed_files") as mock_changed:
            result = analyse_commits(
                commits, rules, Path(tmp_path), sub_path=PurePosixPath("api")
            )

        mock_changed.assert_not_called()
        assert result.change is ChangeType.PATCH

    def test_root_commit_outside_path_is_ignored(self, rules, tmp_path):
        """Test that root commits are filtered on the files they introduce."""
        commits = [
            CommitRecord(sha="child", message="fix: in scope", parents=("root",)),
            CommitRecord(sha="root", message="feat!: unrelated breaking", parents=()),
        ]
        changes = {"child": ["api/a.py"], "root": ["other/file.txt"]}

        with patch(
            "git_next_tag.analyser.changed_files",
            side_effect=lambda sha, cwd, root=False: changes[sha],
        ) as mock_changed:
            result = analyse_commits(
                commits, rules, tmp_path, sub_path=PurePosixPath("api"), bounded=False
            )

        assert result.change is ChangeType.PATCH
        mock_changed.assert_called_with("root", tmp_path, root=True)

    def test_unbounded_walk_stops_at_filtered_root(self, rules, tmp_path):
        """Test that a root commit outside the path still ends the full-history walk."""
        commits = [
            CommitRecord(sha="root", message="chore: init", parents=()),
            CommitRecord(sha="other", message="feat: other history", parents=()),
        ]
        with patch("git_next_tag.analyser.changed_files", return_value=["docs/x.md"]):
            result = analyse_commits(
                commits, rules, tmp_path, sub_path=PurePosixPath("api"), bounded=False
            )

        assert result.commits_checked == 1
        assert result.change is ChangeType.NONE
