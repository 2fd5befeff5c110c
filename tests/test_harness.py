"""End-to-end tests for the comparison harness."""

import io
from unittest.mock import patch

import pytest

from difftreecheck.config import HarnessConfig
from difftreecheck.errors import BackendInvocationError, EmptyRepositoryError, TreeResolutionError
from difftreecheck.harness import (
    DotProgress,
    resolve_override,
    run_harness,
    run_library_pass,
    run_reference_pass,
)
from difftreecheck.library import DulwichBackend
from difftreecheck.records import DiffRecord
from difftreecheck.vcs import GitBackend


class TestDotProgress:
    """Test progress dots."""

    def test_one_dot_per_batch(self):
        stream = io.StringIO()
        progress = DotProgress(batch=100, stream=stream)
        for i in range(250):
            progress(i)
        progress.finish()

        assert stream.getvalue() == "...\n"


class TestRunHarness:
    """Test full runs on synthetic repositories."""

    def test_backends_agree_on_every_change_shape(self, history_repo):
        """Add, delete, modify, chmod, type changes and non-ASCII names all match."""
        config = HarnessConfig(repo=str(history_repo.repo_path))

        result = run_harness(config)

        assert result.passed, result.comparison.report()
        assert result.reference.pairs == result.library.pairs == 5
        assert result.reference.commits == 6
        assert result.git_version

    def test_records_are_canonical(self, history_repo):
        path = history_repo.repo_path
        config = HarnessConfig(repo=str(path))

        git_records = run_reference_pass(path, config).records
        dulwich_records = run_library_pass(path, config).records

        expected = [
            ["A\ta/b.txt", "A\tgone.txt", "A\tlink", "A\tscript.sh"],
            [
                'A\t"gitweb/test/M\\303\\244rchen"',
                "D\tgone.txt",
                "M\ta/b.txt",
                "M\tscript.sh",
            ],
            ["T\tlink"],
            ['A\t"\\346\\227\\245\\346\\234\\254/\\350\\252\\236.txt"', "T\tlink"],
            ["A\ta/b.txt/inner", "D\ta/b.txt"],
        ]
        assert [r.sorted_lines() for r in git_records] == expected
        assert [r.sorted_lines() for r in dulwich_records] == expected

    def test_inserted_path_passes(self, git_helper):
        """A single pair with one inserted file matches on both sides."""
        older = git_helper.get_current_sha()
        git_helper.create_file("a/b.txt", "content\n")
        newer = git_helper.add_and_commit("Add a/b.txt")

        path = git_helper.repo_path
        config = HarnessConfig(repo=str(path))
        git_records = run_reference_pass(path, config).records

        assert git_records == [DiffRecord(older, newer, ["A\ta/b.txt"])]
        assert run_harness(config).passed

    def test_commit_override_pins_pairs(self, history_repo):
        """Both backends use the pinned list instead of walking history."""
        commits = history_repo.run_git(["rev-list", "HEAD"]).stdout.split()
        pinned = (commits[2], commits[3])
        config = HarnessConfig(repo=str(history_repo.repo_path), commits_override=pinned)

        with patch.object(GitBackend, "list_commits") as git_list, patch.object(
            DulwichBackend, "list_commits"
        ) as dulwich_list:
            result = run_harness(config)

        git_list.assert_not_called()
        dulwich_list.assert_not_called()
        assert result.passed
        assert result.reference.pairs == 1
        assert result.reference.used_override is True
        assert result.reference.list_seconds == 0.0

    def test_short_pinned_commits_resolve_for_both_backends(self, history_repo):
        full = history_repo.run_git(["rev-list", "HEAD"]).stdout.split()[:2]
        config = HarnessConfig(
            repo=str(history_repo.repo_path),
            commits_override=[c[:7] for c in full],
        )

        result = run_harness(config)

        assert result.passed, result.comparison.report()
        assert result.reference.pairs == result.library.pairs == 1

    def test_resolve_override_expands_to_full_ids(self, history_repo):
        full = history_repo.run_git(["rev-list", "HEAD"]).stdout.split()[:3]
        config = HarnessConfig(
            repo=str(history_repo.repo_path),
            commits_override=[c[:8] for c in full],
        )

        resolved = resolve_override(history_repo.repo_path, config)

        assert resolved.commits_override == tuple(full)
        assert resolved.repo == config.repo

    def test_unknown_pinned_commit_names_git(self, history_repo):
        head = history_repo.get_current_sha()
        config = HarnessConfig(
            repo=str(history_repo.repo_path),
            commits_override=(head, "0123456"),
        )

        with pytest.raises(BackendInvocationError) as exc_info:
            run_harness(config)

        assert exc_info.value.backend == "git"

    def test_repository_quotepath_setting_is_overridden(self, history_repo):
        """Non-ASCII paths still match when the repository disables quoting."""
        history_repo.run_git(["config", "core.quotepath", "false"])

        result = run_harness(HarnessConfig(repo=str(history_repo.repo_path)))

        assert result.passed, result.comparison.report()

    def test_divergence_is_a_fail_not_an_error(self, history_repo):
        """A dulwich change that git does not report makes the run fail."""
        config = HarnessConfig(repo=str(history_repo.repo_path))

        with patch(
            "difftreecheck.harness.normalize_library_all",
            side_effect=lambda results: [
                DiffRecord(r.pair.older, r.pair.newer, ["M\tphantom.txt"]) for r in results
            ],
        ):
            result = run_harness(config)

        assert result.passed is False
        assert len(result.comparison.divergences) == 5
        assert "only in dulwich: M\tphantom.txt" in result.comparison.report()

    def test_single_commit_fails_before_diffing(self, git_repo):
        config = HarnessConfig(repo=str(git_repo))

        with patch.object(GitBackend, "diff_pair") as git_diff, patch.object(
            DulwichBackend, "diff_pair"
        ) as dulwich_diff:
            with pytest.raises(EmptyRepositoryError) as exc_info:
                run_harness(config)

        git_diff.assert_not_called()
        dulwich_diff.assert_not_called()
        assert exc_info.value.backend == "git"
        assert exc_info.value.describe().startswith("git: The repo has less than 2 commits")

    def test_library_errors_name_the_backend(self, git_helper):
        older = git_helper.get_current_sha()
        newer = git_helper.add_and_commit("Empty")
        config = HarnessConfig(repo=str(git_helper.repo_path), commits_override=(newer, older))

        with patch.object(DulwichBackend, "tree", side_effect=TreeResolutionError(older, "boom")):
            with pytest.raises(TreeResolutionError) as exc_info:
                run_harness(config)

        assert exc_info.value.backend == "dulwich"
        assert exc_info.value.details["backend"] == "dulwich"

    def test_progress_dots(self, history_repo, capsys):
        config = HarnessConfig(repo=str(history_repo.repo_path), progress_batch=2)

        run_harness(config, show_progress=True)

        # 5 pairs -> indices 0, 2, 4 per pass
        assert capsys.readouterr().out == "...\n...\n"
