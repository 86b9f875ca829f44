"""Tests for snapshot capture and restore workflows."""

from pathlib import Path

import pytest

from scm_snapshot_core.errors import BackendFailureError
from scm_snapshot_core.git_provider import GitSourceControlProvider
from scm_snapshot_core.models import SnapshotMetadata
from scm_snapshot_ops.capture import capture_snapshot
from scm_snapshot_ops.restore import marker_path, restore_snapshot

HEAD = "fedcba9876543210fedcba9876543210fedcba98"
URL = "https://example.com/org/widgets.git"


@pytest.fixture
def provider(reports, fake_runner):
    return GitSourceControlProvider(reports, fake_runner)


def _fake_clone(args, cwd):
    dest = Path(args[2])
    (dest / "src" / "lib").mkdir(parents=True)
    (dest / "src" / "lib" / "project.json").write_text("{}", encoding="utf-8")


class TestCapture:

    def test_capture_live_checkout(self, provider, fake_runner, checkout):
        repo_root, project = checkout
        fake_runner.on("rev-parse", "HEAD", stdout=HEAD)
        fake_runner.on("rev-parse", "--show-toplevel", stdout=str(repo_root))

        metadata = capture_snapshot(provider, project, URL)

        assert metadata.to_mapping() == {"url": URL, "commit": HEAD, "path": "src"}
        assert fake_runner.subcommands()[0] == "status"

    def test_capture_rejects_non_checkout(self, provider, fake_runner, reports, tmp_path):
        fake_runner.on("status", exit_code=128, stderr="fatal: not a git repository")
        with pytest.raises(BackendFailureError, match="not a git checkout"):
            capture_snapshot(provider, tmp_path, URL)
        assert reports.errors == [f"{tmp_path} is not a git checkout."]


class TestRestore:

    def test_atomic_restore_moves_clone_into_place(self, provider, fake_runner, tmp_path):
        fake_runner.on("clone", action=_fake_clone)
        metadata = SnapshotMetadata(url=URL, commit=HEAD, path="src/lib")
        cache = tmp_path / "cache"

        result = restore_snapshot(provider, metadata, cache)

        assert result.success and result.fetched
        assert result.snapshot_folder == cache / "widgetsfedcba98"
        assert result.source_folder == cache / "widgetsfedcba98" / "src" / "lib"
        assert (result.source_folder / "project.json").is_file()
        assert sorted(p.name for p in cache.iterdir()) == ["widgetsfedcba98", "widgetsfedcba98.complete"]
        reset = fake_runner.calls[1]
        assert reset.args == ("reset", "--hard", HEAD)
        assert reset.cwd != str(result.snapshot_folder)

    def test_atomic_restore_cleans_up_failed_clone(self, provider, fake_runner, reports, tmp_path):
        def broken_clone(args, cwd):
            Path(args[2]).mkdir()
            (Path(args[2]) / "partial").write_text("x", encoding="utf-8")

        fake_runner.on("clone", exit_code=128, stderr="fatal: early EOF", action=broken_clone)
        cache = tmp_path / "cache"

        result = restore_snapshot(provider, SnapshotMetadata(url=URL, commit=HEAD, path=""), cache)

        assert not result.success
        assert list(cache.iterdir()) == []
        assert reports.errors == ["fatal: early EOF"]

    def test_non_atomic_restore_leaves_partial_state(self, provider, fake_runner, tmp_path):
        def broken_clone(args, cwd):
            Path(args[2]).mkdir()
            (Path(args[2]) / "partial").write_text("x", encoding="utf-8")

        fake_runner.on("clone", exit_code=128, stderr="fatal: early EOF", action=broken_clone)
        cache = tmp_path / "cache"

        result = restore_snapshot(provider, SnapshotMetadata(url=URL, commit=HEAD, path=""), cache, atomic=False)

        assert not result.success
        assert (cache / "widgetsfedcba98" / "partial").is_file()

    def test_completed_snapshot_is_reused(self, provider, fake_runner, tmp_path):
        cached = tmp_path / "cache" / "widgetsfedcba98"
        cached.mkdir(parents=True)
        (cached / "README").write_text("cached", encoding="utf-8")
        marker_path(cached).write_text("done", encoding="utf-8")

        result = restore_snapshot(provider, SnapshotMetadata(url=URL, commit=HEAD, path=""), tmp_path / "cache")

        assert result.success
        assert not result.fetched
        assert result.source_folder == cached
        assert fake_runner.calls == []

    def test_unmarked_snapshot_folder_is_fetched_again(self, provider, fake_runner, reports, tmp_path):
        stale = tmp_path / "cache" / "widgetsfedcba98"
        stale.mkdir(parents=True)
        (stale / "partial").write_text("x", encoding="utf-8")
        fake_runner.on("clone", action=_fake_clone)

        result = restore_snapshot(provider, SnapshotMetadata(url=URL, commit=HEAD, path="src"), tmp_path / "cache")

        assert result.success and result.fetched
        assert not (stale / "partial").exists()
        assert (stale / "src" / "lib" / "project.json").is_file()
        assert marker_path(stale).is_file()
        assert reports.verbose[0] == f"Discarding incomplete snapshot: {stale}"

    def test_failed_reset_is_not_reused_by_next_restore(self, provider, fake_runner, reports, tmp_path):
        fake_runner.on("clone", action=_fake_clone)
        fake_runner.on("reset", exit_code=128, stderr="fatal: Could not parse object")
        metadata = SnapshotMetadata(url=URL, commit=HEAD, path="src")
        cache = tmp_path / "cache"

        first = restore_snapshot(provider, metadata, cache, atomic=False)
        second = restore_snapshot(provider, metadata, cache, atomic=False)

        assert not first.success
        assert not second.success
        assert not second.fetched
        assert fake_runner.subcommands() == ["clone", "reset", "clone", "reset"]
        assert not marker_path(cache / "widgetsfedcba98").exists()
        assert reports.errors == ["fatal: Could not parse object"] * 2

    def test_short_commit_is_reported_not_raised(self, provider, fake_runner, reports, tmp_path):
        result = restore_snapshot(provider, SnapshotMetadata(url=URL, commit="abc", path=""), tmp_path / "cache")

        assert not result.success
        assert fake_runner.calls == []
        assert reports.errors == ["Commit hash must have at least 8 characters: abc"]

    def test_file_at_snapshot_path_is_reported(self, provider, fake_runner, reports, tmp_path):
        cache = tmp_path / "cache"
        cache.mkdir()
        (cache / "widgetsfedcba98").write_text("not a folder", encoding="utf-8")

        result = restore_snapshot(provider, SnapshotMetadata(url=URL, commit=HEAD, path=""), cache)

        assert not result.success
        assert fake_runner.calls == []
        assert reports.errors == [f"Snapshot path {cache / 'widgetsfedcba98'} exists and is not a directory."]

    def test_empty_snapshot_folder_is_replaced(self, provider, fake_runner, tmp_path):
        (tmp_path / "cache" / "widgetsfedcba98").mkdir(parents=True)
        fake_runner.on("clone", action=_fake_clone)

        result = restore_snapshot(provider, SnapshotMetadata(url=URL, commit=HEAD, path="src"), tmp_path / "cache")

        assert result.success and result.fetched
        assert (tmp_path / "cache" / "widgetsfedcba98" / "src" / "lib").is_dir()

    def test_incomplete_metadata_is_reported_not_fetched(self, provider, fake_runner, reports, tmp_path):
        result = restore_snapshot(provider, SnapshotMetadata(url=URL), tmp_path / "cache")

        assert not result.success
        assert fake_runner.calls == []
        assert reports.errors == [
            "The repository information is missing the commit hash.",
            "The repository information is missing the project path.",
        ]
