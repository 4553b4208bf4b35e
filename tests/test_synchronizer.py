"""Tests for applying change sets to targets."""
import os

import pytest

from multicommitter.core.backup_manager import BackupManager
from multicommitter.core.config import RuntimeConfig, set_config
from multicommitter.core.errors import CopyFailedError, NoTargetsConfiguredError, NotARepositoryError
from multicommitter.core.sync_planner import preview_sync
from multicommitter.core.synchronizer import apply_sync
from multicommitter.models.sync import TargetStatus
from multicommitter.services.copier import LocalCopier, RsyncCopier

from conftest import requires_rsync

BACKUP_DIR = ".multi-committer-backup"


def snapshot_tree(root):
    """Map relative path -> bytes for every file outside the backup dir."""
    tree = {}
    for path in root.rglob("*"):
        rel = path.relative_to(root)
        if rel.parts[0] == BACKUP_DIR or not path.is_file():
            continue
        tree[rel.as_posix()] = path.read_bytes()
    return tree


@pytest.fixture
def source(fake_repo):
    return fake_repo("shop-backend", {
        "src/app.js": "console.log('v2');\n",
        "notes.txt": "remember the milk\n",
        "docs/release notes.md": "spaces\n",
    })


CHANGE_SET = frozenset({"src/app.js", "notes.txt", "docs/release notes.md"})


class TestApplySync:
    """Apply scenarios using the local copier."""

    def test_copies_change_set_byte_identical(self, source, fake_repo):
        target = fake_repo("blog-backend", {"src/app.js": "old\n", "README.md": "keep\n"})

        report = apply_sync(source, CHANGE_SET, [target])

        assert report.ok
        for rel in CHANGE_SET:
            assert (target / rel).read_bytes() == (source / rel).read_bytes()
        assert (target / "README.md").read_text() == "keep\n"

    def test_untouched_files_not_modified(self, source, fake_repo):
        target = fake_repo("blog-backend", {"README.md": "keep\n", "lib/util.js": "u\n"})
        before = snapshot_tree(target)

        apply_sync(source, CHANGE_SET, [target])

        after = snapshot_tree(target)
        changed = {p for p in after if before.get(p) != after[p]}
        assert changed == set(CHANGE_SET) | {".gitignore"}

    def test_backup_holds_pre_sync_content(self, source, fake_repo):
        target = fake_repo("blog-backend", {"src/app.js": "old\n", "README.md": "keep\n"})

        report = apply_sync(source, CHANGE_SET, [target])

        backup = report.results[0].backup_path
        assert backup.parent == target / BACKUP_DIR
        assert backup.name.startswith("backup_")
        assert (backup / "src/app.js").read_text() == "old\n"
        assert (backup / "README.md").read_text() == "keep\n"
        assert not (backup / BACKUP_DIR).exists()

    def test_second_apply_does_not_nest_backups(self, source, fake_repo):
        target = fake_repo("blog-backend", {"README.md": "keep\n"})

        apply_sync(source, CHANGE_SET, [target])
        report = apply_sync(source, CHANGE_SET, [target])

        assert len(list((target / BACKUP_DIR).iterdir())) == 2
        assert not (report.results[0].backup_path / BACKUP_DIR).exists()

    def test_gitignore_created_and_appended(self, source, fake_repo):
        fresh = fake_repo("fresh-backend")
        existing = fake_repo("existing-backend", {".gitignore": "node_modules/"})

        apply_sync(source, CHANGE_SET, [fresh, existing])

        assert (fresh / ".gitignore").read_text() == f"{BACKUP_DIR}/\n"
        assert (existing / ".gitignore").read_text() == f"node_modules/\n{BACKUP_DIR}/\n"
        assert f"{BACKUP_DIR}/" in (source / ".gitignore").read_text()

    def test_gitignore_entry_not_duplicated(self, source, fake_repo):
        target = fake_repo("blog-backend", {".gitignore": f"{BACKUP_DIR}/\n"})

        apply_sync(source, CHANGE_SET, [target])
        apply_sync(source, CHANGE_SET, [target])

        assert (target / ".gitignore").read_text() == f"{BACKUP_DIR}/\n"

    def test_preview_matches_apply(self, source, fake_repo):
        first = fake_repo("blog-backend", {"src/app.js": "old\n"})
        second = fake_repo("wiki-backend")
        change_set = CHANGE_SET | {"deleted.txt"}

        plans = preview_sync(source, change_set, [first, second])
        report = apply_sync(source, change_set, [first, second])

        for plan, result in zip(plans, report.results):
            assert plan.writes == sorted(result.files_written)
        assert not (first / "deleted.txt").exists()

    def test_one_failing_target_does_not_stop_the_batch(self, source, fake_repo, tmp_path):
        missing = tmp_path / "missing-parent" / "ghost-backend"
        writable = fake_repo("blog-backend")

        report = apply_sync(source, CHANGE_SET, [missing, writable])

        failed, synced = report.results
        assert failed.status is TargetStatus.FAILED
        assert failed.error_kind in ("CopyFailed", "PermissionDenied")
        assert synced.status is TargetStatus.SYNCED
        for rel in CHANGE_SET:
            assert (writable / rel).read_bytes() == (source / rel).read_bytes()
        assert not report.ok
        assert report.failed == [failed]

    @pytest.mark.skipif(os.geteuid() == 0, reason="root bypasses permission checks")
    def test_read_only_target_reports_permission_denied(self, source, fake_repo):
        target = fake_repo("locked-backend")
        target.chmod(0o555)
        try:
            report = apply_sync(source, CHANGE_SET, [target])
        finally:
            target.chmod(0o755)

        assert report.results[0].error_kind == "PermissionDenied"

    def test_empty_change_set_is_noop(self, source, fake_repo):
        target = fake_repo("blog-backend")

        report = apply_sync(source, frozenset(), [target])

        assert report.noop
        assert report.results == []
        assert not (target / BACKUP_DIR).exists()
        assert not (target / ".gitignore").exists()

    def test_no_targets(self, source):
        with pytest.raises(NoTargetsConfiguredError):
            apply_sync(source, CHANGE_SET, [])

    def test_source_must_be_a_repository(self, tmp_path, fake_repo):
        target = fake_repo("blog-backend")
        with pytest.raises(NotARepositoryError):
            apply_sync(tmp_path / "nowhere", CHANGE_SET, [target])

    def test_backup_failure_leaves_target_untouched(self, source, fake_repo):
        class FailingSnapshot(LocalCopier):
            def snapshot(self, target, destination, exclude_name, timeout=None):
                from multicommitter.core.errors import BackupFailedError
                raise BackupFailedError(target, "disk full")

        target = fake_repo("blog-backend", {"src/app.js": "old\n"})
        copier = FailingSnapshot()

        report = apply_sync(
            source, CHANGE_SET, [target],
            copier=copier, backups=BackupManager(copier=copier),
        )

        assert report.results[0].error_kind == "BackupFailed"
        assert (target / "src/app.js").read_text() == "old\n"
        assert not (target / "notes.txt").exists()

    def test_configured_backup_dir_name_shared_by_preview_and_apply(self, fake_repo):
        set_config(RuntimeConfig(backup_dir_name="bk", copy_backend="local"))
        source = fake_repo("shop-backend", {"bk/old.txt": "o\n", "a.txt": "a\n"})
        target = fake_repo("blog-backend")
        change_set = {"bk/old.txt", "a.txt"}

        plans = preview_sync(source, change_set, [target])
        report = apply_sync(source, change_set, [target])

        assert plans[0].writes == ["a.txt"]
        assert report.results[0].files_written == ["a.txt"]
        assert report.results[0].backup_path.parent == target / "bk"
        assert not (target / "bk" / "old.txt").exists()

    def test_file_over_target_directory_is_not_written(self, fake_repo):
        source = fake_repo("shop-backend", {"docs": "file\n", "a.txt": "a\n"})
        target = fake_repo("blog-backend", {"docs/keep.txt": "k\n"})
        change_set = {"docs", "a.txt"}

        plans = preview_sync(source, change_set, [target])
        report = apply_sync(source, change_set, [target])

        assert plans[0].writes == ["a.txt"]
        assert report.results[0].status is TargetStatus.SYNCED
        assert report.results[0].files_written == ["a.txt"]
        assert sorted(p.name for p in (target / "docs").iterdir()) == ["keep.txt"]

    def test_unwritable_source_gitignore_is_a_named_error(self, source, fake_repo):
        (source / ".gitignore").mkdir()
        target = fake_repo("blog-backend", {"src/app.js": "old\n"})

        with pytest.raises(CopyFailedError):
            apply_sync(source, CHANGE_SET, [target])

        assert (target / "src/app.js").read_text() == "old\n"
        assert not (target / BACKUP_DIR).exists()


class TestInterrupt:
    """Ctrl+C during a batch."""

    def test_interrupt_flags_target_and_keeps_earlier_work(self, source, fake_repo):
        first = fake_repo("a-backend")
        second = fake_repo("b-backend")
        third = fake_repo("c-backend")

        class InterruptOnSecond(LocalCopier):
            def copy_files(self, src, target, paths, timeout=None):
                if target == second:
                    raise KeyboardInterrupt
                return super().copy_files(src, target, paths, timeout)

        copier = InterruptOnSecond()
        report = apply_sync(
            source, CHANGE_SET, [first, second, third],
            copier=copier, backups=BackupManager(copier=copier),
        )

        assert report.interrupted
        assert [r.status for r in report.results] == [
            TargetStatus.SYNCED, TargetStatus.INTERRUPTED, TargetStatus.SKIPPED,
        ]
        assert report.results[1].backup_path is not None
        assert (first / "notes.txt").exists()
        assert not (third / BACKUP_DIR).exists()


@requires_rsync
class TestApplySyncWithRsync:
    """End-to-end apply through the rsync backend."""

    def test_rsync_apply_matches_preview_and_backs_up(self, fake_repo):
        source = fake_repo("shop-backend", {
            "src/app.js": "console.log('v2');\n",
            "docs/release notes.md": "spaces\n",
            "odd\nname.txt": "newline\n",
        })
        target = fake_repo("blog-backend", {
            "src/app.js": "old\n",
            "README.md": "keep\n",
            f"{BACKUP_DIR}/backup_20240101_000000/README.md": "older\n",
        })
        change_set = frozenset({"src/app.js", "docs/release notes.md", "odd\nname.txt"})
        copier = RsyncCopier()

        plans = preview_sync(source, change_set, [target])
        report = apply_sync(source, change_set, [target],
                            copier=copier, backups=BackupManager(copier=copier))

        result = report.results[0]
        assert result.status is TargetStatus.SYNCED
        assert sorted(result.files_written) == plans[0].writes
        for rel in change_set:
            assert (target / rel).read_bytes() == (source / rel).read_bytes()
        assert (target / "README.md").read_text() == "keep\n"

        backup = result.backup_path
        assert (backup / "src/app.js").read_text() == "old\n"
        assert (backup / "README.md").read_text() == "keep\n"
        assert not (backup / BACKUP_DIR).exists()
        assert not (backup / "odd\nname.txt").exists()
