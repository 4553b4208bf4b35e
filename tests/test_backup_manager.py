"""Tests for backup snapshots and .gitignore handling."""
from datetime import datetime

from multicommitter.core.backup_manager import BackupManager, ensure_ignore_entry
from multicommitter.services.copier import LocalCopier

from conftest import write_files


class TestEnsureIgnoreEntry:
    """Test .gitignore maintenance."""

    def test_creates_file(self, tmp_path):
        assert ensure_ignore_entry(tmp_path, ".bk") is True
        assert (tmp_path / ".gitignore").read_text() == ".bk/\n"

    def test_appends_when_missing(self, tmp_path):
        (tmp_path / ".gitignore").write_text("*.pyc\n")
        assert ensure_ignore_entry(tmp_path, ".bk") is True
        assert (tmp_path / ".gitignore").read_text() == "*.pyc\n.bk/\n"

    def test_recognises_existing_variants(self, tmp_path):
        for existing in (".bk/", ".bk", "/.bk/"):
            (tmp_path / ".gitignore").write_text(f"{existing}\n")
            assert ensure_ignore_entry(tmp_path, ".bk") is False


class TestBackupManager:
    """Test snapshot creation and listing."""

    def test_create_backup_uses_timestamp(self, tmp_path):
        write_files(tmp_path, {"a.txt": "a\n"})
        manager = BackupManager(copier=LocalCopier(), backup_dir_name=".bk")

        path = manager.create_backup(tmp_path, now=datetime(2025, 1, 9, 12, 0, 0))

        assert path == tmp_path / ".bk" / "backup_20250109_120000"
        assert (path / "a.txt").read_text() == "a\n"

    def test_same_second_gets_unique_folder(self, tmp_path):
        write_files(tmp_path, {"a.txt": "a\n"})
        manager = BackupManager(copier=LocalCopier(), backup_dir_name=".bk")
        now = datetime(2025, 1, 9, 12, 0, 0)

        first = manager.create_backup(tmp_path, now=now)
        second = manager.create_backup(tmp_path, now=now)

        assert first != second
        assert second.name == "backup_20250109_120000_1"

    def test_list_backups_newest_first(self, tmp_path):
        write_files(tmp_path, {"a.txt": "a\n", ".bk/stray-file": "x\n", ".bk/notes/x": "y\n"})
        manager = BackupManager(copier=LocalCopier(), backup_dir_name=".bk")
        manager.create_backup(tmp_path, now=datetime(2025, 1, 1, 8, 0, 0))
        manager.create_backup(tmp_path, now=datetime(2025, 3, 1, 8, 0, 0))

        backups = manager.list_backups(tmp_path)

        assert [b['name'] for b in backups] == ["backup_20250301_080000", "backup_20250101_080000"]
        assert backups[0]['files'] == 1

    def test_list_backups_without_dir(self, tmp_path):
        manager = BackupManager(copier=LocalCopier())
        assert manager.list_backups(tmp_path) == []

    def test_same_second_snapshots_sorted_by_counter(self, tmp_path):
        for name in ("backup_20250109_120000", "backup_20250109_120000_2",
                     "backup_20250109_120000_10", "backup_20250109_120000_1"):
            (tmp_path / ".bk" / name).mkdir(parents=True)
        manager = BackupManager(copier=LocalCopier(), backup_dir_name=".bk")

        backups = manager.list_backups(tmp_path)

        assert [b['name'] for b in backups] == [
            "backup_20250109_120000_10",
            "backup_20250109_120000_2",
            "backup_20250109_120000_1",
            "backup_20250109_120000",
        ]
