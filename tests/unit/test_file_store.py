from pathlib import Path
from unittest.mock import patch

import pytest

from mediscan.processor.exceptions import ArtifactWriteError, FileReadError
from mediscan.processor.file_store import FileStore, report_file_path


class TestRead:
    def test_returns_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "lab.pdf"
        path.write_bytes(b"%PDF test content")
        assert FileStore().read(path) == b"%PDF test content"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileReadError, match="missing.pdf"):
            FileStore().read(tmp_path / "missing.pdf")

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileReadError):
            FileStore().read(tmp_path)


class TestWrite:
    def test_writes_and_creates_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "out" / "nested" / "report.pdf"
        assert FileStore().write(target, b"%PDF-1.4") == target
        assert target.read_bytes() == b"%PDF-1.4"
        assert list(target.parent.iterdir()) == [target]

    def test_failed_write_leaves_no_file(self, tmp_path: Path) -> None:
        target = tmp_path / "report.pdf"
        with patch("mediscan.processor.file_store.os.replace", side_effect=OSError("denied")):
            with pytest.raises(ArtifactWriteError, match="denied"):
                FileStore().write(target, b"%PDF-1.4")
        assert list(tmp_path.iterdir()) == []

    def test_existing_file_untouched_on_failure(self, tmp_path: Path) -> None:
        target = tmp_path / "report.pdf"
        target.write_bytes(b"old")
        with patch("mediscan.processor.file_store.os.replace", side_effect=OSError("denied")):
            with pytest.raises(ArtifactWriteError):
                FileStore().write(target, b"new")
        assert target.read_bytes() == b"old"


class TestReportFilePath:
    def test_builds_slugged_name(self) -> None:
        path = report_file_path(Path("/reports"), "Jane  Doe", "20250301_093000")
        assert path == Path("/reports/Jane_Doe_20250301_093000.pdf")

    def test_blank_subject(self) -> None:
        assert report_file_path(Path("r"), " ", "1").name == "report_1.pdf"
