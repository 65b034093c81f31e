import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mediscan.logging.logger import Log
from mediscan.main import build_parser, main


def _write_request(path: Path) -> Path:
    path.write_text(json.dumps({
        "subject": {"name": "Jane Doe", "id": "P-001"},
        "generated_at": "2025-03-01T09:30:00",
        "entries": [{
            "title": "Lipid Profile",
            "timestamp": "2025-02-20T08:00:00",
            "parameters": [{"name": "LDL Cholesterol", "value": 160, "unit": "mg/dL"}],
        }],
    }))
    return path


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[MagicMock]:
    monkeypatch.chdir(tmp_path)
    with patch.object(Log, "configure") as configure:
        yield configure


class TestBuildParser:
    def test_export_arguments(self) -> None:
        args = build_parser().parse_args(["export", "req.json", "-o", "out.pdf"])
        assert args.command == "export"
        assert args.request == "req.json"
        assert args.output == "out.pdf"

    def test_analyze_requires_subject_name(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze", "a.pdf"])

    def test_analyze_arguments(self) -> None:
        args = build_parser().parse_args(
            ["analyze", "a.pdf", "b.pdf", "--subject-name", "Jane Doe"]
        )
        assert args.files == ["a.pdf", "b.pdf"]
        assert args.subject_name == "Jane Doe"
        assert args.subject_id is None


class TestMain:
    def test_export_writes_pdf(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str], _isolated: MagicMock
    ) -> None:
        request = _write_request(tmp_path / "request.json")
        output = tmp_path / "out" / "report.pdf"

        assert main(["export", str(request), "-o", str(output)]) == 0

        assert output.read_bytes().startswith(b"%PDF")
        assert str(output) in capsys.readouterr().out
        _isolated.assert_called_once_with("INFO")

    def test_export_default_output_path(self, tmp_path: Path) -> None:
        request = _write_request(tmp_path / "request.json")
        assert main(["export", str(request)]) == 0
        assert (tmp_path / "reports" / "request.pdf").exists()

    def test_missing_request_fails_without_output(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output = tmp_path / "report.pdf"
        assert main(["export", str(tmp_path / "missing.json"), "-o", str(output)]) == 1
        assert "error:" in capsys.readouterr().err
        assert not output.exists()

    def test_invalid_configuration(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("PAGE_MARGIN", "wide")
        request = _write_request(tmp_path / "request.json")
        assert main(["export", str(request)]) == 2
        assert "invalid configuration" in capsys.readouterr().err

    def test_unknown_backend(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("RENDER_BACKEND", "cairo")
        request = _write_request(tmp_path / "request.json")
        assert main(["export", str(request)]) == 1
        assert "Unknown render backend" in capsys.readouterr().err

    def test_unsupported_page_size_is_invalid_configuration(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("PAGE_SIZE", "tabloid")
        request = _write_request(tmp_path / "request.json")
        assert main(["export", str(request)]) == 2
        assert "invalid configuration" in capsys.readouterr().err

    def test_export_mixed_timestamp_offsets(self, tmp_path: Path) -> None:
        request = tmp_path / "request.json"
        request.write_text(json.dumps({
            "subject": {"name": "Jane Doe"},
            "entries": [
                {"title": "CBC", "timestamp": "2025-01-01T10:00:00+00:00",
                 "parameters": [{"name": "Hemoglobin", "value": 10.5}]},
                {"title": "Lipid Profile", "timestamp": "2025-01-02T10:00:00",
                 "parameters": [{"name": "LDL Cholesterol", "value": 160}]},
                {"title": "Notes only", "notes": "No timestamp given"},
            ],
        }))
        output = tmp_path / "mixed.pdf"

        assert main(["export", str(request), "-o", str(output)]) == 0
        assert output.read_bytes().startswith(b"%PDF")

    def test_analyze_renders_failed_uploads(self, tmp_path: Path) -> None:
        bogus = tmp_path / "scan.pdf"
        bogus.write_bytes(b"not a pdf")
        output = tmp_path / "analysis.pdf"
        code = main([
            "analyze", str(bogus), str(tmp_path / "missing.pdf"),
            "--subject-name", "Jane Doe", "-o", str(output),
        ])
        assert code == 0
        assert output.read_bytes().startswith(b"%PDF")
