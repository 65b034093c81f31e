import os
import tempfile
from pathlib import Path

from mediscan.processor.exceptions import ArtifactWriteError, FileReadError


def report_file_path(output_dir: Path, subject_name: str, generated_at_stamp: str) -> Path:
    """Build the default output path: {output_dir}/{subject}_{stamp}.pdf"""
    slug = "_".join(subject_name.split()) or "report"
    return output_dir / f"{slug}_{generated_at_stamp}.pdf"


class FileStore:
    """Reads input files and writes finished artifacts."""

    def read(self, path: Path) -> bytes:
        """Read file bytes from disk.

        Raises:
            FileReadError: if the file is missing or unreadable.
        """
        if not path.is_file():
            raise FileReadError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Could not read {path}: {exc}") from exc

    def write(self, path: Path, data: bytes) -> Path:
        """Write ``data`` to ``path`` through a temporary file in the same directory.

        The destination either holds the complete artifact or is left untouched.

        Raises:
            ArtifactWriteError: if the directory or file cannot be written.
        """
        tmp_name = ""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ArtifactWriteError(f"Could not write {path}: {exc}") from exc
        return path
