import io
import logging

import pytest

from mediscan.logging.logger import Log


class TestLog:
    def test_fields_are_appended(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mediscan"):
            Log.info("Page break", page=2, section="CBC")
        assert "Page break [page=2 section='CBC']" in caplog.text

    def test_plain_message(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mediscan"):
            Log.error("boom")
        assert caplog.records[-1].getMessage() == "boom"

    def test_debug_suppressed_above_level(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mediscan"):
            Log.debug("hidden", x=1)
        assert "hidden" not in caplog.text

    def test_configure_installs_single_handler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        logger = logging.getLogger("mediscan")
        monkeypatch.setattr(logger, "handlers", [])
        previous = logger.level
        stream = io.StringIO()
        try:
            Log.configure("warning", stream=stream)
            Log.configure("warning", stream=stream)
            assert len(logger.handlers) == 1
            Log.warning("careful", code=7)
        finally:
            logger.setLevel(previous)
        assert "[WARNING] mediscan: careful [code=7]" in stream.getvalue()
