"""Tests for logging setup."""

import logging

from imgtourl.logging_config import LOG_FILENAME, _rotate_log_if_needed, setup_logging


class TestRotateLog:
    """Tests for startup log rotation."""

    def test_no_file(self, tmp_path):
        _rotate_log_if_needed(tmp_path / "missing.log")
        assert list(tmp_path.iterdir()) == []

    def test_small_file_kept(self, tmp_path):
        log_file = tmp_path / "app.log"
        log_file.write_text("small")

        _rotate_log_if_needed(log_file, max_bytes=100)

        assert log_file.read_text() == "small"

    def test_rotates_and_shifts_backups(self, tmp_path):
        log_file = tmp_path / "app.log"
        log_file.write_text("x" * 20)
        (tmp_path / "app.log.1").write_text("one")
        (tmp_path / "app.log.2").write_text("two")

        _rotate_log_if_needed(log_file, max_bytes=10, backup_count=3)

        assert not log_file.exists()
        assert (tmp_path / "app.log.1").read_text() == "x" * 20
        assert (tmp_path / "app.log.2").read_text() == "one"
        assert (tmp_path / "app.log.3").read_text() == "two"

    def test_oldest_backup_dropped(self, tmp_path):
        log_file = tmp_path / "app.log"
        log_file.write_text("x" * 20)
        (tmp_path / "app.log.1").write_text("one")
        (tmp_path / "app.log.2").write_text("two")

        _rotate_log_if_needed(log_file, max_bytes=10, backup_count=2)

        assert (tmp_path / "app.log.1").read_text() == "x" * 20
        assert (tmp_path / "app.log.2").read_text() == "one"
        assert not (tmp_path / "app.log.3").exists()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_stderr_only_by_default(self):
        logger = setup_logging()

        assert logger.name == "imgtourl"
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING

    def test_verbose_lowers_stderr_level(self):
        logger = setup_logging(verbose=True)

        assert logger.handlers[0].level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = setup_logging(log_dir=log_dir)

        logging.getLogger("imgtourl.services.r2").info("hello from r2")

        assert len(logger.handlers) == 2
        text = (log_dir / LOG_FILENAME).read_text(encoding="utf-8")
        assert "hello from r2" in text
        assert "| INFO     |" in text

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging(log_dir=tmp_path)
        logger = setup_logging()

        assert len(logger.handlers) == 1
