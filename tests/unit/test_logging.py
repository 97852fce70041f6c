"""Tests for logger setup."""

from loguru import logger

from cloudminer.config.logging import setup_logging


class TestSetupLogging:
    """File sink configuration."""

    def test_writes_to_log_file(self, tmp_path):
        """Records reach the configured file."""
        log_file = tmp_path / "ledger.log"

        setup_logging(log_file=str(log_file), level="DEBUG")
        logger.bind(service="LoggingTest").info("Sample record")
        logger.complete()

        content = log_file.read_text(encoding="utf-8")
        assert "Starting CloudMiner ledger..." in content
        assert "Sample record" in content

        logger.remove()
