"""日志配置测试"""

import logging
from collections.abc import Iterator

import pytest
import structlog
from socialhub.client.logging_config import setup_logging


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestSetupLogging:
    def test_repeated_setup_keeps_single_handler(self, root_logger: logging.Logger):
        host_handler = logging.NullHandler()
        root_logger.addHandler(host_handler)

        setup_logging("json", "debug")
        setup_logging("dev", "warning")

        own = [h for h in root_logger.handlers if h.get_name() == "socialhub"]
        assert len(own) == 1
        assert host_handler in root_logger.handlers
        assert root_logger.level == logging.WARNING

    def test_env_and_aiosqlite_level(self, root_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SOCIALHUB_LOG_LEVEL", "DEBUG")
        setup_logging()
        assert root_logger.level == logging.DEBUG
        assert logging.getLogger("aiosqlite").level == logging.INFO
