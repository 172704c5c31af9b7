import logging

import pytest

from hello3d_mcp.shared.config import LoggingConfig
from hello3d_mcp.shared.logging import CHATTY_LOGGERS, configure_logging, get_logger


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    levels = {name: logging.getLogger(name).level for name in CHATTY_LOGGERS}
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, previous in levels.items():
        logging.getLogger(name).setLevel(previous)


def test_logs_go_to_file_and_never_stdout(tmp_path, capsys, restore_logging):
    log_file = tmp_path / "hello3d.log"
    configure_logging(LoggingConfig(level="INFO", file=str(log_file)))

    get_logger().info("Browser client registered with session ID: s1")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "Browser client registered with session ID: s1" in log_file.read_text(encoding="utf-8")
    assert capsys.readouterr().out == ""


def test_embedded_server_chatter_is_quiet_unless_debugging(restore_logging):
    configure_logging(LoggingConfig(level="INFO"))
    assert logging.getLogger("uvicorn.access").level == logging.WARNING

    configure_logging(LoggingConfig(level="DEBUG"))
    assert logging.getLogger("uvicorn.access").level == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG


def test_get_logger_defaults_to_package_name():
    assert get_logger().name == "hello3d_mcp"
    assert get_logger("hello3d_mcp.bridge").name == "hello3d_mcp.bridge"
