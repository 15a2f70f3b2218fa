import logging

import pytest

import latarchiver
from latarchiver.core.encrypt import decrypt_bytes
from latarchiver.core.errors import TooShortError
from latarchiver.utils import logger as logger_module
from latarchiver.utils.logger import (
    BACKEND_LOGGERS,
    LOG_FILE_NAME,
    PACKAGE_LOGGER,
    configure_logging,
    enable_deferred_file_logging,
)
from latarchiver.utils.preferences import Preferences


@pytest.fixture(autouse=True)
def clean_package_logger():
    yield
    # keep the package logger clean for other tests
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)
    for name in BACKEND_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


def _file_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


def test_package_logger_is_silent_by_default():
    handlers = logging.getLogger(latarchiver.__name__).handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)


def test_configure_logging_non_debug_writes_warning_file(tmp_path):
    logger = configure_logging(False, log_dir=tmp_path)
    child = logging.getLogger("latarchiver.core.registry")
    child.info("info-from-test")
    child.warning("warning-from-test")

    content = (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert logger.name == PACKAGE_LOGGER
    assert "warning-from-test" in content
    assert "latarchiver.core.registry" in content
    assert "info-from-test" not in content


def test_configure_logging_leaves_root_logger_alone(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)

    configure_logging(True, log_dir=tmp_path)

    assert root.handlers == before


def test_configure_logging_debug_adds_console_and_file(tmp_path):
    logger = configure_logging(True, log_dir=tmp_path)

    assert logger.level == logging.DEBUG
    assert any(type(h) is logging.StreamHandler for h in logger.handlers)
    assert len(_file_handlers(logger)) == 1


@pytest.mark.parametrize("debug, level", [(False, logging.WARNING), (True, logging.INFO)])
def test_backend_loggers_are_capped(tmp_path, debug, level):
    configure_logging(debug, log_dir=tmp_path)

    for name in BACKEND_LOGGERS:
        assert logging.getLogger(name).level == level


def test_deferred_file_logging(tmp_path):
    logger = configure_logging(True, log_dir=tmp_path, defer_file_logging=True)
    assert _file_handlers(logger) == []

    enable_deferred_file_logging()
    enable_deferred_file_logging()

    assert len(_file_handlers(logger)) == 1


def test_deferred_file_logging_is_cleared_by_reconfigure(tmp_path):
    configure_logging(True, log_dir=tmp_path, defer_file_logging=True)
    logger = configure_logging(False, log_dir=tmp_path)

    enable_deferred_file_logging()

    assert [h.level for h in _file_handlers(logger)] == [logging.WARNING]


def test_unwritable_log_dir_falls_back_to_null_handler(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file", encoding="utf-8")

    logger = configure_logging(False, log_dir=blocker / "logs")

    assert [type(h) for h in logger.handlers] == [logging.NullHandler]


def test_reconfigure_replaces_handlers(tmp_path):
    configure_logging(True, log_dir=tmp_path)
    logger = configure_logging(False, log_dir=tmp_path)
    assert len(logger.handlers) == 1


def test_default_log_dir_honours_xdg_state_home(monkeypatch, tmp_path):
    monkeypatch.setattr(logger_module.os, "name", "posix")
    monkeypatch.setattr(logger_module.platform, "system", lambda: "Linux")
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

    assert logger_module.default_log_dir() == tmp_path / "latarchiver" / "logs"


def test_preferences_apply_logging(tmp_path):
    prefs = Preferences(debug_logging=True, log_dir=str(tmp_path / "logs"))

    logger = prefs.apply_logging()
    logging.getLogger("latarchiver.formats").debug("debug-from-test")

    assert logger.level == logging.DEBUG
    assert "debug-from-test" in (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")


def test_passwords_are_not_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="latarchiver")
    with pytest.raises(TooShortError):
        decrypt_bytes(bytes(10), "hunter2-secret")
    with pytest.raises(ValueError):
        decrypt_bytes(bytes(64), "hunter2-secret")

    assert "hunter2-secret" not in caplog.text
