# test_custom_loguru.py

import datetime as dt
import io

import pytest
from loguru import logger

from custom_loguru import Rotator, console_level, defineLoggers


class FakeMessage(str):
    # loguru hands rotation functions a str carrying its record
    def __new__(cls, text, when):
        message = super().__new__(cls, text)
        message.record = {"time": when}
        return message


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


def test_console_level():
    assert console_level(-1) == "WARNING"
    assert console_level(0) == "WARNING"
    assert console_level(1) == "INFO"
    assert console_level(2) == "DEBUG"
    assert console_level(5) == "DEBUG"


def test_rotate_on_size():
    rotator = Rotator(size=5, at=dt.time(0, 0, 0))
    assert rotator.should_rotate(FakeMessage("hello", dt.datetime.now()), io.StringIO("0123456789"))


def test_no_rotation_for_small_file_before_midnight():
    rotator = Rotator(size=5e8, at=dt.time(0, 0, 0))
    assert not rotator.should_rotate(FakeMessage("hello", dt.datetime.now()), io.StringIO(""))


def test_rotate_after_time_limit():
    rotator = Rotator(size=5e8, at=dt.time(0, 0, 0))
    later = dt.datetime.now() + dt.timedelta(days=2)
    assert rotator.should_rotate(FakeMessage("hello", later), io.StringIO(""))


def test_define_loggers_writes_debug_to_file(tmp_path, capsys):
    log_directory = tmp_path / "LOGS"
    defineLoggers("testrun", 1, str(log_directory))
    logger.debug("debug detail")
    logger.info("progress note")
    logger.remove()  # flush and close the file sink
    log_files = list(log_directory.glob("testrun_*.log"))
    assert len(log_files) == 1
    content = log_files[0].read_text(encoding="utf8")
    assert "debug detail" in content
    assert "progress note" in content
    console = capsys.readouterr().err
    assert "progress note" in console
    assert "debug detail" not in console


def test_define_loggers_quiet_console(tmp_path, capsys):
    defineLoggers("quietrun", 0, str(tmp_path / "LOGS"))
    logger.info("progress note")
    logger.warning("advisory")
    console = capsys.readouterr().err
    assert "advisory" in console
    assert "progress note" not in console
