from loguru import logger
import datetime as dt
import os
import sys

LOG_DIRECTORY = "./LOGS/"


def console_level(verbosity):
    """console_level(verbosity count)
    Return the loguru level name shown on the console for this verbosity.
    """
    if verbosity <= 0:
        return "WARNING"
    if verbosity == 1:
        return "INFO"
    return "DEBUG"


class Rotator:
    # Custom rotation handler that combines filesize limits with time controlled rotation.
    def __init__(self, *, size, at):
        now = dt.datetime.now()
        self._size_limit = size
        self._time_limit = now.replace(
            hour=at.hour, minute=at.minute, second=at.second
        )
        if now >= self._time_limit:
            # The current time is already past the target time so it would rotate already.
            # Add one day to prevent an immediate rotation.
            self._time_limit += dt.timedelta(days=1)

    def should_rotate(self, message, file):
        file.seek(0, 2)
        if file.tell() + len(message) > self._size_limit:
            return True
        if message.record["time"].timestamp() > self._time_limit.timestamp():
            self._time_limit += dt.timedelta(days=1)
            return True
        return False


@logger.catch
def defineLoggers(filename, verbosity=1, log_directory=LOG_DIRECTORY):
    # set rotate file if over 500 MB or at midnight every day
    rotator = Rotator(size=5e8, at=dt.time(0, 0, 0))

    # Only the verbosity-selected level and above reach the console.
    logger.configure(handlers=[{"sink": sys.stderr, "level": console_level(verbosity)}])
    # this method automatically suppresses the default handler to modify the message level

    os.makedirs(log_directory, exist_ok=True)
    log_path = os.path.join(log_directory, f"{filename}_{{time}}.log")
    logger.add(
        log_path,
        rotation=rotator.should_rotate,
        level="DEBUG",
        encoding="utf8",
        retention="10 days",
    )
    # create a new log file for each run of the program
    return log_path
