"""Utility functionality for logging.
"""
import os
import sys

import logbook

from quantpipe import utils

LOG_NAME = "quantpipe"

def get_log_dir(config):
    d = config.get("log_dir", "log")
    return d

logger = logbook.Logger(LOG_NAME)
logger_cl = logbook.Logger(LOG_NAME + "-commands")

def _is_cl(record, _):
    return record.channel == LOG_NAME + "-commands"

def _not_cl(record, handler):
    return not _is_cl(record, handler)

class CloseableNestedSetup(logbook.NestedSetup):
    def close(self):
        for obj in self.objects:
            if hasattr(obj, "close"):
                obj.close()

def _create_log_handler(config, work_dir=None):
    logbook.set_datetime_format("utc")
    handlers = [logbook.NullHandler()]
    format_str = "".join(["[{record.time:%Y-%m-%dT%H:%MZ}] " if config.get("include_time", True) else "",
                          "{record.message}"])

    log_dir = get_log_dir(config)
    if log_dir and work_dir:
        log_dir = utils.safe_makedir(os.path.join(work_dir, log_dir))
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s.log" % LOG_NAME),
                                            format_string=format_str, level="INFO",
                                            filter=_not_cl))
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s-debug.log" % LOG_NAME),
                                            format_string=format_str, level="DEBUG", bubble=True,
                                            filter=_not_cl))
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s-commands.log" % LOG_NAME),
                                            format_string=format_str, level="DEBUG",
                                            filter=_is_cl))
    handlers.append(logbook.StreamHandler(sys.stderr, format_string=format_str, bubble=True,
                                          level="INFO", filter=_not_cl))
    return CloseableNestedSetup(handlers)

def setup_script_logging():
    """Use this logger for standalone scripts, or script-like subcommands,
    such as the launcher before a workspace exists.
    """
    format_str = ("[{record.time:%Y-%m-%dT%H:%MZ}] "
                  "{record.level_name}: {record.message}")

    handler = logbook.StreamHandler(sys.stderr, format_string=format_str,
                                    level="DEBUG")
    handler.push_thread()
    return handler

def setup_local_logging(config=None, work_dir=None):
    """Setup logging for a run, directing messages into the workspace log directory.

    Returns the pushed handler so callers can pop and close it when the run
    finishes.
    """
    if config is None: config = {}
    handler = _create_log_handler(config, work_dir)
    handler.push_thread()
    return handler
