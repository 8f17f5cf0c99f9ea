'''
This module provides a logger class for handling console and file logging with verbosity control.
It is used by the ARPACK driver to report the state of the reverse-communication loop.

@note If one wants to use file logging, the environment variable PYLOGFILE should be set to a non-zero value.
@note If one wants to disable colored output, the environment variable PYLOGCOLORS should be set to '0'.
@note The default level may be chosen with PYLOGLEVEL ('debug', 'info', 'warning', 'error').

-------------------------------------------------------
file        :   arpack_driver/common/flog.py
description :   Console and file logging with verbosity control.
-------------------------------------------------------
'''

__all__ = [
    "Logger",
    "Colors",
    "get_global_logger",
]

import os
import sys
import re
import functools
import logging
import threading
import time
from datetime import datetime
from typing import Optional

######################################################
#! PRINT THE OUTPUT WITH A GIVEN COLOR
######################################################

class Colors:
    """
    ANSI colors for console output.
    """

    black   = "\033[30m"
    red     = "\033[31m"
    green   = "\033[32m"
    yellow  = "\033[33m"
    blue    = "\033[34m"
    white   = "\033[0m"  # Reset / default color

    MAPPING = {
        "black" : black,
        "red"   : red,
        "green" : green,
        "yellow": yellow,
        "blue"  : blue,
        "white" : white,
    }

######################################################

class StripAnsiFormatter(logging.Formatter):
    '''Removes the color codes before the record lands in a file.'''

    _ANSI = re.compile(r'\x1b\[[0-9;]*m')

    def format(self, record):
        return self._ANSI.sub('', super().format(record))

######################################################
#! PRINT THE OUTPUT WITH A GIVEN LEVEL
######################################################

ENV_LOGGER_FILE     = 'PYLOGFILE'
ENV_LOGGER_COLORS   = 'PYLOGCOLORS'
ENV_LOGGER_LEVEL    = 'PYLOGLEVEL'

# Track already configured logger names to prevent duplicate handlers
_CONFIGURED_LOGGERS = set()

class Logger:
    """
    Logger class for handling console and file logging with verbosity control.
    """

    LEVELS = {
        logging.DEBUG   : 'debug',
        logging.INFO    : 'info',
        logging.WARNING : 'warning',
        logging.ERROR   : 'error'
    }

    LEVELS_R = {v: k for k, v in LEVELS.items()}

    def __init__(self,
                name            : str           = "Global",
                logfile         : Optional[str] = None,
                lvl             : int           = logging.INFO,
                append_ts       : bool          = False,
                use_ts_in_cmd   : bool          = False):
        """
        Initialize the logger instance.

        Args:
            name (str):
                Name of the underlying `logging` logger.
            logfile (str):
                Name of the log file (without extension, if empty a timestamp will be used).
                Only used when PYLOGFILE is set.
            lvl (int | str):
                Logging level (default: logging.INFO).
            append_ts (bool):
                Whether to append a timestamp to the log file name (default: False).
            use_ts_in_cmd (bool):
                Whether to use a timestamp in console output (default: False).
        """
        self.now                = datetime.now()
        self.now_str            = self.now.strftime("%d_%m_%Y_%H-%M_%S")
        self.lvl                = Logger.LEVELS_R.get(lvl.lower(), logging.INFO) if isinstance(lvl, str) else lvl
        self.use_console_ts     = use_ts_in_cmd
        self.has_colors         = sys.stdout.isatty() and os.environ.get(ENV_LOGGER_COLORS, '1') != '0'
        self._f_handler         = None

        self.logger             = logging.getLogger(name or __name__)
        self.logger.setLevel(self.lvl)
        self.logger.propagate   = False

        console_fmt = '%(asctime)s [%(levelname)s] %(message)s' if use_ts_in_cmd else '[%(levelname)s] %(message)s'

        # Clear any existing handlers on this specific logger
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()

        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(self.lvl)
        ch.setFormatter(logging.Formatter(console_fmt, datefmt="%d_%m_%Y_%H-%M_%S"))
        self.logger.addHandler(ch)
        _CONFIGURED_LOGGERS.add(name or __name__)

        # Set the log file name
        if logfile is not None and os.environ.get(ENV_LOGGER_FILE, '0') != '0':
            self.logfile = (logfile.split('.log')[0] if logfile.endswith('.log') else f'{logfile}') if len(logfile) > 0 else self.now_str
            if append_ts:
                self.logfile += f'_{self.now_str}'
            self.configure("./log")
        else:
            self.logfile = self.now_str

    # --------------------------------------------------------------

    @staticmethod
    def colorize(txt: str, color: Optional[str]):
        """
        Apply color to the given text (for console output).
        """
        if not color or color.lower() == 'white':
            return txt
        return f"{Colors.MAPPING.get(color.lower(), Colors.white)}{txt}{Colors.white}"

    # --------------------------------------------------------------

    def configure(self, directory: str):
        """
        Attach a file handler writing into the given directory.

        Args:
            directory (str): Directory in which the log file is created.
        """
        os.makedirs(directory, exist_ok=True)
        self.logfile    = os.path.join(directory, f"{os.path.basename(self.logfile)}.log")

        if self._f_handler is None:
            self._f_handler = logging.FileHandler(self.logfile, encoding='utf-8')
            self._f_handler.setLevel(self.lvl)
            self._f_handler.setFormatter(StripAnsiFormatter('%(asctime)s [%(levelname)s] %(message)s'))
            self.logger.addHandler(self._f_handler)
            self._log_message(logging.INFO, f"Log file created: {self.logfile}")

    # --------------------------------------------------------------

    @staticmethod
    def print_tab(lvl=0):
        '''
        Prefix for the given indentation level.
        '''
        return '' if lvl <= 0 else '\t' * lvl + '->'

    def _log_message(self, log_level, msg, lvl = 0):
        '''
        Pass the message to the underlying logger with the indentation prefix.
        '''
        msg = f"{Logger.print_tab(lvl)}{msg}"
        if log_level == logging.DEBUG:
            self.logger.debug(msg)
        elif log_level == logging.WARNING:
            self.logger.warning(msg)
        else:
            self.logger.info(msg)

    def debug(self, msg: str, lvl=0, verbose=True, color=None):
        if verbose:
            self._log_message(logging.DEBUG, self.colorize(msg, color) if self.has_colors else msg, lvl)

    def warning(self, msg: str, lvl=0, verbose=True, color='yellow'):
        if verbose:
            self._log_message(logging.WARNING, self.colorize(msg, color) if self.has_colors else msg, lvl)

    # --------------------------------------------------------------

    def timing(self, func):
        """
        Decorator to measure and log the execution time of functions at debug level.

        Use as:
            @logger.timing
            def my_function(...):
                ...
        """

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start   = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                self.debug(f"{func.__name__} took {time.perf_counter() - start:.4e}s")
        return wrapper

######################################################
#! GLOBAL LOGGER
######################################################

_G_LOGGER     = None
_G_LOGGER_PID = None
_G_LOCK       = threading.Lock()

def get_global_logger(**kwargs) -> Logger:
    """
    One Logger wrapper per process (PID), safe across threads/forks.

    Args:
        **kwargs: Arguments to pass to the Logger constructor.
        - name (str): Name of the logger (default: "arpack_driver").
        - lvl (int): Logging level (default: PYLOGLEVEL or logging.INFO).
        - append_ts (bool): Whether to append timestamps (default: True).
        - use_ts_in_cmd (bool): Whether to use timestamps in console output (default: True).
        - logfile (str or None): Path to a logfile (default: None).

    Example
    -------
        >>> logger = get_global_logger()
        >>> logger.warning("This is a warning message.")
        >>> logger.debug("This is a debug message.", color='blue')
    """
    global  _G_LOGGER, _G_LOGGER_PID
    pid     = os.getpid()

    if _G_LOGGER is not None and _G_LOGGER_PID == pid:
        return _G_LOGGER

    with _G_LOCK:
        if _G_LOGGER is not None and _G_LOGGER_PID == pid:
            return _G_LOGGER

        _G_LOGGER = Logger(
            name            = kwargs.get("name",            "arpack_driver"),
            lvl             = kwargs.get("lvl",             os.environ.get(ENV_LOGGER_LEVEL, logging.INFO)),
            append_ts       = kwargs.get("append_ts",       True),
            use_ts_in_cmd   = kwargs.get("use_ts_in_cmd",   True),
            logfile         = kwargs.get("logfile",         None),
        )
        _G_LOGGER_PID = pid
        return _G_LOGGER

# ------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------
