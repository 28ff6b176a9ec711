# -*- coding: utf-8 -*-

""" uiccsim: Logging
"""

#
# (C) 2025 by sysmocom - s.f.m.c. GmbH
# All Rights Reserved
#
# Author: Philipp Maier <pmaier@sysmocom.de>
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.
#

import logging
from cmd2 import style

class _UiccSimLogHandler(logging.Handler):
    def __init__(self, log_callback):
        super().__init__()
        self.log_callback = log_callback

    def emit(self, record):
        formatted_message = self.format(record)
        self.log_callback(formatted_message, record)

class UiccSimLogger:
    """
    Static class to centralize the log output of the simulator. Every uiccsim module obtains its logger through
    get(). Configuration (see setup and set_ methods) is optional. Without a print callback the log messages are
    passed directly to print() without any formatting, so that the simulator can be embedded into a test harness
    that simply captures stdout.
    """

    LOG_FMTSTR = "%(levelname)s: %(message)s"
    LOG_FMTSTR_VERBOSE = "%(name)s %(module)s.%(lineno)d -- " + LOG_FMTSTR
    __formatter = logging.Formatter(LOG_FMTSTR)
    __formatter_verbose = logging.Formatter(LOG_FMTSTR_VERBOSE)

    print_callback = None
    colors = {}
    verbose = False
    level = logging.INFO

    def __init__(self):
        raise RuntimeError('static class, do not instantiate')

    @staticmethod
    def setup(print_callback = None, colors:dict = None):
        """
        Set a print callback function and color scheme.
        Args:
            print_callback : callback that accepts the resulting log string: print_callback(message:str)
            colors : optional dict through which log levels can be assigned a color (e.g. {logging.WARN: YELLOW})
        """
        UiccSimLogger.print_callback = print_callback
        UiccSimLogger.colors = colors or {}

    @staticmethod
    def set_verbose(verbose:bool = False):
        """
        Enable/disable verbose logging (adds facility, module and line number).
        Args:
            verbose: verbosity (True = verbose logging, False = normal logging)
        """
        UiccSimLogger.verbose = verbose

    @staticmethod
    def set_level(level:int = logging.INFO):
        """
        Set the logging level of all loggers handed out by get().
        Args:
            level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        """
        UiccSimLogger.level = level
        for logger in UiccSimLogger._loggers.values():
            logger.setLevel(level)

    @staticmethod
    def _log_callback(message, record):
        if not UiccSimLogger.print_callback:
            print(record.getMessage())
            return
        if UiccSimLogger.verbose:
            formatted_message = logging.Formatter.format(UiccSimLogger.__formatter_verbose, record)
        else:
            formatted_message = logging.Formatter.format(UiccSimLogger.__formatter, record)
        color = UiccSimLogger.colors.get(record.levelno)
        if color:
            if isinstance(color, str):
                UiccSimLogger.print_callback(color + formatted_message + "\033[0m")
            else:
                UiccSimLogger.print_callback(style(formatted_message, fg = color))
        else:
            UiccSimLogger.print_callback(formatted_message)

    _loggers = {}

    @staticmethod
    def get(log_facility: str):
        """
        Set up and return a python logger object for a facility. Repeated calls with the same facility return
        the same logger.
        Args:
            log_facility : Name of log facility (e.g. "CARD", "ATCMD"...)
        """
        logger = UiccSimLogger._loggers.get(log_facility)
        if logger:
            return logger
        logger = logging.getLogger('uiccsim.' + log_facility)
        logger.setLevel(UiccSimLogger.level)
        logger.propagate = False
        logger.addHandler(_UiccSimLogHandler(log_callback=UiccSimLogger._log_callback))
        UiccSimLogger._loggers[log_facility] = logger
        return logger
