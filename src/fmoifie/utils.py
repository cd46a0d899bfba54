"""
Logging utilities for CPF parsing and IFIE export

This module provides the standardized logging configuration shared by every stage of
the fmoifie pipeline. It ensures consistent console and file logging and supports
colorized terminal output so that fragment, residue and bond diagnostics stand out
while a large CPF file is being read.

Key Components
--------------
    - CustomColoredFormatter : Colorizes fmoifie log output with contextual emphasis.
    - FMOIFIE_LOGGER : Preconfigured global logger instance.

Dependencies
-------------
    - Python standard libraries: re, logging
    - External libraries: colorama, colorlog
    - logging.handlers (RotatingFileHandler)
"""

import re
import logging
from colorama import init  # type: ignore
from colorlog import ColoredFormatter
from logging.handlers import RotatingFileHandler

init(autoreset=True)

class CustomColoredFormatter(ColoredFormatter):
    def format(self, record):
        timestamp = self.formatTime(record, self.datefmt)
        levelname = record.levelname
        green = "\033[32m"
        reset = "\033[0m"
        formatted_prefix = f"{green}{timestamp} [{levelname}]:{reset}"
        yellow = "\033[33m"
        formatted_details = f"{yellow}{record.filename}:{record.funcName}:{record.lineno} -{reset}"
        colored_msg = self._auto_color_message(record.getMessage())
        formatted_message = f"{formatted_prefix} {formatted_details} {colored_msg}"
        return formatted_message

    def _auto_color_message(self, message: str) -> str:
        RESET = "\033[0m"
        CYAN = "\033[36m"
        MAGENTA = "\033[35m"

        # Color file paths (e.g., /path/to/file.cpf)
        message = re.sub(r'(/[\w\-/\.]+)', rf'{CYAN}\1{RESET}', message)

        # Highlight fmoifie-specific keywords
        message = re.sub(r'\b(fragment|fragments|residue|bond|bonds|energy|IFIE|hartree|kcal/mol)\b',
                         rf'{MAGENTA}\1{RESET}', message, flags=re.IGNORECASE)

        return message

formatter = CustomColoredFormatter(
    "%(message)s",  # Message is fully formatted in CustomColoredFormatter
    datefmt="%Y-%m-%d %H:%M:%S",
    log_colors={
        'DEBUG': 'cyan',
        'INFO': 'white',
        'WARNING': 'yellow',
        'ERROR': 'red',
        'CRITICAL': 'bold_red',
    }
)

# Stream handler for console output
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
console_handler.setLevel(logging.INFO)

# File handler for logging to file, opened on first record
log_file = "fmoifie.log"
file_handler = RotatingFileHandler(log_file, maxBytes=10*1024*1024, backupCount=5, delay=True)
plain_formatter = logging.Formatter(
    "%(asctime)s [%(levelname)s]: %(filename)s:%(funcName)s:%(lineno)d - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
file_handler.setFormatter(plain_formatter)
file_handler.setLevel(logging.DEBUG)

FMOIFIE_LOGGER = logging.getLogger("fmoifie")
FMOIFIE_LOGGER.setLevel(logging.DEBUG)
FMOIFIE_LOGGER.addHandler(console_handler)
FMOIFIE_LOGGER.addHandler(file_handler)
FMOIFIE_LOGGER.propagate = False
