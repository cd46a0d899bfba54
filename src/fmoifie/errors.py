"""
Exception hierarchy for CPF loading and IFIE export.

Every failure raised while reading a CPF file carries the section being read,
the physical line number (when one applies) and a short description of the
expectation that was violated. A load either returns a complete result or
raises one of these; nothing partially populated escapes.
"""
from typing import Optional


class CPFError(Exception):
    """Base class for every fmoifie load/export failure.

    Parameters
    ----------
    section : str
        Name of the CPF section (or stage) in which the failure was detected.
    detail : str
        Human readable description of the violated expectation.
    line_number : int, optional
        1-based physical line number of the offending input line.
    """
    def __init__(self, section: str, detail: str, line_number: Optional[int] = None):
        self.section = section
        self.detail = detail
        self.line_number = line_number
        super().__init__(self._render())

    def _render(self) -> str:
        message = f"[{self.section}] {self.detail}"
        if self.line_number is not None:
            message += f" (line {self.line_number})"
        return message

    def __str__(self):
        return self._render()


class CPFIOError(CPFError, OSError):
    """The CPF input could not be opened or read, or the CSV could not be written."""


class FormatError(CPFError, ValueError):
    """A section violates the positional CPF grammar."""


class ConfigError(FormatError):
    """Declared counts or configuration values are out of their valid range."""
