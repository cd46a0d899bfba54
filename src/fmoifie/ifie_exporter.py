"""
Unit selection and CSV export of the IFIE matrix.

This module defines the output unit options, the Hartree to kcal/mol conversion and
the IFIEExporter class which renders a loaded FmoResult as a labeled
(nfrag+1) x (nfrag+1) CSV table. Conversion happens only here, at export time; the
matrices held by FmoResult always stay in Hartree.

Dependencies
-------------
    - Python standard libraries: csv, enum, os
    - External library: numpy
    - Local modules: cpf_loader (FmoResult), errors, utils (FMOIFIE_LOGGER)
"""
import csv
import os
from enum import Enum
from typing import List
import numpy as np
from .cpf_loader import FmoResult
from .errors import ConfigError, CPFIOError
from .utils import FMOIFIE_LOGGER

# 1 hartree = 627.5095 kcal/mol
HARTREE_KCAL_PER_MOL = 627.5095


class Unit(Enum):
    HARTREE = "hartree"
    KCAL_PER_MOL = "kcal/mol"

    @classmethod
    def parse(cls, value) -> "Unit":
        """Accept a Unit or one of 'hartree', 'kcal', 'kcal/mol', 'kcal_per_mol'."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in ("hartree", "ha", "au"):
            return cls.HARTREE
        if key in ("kcal", "kcal/mol", "kcal_per_mol", "kcalpermol"):
            return cls.KCAL_PER_MOL
        raise ConfigError("unit", f"unknown unit {value!r}; expected 'hartree' or 'kcal/mol'")


def hartree_to_kcal_per_mol(value):
    """Convert a Hartree value (float or array) to kcal/mol."""
    return value * HARTREE_KCAL_PER_MOL


def convert(values, unit: Unit):
    if unit is Unit.KCAL_PER_MOL:
        return hartree_to_kcal_per_mol(values)
    return values


class IFIEExporter:
    """Writes the IFIE matrix of an FmoResult as CSV.

    Parameters
    ----------
    unit : Unit or str, optional
        Output unit, Hartree (the CPF native unit) by default.
    precision : int, optional
        Fractional digits of every fixed-point cell (default 15).

    Attributes
    ----------
    logger : logging.Logger
        Logger instance for fmoifie.
    unit : Unit
        Selected output unit.
    precision : int
        Fractional digits.
    """
    def __init__(self, unit=Unit.HARTREE, precision: int = 15):
        self.logger = FMOIFIE_LOGGER
        self.unit = Unit.parse(unit)
        if precision < 0:
            raise ConfigError("precision", f"precision must be non-negative, got {precision}")
        self.precision = precision

    def set_unit_hartree(self) -> None:
        self.unit = Unit.HARTREE

    def set_unit_kcal_per_mol(self) -> None:
        self.unit = Unit.KCAL_PER_MOL

    def _format(self, value: float) -> str:
        return f"{value:.{self.precision}f}"

    def table(self, result: FmoResult) -> List[List[str]]:
        """Build the CSV rows: header row, then one labeled row per fragment.

        Parameters
        ----------
        result : FmoResult
            Loaded CPF result.

        Returns
        -------
        List[List[str]]
            (nfrag+1) rows of (nfrag+1) cells; cell [0][0] is empty.
        """
        labels = result.fragment_labels
        values = convert(np.asarray(result.ifie, dtype=np.float64), self.unit)
        rows = [[""] + labels]
        for i, label in enumerate(labels):
            rows.append([label] + [self._format(float(v)) for v in values[i]])
        return rows

    def write(self, result: FmoResult, path: str) -> None:
        """Write the IFIE table of `result` to the CSV file at `path`.

        Raises
        ------
        CPFIOError
            If the output file cannot be written.
        """
        rows = self.table(result)
        try:
            with open(path, 'w', newline='') as csv_file:
                writer = csv.writer(csv_file)
                writer.writerows(rows)
        except OSError as e:
            self.logger.error(f"Error writing {path}: {e}")
            raise CPFIOError("output", f"cannot write {path}: {e}") from e
        self.logger.info(f"Wrote IFIE matrix of {result.fragment_num} fragments in {self.unit.value} to {os.path.abspath(path)}")
