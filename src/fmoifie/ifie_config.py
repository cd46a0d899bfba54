"""
Configuration management for CPF loading and IFIE export

This module defines the IFIEConfig class, responsible for managing and validating
the parameters of one CPF-to-CSV run. It handles an optional JSON configuration file
and explicit overrides (typically from the command line), and checks that every value
is usable before any input is read.

Key Responsibilities
--------------------
    - Load, parse, and validate JSON configuration files.
    - Merge explicit overrides on top of file values and defaults.
    - Normalize the output unit and numeric precision.

Dependencies
-------------
    - Python standard libraries: json
    - External library: typing (Optional)
    - Local modules: errors (ConfigError), ifie_exporter (Unit), utils (FMOIFIE_LOGGER)
"""
import json
from typing import Optional
from .errors import ConfigError
from .ifie_exporter import Unit
from .utils import FMOIFIE_LOGGER

DEFAULTS = {
    "cpf_file": None,
    "csv_file": None,
    "unit": "hartree",
    "precision": 15,
    "strict_bond_count": True,
}

class IFIEConfig:
    """Configuration manager for a CPF to IFIE CSV run.

    Parameters
    ----------
    input_file : str, optional
        Path to a JSON configuration file.
    **overrides
        Values taking precedence over the file; None values are ignored.

    Attributes
    ----------
    logger : logging.Logger
        Logger instance for fmoifie.
    data : Dict[str, Any]
        Merged configuration data.
    cpf_file : str
        Path to the CPF input file.
    csv_file : str
        Path to the CSV output file.
    unit : Unit
        Output unit of the exported matrix.
    precision : int
        Fractional digits of exported values.
    strict_bond_count : bool
        Reject bond blocks longer than their declared count.

    Raises
    ------
    ConfigError
        If the JSON file cannot be read or a value is invalid.
    """
    def __init__(self, input_file: Optional[str] = None, **overrides):
        self.logger = FMOIFIE_LOGGER
        data = {}
        if input_file is not None:
            try:
                with open(input_file) as f:
                    data = json.load(f)
                self.logger.info(f"Successfully loaded configuration from {input_file}")
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Error reading {input_file}: {e}")
                raise ConfigError("config", f"Error reading {input_file}: {e}")
            if not isinstance(data, dict):
                self.logger.error(f"Configuration in {input_file} must be a JSON object")
                raise ConfigError("config", f"Configuration in {input_file} must be a JSON object")

        for key in data:
            if key not in DEFAULTS:
                self.logger.warning(f"Ignoring unknown configuration key: {key}")

        merged = dict(DEFAULTS)
        merged.update({k: v for k, v in data.items() if k in DEFAULTS})
        merged.update({k: v for k, v in overrides.items() if v is not None})
        self.data = merged

        self.cpf_file = merged["cpf_file"]
        self.csv_file = merged["csv_file"]
        self.unit = Unit.parse(merged["unit"])

        try:
            self.precision = int(merged["precision"])
            if self.precision < 0:
                raise ValueError
        except (ValueError, TypeError):
            self.logger.error(f"Invalid precision: {merged['precision']}")
            raise ConfigError("config", f"Invalid precision: {merged['precision']}")

        self.strict_bond_count = merged["strict_bond_count"]
        if not isinstance(self.strict_bond_count, bool):
            self.logger.error(f"strict_bond_count must be true or false, got {self.strict_bond_count!r}")
            raise ConfigError("config", f"strict_bond_count must be true or false, got {self.strict_bond_count!r}")

    def validate_paths(self) -> None:
        """Check that both the CPF input and the CSV output paths are set.

        Raises
        ------
        ConfigError
            If either path is missing.
        """
        for key in ("cpf_file", "csv_file"):
            if not self.data.get(key):
                self.logger.error(f"Missing required setting: {key}")
                raise ConfigError("config", f"Missing required setting: {key}")
        self.logger.info(f"[CALC INFO] input: {self.cpf_file}, output: {self.csv_file}, "
                         f"unit: {self.unit.value}, precision: {self.precision}")
