"""
Orchestration of a CPF to IFIE CSV run.

This module implements the IFIEProcessor class, responsible for driving one complete
run: loading the CPF file into an immutable FmoResult and exporting its IFIE matrix
in the configured unit. The load is all-or-nothing; no CSV is written unless the
whole file was read successfully.

Key Responsibilities
--------------------
    - Validate the run configuration via IFIEConfig.
    - Load the CPF file through load_cpf.
    - Export the IFIE matrix through IFIEExporter.
    - Log timing and a short summary of the loaded system.

Dependencies
-------------
    - Python standard libraries: time
    - External library: numpy
    - Local modules: ifie_config (IFIEConfig), cpf_loader (load_cpf, FmoResult),
      ifie_exporter (IFIEExporter), utils (FMOIFIE_LOGGER)
"""
import time
import numpy as np
from .cpf_loader import FmoResult, load_cpf
from .ifie_config import IFIEConfig
from .ifie_exporter import IFIEExporter, convert
from .utils import FMOIFIE_LOGGER

class IFIEProcessor:
    """Processor converting a CPF file into an IFIE CSV table.

    Parameters
    ----------
    config : IFIEConfig
        Validated run configuration.

    Attributes
    ----------
    logger : logging.Logger
        Logger instance for fmoifie.
    config : IFIEConfig
        Run configuration.
    exporter : IFIEExporter
        CSV writer in the configured unit.
    result : FmoResult or None
        Result of the last successful load.
    """
    def __init__(self, config: IFIEConfig):
        self.logger = FMOIFIE_LOGGER
        self.config = config
        self.config.validate_paths()
        self.exporter = IFIEExporter(unit=config.unit, precision=config.precision)
        self.result = None

    def load(self) -> FmoResult:
        self.result = load_cpf(self.config.cpf_file, strict_bond_count=self.config.strict_bond_count)
        return self.result

    def run(self) -> FmoResult:
        """Load the CPF file and write the IFIE CSV.

        Returns
        -------
        FmoResult
            The loaded result whose IFIE matrix was exported.

        Raises
        ------
        CPFError
            If the input cannot be read or parsed, or the output cannot be written.
        """
        start = time.time()
        result = self.load()
        self._log_summary(result)
        self.exporter.write(result, self.config.csv_file)
        end = time.time()
        self.logger.info(f"[TIMING INFO] Overall time: {end - start} seconds")
        return result

    def _log_summary(self, result: FmoResult) -> None:
        unit = self.exporter.unit
        upper = np.triu_indices(result.fragment_num, k=1)
        if len(upper[0]) == 0:
            self.logger.info("[ENERGY INFO] Single fragment: no fragment pairs")
            return
        values = convert(result.ifie[upper], unit)
        strongest = int(np.argmin(values))
        i, j = upper[0][strongest], upper[1][strongest]
        self.logger.info(f"[ENERGY INFO] Sum of IFIE over fragment pairs: {values.sum()} {unit.value}")
        self.logger.info(f"[ENERGY INFO] Most attractive pair: {result.topology.label(i).strip()} - "
                         f"{result.topology.label(j).strip()}: {values[strongest]} {unit.value}")
