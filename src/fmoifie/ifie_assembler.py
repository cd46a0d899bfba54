"""
Assembly of fragment-pair energy matrices and the derived IFIE matrix.

This module defines the EnergyAssembler class, responsible for reading the
fragment-pair energy records at the end of a CPF file into six symmetric component
matrices, and compute_ifie, which derives the inter-fragment interaction energy
matrix with covalently bonded pairs suppressed.

Key Responsibilities
--------------------
    - Read exactly nfrag*(nfrag-1)/2 18-field records in lower-triangle order.
    - Store nuclear repulsion, HF electronic, HF electrostatic, MP2, HF-BSSE and
      MP2-BSSE energies symmetrically, diagonal left at zero.
    - Sum nuclear repulsion, HF electronic and MP2 terms for non-bonded pairs.

Dependencies
-------------
    - Python standard libraries: dataclasses, typing
    - External library: numpy
    - Local modules: cpf_reader (LineCursor), cpf_schema, errors, utils (FMOIFIE_LOGGER)
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple
import numpy as np
from . import cpf_schema
from .cpf_reader import LineCursor
from .errors import FormatError
from .utils import FMOIFIE_LOGGER


@dataclass(frozen=True)
class EnergyComponents:
    """Six symmetric (nfrag, nfrag) energy matrices in Hartree.

    Attributes
    ----------
    nuclear_repulsion : np.ndarray
        Nuclear repulsion energy per fragment pair.
    hf_electron : np.ndarray
        Electronic term of the HF-IFIE.
    hf_electrostatic : np.ndarray
        Electrostatic term of the HF-IFIE.
    mp2 : np.ndarray
        MP2 correlation contribution to the IFIE.
    hf_ifie_bsse : np.ndarray
        HF-IFIE with BSSE correction.
    mp2_ifie_bsse : np.ndarray
        MP2-IFIE with BSSE correction.
    """
    nuclear_repulsion: np.ndarray = field(compare=False)
    hf_electron: np.ndarray = field(compare=False)
    hf_electrostatic: np.ndarray = field(compare=False)
    mp2: np.ndarray = field(compare=False)
    hf_ifie_bsse: np.ndarray = field(compare=False)
    mp2_ifie_bsse: np.ndarray = field(compare=False)

    @property
    def fragment_num(self) -> int:
        return self.nuclear_repulsion.shape[0]

    def as_dict(self) -> Dict[str, np.ndarray]:
        return {name: getattr(self, name) for name in cpf_schema.ENERGY_COMPONENTS}


def lower_triangle_pairs(fragment_num: int) -> Iterator[Tuple[int, int]]:
    """Yield 0-based (i, j) with i > j: i ascending, j ascending within each i."""
    for i in range(1, fragment_num):
        for j in range(i):
            yield i, j


class EnergyAssembler:
    """Reader for the fragment-pair energy records of a CPF file.

    Attributes
    ----------
    logger : logging.Logger
        Logger instance for fmoifie.
    """
    def __init__(self):
        self.logger = FMOIFIE_LOGGER

    def read(self, cursor: LineCursor, fragment_num: int) -> EnergyComponents:
        """Read all pair records and fill the component matrices.

        Parameters
        ----------
        cursor : LineCursor
            Cursor positioned at the first pair record.
        fragment_num : int
            Number of fragments.

        Returns
        -------
        EnergyComponents
            Read-only symmetric component matrices.

        Raises
        ------
        FormatError
            If a record does not have 18 fields, a value is not numeric, or input ends
            before every pair has been read.
        """
        schema = cpf_schema.ENERGY
        matrices = {name: np.zeros((fragment_num, fragment_num), dtype=np.float64)
                    for name in cpf_schema.ENERGY_COMPONENTS}
        total = cpf_schema.pair_record_count(fragment_num)

        for record, (i, j) in enumerate(lower_triangle_pairs(fragment_num), start=1):
            line = cursor.require(schema.name, f"energy record {record} of {total} (fragments {i+1}-{j+1})")
            fields = line.split()
            if len(fields) != schema.field_count:
                raise FormatError(schema.name,
                                  f"expected {schema.field_count} fields, got {len(fields)}, at energy record {record}",
                                  cursor.line_number)
            for name, token in schema.pick(fields).items():
                try:
                    value = float(token)
                except ValueError:
                    raise FormatError(schema.name,
                                      f"{name} is not a number: {token!r}, at energy record {record}",
                                      cursor.line_number) from None
                matrices[name][i, j] = value
                matrices[name][j, i] = value

        for matrix in matrices.values():
            matrix.flags.writeable = False
        self.logger.info(f"[ENERGY INFO] Read {total} fragment pair energy records")
        return EnergyComponents(**matrices)


def compute_ifie(energies: EnergyComponents, adjacency: np.ndarray) -> np.ndarray:
    """Derive the IFIE matrix from the energy components.

    For non-adjacent pairs the IFIE is nuclear repulsion + HF electronic + MP2. Pairs of
    covalently bonded fragments are left at zero since their raw sum is a bond energy
    rather than an interaction energy. The diagonal is zero.

    Parameters
    ----------
    energies : EnergyComponents
        Component matrices in Hartree.
    adjacency : np.ndarray
        Boolean fragment adjacency of the same shape.

    Returns
    -------
    np.ndarray
        Read-only symmetric IFIE matrix in Hartree.
    """
    if adjacency.shape != energies.nuclear_repulsion.shape:
        raise ValueError(f"adjacency shape {adjacency.shape} does not match energies {energies.nuclear_repulsion.shape}")
    total = energies.nuclear_repulsion + energies.hf_electron + energies.mp2
    ifie = np.where(adjacency, 0.0, total)
    np.fill_diagonal(ifie, 0.0)
    ifie.flags.writeable = False
    return ifie
