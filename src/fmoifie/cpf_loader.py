"""
Single-pass loading of a CPF file into an immutable FmoResult.

The loader chains the three stages in one forward pass over the input:
CPFReader produces the geometry, build_topology the fragment adjacency, and
EnergyAssembler the component matrices from which the IFIE matrix is derived.
A load either returns a complete FmoResult or raises a CPFError.
"""
import os
from dataclasses import dataclass, field
from typing import Iterable, List
import numpy as np
from .cpf_reader import CPFGeometry, CPFReader, LineCursor
from .errors import CPFIOError
from .ifie_assembler import EnergyAssembler, EnergyComponents, compute_ifie
from .topology import FragmentTopology, build_topology
from .utils import FMOIFIE_LOGGER


@dataclass(frozen=True)
class FmoResult:
    """Everything loaded from one CPF file.

    Attributes
    ----------
    geometry : CPFGeometry
        Header, atoms, residue names and bonds.
    topology : FragmentTopology
        Residue grouping and fragment adjacency.
    energies : EnergyComponents
        The six fragment-pair energy matrices in Hartree.
    ifie : np.ndarray
        Read-only IFIE matrix in Hartree; zero for bonded pairs and the diagonal.
    """
    geometry: CPFGeometry
    topology: FragmentTopology
    energies: EnergyComponents
    ifie: np.ndarray = field(compare=False)

    @property
    def version(self) -> str:
        return self.geometry.version

    @property
    def atom_num(self) -> int:
        return self.geometry.atom_num

    @property
    def fragment_num(self) -> int:
        return self.geometry.fragment_num

    @property
    def fragment_labels(self) -> List[str]:
        return self.topology.labels()


def parse_cpf(lines: Iterable[str], strict_bond_count: bool = True) -> FmoResult:
    """Parse CPF text into an FmoResult.

    Parameters
    ----------
    lines : Iterable[str]
        Lines of a CPF file, with or without trailing newlines.
    strict_bond_count : bool, optional
        Reject a bond block that is longer than its declared count (default True).

    Returns
    -------
    FmoResult
        Fully populated, immutable result.

    Raises
    ------
    FormatError
        If the input violates the CPF grammar.
    ConfigError
        If the atom or fragment count is not positive.
    """
    cursor = LineCursor(lines)
    reader = CPFReader(strict_bond_count=strict_bond_count)
    geometry = reader.read_geometry(cursor)
    topology = build_topology(geometry)
    reader.skip_to_energy_records(cursor, geometry.fragment_num)
    energies = EnergyAssembler().read(cursor, geometry.fragment_num)
    ifie = compute_ifie(energies, topology.adjacency)
    return FmoResult(geometry=geometry, topology=topology, energies=energies, ifie=ifie)


def load_cpf(path: str, strict_bond_count: bool = True) -> FmoResult:
    """Open and parse the CPF file at `path`.

    Raises
    ------
    CPFIOError
        If the file cannot be opened or read.
    FormatError
        If the file violates the CPF grammar.
    """
    try:
        with open(path, 'r') as cpf_file:
            result = parse_cpf(cpf_file, strict_bond_count=strict_bond_count)
    except (OSError, UnicodeDecodeError) as e:
        FMOIFIE_LOGGER.error(f"Error reading {path}: {e}")
        raise CPFIOError("input", f"cannot read {path}: {e}") from e
    FMOIFIE_LOGGER.info(f"Loaded {os.path.abspath(path)} successfully")
    return result
