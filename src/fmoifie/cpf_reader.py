"""
Grammar reader for CPF files written by FMO calculations.

This module defines the CPFReader class, responsible for walking the strict positional
grammar of a CPF file line by line. It captures the format version, the atom and
fragment counts, one record per atom, the residue display names and the atom-level
bond list, then skips forward to the first fragment-pair energy record.

Key Responsibilities
--------------------
    - Read the version tag and the `AtomNum FragmentNum` header.
    - Parse the 15-field atom records into immutable AtomRecord values.
    - Skip the electron-count block and sum the bond-count block.
    - Parse exactly the declared number of 2-field bond records.
    - Skip to the energy summary section marked by "MP2" and past the monomer summaries.

Dependencies
-------------
    - Python standard libraries: dataclasses, typing
    - Local modules: cpf_schema, errors, utils (FMOIFIE_LOGGER)
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
from . import cpf_schema
from .cpf_schema import RecordSchema
from .errors import ConfigError, FormatError
from .utils import FMOIFIE_LOGGER


@dataclass(frozen=True)
class AtomRecord:
    index: int
    name: str
    atom_type: str
    residue_name: str
    residue_number: int
    fragment_number: int

    def describe(self) -> str:
        return "%5d %3s %3s %4d %4d" % (self.index, self.name, self.atom_type,
                                        self.residue_number, self.fragment_number)


@dataclass(frozen=True)
class Bond:
    """Atom-level connectivity entry, both ends 1-based atom indices."""
    src: int
    dest: int


@dataclass(frozen=True)
class CPFGeometry:
    """Everything the grammar reader extracts before the energy section.

    Attributes
    ----------
    version : str
        First line of the file, verbatim.
    atom_num : int
        Declared number of atoms.
    fragment_num : int
        Declared number of fragments.
    atoms : Tuple[AtomRecord, ...]
        One record per atom line, in file order.
    residue_names : Mapping[int, str]
        Residue number to display name; the last atom line naming a residue wins.
    connectivity_num : int
        Bond count declared by the bond-count block.
    bonds : Tuple[Bond, ...]
        Atom-level bonds in file order.
    """
    version: str
    atom_num: int
    fragment_num: int
    atoms: Tuple[AtomRecord, ...]
    residue_names: Mapping[int, str] = field(hash=False)
    connectivity_num: int
    bonds: Tuple[Bond, ...]


class LineCursor:
    """Forward-only view over text lines with one line of look-ahead.

    Parameters
    ----------
    lines : Iterable[str]
        Source lines; trailing newlines are stripped.
    """
    def __init__(self, lines: Iterable[str]):
        self._lines: Iterator[str] = iter(lines)
        self._pending: Optional[str] = None
        self._has_pending = False
        self.line_number = 0

    def _pull(self) -> Optional[str]:
        try:
            return next(self._lines).rstrip("\r\n")
        except StopIteration:
            return None

    def peek(self) -> Optional[str]:
        if not self._has_pending:
            self._pending = self._pull()
            self._has_pending = True
        return self._pending

    def advance(self) -> Optional[str]:
        """Consume and return the next line, or None at end of input."""
        if self._has_pending:
            line = self._pending
            self._pending = None
            self._has_pending = False
        else:
            line = self._pull()
        if line is not None:
            self.line_number += 1
        return line

    def require(self, section: str, what: str) -> str:
        line = self.advance()
        if line is None:
            raise FormatError(section, f"unexpected end of input while reading {what}",
                              self.line_number + 1)
        return line


def _fields(line: str, schema: RecordSchema, line_number: int, where: str = "") -> List[str]:
    fields = line.split()
    if len(fields) != schema.field_count:
        raise FormatError(schema.name,
                          f"expected {schema.field_count} fields, got {len(fields)}{where}",
                          line_number)
    return fields


def _to_int(token: str, section: str, label: str, line_number: int) -> int:
    try:
        return int(token)
    except ValueError:
        raise FormatError(section, f"{label} is not an integer: {token!r}", line_number) from None


def _is_bond_line(line: Optional[str]) -> bool:
    if line is None:
        return False
    fields = line.split()
    if len(fields) != cpf_schema.BOND.field_count:
        return False
    try:
        int(fields[0]), int(fields[1])
    except ValueError:
        return False
    return True


class CPFReader:
    """Reader for the geometry/topology part of a CPF file.

    Parameters
    ----------
    strict_bond_count : bool, optional
        When True (default) the line right after the declared bonds must not itself be a
        bond record, so a bond block longer than its declared count is rejected.

    Attributes
    ----------
    logger : logging.Logger
        Logger instance for fmoifie.
    strict_bond_count : bool
        Whether surplus bond lines are detected.
    """
    def __init__(self, strict_bond_count: bool = True):
        self.logger = FMOIFIE_LOGGER
        self.strict_bond_count = strict_bond_count

    def read_geometry(self, cursor: LineCursor) -> CPFGeometry:
        """Read version, header, atoms, electron/bond-count blocks and bonds.

        Parameters
        ----------
        cursor : LineCursor
            Cursor positioned at the first line of the file.

        Returns
        -------
        CPFGeometry
            Immutable geometry and connectivity of the system.

        Raises
        ------
        FormatError
            If any record has the wrong number of fields, a count does not match, or
            input ends early.
        ConfigError
            If the atom or fragment count is not positive.
        """
        version = cursor.advance()
        if version is None:
            raise FormatError("version", "input is empty", 1)

        atom_num, fragment_num = self._read_header(cursor)
        atoms, residue_names = self._read_atoms(cursor, atom_num, fragment_num)

        self._skip_block(cursor, fragment_num, "electron counts")
        connectivity_num = self._read_connectivity_num(cursor, fragment_num)
        bonds = self._read_bonds(cursor, connectivity_num, atom_num)

        self.logger.info(f"[CPF INFO] version: {version.strip()}, atoms: {atom_num}, "
                         f"fragments: {fragment_num}, bonds: {connectivity_num}")
        return CPFGeometry(
            version=version,
            atom_num=atom_num,
            fragment_num=fragment_num,
            atoms=atoms,
            residue_names=MappingProxyType(residue_names),
            connectivity_num=connectivity_num,
            bonds=bonds,
        )

    def _read_header(self, cursor: LineCursor) -> Tuple[int, int]:
        schema = cpf_schema.HEADER
        line = cursor.require(schema.name, "atom and fragment counts")
        values = schema.pick(_fields(line, schema, cursor.line_number))
        atom_num = _to_int(values["atom_num"], schema.name, "atom count", cursor.line_number)
        fragment_num = _to_int(values["fragment_num"], schema.name, "fragment count", cursor.line_number)
        if atom_num < 1 or fragment_num < 1:
            self.logger.error(f"Number of fragments or number of atoms are illegal: {atom_num} atoms, {fragment_num} fragments")
            raise ConfigError(schema.name,
                              f"atom and fragment counts must be positive, got {atom_num} and {fragment_num}",
                              cursor.line_number)
        return atom_num, fragment_num

    def _read_atoms(self, cursor: LineCursor, atom_num: int,
                    fragment_num: int) -> Tuple[Tuple[AtomRecord, ...], Dict[int, str]]:
        schema = cpf_schema.ATOM
        atoms = []
        residue_names: Dict[int, str] = {}
        for i in range(atom_num):
            line = cursor.require(schema.name, f"atom record {i+1} of {atom_num}")
            values = schema.pick(_fields(line, schema, cursor.line_number, f", at atom record {i+1}"))
            atom = AtomRecord(
                index=_to_int(values["index"], schema.name, "atom index", cursor.line_number),
                name=values["name"],
                atom_type=values["atom_type"],
                residue_name=values["residue_name"],
                residue_number=_to_int(values["residue_number"], schema.name, "residue number", cursor.line_number),
                fragment_number=_to_int(values["fragment_number"], schema.name, "fragment number", cursor.line_number),
            )
            if not 1 <= atom.fragment_number <= fragment_num:
                raise FormatError(schema.name,
                                  f"fragment number {atom.fragment_number} outside [1, {fragment_num}] at atom record {i+1}",
                                  cursor.line_number)
            residue_names[atom.residue_number] = atom.residue_name
            atoms.append(atom)
            self.logger.debug(atom.describe())
        return tuple(atoms), residue_names

    def _skip_block(self, cursor: LineCursor, fragment_num: int, section: str) -> None:
        for i in range(cpf_schema.block_line_count(fragment_num)):
            cursor.require(section, f"{section} line {i+1}")

    def _read_connectivity_num(self, cursor: LineCursor, fragment_num: int) -> int:
        section = "bond counts"
        connectivity_num = 0
        for i in range(cpf_schema.block_line_count(fragment_num)):
            line = cursor.require(section, f"bond count line {i+1}")
            for token in line.split():
                connectivity_num += _to_int(token, section, "bond count", cursor.line_number)
        if connectivity_num < 0:
            raise FormatError(section, f"declared bond count is negative: {connectivity_num}", cursor.line_number)
        return connectivity_num

    def _read_bonds(self, cursor: LineCursor, connectivity_num: int, atom_num: int) -> Tuple[Bond, ...]:
        schema = cpf_schema.BOND
        bonds = []
        for i in range(connectivity_num):
            line = cursor.require(schema.name, f"bond record {i+1} of {connectivity_num}")
            values = schema.pick(_fields(line, schema, cursor.line_number,
                                         f", at bond record {i+1} of {connectivity_num}"))
            src = _to_int(values["src"], schema.name, "bond source atom", cursor.line_number)
            dest = _to_int(values["dest"], schema.name, "bond destination atom", cursor.line_number)
            for atom_index in (src, dest):
                if not 1 <= atom_index <= atom_num:
                    raise FormatError(schema.name,
                                      f"atom index {atom_index} outside [1, {atom_num}] at bond record {i+1}",
                                      cursor.line_number)
            bonds.append(Bond(src=src, dest=dest))

        if self.strict_bond_count and _is_bond_line(cursor.peek()):
            raise FormatError(schema.name,
                              f"more bond lines than the {connectivity_num} declared",
                              cursor.line_number + 1)
        return tuple(bonds)

    def skip_to_energy_records(self, cursor: LineCursor, fragment_num: int) -> None:
        """Advance past the energy summary to the first fragment-pair record.

        Skips free-form lines up to and including the first one containing "MP2", then
        the four summary lines and one monomer line per fragment.

        Raises
        ------
        FormatError
            If the marker is never found or input ends inside the skipped lines.
        """
        section = "energy summary"
        while True:
            line = cursor.advance()
            if line is None:
                raise FormatError(section,
                                  f"section marker not found: no line contains {cpf_schema.ENERGY_SECTION_MARKER!r}",
                                  cursor.line_number)
            if cpf_schema.ENERGY_SECTION_MARKER in line:
                break
        self.logger.debug(f"Energy summary marker found at line {cursor.line_number}")

        for i in range(cpf_schema.ENERGY_SUMMARY_LINES):
            cursor.require(section, f"summary line {i+1} of {cpf_schema.ENERGY_SUMMARY_LINES}")
        for i in range(fragment_num):
            cursor.require("monomer energies", f"monomer energy line {i+1} of {fragment_num}")
