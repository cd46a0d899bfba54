from __future__ import annotations

import sys
from pathlib import Path


def _ensure_src_on_syspath() -> None:
    src = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_src_on_syspath()

import pytest

from fmoifie.cpf_schema import block_line_count


def pair_energies(i: int, j: int) -> list[str]:
    """Distinct, reproducible 18-field energy record for 0-based pair (i, j)."""
    base = 0.001 * (10 * i + j + 1)
    values = [
        f"{base:.12f}",           # nuclear repulsion
        f"{-2.0 * base:.12f}",    # HF electronic
        f"{-0.5 * base:.12f}",    # HF electrostatic
        f"{-0.25 * base:.12f}",   # MP2
    ]
    values += ["0.0"] * 4
    values += [f"{-1.5 * base:.12f}", f"{-1.75 * base:.12f}"]
    values += ["0.0"] * 8
    return values


def build_cpf(
    atoms: list[tuple],
    fragment_num: int,
    bonds: list[tuple[int, int]],
    energies: dict | None = None,
    declared_bonds: int | None = None,
    atom_extra_fields: int = 9,
    preamble: tuple[str, ...] = ("## Dipole moment", "   0.000  0.000  0.000"),
    marker: str = "## MP2 IFIE section",
    energy_lines: list[str] | None = None,
) -> str:
    """Render a synthetic CPF file.

    ``atoms`` holds (name, residue_name, residue_number, fragment_number) tuples.
    """
    lines = ["CPF Ver.4.201", f"{len(atoms)} {fragment_num}"]
    for index, (name, res_name, res_num, frag) in enumerate(atoms, start=1):
        extra = " ".join(["0.000"] * atom_extra_fields)
        lines.append(f"{index:10d} {name:<4s} {name[0]:<2s} {res_name:<3s} {res_num:10d} {frag:10d} {extra}")

    nblock = block_line_count(fragment_num)
    for _ in range(nblock):
        lines.append(" ".join(["10"] * min(fragment_num, 16)))
    count = len(bonds) if declared_bonds is None else declared_bonds
    lines.append(str(count))
    for _ in range(nblock - 1):
        lines.append("0")
    for src, dest in bonds:
        lines.append(f"{src:10d} {dest:10d}")

    lines.extend(preamble)
    if marker is not None:
        lines.append(marker)
        lines.append("  FMO2 approximation 0.0 0.0 2.0")
        lines.append("  1.0  nuclear repulsion")
        lines.append("  -2.0  electronic")
        lines.append("  -1.0  total")
        for frag in range(fragment_num):
            lines.append(f"  {frag+1}  -100.0  -50.0")

        if energy_lines is None:
            energy_lines = []
            for i in range(1, fragment_num):
                for j in range(i):
                    fields = (energies or {}).get((i, j)) or pair_energies(i, j)
                    energy_lines.append("  ".join(fields))
        lines.extend(energy_lines)
    return "\n".join(lines) + "\n"


@pytest.fixture
def cpf_text():
    return build_cpf


@pytest.fixture
def tripeptide():
    """Three fragments, four residues; fragments 1 and 2 are bonded, fragment 3 is free."""
    atoms = [
        ("N", "GLY", 1, 1),
        ("CA", "GLY", 1, 1),
        ("C", "ALA", 2, 1),
        ("N", "SER", 3, 2),
        ("CA", "SER", 3, 2),
        ("O", "WAT", 4, 3),
    ]
    return build_cpf(atoms, 3, bonds=[(3, 4), (1, 2)])


@pytest.fixture
def cpf_file(tmp_path, tripeptide):
    path = tmp_path / "tripeptide.cpf"
    path.write_text(tripeptide)
    return path
