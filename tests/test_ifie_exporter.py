import csv

import numpy as np
import pytest

from conftest import build_cpf
from fmoifie.cpf_loader import load_cpf, parse_cpf
from fmoifie.errors import ConfigError, CPFIOError
from fmoifie.ifie_exporter import (
    HARTREE_KCAL_PER_MOL,
    IFIEExporter,
    Unit,
    hartree_to_kcal_per_mol,
)


def test_kcal_conversion_is_reversible() -> None:
    for value in (0.0, 1.0, -0.0123456789, 3.5e-7):
        assert hartree_to_kcal_per_mol(value) / 627.5095 == pytest.approx(value, rel=1e-15, abs=0.0)
    array = np.array([[0.0, -0.01], [-0.01, 0.0]])
    np.testing.assert_allclose(hartree_to_kcal_per_mol(array) / HARTREE_KCAL_PER_MOL, array)


def test_unit_parse_accepts_common_spellings() -> None:
    assert Unit.parse("hartree") is Unit.HARTREE
    assert Unit.parse("Kcal") is Unit.KCAL_PER_MOL
    assert Unit.parse("kcal/mol") is Unit.KCAL_PER_MOL
    assert Unit.parse(Unit.HARTREE) is Unit.HARTREE
    with pytest.raises(ConfigError):
        Unit.parse("eV")


def test_default_unit_is_hartree() -> None:
    assert IFIEExporter().unit is Unit.HARTREE


def test_table_shape_and_headers(tripeptide) -> None:
    result = parse_cpf(tripeptide.splitlines())
    rows = IFIEExporter().table(result)
    assert len(rows) == 4
    assert all(len(row) == 4 for row in rows)
    assert rows[0] == ["", "GLY1 ALA2 ", "SER3 ", "WAT4 "]
    assert [row[0] for row in rows[1:]] == ["GLY1 ALA2 ", "SER3 ", "WAT4 "]


def test_hartree_cells_are_fixed_point_with_fifteen_digits(tripeptide) -> None:
    result = parse_cpf(tripeptide.splitlines())
    rows = IFIEExporter(Unit.HARTREE).table(result)
    for i in range(3):
        for j in range(3):
            cell = rows[i + 1][j + 1]
            assert cell == f"{result.ifie[i, j]:.15f}"
            assert len(cell.split(".")[1]) == 15
    # fragments 1 and 2 are covalently bonded
    assert float(rows[1][2]) == 0.0


def test_kcal_cells_scale_every_value(tmp_path, tripeptide) -> None:
    result = parse_cpf(tripeptide.splitlines())
    path = tmp_path / "ifie.csv"
    IFIEExporter(Unit.KCAL_PER_MOL).write(result, str(path))
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 4
    for i in range(3):
        for j in range(3):
            assert rows[i + 1][j + 1] == f"{result.ifie[i, j] * 627.5095:.15f}"
    # conversion happens on export only
    assert result.ifie[0, 2] == pytest.approx(float(rows[1][3]) / 627.5095)
    assert result.ifie[0, 2] != pytest.approx(float(rows[1][3]))


def test_unit_setters_switch_output(tripeptide) -> None:
    result = parse_cpf(tripeptide.splitlines())
    exporter = IFIEExporter()
    exporter.set_unit_kcal_per_mol()
    kcal = exporter.table(result)
    exporter.set_unit_hartree()
    hartree = exporter.table(result)
    assert float(kcal[1][3]) == pytest.approx(float(hartree[1][3]) * 627.5095)


def test_precision_is_configurable(tripeptide) -> None:
    result = parse_cpf(tripeptide.splitlines())
    rows = IFIEExporter(precision=4).table(result)
    assert rows[1][3] == f"{result.ifie[0, 2]:.4f}"
    with pytest.raises(ConfigError):
        IFIEExporter(precision=-1)


def test_single_fragment_exports_header_and_zero_cell() -> None:
    result = parse_cpf(build_cpf([("O", "WAT", 1, 1)], 1, bonds=[]).splitlines())
    rows = IFIEExporter().table(result)
    assert rows == [["", "WAT1 "], ["WAT1 ", "0.000000000000000"]]


def test_unwritable_output_raises_io_error(tmp_path, tripeptide) -> None:
    result = parse_cpf(tripeptide.splitlines())
    with pytest.raises(CPFIOError):
        IFIEExporter().write(result, str(tmp_path / "missing" / "ifie.csv"))


def test_load_cpf_reads_file(cpf_file) -> None:
    result = load_cpf(str(cpf_file))
    assert result.fragment_num == 3
    assert result.atom_num == 6
    assert result.version == "CPF Ver.4.201"


def test_load_cpf_missing_file_raises_io_error(tmp_path) -> None:
    with pytest.raises(CPFIOError) as excinfo:
        load_cpf(str(tmp_path / "absent.cpf"))
    assert isinstance(excinfo.value, OSError)
