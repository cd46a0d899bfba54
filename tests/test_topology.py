import numpy as np
import pytest

from conftest import build_cpf
from fmoifie.cpf_reader import AtomRecord, Bond, CPFReader, LineCursor
from fmoifie.topology import build_adjacency, build_topology, group_residues


def _atom(index: int, residue: int, fragment: int) -> AtomRecord:
    return AtomRecord(index=index, name="C", atom_type="C", residue_name="GLY",
                      residue_number=residue, fragment_number=fragment)


def test_adjacency_is_symmetric_and_marks_bonded_fragments() -> None:
    atoms = [_atom(1, 1, 1), _atom(2, 2, 2), _atom(3, 3, 3), _atom(4, 4, 4)]
    bonds = [Bond(1, 2), Bond(4, 2)]
    adjacency = build_adjacency(atoms, bonds, 4)
    assert adjacency.dtype == bool
    assert np.array_equal(adjacency, adjacency.T)
    assert adjacency[0, 1] and adjacency[1, 0]
    assert adjacency[1, 3] and adjacency[3, 1]
    assert not adjacency[0, 2]
    assert not adjacency[2, 3]


def test_bond_inside_one_fragment_only_touches_the_diagonal() -> None:
    atoms = [_atom(1, 1, 1), _atom(2, 1, 1), _atom(3, 2, 2)]
    adjacency = build_adjacency(atoms, [Bond(1, 2)], 2)
    assert adjacency[0, 0]
    assert not adjacency[0, 1]
    assert not adjacency[1, 0]


def test_adjacency_is_read_only() -> None:
    adjacency = build_adjacency([_atom(1, 1, 1), _atom(2, 2, 2)], [Bond(1, 2)], 2)
    with pytest.raises(ValueError):
        adjacency[0, 1] = False


def test_bond_indices_refer_to_atom_order_not_fragments() -> None:
    # atom 1 lives in fragment 3 and atom 3 in fragment 1
    atoms = [_atom(1, 3, 3), _atom(2, 2, 2), _atom(3, 1, 1)]
    adjacency = build_adjacency(atoms, [Bond(1, 2)], 3)
    assert adjacency[1, 2] and adjacency[2, 1]
    assert not adjacency[0, 1]


def test_group_residues_collects_residue_numbers_per_fragment() -> None:
    atoms = [_atom(1, 1, 1), _atom(2, 1, 1), _atom(3, 2, 1), _atom(4, 3, 2)]
    assert group_residues(atoms, 3) == (frozenset({1, 2}), frozenset({3}), frozenset())


def test_labels_join_residues_in_ascending_order(tripeptide) -> None:
    geometry = CPFReader().read_geometry(LineCursor(tripeptide.splitlines()))
    topology = build_topology(geometry)
    assert topology.fragment_num == 3
    assert topology.labels() == ["GLY1 ALA2 ", "SER3 ", "WAT4 "]
    assert topology.is_bonded(0, 1)
    assert not topology.is_bonded(0, 2)
    assert not topology.is_bonded(1, 2)


def test_last_residue_name_wins() -> None:
    text = build_cpf([("C", "GLY", 1, 1), ("C", "GLX", 1, 1), ("C", "ALA", 2, 2)], 2, bonds=[])
    geometry = CPFReader().read_geometry(LineCursor(text.splitlines()))
    assert build_topology(geometry).label(0) == "GLX1 "
