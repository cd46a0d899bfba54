"""
Fragment topology derived from CPF atom records and bonds.

Groups residues into fragments and translates the atom-level bond list into a
symmetric fragment adjacency matrix. A pair of fragments is adjacent when at
least one covalent bond joins an atom of one to an atom of the other.
"""
from dataclasses import dataclass, field
from typing import Mapping, Sequence, Tuple
import numpy as np
from .cpf_reader import AtomRecord, Bond, CPFGeometry
from .utils import FMOIFIE_LOGGER


@dataclass(frozen=True)
class FragmentTopology:
    """Fragment grouping and connectivity.

    Attributes
    ----------
    adjacency : np.ndarray
        Read-only boolean (nfrag, nfrag) matrix; entry [i, j] is True when fragments
        i+1 and j+1 share a bond. The diagonal may be True for intra-fragment bonds
        and is never consulted.
    residues_in_fragment : Tuple[frozenset, ...]
        Residue numbers per fragment; index 0 holds fragment 1.
    residue_names : Mapping[int, str]
        Residue number to display name.
    """
    adjacency: np.ndarray = field(compare=False)
    residues_in_fragment: Tuple[frozenset, ...]
    residue_names: Mapping[int, str] = field(compare=False)

    @property
    def fragment_num(self) -> int:
        return len(self.residues_in_fragment)

    def is_bonded(self, i: int, j: int) -> bool:
        """Whether 0-based fragments i and j are covalently connected."""
        return bool(self.adjacency[i, j])

    def label(self, i: int) -> str:
        """CSV header for 0-based fragment i, e.g. 'GLY1 ALA2 '."""
        return "".join(f"{self.residue_names[res]}{res} "
                       for res in sorted(self.residues_in_fragment[i]))

    def labels(self):
        return [self.label(i) for i in range(self.fragment_num)]


def build_adjacency(atoms: Sequence[AtomRecord], bonds: Sequence[Bond], fragment_num: int) -> np.ndarray:
    """Convert atom-level bonds into a fragment adjacency matrix.

    The destination atom's fragment indexes the row and the source atom's fragment the
    column; the matrix is symmetric so the swap only matters for the write order.

    Parameters
    ----------
    atoms : Sequence[AtomRecord]
        Atom records in file order; bond indices point into this sequence (1-based).
    bonds : Sequence[Bond]
        Atom-level bonds.
    fragment_num : int
        Number of fragments.

    Returns
    -------
    np.ndarray
        Read-only symmetric boolean matrix of shape (fragment_num, fragment_num).
    """
    adjacency = np.zeros((fragment_num, fragment_num), dtype=bool)
    for bond in bonds:
        frag_src = atoms[bond.dest-1].fragment_number
        frag_dest = atoms[bond.src-1].fragment_number
        adjacency[frag_src-1, frag_dest-1] = True
        adjacency[frag_dest-1, frag_src-1] = True
    adjacency.flags.writeable = False
    return adjacency


def group_residues(atoms: Sequence[AtomRecord], fragment_num: int) -> Tuple[frozenset, ...]:
    residues = [set() for _ in range(fragment_num)]
    for atom in atoms:
        residues[atom.fragment_number-1].add(atom.residue_number)
    return tuple(frozenset(r) for r in residues)


def build_topology(geometry: CPFGeometry) -> FragmentTopology:
    """Build the fragment topology of a parsed CPF geometry."""
    adjacency = build_adjacency(geometry.atoms, geometry.bonds, geometry.fragment_num)
    residues_in_fragment = group_residues(geometry.atoms, geometry.fragment_num)
    bonded_pairs = int(np.count_nonzero(np.triu(adjacency, k=1)))
    FMOIFIE_LOGGER.info(f"[TOPOLOGY INFO] {geometry.fragment_num} fragments, "
                        f"{bonded_pairs} covalently bonded fragment pairs")
    return FragmentTopology(
        adjacency=adjacency,
        residues_in_fragment=residues_in_fragment,
        residue_names=geometry.residue_names,
    )
