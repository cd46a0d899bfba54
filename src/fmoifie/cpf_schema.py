"""
Declarative record layouts for the CPF text format.

Each fixed-width record type of a CPF file is described once here: how many
whitespace-separated fields a line must carry and which field offset holds
which quantity. The reader and the energy assembler look fields up by name
through these schemas instead of scattering literal indices.
"""
from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class RecordSchema:
    """Field layout of one CPF record type.

    Parameters
    ----------
    name : str
        Section name used in error messages.
    field_count : int
        Exact number of whitespace-separated fields a record line must have.
    offsets : Dict[str, int]
        Named field offsets (0-based) the pipeline consumes. Other fields are ignored.
    """
    name: str
    field_count: int
    offsets: Dict[str, int]

    def __post_init__(self):
        for key, offset in self.offsets.items():
            if not 0 <= offset < self.field_count:
                raise ValueError(f"{self.name}: offset {offset} for '{key}' outside {self.field_count} fields")

    def pick(self, fields: List[str]) -> Dict[str, str]:
        return {key: fields[offset] for key, offset in self.offsets.items()}


# Fragments per line in the electron-count and bond-count blocks
BLOCK_WIDTH = 16

# First line of the energy summary section contains this substring
ENERGY_SECTION_MARKER = "MP2"

# approximation parameters, nuclear repulsion, total electronic energy, total energy
ENERGY_SUMMARY_LINES = 4

HEADER = RecordSchema(
    name="header",
    field_count=2,
    offsets={"atom_num": 0, "fragment_num": 1},
)

ATOM = RecordSchema(
    name="atoms",
    field_count=15,
    offsets={
        "index": 0,
        "name": 1,
        "atom_type": 2,
        "residue_name": 3,
        "residue_number": 4,
        "fragment_number": 5,
    },
)

BOND = RecordSchema(
    name="bonds",
    field_count=2,
    offsets={"src": 0, "dest": 1},
)

ENERGY = RecordSchema(
    name="energy records",
    field_count=18,
    offsets={
        "nuclear_repulsion": 0,
        "hf_electron": 1,
        "hf_electrostatic": 2,
        "mp2": 3,
        "hf_ifie_bsse": 8,
        "mp2_ifie_bsse": 9,
    },
)

# Order of the six component matrices held by EnergyComponents
ENERGY_COMPONENTS = tuple(ENERGY.offsets)


def block_line_count(fragment_num: int) -> int:
    """Lines needed to list one value per fragment, BLOCK_WIDTH values per line."""
    return (fragment_num - 1) // BLOCK_WIDTH + 1


def pair_record_count(fragment_num: int) -> int:
    """Number of lower-triangle fragment pair records."""
    return fragment_num * (fragment_num - 1) // 2
