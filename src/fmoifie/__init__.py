from .errors import CPFError, CPFIOError, FormatError, ConfigError
from .cpf_reader import AtomRecord, Bond, CPFGeometry, CPFReader
from .topology import FragmentTopology, build_topology
from .ifie_assembler import EnergyComponents, EnergyAssembler, compute_ifie
from .cpf_loader import FmoResult, parse_cpf, load_cpf
from .ifie_exporter import Unit, IFIEExporter, hartree_to_kcal_per_mol, HARTREE_KCAL_PER_MOL
from .ifie_config import IFIEConfig
from .ifie_processor import IFIEProcessor

__all__ = [
    "CPFError",
    "CPFIOError",
    "FormatError",
    "ConfigError",
    "AtomRecord",
    "Bond",
    "CPFGeometry",
    "CPFReader",
    "FragmentTopology",
    "build_topology",
    "EnergyComponents",
    "EnergyAssembler",
    "compute_ifie",
    "FmoResult",
    "parse_cpf",
    "load_cpf",
    "Unit",
    "IFIEExporter",
    "hartree_to_kcal_per_mol",
    "HARTREE_KCAL_PER_MOL",
    "IFIEConfig",
    "IFIEProcessor",
]
