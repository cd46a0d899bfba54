"""
Main entry point for converting a CPF file into an IFIE CSV table.

This script serves as the command-line driver for fmoifie. It reads the CPF path,
CSV path and output unit from the command line (optionally from a JSON configuration
file), and invokes the IFIEProcessor class to load the file and write the matrix.

Key Responsibilities
--------------------
    - Parse command-line arguments for:
        - Input CPF file (`--file` or `-f`)
        - Output CSV file (`--output` or `-o`)
        - Output unit (`--unit` or `-u`)
        - Configuration file (`--config` or `-c`)
    - Merge arguments over the configuration file.
    - Run the IFIEProcessor and exit non-zero on any load or format error.

Dependencies
-------------
    - fmoifie.ifie_processor.IFIEProcessor
    - fmoifie.ifie_config.IFIEConfig
    - Python standard libraries: sys, argparse
"""
import sys
import argparse
from fmoifie.errors import CPFError
from fmoifie.ifie_config import IFIEConfig
from fmoifie.ifie_processor import IFIEProcessor
from fmoifie.utils import FMOIFIE_LOGGER

def build_parser():
    parser = argparse.ArgumentParser(description="Export the IFIE matrix of a CPF file as CSV")
    parser.add_argument("-f", "--file", dest="cpf_file", default=None, help="Path to input cpf file")
    parser.add_argument("-o", "--output", dest="csv_file", default=None, help="Path to output csv file")
    parser.add_argument("-u", "--unit", default=None, choices=["hartree", "kcal"],
                        help="Output unit (default: hartree)")
    parser.add_argument("-c", "--config", default=None, help="Path to JSON configuration")
    parser.add_argument("--precision", type=int, default=None, help="Fractional digits in the CSV (default: 15)")
    parser.add_argument("--no-strict-bonds", dest="strict_bond_count", action="store_const", const=False,
                        default=None, help="Do not reject bond blocks longer than declared")
    return parser

def main(argv=None):
    args = build_parser().parse_args(argv)
    logger = FMOIFIE_LOGGER

    try:
        config = IFIEConfig(args.config, cpf_file=args.cpf_file, csv_file=args.csv_file, unit=args.unit,
                            precision=args.precision, strict_bond_count=args.strict_bond_count)
        processor = IFIEProcessor(config)
        result = processor.run()
        logger.info(f"IFIE matrix of {result.fragment_num} fragments written to {config.csv_file}")
    except CPFError as e:
        logger.error(f"Error running fmoifie: {e}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
