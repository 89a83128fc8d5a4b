# compile_cli.py
"""
Compile eBird checklists from the command line.

    python compile_cli.py S123456789 https://ebird.org/checklist/S987654321
    python compile_cli.py --file checklists.txt
    cat checklists.txt | python compile_cli.py
"""
import argparse
import logging
import sys

from summary_report import format_summary
from tasks import CompilationError, compile_checklists
from taxonomy_order import TAXONOMY_FILE, TAXONOMY_URL, TaxonomyError, TaxonomyOrder


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarize a set of eBird checklists.")
    parser.add_argument("checklists", nargs="*", help="checklist URLs or IDs (S...)")
    parser.add_argument("--file", "-f", help="read checklist URLs or IDs from this file")
    parser.add_argument("--taxonomy", default=TAXONOMY_FILE, help="path to the eBird taxonomy .csv")
    parser.add_argument("--verbose", "-v", action="store_true", help="log progress to stderr")
    return parser


def read_input(args) -> str:
    if args.checklists:
        return "\n".join(args.checklists)
    if args.file:
        with open(args.file, encoding="utf-8") as f:
            return f.read()
    return sys.stdin.read()


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if args.verbose else logging.ERROR)
    root_logger.addHandler(console_handler)

    try:
        taxonomy = TaxonomyOrder.load(args.taxonomy, TAXONOMY_URL)
        result = compile_checklists(read_input(args), taxonomy)
    except (CompilationError, TaxonomyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_summary(result.summary), end="")
    for w in result.warnings:
        print(f"Warning: {w}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
