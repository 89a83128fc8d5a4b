# taxonomy_order.py
"""
Lookup of eBird taxonomic sequence numbers by common name.

The taxonomy .csv is the eBird/Clements download
(https://www.birds.cornell.edu/clementschecklist/download/).  It is read once
and kept in memory; lookups are exact-name matches.
"""
import csv
import logging
import os
from pathlib import Path

import requests
from dotenv import load_dotenv

from models import TaxonCategory, TaxonomyEntry

load_dotenv()
TAXONOMY_FILE = os.getenv("EBIRD_TAXONOMY_FILE", "./data/eBird_Taxonomy.csv")
TAXONOMY_URL = os.getenv("EBIRD_TAXONOMY_URL")
USER_AGENT = os.getenv("EBIRD_COMPILER_USER_AGENT", "eBird Compiler")

EXPECTED_HEADER = [
    "TAXON_ORDER",
    "CATEGORY",
    "SPECIES_CODE",
    "PRIMARY_COM_NAME",
    "SCI_NAME",
    "ORDER1",
    "FAMILY",
    "SPECIES_GROUP",
    "REPORT_AS",
]

logger = logging.getLogger(__name__)


class TaxonomyError(RuntimeError):
    pass


def download_taxonomy_file(url: str, save_to: str | Path, timeout: float = 60):
    path = Path(save_to)
    logger.info(f"Downloading taxonomy from {url}")
    try:
        res = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        res.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise TaxonomyError(f"Failed to download taxonomy file from {url}: {e}") from e

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(res.content)
    return path


def parse_taxonomy_row(row: list[str]) -> TaxonomyEntry:
    if len(row) > len(EXPECTED_HEADER):
        raise ValueError(f"expected {len(EXPECTED_HEADER)} fields, found {len(row)}")
    # Blank trailing fields may be left off entirely
    fields = [f.strip() for f in row] + [""] * (len(EXPECTED_HEADER) - len(row))
    sequence, category, code, common, sci, order, family, group, report_as = fields

    if not sequence.isdigit():
        raise ValueError(f"invalid TAXON_ORDER '{sequence}'")
    if not common:
        raise ValueError("missing PRIMARY_COM_NAME")

    return TaxonomyEntry(
        sequence=int(sequence),
        category=TaxonCategory(category.lower()),
        species_code=code,
        common_name=common,
        scientific_name=sci,
        order=order,
        family=family,
        species_group=group,
        report_as=report_as,
    )


class TaxonomyOrder:
    def __init__(self, entries: list[TaxonomyEntry] | None = None):
        self._by_name: dict[str, TaxonomyEntry] = {}
        self._entries: list[TaxonomyEntry] = []
        for entry in entries or []:
            self.add(entry)

    def __len__(self):
        return len(self._entries)

    def add(self, entry: TaxonomyEntry):
        self._entries.append(entry)
        if entry.common_name in self._by_name:
            logger.warning(f"Duplicate taxonomy name '{entry.common_name}', keeping first entry")
            return
        self._by_name[entry.common_name] = entry

    @classmethod
    def parse(cls, file_name: str | Path) -> "TaxonomyOrder":
        """Read a taxonomy .csv; any header mismatch or malformed line is fatal."""
        path = Path(file_name)
        try:
            f = open(path, newline="", encoding="utf-8-sig")
        except OSError as e:
            raise TaxonomyError(f"Failed to open file at '{path}'") from e

        taxonomy = cls()
        with f:
            reader = csv.reader(f)
            try:
                header = next(reader, None)
            except (csv.Error, UnicodeDecodeError) as e:
                raise TaxonomyError(f"Failed to read taxonomy file header line: {e}") from e
            if header is None:
                raise TaxonomyError("Failed to read taxonomy file header line")
            if [h.strip() for h in header] != EXPECTED_HEADER:
                raise TaxonomyError("Unexpected taxonomy file header format")

            try:
                for row in reader:
                    if not any(cell.strip() for cell in row):
                        continue
                    try:
                        taxonomy.add(parse_taxonomy_row(row))
                    except ValueError as e:
                        raise TaxonomyError(
                            f"Failed to parse taxonomy file at line {reader.line_num}: {e}"
                        ) from e
            except (csv.Error, UnicodeDecodeError) as e:
                raise TaxonomyError(f"Failed to parse taxonomy file at line {reader.line_num}: {e}") from e

        logger.info(f"Loaded {len(taxonomy)} taxa from {path}")
        return taxonomy

    @classmethod
    def load(cls, file_name: str | Path = TAXONOMY_FILE, url: str | None = TAXONOMY_URL) -> "TaxonomyOrder":
        """Parse the taxonomy file, downloading it first if it is missing and a URL is known."""
        path = Path(file_name)
        if not path.exists():
            if not url:
                raise TaxonomyError(f"Taxonomy file '{path}' not found and EBIRD_TAXONOMY_URL is not set")
            download_taxonomy_file(url, path)
        return cls.parse(path)

    def get_entry(self, common_name: str) -> TaxonomyEntry | None:
        return self._by_name.get(common_name)

    def get_taxonomic_sequence(self, common_name: str) -> int | None:
        entry = self._by_name.get(common_name)
        return entry.sequence if entry else None

    def find_by_species_code(self, code: str) -> TaxonomyEntry | None:
        code = code.strip().lower()
        for entry in self._entries:
            if entry.species_code.lower() == code:
                return entry
        return None
