from __future__ import annotations

from pathlib import Path

import pytest

import taxonomy_order
from models import TaxonCategory
from taxonomy_order import EXPECTED_HEADER, TaxonomyError, TaxonomyOrder

HEADER = ",".join(EXPECTED_HEADER)


def write_csv(tmp_path: Path, body: str, header: str = HEADER) -> Path:
    path = tmp_path / "taxonomy.csv"
    path.write_text(header + "\n" + body, encoding="utf-8")
    return path


def test_parse_sample_table(taxonomy: TaxonomyOrder) -> None:
    assert len(taxonomy) == 9
    assert taxonomy.get_taxonomic_sequence("Mallard") == 2
    assert taxonomy.get_taxonomic_sequence("Dark-eyed Junco (Oregon)") == 22
    assert taxonomy.get_taxonomic_sequence("mallard") is None


def test_quoted_fields_and_missing_trailing_fields(taxonomy: TaxonomyOrder) -> None:
    goose = taxonomy.get_entry("Canada Goose")
    assert goose is not None
    assert goose.family == "Anatidae (Ducks, Geese, and Waterfowl)"
    assert goose.species_group == "Waterfowl"
    assert goose.report_as == ""

    hawk = taxonomy.get_entry("Cooper's Hawk")
    assert hawk is not None
    assert hawk.species_group == "Hawks and Eagles"
    assert hawk.report_as == ""

    junco = taxonomy.get_entry("Dark-eyed Junco (Slate-colored)")
    assert junco is not None
    assert junco.category is TaxonCategory.ISSF
    assert junco.report_as == "daejun"


def test_find_by_species_code(taxonomy: TaxonomyOrder) -> None:
    entry = taxonomy.find_by_species_code("AMEDIP")
    assert entry is not None
    assert entry.common_name == "American Dipper"
    assert taxonomy.find_by_species_code("nothing") is None


def test_header_mismatch_is_fatal(tmp_path: Path) -> None:
    path = write_csv(tmp_path, "1,species,mallar3,Mallard,,,,,\n", header="ORDER,CATEGORY")
    with pytest.raises(TaxonomyError, match="header"):
        TaxonomyOrder.parse(path)


@pytest.mark.parametrize(
    "line",
    [
        "abc,species,mallar3,Mallard,,,,,",
        "1,bird,mallar3,Mallard,,,,,",
        "1,species,mallar3,,,,,,",
        "1,species,mallar3,Mallard,,,,,,extra",
    ],
)
def test_malformed_line_is_fatal(tmp_path: Path, line: str) -> None:
    path = write_csv(tmp_path, "2,species,cangoo,Canada Goose,,,,,\n" + line + "\n")
    with pytest.raises(TaxonomyError, match="line 3"):
        TaxonomyOrder.parse(path)


def test_blank_lines_are_skipped(tmp_path: Path) -> None:
    path = write_csv(tmp_path, "2,species,cangoo,Canada Goose,,,,,\n\n3,species,mallar3,Mallard,,,,,\n\n")
    assert len(TaxonomyOrder.parse(path)) == 2


def test_first_duplicate_name_wins(tmp_path: Path) -> None:
    path = write_csv(tmp_path, "5,species,mallar3,Mallard,,,,,\n9,species,mallar9,Mallard,,,,,\n")
    assert TaxonomyOrder.parse(path).get_taxonomic_sequence("Mallard") == 5


def test_missing_file_without_url(tmp_path: Path) -> None:
    with pytest.raises(TaxonomyError, match="not found"):
        TaxonomyOrder.load(tmp_path / "missing.csv", url=None)


def test_missing_file_is_downloaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "data" / "taxonomy.csv"
    calls = []

    def fake_download(url: str, save_to: Path) -> Path:
        calls.append(url)
        save_to.parent.mkdir(parents=True, exist_ok=True)
        save_to.write_text(HEADER + "\n7,species,amedip,American Dipper,,,,,\n", encoding="utf-8")
        return save_to

    monkeypatch.setattr(taxonomy_order, "download_taxonomy_file", fake_download)
    loaded = TaxonomyOrder.load(target, url="https://example.org/taxonomy.csv")
    assert calls == ["https://example.org/taxonomy.csv"]
    assert loaded.get_taxonomic_sequence("American Dipper") == 7


def test_undecodable_row_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "taxonomy.csv"
    # Large enough valid prefix that decoding fails while reading rows
    rows = "".join(f"{i},species,code{i},Bird {i},,,,,\n" for i in range(1, 2000))
    path.write_bytes((HEADER + "\n" + rows).encode("utf-8") + b"9999,species,bad,Bad \xff Bird,,,,,\n")
    with pytest.raises(TaxonomyError, match="Failed to"):
        TaxonomyOrder.parse(path)


def test_undecodable_header_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "taxonomy.csv"
    path.write_bytes(b"\xff\xfeTAXON_ORDER\n")
    with pytest.raises(TaxonomyError, match="header"):
        TaxonomyOrder.parse(path)
