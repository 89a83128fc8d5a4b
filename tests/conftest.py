from __future__ import annotations

from pathlib import Path

import pytest

from checklist_parser import ChecklistParser
from html_retriever import RetrievalError
from taxonomy_order import TaxonomyOrder

DATA_DIR = Path(__file__).resolve().parent / "data"


def read_page(name: str) -> str:
    return (DATA_DIR / name).read_text(encoding="utf-8")


class FakeRetriever:
    """Serves pages from a dict instead of the network."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.requested: list[str] = []

    def get_html(self, url: str) -> str:
        self.requested.append(url)
        if url not in self.pages:
            raise RetrievalError(url, "404 Client Error: Not Found")
        return self.pages[url]


@pytest.fixture(scope="session")
def taxonomy() -> TaxonomyOrder:
    return TaxonomyOrder.parse(DATA_DIR / "taxonomy.csv")


@pytest.fixture()
def checklist_parser(taxonomy: TaxonomyOrder) -> ChecklistParser:
    return ChecklistParser(taxonomy)


@pytest.fixture()
def pages() -> dict[str, str]:
    return {
        "https://ebird.org/checklist/S1000001": read_page("traveling_checklist.html"),
        "https://ebird.org/checklist/S1000002": read_page("stationary_checklist.html"),
        "https://ebird.org/checklist/S1000003": read_page("incidental_checklist.html"),
    }
