from __future__ import annotations

from models import SpeciesEntry
from species_lists import (
    add_checklist_species,
    count_species,
    merge_sublists,
    remove_subspecies,
    sort_taxonomically,
    strip_subspecies,
)


def entry(name: str, count: int, order: int = 1) -> SpeciesEntry:
    return SpeciesEntry(name=name, count=count, taxonomic_order=order)


def test_merge_single_sublist_is_unchanged() -> None:
    primary = [entry("Mallard", 5, 2), entry("duck sp.", 0, 3)]
    assert merge_sublists([primary]) == primary
    assert merge_sublists([]) == []


def test_merge_sublists_takes_max_not_sum() -> None:
    merged = merge_sublists([[entry("Mallard", 5)], [entry("Mallard", 2)]])
    assert merged == [entry("Mallard", 5)]

    merged = merge_sublists([[entry("Mallard", 0)], [entry("Mallard", 3)]])
    assert merged == [entry("Mallard", 3)]


def test_merge_sublists_appends_new_names_in_order() -> None:
    merged = merge_sublists(
        [
            [entry("Mallard", 5)],
            [entry("Canada Goose", 12), entry("Mallard", 7)],
            [entry("American Dipper", 1), entry("Canada Goose", 2)],
        ]
    )
    assert [(s.name, s.count) for s in merged] == [("Mallard", 7), ("Canada Goose", 12), ("American Dipper", 1)]


def test_merge_does_not_modify_inputs() -> None:
    primary = [entry("Mallard", 1)]
    merge_sublists([primary, [entry("Mallard", 9)]])
    assert primary == [entry("Mallard", 1)]


def test_add_checklist_species_sums_matching_names() -> None:
    summary: list[SpeciesEntry] = []
    add_checklist_species(summary, [entry("Mallard", 5)])
    add_checklist_species(summary, [entry("Mallard", 3), entry("Canada Goose", 2)])
    assert summary == [entry("Mallard", 8), entry("Canada Goose", 2)]


def test_add_checklist_species_keeps_subspecies_apart() -> None:
    summary: list[SpeciesEntry] = []
    add_checklist_species(summary, [entry("Dark-eyed Junco (Oregon)", 3)])
    add_checklist_species(summary, [entry("Dark-eyed Junco (Slate-colored)", 2)])
    assert len(summary) == 2


def test_strip_subspecies() -> None:
    assert strip_subspecies("Dark-eyed Junco (Slate-colored)") == "Dark-eyed Junco"
    assert strip_subspecies("Mallard") == "Mallard"
    assert strip_subspecies("Mallard (Domestic type)") == "Mallard"


def test_remove_subspecies_remerges_by_sum() -> None:
    species = [
        entry("Dark-eyed Junco (Slate-colored)", 2, 21),
        entry("Mallard", 4, 2),
        entry("Dark-eyed Junco (Oregon)", 3, 22),
    ]
    assert remove_subspecies(species) == [entry("Dark-eyed Junco", 5, 21), entry("Mallard", 4, 2)]


def test_sort_taxonomically() -> None:
    species = [entry("Cooper's Hawk", 1, 30), entry("Canada Goose", 1, 1), entry("Mallard", 1, 2)]
    assert [s.name for s in sort_taxonomically(species)] == ["Canada Goose", "Mallard", "Cooper's Hawk"]


def test_count_species_separates_spuhs_and_slashes() -> None:
    species = [
        entry("Mallard", 1),
        entry("duck sp.", 1),
        entry("Greater/Lesser Scaup", 1),
        entry("Dark-eyed Junco", 1),
    ]
    assert count_species(species) == (2, 2)
    assert count_species([]) == (0, 0)


def test_remove_subspecies_keeps_earliest_order_whatever_the_input_order() -> None:
    forward = [entry("Dark-eyed Junco (Oregon)", 1, 22), entry("Dark-eyed Junco", 2, 20)]
    merged = remove_subspecies(forward)
    assert merged == [entry("Dark-eyed Junco", 3, 20)]
    assert remove_subspecies(list(reversed(forward))) == merged
