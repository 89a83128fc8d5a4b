# species_lists.py
"""
Species list reductions.

There are three separate passes and each has its own operator:

  merge_sublists          one checklist, shared sub-lists      -> max
  add_checklist_species   across checklists, by full name      -> sum
  remove_subspecies       after stripping "(...)" qualifiers   -> sum

Entries are copied on the way in, so input lists are never modified.
"""
from dataclasses import replace

from models import SpeciesEntry


def _index_by_name(species: list[SpeciesEntry]) -> dict[str, SpeciesEntry]:
    return {s.name: s for s in species}


def merge_sublists(sublists: list[list[SpeciesEntry]]) -> list[SpeciesEntry]:
    """
    Combine the primary list of a checklist with the "additional species"
    lists of other observers sharing it.

    A shared sighting only shows its full count on the checklist being
    viewed; the others show "X" or partial numbers, so the larger count
    is kept. Order of first appearance is preserved.
    """
    if not sublists:
        return []

    merged = [replace(s) for s in sublists[0]]
    by_name = _index_by_name(merged)
    for sublist in sublists[1:]:
        for s in sublist:
            existing = by_name.get(s.name)
            if existing:
                existing.count = max(existing.count, s.count)
            else:
                entry = replace(s)
                merged.append(entry)
                by_name[entry.name] = entry
    return merged


def add_checklist_species(summary_species: list[SpeciesEntry], checklist_species: list[SpeciesEntry]):
    """Add one checklist's species to the running summary list; matching names are summed."""
    by_name = _index_by_name(summary_species)
    for s in checklist_species:
        existing = by_name.get(s.name)
        if existing:
            existing.count += s.count
        else:
            entry = replace(s)
            summary_species.append(entry)
            by_name[entry.name] = entry


def strip_subspecies(name: str) -> str:
    """'Dark-eyed Junco (Oregon)' -> 'Dark-eyed Junco'."""
    paren = name.find("(")
    if paren == -1:
        return name
    # Drop the separator before the parenthesis as well
    return name[:max(paren - 1, 0)]


def remove_subspecies(species: list[SpeciesEntry]) -> list[SpeciesEntry]:
    """Strip qualifiers, then sum entries whose names now collide."""
    result: list[SpeciesEntry] = []
    by_name: dict[str, SpeciesEntry] = {}
    for s in species:
        name = strip_subspecies(s.name)
        existing = by_name.get(name)
        if existing:
            existing.count += s.count
            existing.taxonomic_order = min(existing.taxonomic_order, s.taxonomic_order)
        else:
            entry = replace(s, name=name)
            result.append(entry)
            by_name[name] = entry
    return result


def sort_taxonomically(species: list[SpeciesEntry]) -> list[SpeciesEntry]:
    return sorted(species, key=lambda s: s.taxonomic_order)


def is_spuh_or_slash(name: str) -> bool:
    return "sp." in name or "/" in name


def count_species(species: list[SpeciesEntry]) -> tuple[int, int]:
    """Return (full species count, other taxa count)."""
    other_taxa = sum(1 for s in species if is_spuh_or_slash(strip_subspecies(s.name)))
    return len(species) - other_taxa, other_taxa
