# compiler.py
"""
Compiles one summary from many parsed checklists.

Checklist species are summed by full name, then subspecies qualifiers are
stripped and colliding names summed again, and the result is sorted in
taxonomic order.  Mixed dates and repeated anonymous observers do not stop
compilation; they are returned as warnings next to the summary.
"""
import logging
from collections import Counter

from models import ANONYMOUS_PARTICIPANT, ChecklistRecord, SummaryRecord
from species_lists import add_checklist_species, remove_subspecies, sort_taxonomically
from time_utils import date_code_for, decode_date_code

logger = logging.getLogger(__name__)

MAJORITY_DATE_FRACTION = 0.8


def compile_summary(checklists: list[ChecklistRecord]) -> tuple[SummaryRecord, list[str]]:
    summary = SummaryRecord()
    locations = set()
    anonymous_checklists = 0
    identifiers_by_date: dict[int, list[str]] = {}

    for checklist in checklists:
        summary.total_distance_km += checklist.distance_km
        summary.total_minutes += checklist.duration_minutes

        for participant in checklist.participants:
            if participant not in summary.participants:
                summary.participants.append(participant)
        if ANONYMOUS_PARTICIPANT in checklist.participants:
            anonymous_checklists += 1

        locations.add(checklist.location)
        add_checklist_species(summary.species, checklist.species)

        identifiers_by_date.setdefault(date_code_for(checklist.date), []).append(checklist.identifier)

    summary.includes_multiple_anonymous_contributors = anonymous_checklists > 1
    summary.distinct_location_count = len(locations)
    summary.species = sort_taxonomically(remove_subspecies(summary.species))

    warnings = []
    date_warning = check_dates(identifiers_by_date)
    if date_warning:
        warnings.append(date_warning)
    if summary.includes_multiple_anonymous_contributors:
        warnings.append(
            f"{anonymous_checklists} checklists include an anonymous observer; "
            "participant count may be inexact"
        )

    for w in warnings:
        logger.warning(w)
    return summary, warnings


def format_date_code(code: int) -> str:
    year, month, day = decode_date_code(code)
    return f"{year:04d}-{month:02d}-{day:02d}"


def check_dates(identifiers_by_date: dict[int, list[str]]) -> str | None:
    """
    Return a warning when checklists span more than one date, or None.

    If one date holds more than 80% of the checklists the others are
    probably mistakes and are listed by identifier; otherwise a count per
    date is given.
    """
    if len(identifiers_by_date) <= 1:
        return None

    counts = Counter({code: len(ids) for code, ids in identifiers_by_date.items()})
    total = sum(counts.values())
    majority_code, majority_count = counts.most_common(1)[0]

    if majority_count > MAJORITY_DATE_FRACTION * total:
        outliers = [
            f"{identifier} ({format_date_code(code)})"
            for code, ids in identifiers_by_date.items()
            if code != majority_code
            for identifier in ids
        ]
        return (
            f"Most checklists are from {format_date_code(majority_code)}, but these are not: "
            + ", ".join(outliers)
        )

    by_calendar = sorted(identifiers_by_date, key=decode_date_code)
    breakdown = ", ".join(f"{format_date_code(code)}: {counts[code]}" for code in by_calendar)
    return f"Checklists are from multiple dates ({breakdown})"
