# checklist_parser.py
"""
Extraction of one ChecklistRecord from an eBird checklist page.

Fields are read in page order with a single cursor that only moves
forward: date, location, participants, protocol, duration, distance and
finally the species list.  A failure at any step rejects the whole page.
"""
import html as html_lib
import logging

from mappers import (
    map_observation_method,
    parse_checklist_date,
    parse_distance_km,
    parse_species_count,
)
from models import ChecklistField, ChecklistRecord, ObservationMethod, SpeciesEntry
from species_lists import merge_sublists
from tag_scanner import advance_past, extract_between, find_marker
from taxonomy_order import TaxonomyOrder
from time_utils import parse_duration_minutes

logger = logging.getLogger(__name__)

DATE_OPEN = '<time datetime="'
DATE_CLOSE = '"'

SPAN_OPEN = "<span>"
SPAN_CLOSE = "</span>"

LOCATION_LABEL = '<h6 class="is-visuallyHidden">Location</h6>'
OWNER_LABEL = '<h6 class="is-visuallyHidden">Owner</h6>'
OTHER_PARTICIPANTS_LABEL = '<h6 class="is-visuallyHidden">Other participating eBirders</h6>'
PARTICIPANTS_BREADCRUMB = '<ul class="Breadcrumbs">'
BLOCK_CLOSE = "</ul>"
PARTICIPANT_OPEN = '<span class="Breadcrumbs-item">'

PROTOCOL_OPEN = '<span title="Protocol">'
DURATION_OPEN = '<span class="Badge" title="Duration">'
DISTANCE_OPEN = '<span class="Badge" title="Distance">'

SPECIES_LIST_START = '<div id="list">'
SPECIES_LIST_END = '<div id="checklist-tools">'
ADDITIONAL_SPECIES = '<h3 class="Observation-shared">'
SPECIES_SECTION_OPEN = '<section class="Observation">'
SPECIES_SECTION_CLOSE = "</section>"
SPECIES_NAME_OPEN = '<span class="Heading-main">'
NUMBER_OBSERVED_LABEL = '<span class="is-visuallyHidden">Number observed: </span>'


class ChecklistParseError(ValueError):
    def __init__(self, field: ChecklistField, detail: str | None = None):
        self.field = field
        self.detail = detail
        message = f"Failed to extract {field.value}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


def clean_text(token: str) -> str:
    """Decode entities and collapse whitespace."""
    return " ".join(html_lib.unescape(token).split())


def _extract(html, start_marker, end_marker, position, field, bound=None, what=None):
    result = extract_between(html, start_marker, end_marker, position, bound)
    if result is None:
        raise ChecklistParseError(field, f"missing {what or start_marker}")
    return result


def _advance(html, marker, position, field, bound=None, what=None):
    new_position = advance_past(html, marker, position, bound)
    if new_position is None:
        raise ChecklistParseError(field, f"missing {what or marker}")
    return new_position


class ChecklistParser:
    def __init__(self, taxonomy: TaxonomyOrder):
        self.taxonomy = taxonomy

    def parse(self, html: str, identifier: str = "") -> ChecklistRecord:
        """Extract a complete record or raise ChecklistParseError."""
        position = 0
        checklist_date, position = self.extract_date(html, position)
        location, position = self.extract_location(html, position)
        participants, position = self.extract_participants(html, position)
        method, position = self.extract_protocol(html, position)

        duration = 0.0
        if method in (ObservationMethod.TRAVELING, ObservationMethod.STATIONARY):
            duration, position = self.extract_duration(html, position)

        distance = 0.0
        if method == ObservationMethod.TRAVELING:
            distance, position = self.extract_distance(html, position)

        species, position = self.extract_species_list(html, position)

        logger.debug(
            f"Parsed checklist {identifier}: {checklist_date}, {location}, "
            f"{len(participants)} participant(s), {len(species)} taxa"
        )
        return ChecklistRecord(
            identifier=identifier,
            date=checklist_date,
            location=location,
            participants=participants,
            observation_method=method,
            duration_minutes=duration,
            distance_km=distance,
            species=species,
        )

    def extract_date(self, html: str, position: int):
        token, position = _extract(html, DATE_OPEN, DATE_CLOSE, position, ChecklistField.DATE, what="date")
        try:
            return parse_checklist_date(token), position
        except ValueError as e:
            raise ChecklistParseError(ChecklistField.DATE, str(e)) from e

    def extract_location(self, html: str, position: int):
        position = _advance(html, LOCATION_LABEL, position, ChecklistField.LOCATION, what="location label")
        token, position = _extract(html, SPAN_OPEN, SPAN_CLOSE, position, ChecklistField.LOCATION, what="location")
        return clean_text(token), position

    def extract_participants(self, html: str, position: int):
        field = ChecklistField.PARTICIPANTS
        position = _advance(html, OWNER_LABEL, position, field, what="owner label")
        owner, position = _extract(html, SPAN_OPEN, SPAN_CLOSE, position, field, what="owner")
        participants = [clean_text(owner)]

        # Only look for other participants ahead of the protocol, so a missing
        # block can't pick up names from further down the page
        others_bound = find_marker(html, PROTOCOL_OPEN, position)
        others = advance_past(html, OTHER_PARTICIPANTS_LABEL, position, others_bound)
        if others is None:
            return participants, position

        position = _advance(html, PARTICIPANTS_BREADCRUMB, others, field, what="participant list")
        list_end = find_marker(html, BLOCK_CLOSE, position)
        if list_end is None:
            raise ChecklistParseError(field, "unterminated participant list")

        while True:
            result = extract_between(html, PARTICIPANT_OPEN, SPAN_CLOSE, position, list_end)
            if result is None:
                break
            name, position = result
            participants.append(clean_text(name))

        return participants, list_end + len(BLOCK_CLOSE)

    def extract_protocol(self, html: str, position: int):
        token, position = _extract(html, PROTOCOL_OPEN, SPAN_CLOSE, position, ChecklistField.METHOD, what="protocol")
        return map_observation_method(clean_text(token)), position

    def extract_duration(self, html: str, position: int):
        token, position = _extract(html, DURATION_OPEN, SPAN_CLOSE, position, ChecklistField.DURATION, what="duration")
        try:
            return parse_duration_minutes(clean_text(token)), position
        except ValueError as e:
            raise ChecklistParseError(ChecklistField.DURATION, str(e)) from e

    def extract_distance(self, html: str, position: int):
        token, position = _extract(html, DISTANCE_OPEN, SPAN_CLOSE, position, ChecklistField.DISTANCE, what="distance")
        try:
            return parse_distance_km(clean_text(token)), position
        except ValueError as e:
            raise ChecklistParseError(ChecklistField.DISTANCE, str(e)) from e

    def extract_species_list(self, html: str, position: int):
        field = ChecklistField.SPECIES_LIST
        position = _advance(html, SPECIES_LIST_START, position, field, what="species list")
        list_end = find_marker(html, SPECIES_LIST_END, position)
        if list_end is None:
            raise ChecklistParseError(field, "missing end of species list")

        # Primary list first, then one sub-list per "additional species" heading
        starts = [position]
        ends = []
        marker = find_marker(html, ADDITIONAL_SPECIES, position, list_end)
        while marker is not None:
            ends.append(marker)
            starts.append(marker + len(ADDITIONAL_SPECIES))
            marker = find_marker(html, ADDITIONAL_SPECIES, starts[-1], list_end)
        ends.append(list_end)

        sublists = [self.extract_sublist(html, start, end) for start, end in zip(starts, ends)]
        if len(sublists) > 1:
            logger.debug(f"Merging {len(sublists)} species sub-lists")
        return merge_sublists(sublists), list_end + len(SPECIES_LIST_END)

    def extract_sublist(self, html: str, position: int, bound: int) -> list[SpeciesEntry]:
        species = []
        while True:
            section = advance_past(html, SPECIES_SECTION_OPEN, position, bound)
            if section is None:
                return species
            entry, position = self.extract_species_info(html, section, bound)
            species.append(entry)

    def extract_species_info(self, html: str, position: int, bound: int):
        field = ChecklistField.SPECIES_LIST
        token, position = _extract(html, SPECIES_NAME_OPEN, SPAN_CLOSE, position, field, bound, "species name")
        name = clean_text(token)

        sequence = self.taxonomy.get_taxonomic_sequence(name)
        if sequence is None:
            raise ChecklistParseError(field, f"'{name}' not found in taxonomy")

        position = _advance(html, NUMBER_OBSERVED_LABEL, position, field, bound, f"count label for {name}")
        token, position = _extract(html, SPAN_OPEN, SPAN_CLOSE, position, field, bound, f"count for {name}")
        try:
            count = parse_species_count(token)
        except ValueError as e:
            raise ChecklistParseError(field, f"{name}: {e}") from e

        position = _advance(html, SPECIES_SECTION_CLOSE, position, field, bound, f"end of {name}")
        return SpeciesEntry(name=name, count=count, taxonomic_order=sequence), position
