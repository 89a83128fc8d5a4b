# summary_report.py
from models import SummaryRecord
from species_lists import count_species
from time_utils import format_minutes

MILES_PER_KM = 0.621371
MAX_DISCORD_MSG_LEN = 2000
CODE_FENCE = "```"


def format_count(count: int) -> str:
    return "X" if count == 0 else str(count)


def format_summary(summary: SummaryRecord) -> str:
    species_count, other_taxa = count_species(summary.species)
    total_individuals = sum(s.count for s in summary.species)

    participants = str(len(summary.participants))
    if summary.includes_multiple_anonymous_contributors:
        participants += " (participant count may be inexact due to anonymous checklists)"

    species_line = str(species_count)
    if other_taxa:
        species_line += f" (+{other_taxa} other taxa)"

    lines = [
        "Summary of observations:",
        f"  Participants:    {participants}",
        f"  Total distance:  {summary.total_distance_km * MILES_PER_KM:.1f} miles",
        f"  Total time:      {format_minutes(summary.total_minutes)}",
        f"  # Locations:     {summary.distinct_location_count}",
        f"  # Species:       {species_line}",
        f"  # Individuals:   {total_individuals}",
        "",
        "  Species list:",
    ]

    name_width = max((len(s.name) for s in summary.species), default=0)
    count_width = max((len(format_count(s.count)) for s in summary.species), default=1)
    for s in summary.species:
        # Counts sit in a right-aligned column two spaces past the longest name
        lines.append(f"    {s.name.ljust(name_width)}  {format_count(s.count).rjust(count_width)}")

    return "\n".join(lines) + "\n"


def chunked_report_messages(report: str, max_len: int = MAX_DISCORD_MSG_LEN) -> list[str]:
    """
    Split a report into Discord messages (<=max_len chars), each wrapped
    in a code block so the species column stays aligned.
    """
    overhead = len(CODE_FENCE) * 2 + 2
    messages: list[str] = []
    current_lines: list[str] = []

    for line in report.rstrip("\n").split("\n"):
        line = line[:max_len - overhead]
        if sum(len(l) + 1 for l in current_lines) + len(line) + overhead > max_len:
            messages.append(f"{CODE_FENCE}\n" + "\n".join(current_lines) + f"\n{CODE_FENCE}")
            current_lines = []
        current_lines.append(line)

    if current_lines:
        messages.append(f"{CODE_FENCE}\n" + "\n".join(current_lines) + f"\n{CODE_FENCE}")

    return messages
