# mappers.py
from datetime import date
from models import ObservationMethod
from time_utils import encode_date_code, split_leading_number

KM_PER_MILE = 1.609344
NOT_COUNTED_TOKEN = "X"

# "Incidential" is the spelling the original marker matching used;
# checklist pages spell it "Incidental".  Both map to the same method.
_METHODS = {
    "Traveling": ObservationMethod.TRAVELING,
    "Stationary": ObservationMethod.STATIONARY,
    "Incidental": ObservationMethod.INCIDENTAL,
    "Incidential": ObservationMethod.INCIDENTAL,
}


def parse_checklist_date(token: str) -> date:
    """Checklist pages carry 'YYYY-MM-DD', sometimes followed by 'THH:MM'. Keep the date only."""
    parts = token.strip().split("T")[0].split("-")
    if len(parts) != 3:
        raise ValueError(f"Expected year-month-day, got '{token}'")
    year, month, day = (int(p) for p in parts)
    encode_date_code(year, month, day)
    return date(year, month, day)


def map_observation_method(token: str) -> ObservationMethod:
    return _METHODS.get(token.strip(), ObservationMethod.OTHER)


def parse_species_count(token: str) -> int:
    token = token.strip()
    if token == NOT_COUNTED_TOKEN:
        return 0
    if not token.isdigit():
        raise ValueError(f"Invalid species count '{token}'")
    return int(token)


def parse_distance_km(token: str) -> float:
    """'2.5 mi' -> 4.02336, '3 km' -> 3.0. Other units raise ValueError."""
    value, unit, _ = split_leading_number(token)
    if unit.startswith("mi"):
        return value * KM_PER_MILE
    if unit.startswith("km"):
        return value
    raise ValueError(f"Unexpected distance unit '{unit}' in '{token}'")
