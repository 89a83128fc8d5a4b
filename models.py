# models.py
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

ANONYMOUS_PARTICIPANT = "Anonymous eBirder"


class ObservationMethod(str, Enum):
    TRAVELING = "Traveling"
    STATIONARY = "Stationary"
    INCIDENTAL = "Incidental"
    OTHER = "Other"


class TaxonCategory(str, Enum):
    SPECIES = "species"
    HYBRID = "hybrid"
    SPUH = "spuh"
    SLASH = "slash"
    ISSF = "issf"  # identifiable sub-specific group
    INTERGRADE = "intergrade"
    DOMESTIC = "domestic"
    FORM = "form"


class ChecklistField(str, Enum):
    DATE = "date"
    LOCATION = "location"
    PARTICIPANTS = "participants"
    METHOD = "method"
    DURATION = "duration"
    DISTANCE = "distance"
    SPECIES_LIST = "species-list"


@dataclass
class SpeciesEntry:
    name: str
    count: int  # 0 means present but not counted ("X")
    taxonomic_order: int


@dataclass
class ChecklistRecord:
    identifier: str
    date: date
    location: str
    participants: list[str]
    observation_method: ObservationMethod
    duration_minutes: float
    distance_km: float
    species: list[SpeciesEntry] = field(default_factory=list)


@dataclass
class TaxonomyEntry:
    sequence: int
    category: TaxonCategory
    species_code: str
    common_name: str
    scientific_name: str = ""
    order: str = ""
    family: str = ""
    species_group: str = ""
    report_as: str = ""


@dataclass
class SummaryRecord:
    participants: list[str] = field(default_factory=list)
    includes_multiple_anonymous_contributors: bool = False
    total_distance_km: float = 0.0
    total_minutes: float = 0.0
    distinct_location_count: int = 0
    species: list[SpeciesEntry] = field(default_factory=list)


@dataclass
class CompilationResult:
    summary: SummaryRecord
    warnings: list[str] = field(default_factory=list)
    identifiers: list[str] = field(default_factory=list)
