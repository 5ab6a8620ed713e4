"""
Shared data models for GEDCOM import and export
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


GEDCOM_VERSION_551 = "5.5.1"
GEDCOM_VERSION_70 = "7.0"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class RelationshipType(str, Enum):
    SPOUSE = "SPOUSE"
    PARENT = "PARENT"
    CHILD = "CHILD"


class MappingErrorType(str, Enum):
    BROKEN_REFERENCE = "broken_reference"
    INVALID_FORMAT = "invalid_format"
    MAPPING_ERROR = "mapping_error"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


# Raw GEDCOM structure

@dataclass
class GedcomLine:
    """One GEDCOM line after CONT/CONC folding"""
    level: int
    tag: str
    value: str = ""
    pointer: str | None = None  # "@I1@" style value
    xref: str | None = None  # level 0 record identifier, "@I1@"
    children: list['GedcomLine'] = field(default_factory=list)

    @property
    def pointer_id(self) -> str | None:
        """Pointer with the surrounding @ removed"""
        return self.pointer.strip('@') if self.pointer else None

    def first_child(self, tag: str) -> 'GedcomLine | None':
        """First direct child line with the given tag"""
        for child in self.children:
            if child.tag == tag:
                return child
        return None


@dataclass
class GedcomRecord:
    """A level 0 record with its nested lines"""
    tag: str
    id: str | None
    line: GedcomLine
    tags: dict[str, list[GedcomLine]] = field(default_factory=dict)
    lines: list[GedcomLine] = field(default_factory=list)

    def get(self, tag: str) -> list[GedcomLine]:
        """All level 1 lines with the given tag, in file order"""
        return self.tags.get(tag, [])

    def first(self, tag: str) -> GedcomLine | None:
        lines = self.tags.get(tag)
        return lines[0] if lines else None


@dataclass
class GedcomFile:
    """Parsed GEDCOM file bucketed by record type"""
    header: GedcomRecord | None
    trailer: GedcomRecord | None
    individuals: list[GedcomRecord] = field(default_factory=list)
    families: list[GedcomRecord] = field(default_factory=list)
    charset: str = "UTF-8"
    version: str = GEDCOM_VERSION_551
    gedcom_version: str = GEDCOM_VERSION_551
    submitters: list[GedcomRecord] = field(default_factory=list)
    sources: list[GedcomRecord] = field(default_factory=list)
    repositories: list[GedcomRecord] = field(default_factory=list)
    objects: list[GedcomRecord] = field(default_factory=list)
    other: list[GedcomRecord] = field(default_factory=list)


# Parsed views

@dataclass
class ParsedName:
    first_name: str | None = None
    last_name: str | None = None


@dataclass
class ParsedIndividual:
    """Typed projection of an INDI record"""
    id: str | None
    names: list[ParsedName] = field(default_factory=list)
    sex: str | None = None
    birth_date: str | None = None
    birth_place: str | None = None
    death_date: str | None = None
    death_place: str | None = None
    occupation: str | None = None
    notes: list[str] = field(default_factory=list)
    families_as_spouse: list[str] = field(default_factory=list)
    families_as_child: list[str] = field(default_factory=list)


@dataclass
class ParsedFamily:
    """Typed projection of a FAM record"""
    id: str | None
    husband: str | None = None
    wife: str | None = None
    children: list[str] = field(default_factory=list)
    marriage_date: str | None = None
    marriage_place: str | None = None
    divorce_date: str | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class ParsedRepository:
    """Typed projection of a REPO record"""
    id: str | None
    name: str = ""
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class ParsedSubmitter:
    """Typed projection of a SUBM record"""
    id: str | None
    name: str = ""
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: list[str] = field(default_factory=list)


# Diagnostics

@dataclass
class ValidationIssue:
    severity: Severity
    message: str
    code: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


@dataclass
class MappingError:
    type: MappingErrorType
    message: str
    source: str | None = None  # INDI or FAM
    record_id: str | None = None
    field: str | None = None

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'message': self.message,
            'source': self.source,
            'record_id': self.record_id,
            'field': self.field
        }


# Application entities

def _date_to_str(value: datetime | None) -> str | None:
    return value.date().isoformat() if value else None


def _date_from_str(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass
class VamsaPerson:
    """Represents a person in the family tree"""
    id: str
    first_name: str
    last_name: str
    gender: Gender | None = None
    date_of_birth: datetime | None = None
    date_of_passing: datetime | None = None
    birth_place: str | None = None
    profession: str | None = None
    bio: str | None = None
    is_living: bool = True

    @property
    def full_name(self) -> str:
        return " ".join(filter(None, [self.first_name, self.last_name]))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'gender': self.gender.value if self.gender else None,
            'date_of_birth': _date_to_str(self.date_of_birth),
            'date_of_passing': _date_to_str(self.date_of_passing),
            'birth_place': self.birth_place,
            'profession': self.profession,
            'bio': self.bio,
            'is_living': self.is_living
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'VamsaPerson':
        date_of_passing = _date_from_str(data.get('date_of_passing'))
        return cls(
            id=data['id'],
            first_name=data.get('first_name') or "Unknown",
            last_name=data.get('last_name') or "Unknown",
            gender=Gender(data['gender']) if data.get('gender') else None,
            date_of_birth=_date_from_str(data.get('date_of_birth')),
            date_of_passing=date_of_passing,
            birth_place=data.get('birth_place'),
            profession=data.get('profession'),
            bio=data.get('bio'),
            is_living=data.get('is_living', date_of_passing is None)
        )


@dataclass
class VamsaRelationship:
    """Directed relationship edge between two people"""
    id: str
    person_id: str
    related_person_id: str
    type: RelationshipType
    marriage_date: datetime | None = None
    divorce_date: datetime | None = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'person_id': self.person_id,
            'related_person_id': self.related_person_id,
            'type': self.type.value,
            'marriage_date': _date_to_str(self.marriage_date),
            'divorce_date': _date_to_str(self.divorce_date),
            'is_active': self.is_active
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'VamsaRelationship':
        divorce_date = _date_from_str(data.get('divorce_date'))
        return cls(
            id=data['id'],
            person_id=data['person_id'],
            related_person_id=data['related_person_id'],
            type=RelationshipType(data['type']),
            marriage_date=_date_from_str(data.get('marriage_date')),
            divorce_date=divorce_date,
            is_active=data.get('is_active', divorce_date is None)
        )


# Mapping inputs and outputs

@dataclass
class MapOptions:
    ignore_missing_references: bool = False
    skip_validation: bool = False


@dataclass
class MappingResult:
    people: list[VamsaPerson] = field(default_factory=list)
    relationships: list[VamsaRelationship] = field(default_factory=list)
    errors: list[MappingError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class GedcomIndividualData:
    """Export-side view of one INDI record"""
    xref: str
    name: str
    sex: str | None = None
    birth_date: str | None = None
    birth_place: str | None = None
    death_date: str | None = None
    death_place: str | None = None
    occupation: str | None = None
    notes: list[str] = field(default_factory=list)
    families_as_spouse: list[str] = field(default_factory=list)
    families_as_child: list[str] = field(default_factory=list)


@dataclass
class GedcomFamilyData:
    """Export-side view of one FAM record"""
    xref: str
    husband: str | None = None
    wife: str | None = None
    children: list[str] = field(default_factory=list)
    marriage_date: str | None = None
    marriage_place: str | None = None
    divorce_date: str | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class GeneratorConfig:
    source_program: str = "vamsa"
    submitter_name: str = "Vamsa User"
