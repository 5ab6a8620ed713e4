"""
Bidirectional mapping between GEDCOM records and Vamsa people/relationships
"""

import uuid
from datetime import UTC, datetime

from .gedcom_parser import GEDCOMParser
from .gedcom_utils import GedcomDateParser, GedcomNameParser
from .gedcom_validator import GedcomValidator
from .logging_config import get_project_logger
from .models import (
    GedcomFamilyData,
    GedcomFile,
    GedcomIndividualData,
    Gender,
    MapOptions,
    MappingError,
    MappingErrorType,
    MappingResult,
    ParsedFamily,
    ParsedIndividual,
    RelationshipType,
    VamsaPerson,
    VamsaRelationship,
)


logger = get_project_logger(__name__)

UNKNOWN_NAME = "Unknown"

GEDCOM_TO_GENDER = {
    'M': Gender.MALE,
    'F': Gender.FEMALE,
    'X': Gender.OTHER
}
GENDER_TO_GEDCOM = {gender: sex for sex, gender in GEDCOM_TO_GENDER.items()}


def generate_id() -> str:
    """Storage id for a mapped entity, never derived from a GEDCOM xref"""
    return str(uuid.uuid4())


def parse_iso_date(value: str | None) -> datetime | None:
    """Anchor a (possibly partial) ISO date to UTC midnight of its first day"""
    if not value:
        return None
    parts = [int(part) for part in value.split('-')]
    year = parts[0]
    month = parts[1] if len(parts) > 1 else 1
    day = parts[2] if len(parts) > 2 else 1
    try:
        return datetime(year, month, day, tzinfo=UTC)
    except ValueError:
        logger.debug(f"Date out of range: {value}")
        return None


def format_gedcom_date(value: datetime | None) -> str | None:
    """Format a stored date as GEDCOM "D MON YYYY" in UTC"""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return GedcomDateParser.format_date(value.year, value.month, value.day)


class GEDCOMMapper:
    """Translate between parsed GEDCOM files and Vamsa entities"""

    def __init__(self, parser: GEDCOMParser = None, validator: GedcomValidator = None):
        self.parser = parser or GEDCOMParser()
        self.validator = validator or GedcomValidator()

    # GEDCOM -> Vamsa

    def map_from_gedcom(self, gedcom_file: GedcomFile, options: MapOptions = None) -> MappingResult:
        """Convert a parsed GEDCOM file to people and relationships

        Problems are collected on the result rather than raised; the caller
        decides whether to persist a result that carries errors.
        """
        options = options or MapOptions()
        result = MappingResult()

        if not options.skip_validation:
            self._collect_validation(gedcom_file, options, result)

        # xref -> generated id, local to this call
        person_lookup: dict[str, str] = {}

        for record in gedcom_file.individuals:
            parsed = self.parser.parse_individual(record)
            person = self._map_individual(parsed)
            result.people.append(person)

            if not parsed.id:
                result.errors.append(MappingError(
                    type=MappingErrorType.INVALID_FORMAT,
                    message="Individual record without an xref cannot be referenced by families",
                    source='INDI',
                    field='xref'
                ))
                continue
            person_lookup[parsed.id] = person.id

        for record in gedcom_file.families:
            family = self.parser.parse_family(record)
            self._map_family(family, person_lookup, options, result)

        logger.info(
            f"Mapped {len(result.people)} people and {len(result.relationships)} relationships "
            f"with {len(result.errors)} errors"
        )
        return result

    def _collect_validation(self, gedcom_file: GedcomFile, options: MapOptions,
                            result: MappingResult) -> None:
        for issue in self.validator.validate(gedcom_file):
            demoted = options.ignore_missing_references and issue.code == 'broken_reference'
            if issue.is_error and not demoted:
                result.errors.append(MappingError(
                    type=MappingErrorType.INVALID_FORMAT,
                    message=issue.message,
                    field='structure'
                ))
            else:
                result.warnings.append(issue.message)

    def _map_individual(self, parsed: ParsedIndividual) -> VamsaPerson:
        primary = parsed.names[0] if parsed.names else None
        date_of_passing = parse_iso_date(parsed.death_date)

        return VamsaPerson(
            id=generate_id(),
            first_name=(primary.first_name if primary else None) or UNKNOWN_NAME,
            last_name=(primary.last_name if primary else None) or UNKNOWN_NAME,
            gender=GEDCOM_TO_GENDER.get(parsed.sex.upper()) if parsed.sex else None,
            date_of_birth=parse_iso_date(parsed.birth_date),
            date_of_passing=date_of_passing,
            birth_place=parsed.birth_place,
            profession=parsed.occupation,
            bio="\n\n".join(parsed.notes) or None,
            is_living=date_of_passing is None
        )

    def _map_family(self, family: ParsedFamily, person_lookup: dict[str, str],
                    options: MapOptions, result: MappingResult) -> None:
        family_label = family.id or "(no xref)"

        if not family.id:
            result.errors.append(MappingError(
                type=MappingErrorType.INVALID_FORMAT,
                message="Family record without an xref",
                source='FAM',
                field='xref'
            ))

        if not family.husband and not family.wife and not family.children:
            result.errors.append(MappingError(
                type=MappingErrorType.MAPPING_ERROR,
                message=f"Family {family_label} has no spouses or children",
                source='FAM',
                record_id=family.id
            ))
            return

        def resolve(xref: str | None, field: str) -> str | None:
            if not xref:
                return None
            person_id = person_lookup.get(xref)
            if person_id is None:
                if options.ignore_missing_references:
                    logger.debug(f"Dropping {field} {xref} of family {family_label}")
                else:
                    result.errors.append(MappingError(
                        type=MappingErrorType.BROKEN_REFERENCE,
                        message=f"Broken {field} reference in family {family_label}: {xref}",
                        source='FAM',
                        record_id=family.id,
                        field=field
                    ))
            return person_id

        husband_id = resolve(family.husband, 'HUSB')
        wife_id = resolve(family.wife, 'WIFE')

        if husband_id and husband_id == wife_id:
            result.errors.append(MappingError(
                type=MappingErrorType.MAPPING_ERROR,
                message=f"Family {family_label} lists {family.husband} as both HUSB and WIFE",
                source='FAM',
                record_id=family.id,
                field='WIFE'
            ))
            wife_id = None

        if husband_id and wife_id:
            marriage_date = parse_iso_date(family.marriage_date)
            divorce_date = parse_iso_date(family.divorce_date)
            for person_id, related_id in ((husband_id, wife_id), (wife_id, husband_id)):
                result.relationships.append(VamsaRelationship(
                    id=generate_id(),
                    person_id=person_id,
                    related_person_id=related_id,
                    type=RelationshipType.SPOUSE,
                    marriage_date=marriage_date,
                    divorce_date=divorce_date,
                    is_active=divorce_date is None
                ))

        parent_ids = [p for p in (husband_id, wife_id) if p]
        for child_xref in family.children:
            child_id = resolve(child_xref, 'CHIL')
            if child_id is None:
                continue
            for parent_id in parent_ids:
                result.relationships.append(VamsaRelationship(
                    id=generate_id(),
                    person_id=parent_id,
                    related_person_id=child_id,
                    type=RelationshipType.PARENT
                ))
                result.relationships.append(VamsaRelationship(
                    id=generate_id(),
                    person_id=child_id,
                    related_person_id=parent_id,
                    type=RelationshipType.CHILD
                ))

    # Vamsa -> GEDCOM

    def map_to_gedcom(self, people: list[VamsaPerson],
                      relationships: list[VamsaRelationship]) -> tuple[list[GedcomIndividualData], list[GedcomFamilyData]]:
        """Convert people and relationships to GEDCOM individual and family views

        Returns:
            (individuals, families) with fresh sequential @I<n>@ / @F<n>@ xrefs
        """
        id_to_xref: dict[str, str] = {}
        order: dict[str, int] = {}
        genders: dict[str, Gender | None] = {}
        individuals: dict[str, GedcomIndividualData] = {}

        for index, person in enumerate(people):
            if person.id in id_to_xref:
                logger.warning(f"Duplicate person id {person.id} skipped during export")
                continue
            xref = f"@I{len(id_to_xref) + 1}@"
            id_to_xref[person.id] = xref
            order[person.id] = index
            genders[person.id] = person.gender
            individuals[person.id] = self._map_person(person, xref)

        unions = self._collect_unions(relationships, id_to_xref)
        children_of = self._collect_children(relationships, id_to_xref)

        families = []
        for union in unions.values():
            husband_id, wife_id = self._assign_slots(union['members'], genders, order)
            family = GedcomFamilyData(
                xref=f"@F{len(families) + 1}@",
                husband=id_to_xref[husband_id],
                wife=id_to_xref[wife_id],
                marriage_date=format_gedcom_date(union['marriage_date']),
                divorce_date=format_gedcom_date(union['divorce_date'])
            )
            for member_id in (husband_id, wife_id):
                for child_id in children_of.get(member_id, []):
                    child_xref = id_to_xref[child_id]
                    if child_xref not in family.children:
                        family.children.append(child_xref)
            families.append(family)

        in_union = {member for union in unions.values() for member in union['members']}
        for parent_id in children_of:
            if parent_id in in_union:
                continue
            family = GedcomFamilyData(
                xref=f"@F{len(families) + 1}@",
                children=[id_to_xref[child_id] for child_id in children_of[parent_id]]
            )
            if genders.get(parent_id) == Gender.FEMALE:
                family.wife = id_to_xref[parent_id]
            else:
                family.husband = id_to_xref[parent_id]
            families.append(family)

        by_xref = {individual.xref: individual for individual in individuals.values()}
        for family in families:
            for spouse in (family.husband, family.wife):
                if spouse:
                    by_xref[spouse].families_as_spouse.append(family.xref)
            for child in family.children:
                by_xref[child].families_as_child.append(family.xref)

        return list(individuals.values()), families

    def _map_person(self, person: VamsaPerson, xref: str) -> GedcomIndividualData:
        return GedcomIndividualData(
            xref=xref,
            name=GedcomNameParser.format_name(person.first_name, person.last_name),
            sex=GENDER_TO_GEDCOM.get(person.gender) if person.gender else None,
            birth_date=format_gedcom_date(person.date_of_birth),
            birth_place=person.birth_place,
            death_date=format_gedcom_date(person.date_of_passing),
            occupation=person.profession,
            notes=[person.bio] if person.bio else []
        )

    def _collect_unions(self, relationships: list[VamsaRelationship],
                        id_to_xref: dict[str, str]) -> dict[frozenset, dict]:
        """Collapse reciprocal SPOUSE edges into unordered unions, first-seen order"""
        unions: dict[frozenset, dict] = {}
        for rel in relationships:
            if rel.type != RelationshipType.SPOUSE:
                continue
            if rel.person_id == rel.related_person_id:
                logger.warning(f"Self-referencing spouse relationship {rel.id} skipped")
                continue
            if rel.person_id not in id_to_xref or rel.related_person_id not in id_to_xref:
                logger.warning(f"Spouse relationship {rel.id} references an unknown person, skipped")
                continue

            key = frozenset((rel.person_id, rel.related_person_id))
            union = unions.setdefault(key, {
                'members': (rel.person_id, rel.related_person_id),
                'marriage_date': None,
                'divorce_date': None
            })
            if union['marriage_date'] is None:
                union['marriage_date'] = rel.marriage_date
            if union['divorce_date'] is None:
                union['divorce_date'] = rel.divorce_date
        return unions

    def _collect_children(self, relationships: list[VamsaRelationship],
                          id_to_xref: dict[str, str]) -> dict[str, list[str]]:
        """Parent id -> child ids from PARENT and CHILD edges, first-seen order"""
        children_of: dict[str, list[str]] = {}
        for rel in relationships:
            if rel.type == RelationshipType.PARENT:
                parent_id, child_id = rel.person_id, rel.related_person_id
            elif rel.type == RelationshipType.CHILD:
                parent_id, child_id = rel.related_person_id, rel.person_id
            else:
                continue
            if parent_id not in id_to_xref or child_id not in id_to_xref or parent_id == child_id:
                logger.warning(f"Parent/child relationship {rel.id} references an unknown person, skipped")
                continue
            children = children_of.setdefault(parent_id, [])
            if child_id not in children:
                children.append(child_id)
        return children_of

    def _assign_slots(self, members: tuple[str, str], genders: dict[str, Gender | None],
                      order: dict[str, int]) -> tuple[str, str]:
        """Pick (husband, wife) for a union

        Gender decides only for a MALE/FEMALE pair; otherwise the member that
        comes first in the people list takes the husband slot.
        """
        first, second = members
        if {genders.get(first), genders.get(second)} == {Gender.MALE, Gender.FEMALE}:
            return (first, second) if genders.get(first) == Gender.MALE else (second, first)
        return (first, second) if order[first] <= order[second] else (second, first)
