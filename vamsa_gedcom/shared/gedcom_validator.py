"""
Structural and referential validation of parsed GEDCOM files
"""

from .gedcom_utils import GedcomDateParser
from .models import GEDCOM_VERSION_551, GedcomFile, GedcomRecord, Severity, ValidationIssue


INDIVIDUAL_POINTER_TAGS = ('HUSB', 'WIFE', 'CHIL')
FAMILY_POINTER_TAGS = ('FAMS', 'FAMC')
DATED_EVENTS = ('BIRT', 'DEAT', 'MARR', 'DIV')


class GedcomValidator:
    """Read-only pass producing severity-tagged issues for a parsed file

    Issues are advisory: the validator never raises and never changes the
    file, callers decide whether errors block an import.
    """

    def validate(self, gedcom_file: GedcomFile) -> list[ValidationIssue]:
        issues = []

        if gedcom_file.header is None:
            issues.append(self._error("Missing required HEAD record", 'missing_header'))
        if gedcom_file.trailer is None:
            issues.append(self._error("Missing required TRLR record", 'missing_trailer'))

        seen = set()
        for record in [*gedcom_file.individuals, *gedcom_file.families]:
            if not record.id:
                continue
            if record.id in seen:
                issues.append(self._error(f"Duplicate xref: {record.id}", 'duplicate_xref'))
            seen.add(record.id)

        person_ids = {r.id for r in gedcom_file.individuals if r.id}
        family_ids = {r.id for r in gedcom_file.families if r.id}

        for family in gedcom_file.families:
            issues.extend(self._check_pointers(family, 'family', INDIVIDUAL_POINTER_TAGS, person_ids))
        for person in gedcom_file.individuals:
            issues.extend(self._check_pointers(person, 'person', FAMILY_POINTER_TAGS, family_ids))

        for record in [*gedcom_file.individuals, *gedcom_file.families]:
            issues.extend(self._check_dates(record, gedcom_file.gedcom_version))

        return issues

    def _check_pointers(self, record: GedcomRecord, kind: str, tags: tuple,
                        targets: set[str]) -> list[ValidationIssue]:
        issues = []
        for tag in tags:
            for line in record.get(tag):
                if line.pointer and line.pointer_id not in targets:
                    issues.append(self._error(
                        f"Broken reference in {kind} {record.id}: {tag} {line.pointer} not found",
                        'broken_reference'
                    ))
        return issues

    def _check_dates(self, record: GedcomRecord, gedcom_version: str) -> list[ValidationIssue]:
        issues = []
        for event_tag in DATED_EVENTS:
            for event in record.get(event_tag):
                for child in event.children:
                    if child.tag != 'DATE' or not child.value:
                        continue
                    if GedcomDateParser.parse_date(child.value) is None:
                        issues.append(self._warning(
                            f"Unrecognized date in {record.tag} {record.id} {event_tag}: {child.value}",
                            'invalid_date'
                        ))
                    elif gedcom_version == GEDCOM_VERSION_551 and GedcomDateParser.is_iso_date(child.value) \
                            and '-' in child.value:
                        issues.append(self._warning(
                            f"ISO date in GEDCOM 5.5.1 file ({record.tag} {record.id} {event_tag}): {child.value}",
                            'invalid_date'
                        ))
        return issues

    @staticmethod
    def _error(message: str, code: str) -> ValidationIssue:
        return ValidationIssue(severity=Severity.ERROR, message=message, code=code)

    @staticmethod
    def _warning(message: str, code: str) -> ValidationIssue:
        return ValidationIssue(severity=Severity.WARNING, message=message, code=code)
