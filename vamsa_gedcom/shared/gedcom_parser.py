"""
GEDCOM parser for reading genealogy data from GEDCOM 5.5.1 and 7.0 text
"""

import re

from .gedcom_utils import GedcomDateParser, GedcomNameParser
from .logging_config import get_project_logger
from .models import (
    GEDCOM_VERSION_70,
    GEDCOM_VERSION_551,
    GedcomFile,
    GedcomLine,
    GedcomRecord,
    ParsedFamily,
    ParsedIndividual,
    ParsedName,
    ParsedRepository,
    ParsedSubmitter,
)


logger = get_project_logger(__name__)

LINE_PATTERN = re.compile(r'^\s*(\d+)\s+(?:(@[^@\s]+@)\s+)?([A-Za-z0-9_]+)(?:[ \t](.*))?$')
POINTER_PATTERN = re.compile(r'^@[^@\s]+@$')
LINE_BREAK_PATTERN = re.compile(r'\r\n|\r|\n')

CONTINUATION_TAGS = ('CONT', 'CONC')


class GedcomParseError(ValueError):
    """Raised when GEDCOM text is missing structure required to interpret it"""
    pass


class GEDCOMParser:
    """Parse GEDCOM text into records and typed individual/family views"""

    def parse(self, text: str) -> GedcomFile:
        """Parse GEDCOM text and return the bucketed file structure"""
        if text.startswith('\ufeff'):
            text = text[1:]

        roots = self._build_tree(LINE_BREAK_PATTERN.split(text))
        records = [self._make_record(root) for root in roots]

        header = next((r for r in records if r.tag == 'HEAD'), None)
        trailer = next((r for r in records if r.tag == 'TRLR'), None)

        if header is None:
            raise GedcomParseError("Missing required HEAD record")
        if trailer is None:
            raise GedcomParseError("Missing required TRLR record")

        gedcom_file = GedcomFile(header=header, trailer=trailer)
        for record in records:
            if record.tag == 'INDI':
                gedcom_file.individuals.append(record)
            elif record.tag == 'FAM':
                gedcom_file.families.append(record)
            elif record.tag == 'SUBM':
                gedcom_file.submitters.append(record)
            elif record.tag == 'SOUR':
                gedcom_file.sources.append(record)
            elif record.tag == 'REPO':
                gedcom_file.repositories.append(record)
            elif record.tag == 'OBJE':
                gedcom_file.objects.append(record)
            elif record.tag not in ('HEAD', 'TRLR'):
                gedcom_file.other.append(record)

        charset_line = header.first('CHAR')
        if charset_line and charset_line.value:
            gedcom_file.charset = charset_line.value

        gedc = header.first('GEDC')
        version_line = gedc.first_child('VERS') if gedc else None
        if version_line and version_line.value:
            gedcom_file.version = version_line.value
        gedcom_file.gedcom_version = self._detect_gedcom_version(gedcom_file.version)

        logger.info(
            f"Parsed GEDCOM {gedcom_file.gedcom_version}: "
            f"{len(gedcom_file.individuals)} individuals, {len(gedcom_file.families)} families"
        )
        return gedcom_file

    def _build_tree(self, raw_lines: list[str]) -> list[GedcomLine]:
        """Build level 0 line trees using a stack of open lines indexed by depth"""
        roots = []
        stack: list[GedcomLine] = []

        for number, raw in enumerate(raw_lines, 1):
            if not raw.strip():
                continue

            match = LINE_PATTERN.match(raw)
            if not match:
                logger.debug(f"Skipping malformed line {number}: {raw!r}")
                continue

            level = int(match.group(1))
            xref = match.group(2)
            tag = match.group(3)
            value = match.group(4) or ""

            if tag in CONTINUATION_TAGS:
                if level == 0 or len(stack) < level:
                    logger.debug(f"Skipping {tag} on line {number} with no open value")
                    continue
                target = stack[level - 1]
                if tag == 'CONT':
                    target.value += "\n" + value
                else:
                    target.value += value
                continue

            value = value.strip()
            pointer = None
            if POINTER_PATTERN.match(value):
                pointer = value
                value = ""

            line = GedcomLine(level=level, tag=tag, value=value, pointer=pointer, xref=xref)

            if level == 0:
                roots.append(line)
                stack = [line]
                continue

            if not stack:
                logger.debug(f"Skipping line {number} outside of any record")
                continue

            # A deeper jump than one level attaches to the deepest open line
            del stack[level:]
            stack[-1].children.append(line)
            stack.append(line)

        return roots

    def _make_record(self, root: GedcomLine) -> GedcomRecord:
        """Index a level 0 line tree as a record"""
        record = GedcomRecord(
            tag=root.tag,
            id=self._extract_id(root.xref),
            line=root
        )
        for child in root.children:
            record.tags.setdefault(child.tag, []).append(child)

        pending = [root]
        while pending:
            line = pending.pop()
            record.lines.append(line)
            pending.extend(reversed(line.children))

        return record

    def _detect_gedcom_version(self, version: str) -> str:
        """Map a GEDC VERS value to the supported 5.5.1/7.0 variants"""
        if version and version.strip().startswith('7'):
            return GEDCOM_VERSION_70
        return GEDCOM_VERSION_551

    def _extract_id(self, token: str | None) -> str | None:
        """Extract ID from a pointer token (e.g., @I001@ -> I001)"""
        if not token:
            return None
        match = re.search(r'@([^@]+)@', token)
        return match.group(1) if match else None

    def parse_date(self, value: str) -> str | None:
        """Normalize a GEDCOM date value to ISO form"""
        return GedcomDateParser.parse_date(value)

    def parse_name(self, value: str) -> ParsedName:
        """Split a GEDCOM NAME value"""
        return GedcomNameParser.parse_name(value)

    def parse_individual(self, record: GedcomRecord) -> ParsedIndividual:
        """Project an INDI record onto a ParsedIndividual"""
        return ParsedIndividual(
            id=record.id,
            names=[self.parse_name(line.value) for line in record.get('NAME')],
            sex=self._first_value(record, 'SEX'),
            birth_date=self._event_date(record, 'BIRT'),
            birth_place=self._event_place(record, 'BIRT'),
            death_date=self._event_date(record, 'DEAT'),
            death_place=self._event_place(record, 'DEAT'),
            occupation=self._first_value(record, 'OCCU'),
            notes=self._notes(record),
            families_as_spouse=self._pointers(record, 'FAMS'),
            families_as_child=self._pointers(record, 'FAMC')
        )

    def parse_family(self, record: GedcomRecord) -> ParsedFamily:
        """Project a FAM record onto a ParsedFamily"""
        husband_line = record.first('HUSB')
        wife_line = record.first('WIFE')

        return ParsedFamily(
            id=record.id,
            husband=husband_line.pointer_id if husband_line else None,
            wife=wife_line.pointer_id if wife_line else None,
            children=self._pointers(record, 'CHIL'),
            marriage_date=self._event_date(record, 'MARR'),
            marriage_place=self._event_place(record, 'MARR'),
            divorce_date=self._event_date(record, 'DIV'),
            notes=self._notes(record)
        )

    def parse_repository(self, record: GedcomRecord) -> ParsedRepository:
        """Project a REPO record onto a ParsedRepository

        CITY, STAE and CTRY are read from under ADDR, or from the record
        itself for files that put them at level 1.
        """
        return ParsedRepository(
            id=record.id,
            name=self._first_value(record, 'NAME') or "",
            address=self._first_value(record, 'ADDR'),
            city=self._address_part(record, 'CITY'),
            state=self._address_part(record, 'STAE'),
            country=self._address_part(record, 'CTRY'),
            phone=self._first_value(record, 'PHON'),
            email=self._first_value(record, 'EMAIL'),
            website=self._first_value(record, 'WWW'),
            notes=self._notes(record)
        )

    def parse_submitter(self, record: GedcomRecord) -> ParsedSubmitter:
        """Project a SUBM record onto a ParsedSubmitter"""
        return ParsedSubmitter(
            id=record.id,
            name=self._first_value(record, 'NAME') or "",
            address=self._first_value(record, 'ADDR'),
            phone=self._first_value(record, 'PHON'),
            email=self._first_value(record, 'EMAIL'),
            notes=self._notes(record)
        )

    def _event_date(self, record: GedcomRecord, event_tag: str) -> str | None:
        """First DATE under an event that normalizes to a valid date"""
        for event in record.get(event_tag):
            for child in event.children:
                if child.tag == 'DATE':
                    parsed = self.parse_date(child.value)
                    if parsed:
                        return parsed
        return None

    def _event_place(self, record: GedcomRecord, event_tag: str) -> str | None:
        for event in record.get(event_tag):
            place = event.first_child('PLAC')
            if place and place.value:
                return place.value
        return None

    def _first_value(self, record: GedcomRecord, tag: str) -> str | None:
        line = record.first(tag)
        if line is None or not line.value:
            return None
        return line.value

    def _address_part(self, record: GedcomRecord, tag: str) -> str | None:
        address = record.first('ADDR')
        part = address.first_child(tag) if address else None
        if part and part.value:
            return part.value
        return self._first_value(record, tag)

    def _notes(self, record: GedcomRecord) -> list[str]:
        return [line.value.strip() for line in record.get('NOTE') if line.value.strip()]

    def _pointers(self, record: GedcomRecord, tag: str) -> list[str]:
        return [line.pointer_id for line in record.get(tag) if line.pointer]
