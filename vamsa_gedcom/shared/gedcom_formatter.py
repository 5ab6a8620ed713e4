"""
Pure GEDCOM 5.5.1 generation without file I/O operations
"""

from datetime import UTC, date, datetime

from .gedcom_utils import GedcomDateParser
from .logging_config import get_project_logger
from .models import GEDCOM_VERSION_551, GedcomFamilyData, GedcomIndividualData, GeneratorConfig


logger = get_project_logger(__name__)

SUBMITTER_XREF = "@SUBM1@"
# GEDCOM 5.5.1 caps a line at 255 characters including level and tag
MAX_VALUE_LENGTH = 248


class GEDCOMGenerator:
    """Format export-side GEDCOM views as GEDCOM 5.5.1 text"""

    def generate(self, individuals: list[GedcomIndividualData], families: list[GedcomFamilyData],
                 config: GeneratorConfig = None, today: date = None) -> str:
        """Generate a complete GEDCOM document ending in a newline"""
        config = config or GeneratorConfig()
        lines = []

        lines.extend(self._format_header(config, today or datetime.now(UTC).date()))
        lines.extend(self._format_submitter(config))

        for individual in individuals:
            lines.extend(self._format_individual(individual))

        for family in families:
            lines.extend(self._format_family(family))

        lines.extend(self._format_trailer())

        logger.info(f"Generated GEDCOM with {len(individuals)} individuals and {len(families)} families")
        return "\n".join(lines) + "\n"

    def _format_header(self, config: GeneratorConfig, today: date) -> list[str]:
        return [
            "0 HEAD",
            f"1 SOUR {config.source_program}",
            f"2 NAME {config.source_program}",
            "2 VERS 1.0",
            "1 DATE " + GedcomDateParser.format_date(today.year, today.month, today.day),
            "1 GEDC",
            f"2 VERS {GEDCOM_VERSION_551}",
            "2 FORM LINEAGE-LINKED",
            "1 CHAR UTF-8",
            f"1 SUBM {SUBMITTER_XREF}"
        ]

    def _format_submitter(self, config: GeneratorConfig) -> list[str]:
        return [
            f"0 {SUBMITTER_XREF} SUBM",
            *self._format_value(1, "NAME", config.submitter_name)
        ]

    def _format_trailer(self) -> list[str]:
        return ["0 TRLR"]

    def _format_individual(self, individual: GedcomIndividualData) -> list[str]:
        """Format an individual record"""
        lines = [f"0 {individual.xref} INDI"]
        lines.extend(self._format_value(1, "NAME", individual.name))

        if individual.sex:
            lines.append(f"1 SEX {individual.sex}")

        # Birth
        if individual.birth_date or individual.birth_place:
            lines.append("1 BIRT")
            if individual.birth_date:
                lines.append(f"2 DATE {individual.birth_date}")
            if individual.birth_place:
                lines.extend(self._format_value(2, "PLAC", individual.birth_place))

        # Death
        if individual.death_date or individual.death_place:
            lines.append("1 DEAT")
            if individual.death_date:
                lines.append(f"2 DATE {individual.death_date}")
            if individual.death_place:
                lines.extend(self._format_value(2, "PLAC", individual.death_place))

        if individual.occupation:
            lines.extend(self._format_value(1, "OCCU", individual.occupation))

        for note in individual.notes:
            lines.extend(self._format_value(1, "NOTE", note))

        for family_xref in individual.families_as_spouse:
            lines.append(f"1 FAMS {family_xref}")
        for family_xref in individual.families_as_child:
            lines.append(f"1 FAMC {family_xref}")

        return lines

    def _format_family(self, family: GedcomFamilyData) -> list[str]:
        """Format a family record"""
        lines = [f"0 {family.xref} FAM"]

        if family.husband:
            lines.append(f"1 HUSB {family.husband}")
        if family.wife:
            lines.append(f"1 WIFE {family.wife}")

        for child_xref in family.children:
            lines.append(f"1 CHIL {child_xref}")

        # Marriage event
        if family.marriage_date or family.marriage_place:
            lines.append("1 MARR")
            if family.marriage_date:
                lines.append(f"2 DATE {family.marriage_date}")
            if family.marriage_place:
                lines.extend(self._format_value(2, "PLAC", family.marriage_place))

        if family.divorce_date:
            lines.append("1 DIV")
            lines.append(f"2 DATE {family.divorce_date}")

        for note in family.notes:
            lines.extend(self._format_value(1, "NOTE", note))

        return lines

    def _format_value(self, level: int, tag: str, value: str) -> list[str]:
        """Emit a tagged value, folding newlines into CONT and long runs into CONC"""
        lines = []
        for index, segment in enumerate(value.split("\n")):
            chunks = self._split_long_value(segment)
            if index == 0:
                lines.append(self._format_line(level, tag, chunks[0]))
            else:
                lines.append(self._format_line(level + 1, "CONT", chunks[0]))
            for chunk in chunks[1:]:
                lines.append(self._format_line(level + 1, "CONC", chunk))
        return lines

    def _format_line(self, level: int, tag: str, value: str) -> str:
        return f"{level} {tag} {value}" if value else f"{level} {tag}"

    def _split_long_value(self, value: str, max_length: int = MAX_VALUE_LENGTH) -> list[str]:
        """Split a value into chunks of at most max_length characters

        Split points avoid whitespace on either side so readers that trim
        line values reassemble the original text.
        """
        chunks = []
        while len(value) > max_length:
            split_at = max_length
            while split_at > 1 and (value[split_at - 1].isspace() or value[split_at].isspace()):
                split_at -= 1
            if split_at <= 1:
                split_at = max_length
            chunks.append(value[:split_at])
            value = value[split_at:]
        chunks.append(value)
        return chunks


class GEDCOMFileWriter:
    """Handles GEDCOM file I/O operations"""

    @staticmethod
    def write_gedcom_file(content: str, output_file: str) -> None:
        """Write GEDCOM text to file"""
        with open(output_file, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)

    @staticmethod
    def read_gedcom_file(input_file: str) -> bytes:
        """Read raw GEDCOM bytes from file, decoding is left to the caller"""
        with open(input_file, 'rb') as f:
            return f.read()
