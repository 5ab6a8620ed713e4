"""
GEDCOM service for the CLI and for callers embedding import/export
"""

from datetime import UTC, date, datetime
from pathlib import Path

from vamsa_gedcom.services.exceptions import ValidationError, handle_service_exceptions
from vamsa_gedcom.shared import (
    GEDCOMGenerator,
    GEDCOMMapper,
    GEDCOMParser,
    GedcomParseError,
    GedcomValidator,
    GEDCOMWriter,
    decode_gedcom,
)
from vamsa_gedcom.shared.logging_config import get_project_logger
from vamsa_gedcom.shared.models import (
    GedcomFile,
    GeneratorConfig,
    MapOptions,
    MappingErrorType,
    MappingResult,
    RelationshipType,
    VamsaPerson,
    VamsaRelationship,
)


logger = get_project_logger(__name__)

GEDCOM_EXTENSION = '.ged'
CRITICAL_MAPPING_ERRORS = (MappingErrorType.BROKEN_REFERENCE, MappingErrorType.INVALID_FORMAT)


class GedcomService:
    """Service for validating, importing and exporting GEDCOM data

    Persistence is left to the caller: imports return mapped entities and
    exports take them as arguments.
    """

    def __init__(self):
        self.logger = get_project_logger(__name__)
        self.parser = GEDCOMParser()
        self.validator = GedcomValidator()
        self.mapper = GEDCOMMapper(self.parser, self.validator)
        self.generator = GEDCOMGenerator()
        self.writer = GEDCOMWriter(mapper=self.mapper, generator=self.generator)

    def parse(self, content: str | bytes) -> GedcomFile:
        """Parse GEDCOM text or raw bytes; raises GedcomParseError"""
        if isinstance(content, bytes):
            content = decode_gedcom(content)
        return self.parser.parse(content)

    def validate_structure(self, gedcom_file: GedcomFile) -> dict:
        """Validate a parsed file and preview what an import would create"""
        issues = self.validator.validate(gedcom_file)
        mapped = self.mapper.map_from_gedcom(gedcom_file, MapOptions(skip_validation=True))

        errors = [
            {"message": issue.message,
             "type": "validation_error" if issue.is_error else "validation_warning"}
            for issue in issues
        ]
        errors.extend({"message": error.message, "type": "mapping_error"} for error in mapped.errors)

        return {
            "valid": not any(issue.is_error for issue in issues),
            "errors": errors,
            "preview": {
                "people_count": len(mapped.people),
                "families_count": self._count_families(mapped)
            }
        }

    def validate_import_prerequisites(self, gedcom_file: GedcomFile) -> dict:
        """Check a parsed file for errors that should block an import"""
        structural = [issue for issue in self.validator.validate(gedcom_file) if issue.is_error]
        if structural:
            return {
                "valid": False,
                "errors": [{"message": issue.message, "type": "validation_error"} for issue in structural]
            }

        mapped = self.mapper.map_from_gedcom(gedcom_file, MapOptions(skip_validation=True))
        critical = [error for error in mapped.errors if error.type in CRITICAL_MAPPING_ERRORS]
        if critical:
            return {
                "valid": False,
                "errors": [{"message": error.message, "type": "mapping_error"} for error in critical]
            }

        return {"valid": True, "errors": []}

    def validate_import(self, file_name: str, content: str | bytes) -> dict:
        """Validate an uploaded file by name and content; never raises"""
        if not file_name or not file_name.lower().endswith(GEDCOM_EXTENSION):
            return {
                "valid": False,
                "errors": [{"message": "File must be a GEDCOM file (.ged)", "type": "validation_error"}]
            }

        try:
            gedcom_file = self.parse(content)
        except (GedcomParseError, UnicodeDecodeError) as e:
            self.logger.warning(f"Rejected {file_name}: {e}")
            return {
                "valid": False,
                "errors": [{"message": f"Failed to parse GEDCOM file: {e}", "type": "validation_error"}]
            }

        return self.validate_structure(gedcom_file)

    @handle_service_exceptions(logger)
    def map_gedcom(self, content: str | bytes, options: MapOptions = None) -> MappingResult:
        """Parse and map GEDCOM content to people and relationships"""
        gedcom_file = self.parse(content)
        return self.mapper.map_from_gedcom(gedcom_file, options)

    @handle_service_exceptions(logger)
    def import_gedcom(self, content: str | bytes, options: MapOptions = None) -> dict:
        """Import GEDCOM content, returning serializable entities for the caller to persist"""
        self.logger.info("Starting GEDCOM import")
        result = self.map_gedcom(content, options)

        statistics = self.calculate_statistics(result)
        self.logger.info(
            f"GEDCOM import mapped {statistics['people_count']} people "
            f"with {statistics['error_count']} errors"
        )

        return {
            "success": not result.errors,
            "message": "GEDCOM import completed" if not result.errors
            else f"GEDCOM import completed with {len(result.errors)} errors",
            "people": [person.to_dict() for person in result.people],
            "relationships": [relationship.to_dict() for relationship in result.relationships],
            "errors": [error.to_dict() for error in result.errors],
            "warnings": list(result.warnings),
            "statistics": statistics
        }

    @handle_service_exceptions(logger)
    def export_gedcom(self, people: list[VamsaPerson], relationships: list[VamsaRelationship],
                      config: GeneratorConfig = None) -> str:
        """Export people and relationships as GEDCOM 5.5.1 text"""
        if people is None or relationships is None:
            raise ValidationError("People and relationships are required for export")

        return self.writer.generate(people, relationships, config)

    @handle_service_exceptions(logger)
    def read_gedcom_file(self, path: str | Path) -> str:
        """Read and decode a GEDCOM file from disk"""
        return decode_gedcom(self.writer.file_writer.read_gedcom_file(str(path)))

    @handle_service_exceptions(logger)
    def write_gedcom_file(self, content: str, path: str | Path) -> None:
        self.writer.file_writer.write_gedcom_file(content, str(path))
        self.logger.info(f"GEDCOM file saved: {path}")

    def calculate_statistics(self, result: MappingResult) -> dict:
        """Summary counts for a mapping result"""
        return {
            "people_count": len(result.people),
            "relationship_count": len(result.relationships),
            "spousal_relationships": sum(
                1 for r in result.relationships if r.type == RelationshipType.SPOUSE
            ),
            "warning_count": len(result.warnings),
            "error_count": len(result.errors)
        }

    def format_gedcom_file_name(self, today: date = None) -> str:
        """Export file name, e.g. family-tree-2025-01-15.ged"""
        today = today or datetime.now(UTC).date()
        return f"family-tree-{today.isoformat()}{GEDCOM_EXTENSION}"

    def _count_families(self, result: MappingResult) -> int:
        spouse_edges = sum(1 for r in result.relationships if r.type == RelationshipType.SPOUSE)
        return round(spouse_edges / 2)


# Global service instance
gedcom_service = GedcomService()
