"""
Tests for the GEDCOM service layer
"""

from datetime import date
from unittest.mock import patch

import pytest

from vamsa_gedcom.services.exceptions import NotFoundError, ParseError, ValidationError
from vamsa_gedcom.services.gedcom_service import GedcomService
from vamsa_gedcom.shared.models import GeneratorConfig, MapOptions, MappingResult, RelationshipType


@pytest.fixture
def service():
    return GedcomService()


class TestGedcomServiceValidation:
    """Test validation helpers"""

    def test_validate_structure_preview(self, service, sample_gedcom_data):
        """Test a valid file reports counts"""
        result = service.validate_structure(service.parse(sample_gedcom_data))

        assert result['valid'] is True
        assert result['errors'] == []
        assert result['preview'] == {'people_count': 3, 'families_count': 1}

    def test_validate_structure_broken_reference(self, service, broken_reference_gedcom):
        """Test broken references invalidate the file"""
        result = service.validate_structure(service.parse(broken_reference_gedcom))

        assert result['valid'] is False
        types = {error['type'] for error in result['errors']}
        assert types == {'validation_error', 'mapping_error'}

    def test_prerequisites_pass(self, service, sample_gedcom_data):
        """Test a clean file is ready for import"""
        assert service.validate_import_prerequisites(service.parse(sample_gedcom_data)) == {
            'valid': True, 'errors': []
        }

    def test_prerequisites_structural_errors(self, service, broken_reference_gedcom):
        """Test structural errors are reported before mapping"""
        result = service.validate_import_prerequisites(service.parse(broken_reference_gedcom))

        assert result['valid'] is False
        assert all(error['type'] == 'validation_error' for error in result['errors'])

    def test_prerequisites_ignore_non_critical_mapping_errors(self, service):
        """Test an empty family does not block import"""
        result = service.validate_import_prerequisites(service.parse("0 HEAD\n0 @F1@ FAM\n0 TRLR\n"))
        assert result['valid'] is True

    def test_prerequisites_critical_mapping_errors(self, service):
        """Test invalid_format mapping errors block import"""
        result = service.validate_import_prerequisites(service.parse("0 HEAD\n0 INDI\n0 TRLR\n"))

        assert result['valid'] is False
        assert result['errors'][0]['type'] == 'mapping_error'

    def test_validate_import_rejects_extension(self, service, sample_gedcom_data):
        """Test files must have a .ged extension"""
        result = service.validate_import("family.txt", sample_gedcom_data)

        assert result['valid'] is False
        assert ".ged" in result['errors'][0]['message']

    def test_validate_import_parse_failure(self, service):
        """Test parse failures are reported, not raised"""
        result = service.validate_import("family.GED", "0 @I1@ INDI\n")

        assert result['valid'] is False
        assert "HEAD" in result['errors'][0]['message']

    def test_validate_import_accepts_bytes(self, service, sample_gedcom_data):
        """Test raw uploaded bytes are decoded"""
        result = service.validate_import("family.ged", sample_gedcom_data.encode('utf-8'))
        assert result['valid'] is True


class TestGedcomServiceImportExport:
    """Test import and export flows"""

    def test_import_gedcom(self, service, sample_gedcom_data):
        """Test import returns serializable entities"""
        result = service.import_gedcom(sample_gedcom_data)

        assert result['success'] is True
        assert len(result['people']) == 3
        assert len(result['relationships']) == 6
        assert result['people'][0]['first_name'] == "John"
        assert result['people'][0]['date_of_birth'] == "1950-01-15"
        assert result['statistics']['spousal_relationships'] == 2

    def test_import_with_errors(self, service, broken_reference_gedcom):
        """Test import reports errors without raising"""
        result = service.import_gedcom(broken_reference_gedcom)

        assert result['success'] is False
        assert any(error['type'] == 'broken_reference' for error in result['errors'])

    def test_import_with_options(self, service, broken_reference_gedcom):
        """Test options are passed through to the mapper"""
        result = service.import_gedcom(broken_reference_gedcom, MapOptions(ignore_missing_references=True))
        assert result['success'] is True

    def test_import_invalid_content_raises_parse_error(self, service):
        """Test unparseable content becomes a ParseError"""
        with pytest.raises(ParseError):
            service.import_gedcom("not gedcom at all")

    def test_export_gedcom(self, service, sample_people, sample_relationships):
        """Test export produces GEDCOM text"""
        text = service.export_gedcom(sample_people, sample_relationships)

        assert text.startswith("0 HEAD\n")
        assert "0 @I1@ INDI" in text
        assert "0 @F1@ FAM" in text
        assert text.endswith("0 TRLR\n")

    def test_export_uses_writer(self, service, sample_people, sample_relationships):
        """Test export is delegated to the shared writer with the given config"""
        config = GeneratorConfig(source_program="ServiceTest")

        with patch.object(service.writer, 'generate', return_value="0 HEAD\n0 TRLR\n") as mock_generate:
            assert service.export_gedcom(sample_people, sample_relationships, config) == "0 HEAD\n0 TRLR\n"

        mock_generate.assert_called_once_with(sample_people, sample_relationships, config)

    def test_writer_shares_mapper(self, service):
        """Test the writer maps with the service's own mapper"""
        assert service.writer.mapper is service.mapper
        assert service.writer.generator is service.generator

    def test_export_requires_inputs(self, service):
        """Test missing inputs are a validation error"""
        with pytest.raises(ValidationError):
            service.export_gedcom(None, [])

    def test_export_wraps_unexpected_value_errors(self, service, sample_people):
        """Test ValueError from collaborators is converted"""
        with patch.object(service.mapper, 'map_to_gedcom', side_effect=ValueError("bad date")):
            with pytest.raises(ValidationError, match="bad date"):
                service.export_gedcom(sample_people, [])

    def test_read_gedcom_file(self, service, temp_dir, sample_gedcom_data):
        """Test files are read and decoded"""
        path = temp_dir / "tree.ged"
        path.write_bytes(sample_gedcom_data.encode('utf-8'))

        assert service.read_gedcom_file(path) == sample_gedcom_data

    def test_read_missing_file(self, service, temp_dir):
        """Test a missing file becomes NotFoundError"""
        with pytest.raises(NotFoundError):
            service.read_gedcom_file(temp_dir / "missing.ged")

    def test_write_gedcom_file(self, service, temp_dir):
        """Test content is written to disk"""
        path = temp_dir / "out.ged"
        service.write_gedcom_file("0 HEAD\n0 TRLR\n", path)
        assert path.read_text(encoding='utf-8') == "0 HEAD\n0 TRLR\n"


class TestGedcomServiceHelpers:
    """Test statistics and naming helpers"""

    def test_calculate_statistics(self, service, sample_gedcom_data):
        """Test statistics count people, edges, warnings and errors"""
        result = service.map_gedcom(sample_gedcom_data)

        assert service.calculate_statistics(result) == {
            'people_count': 3,
            'relationship_count': 6,
            'spousal_relationships': 2,
            'warning_count': 0,
            'error_count': 0
        }

    def test_calculate_statistics_empty(self, service):
        """Test statistics of an empty result"""
        stats = service.calculate_statistics(MappingResult())
        assert all(value == 0 for value in stats.values())

    def test_format_gedcom_file_name(self, service):
        """Test export file names carry the date"""
        assert service.format_gedcom_file_name(date(2025, 1, 15)) == "family-tree-2025-01-15.ged"

    def test_format_gedcom_file_name_default(self, service):
        """Test the default file name uses today's date"""
        name = service.format_gedcom_file_name()
        assert name.startswith("family-tree-")
        assert name.endswith(".ged")

    def test_families_count_rounds_spouse_edges(self, service):
        """Test families are counted from spouse edge pairs"""
        result = service.map_gedcom("\n".join([
            "0 HEAD",
            "0 @I1@ INDI",
            "0 @I2@ INDI",
            "0 @F1@ FAM",
            "1 HUSB @I1@",
            "1 WIFE @I2@",
            "0 TRLR",
        ]))
        assert len([r for r in result.relationships if r.type == RelationshipType.SPOUSE]) == 2
        assert service._count_families(result) == 1
