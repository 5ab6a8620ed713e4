"""
Tests for GEDCOM and Vamsa data models
"""

from datetime import UTC, datetime

import pytest

from vamsa_gedcom.shared.models import (
    GedcomLine,
    Gender,
    MappingError,
    MappingErrorType,
    RelationshipType,
    Severity,
    ValidationIssue,
    VamsaPerson,
    VamsaRelationship,
)


def test_gedcom_line_pointer_id():
    """Test pointer ids drop the surrounding @"""
    line = GedcomLine(level=1, tag="HUSB", pointer="@I1@")

    assert line.pointer_id == "I1"
    assert GedcomLine(level=1, tag="NAME", value="A /B/").pointer_id is None

def test_gedcom_line_first_child():
    """Test direct child lookup"""
    birth = GedcomLine(level=1, tag="BIRT", children=[
        GedcomLine(level=2, tag="DATE", value="1900"),
        GedcomLine(level=2, tag="PLAC", value="Delft"),
    ])

    assert birth.first_child("PLAC").value == "Delft"
    assert birth.first_child("NOTE") is None

def test_validation_issue_is_error():
    """Test severity helpers"""
    assert ValidationIssue(Severity.ERROR, "x").is_error
    assert not ValidationIssue(Severity.WARNING, "x").is_error

def test_mapping_error_to_dict():
    """Test mapping errors serialize with string types"""
    error = MappingError(MappingErrorType.BROKEN_REFERENCE, "Broken", source="FAM", record_id="F1", field="WIFE")

    assert error.to_dict() == {
        'type': 'broken_reference',
        'message': 'Broken',
        'source': 'FAM',
        'record_id': 'F1',
        'field': 'WIFE'
    }

def test_person_full_name():
    """Test full name construction"""
    person = VamsaPerson(id="p1", first_name="Jan", last_name="Jansen")
    assert person.full_name == "Jan Jansen"

def test_person_dict_round_trip():
    """Test persons survive JSON-style serialization"""
    person = VamsaPerson(
        id="p1", first_name="Jan", last_name="Jansen", gender=Gender.MALE,
        date_of_birth=datetime(1800, 1, 1, tzinfo=UTC),
        date_of_passing=datetime(1870, 12, 31, tzinfo=UTC),
        birth_place="Amsterdam", profession="Baker", bio="Notes", is_living=False
    )

    data = person.to_dict()
    assert data['gender'] == "MALE"
    assert data['date_of_birth'] == "1800-01-01"
    assert VamsaPerson.from_dict(data) == person

def test_person_from_dict_defaults():
    """Test missing values fall back to defaults"""
    person = VamsaPerson.from_dict({'id': 'p1'})

    assert person.first_name == "Unknown"
    assert person.last_name == "Unknown"
    assert person.gender is None
    assert person.is_living is True

def test_person_from_dict_missing_id():
    """Test id is required"""
    with pytest.raises(KeyError):
        VamsaPerson.from_dict({'first_name': 'Jan'})

def test_person_from_dict_invalid_gender():
    """Test unknown gender values are rejected"""
    with pytest.raises(ValueError):
        VamsaPerson.from_dict({'id': 'p1', 'gender': 'ROBOT'})

def test_relationship_dict_round_trip():
    """Test relationships survive JSON-style serialization"""
    relationship = VamsaRelationship(
        id="r1", person_id="p1", related_person_id="p2", type=RelationshipType.SPOUSE,
        marriage_date=datetime(1825, 6, 15, tzinfo=UTC),
        divorce_date=datetime(1830, 1, 1, tzinfo=UTC), is_active=False
    )

    data = relationship.to_dict()
    assert data['type'] == "SPOUSE"
    assert VamsaRelationship.from_dict(data) == relationship

def test_relationship_is_active_follows_divorce():
    """Test is_active defaults from the divorce date"""
    relationship = VamsaRelationship.from_dict({
        'id': 'r1', 'person_id': 'p1', 'related_person_id': 'p2',
        'type': 'SPOUSE', 'divorce_date': '1830-01-01'
    })
    assert relationship.is_active is False
