"""
Pytest configuration and fixtures for the GEDCOM import/export package
"""

import shutil
import tempfile
from datetime import UTC, datetime
from pathlib import Path

import pytest

from vamsa_gedcom.shared.models import Gender, RelationshipType, VamsaPerson, VamsaRelationship


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)

@pytest.fixture
def sample_gedcom_data():
    """Two parents, one child and a marriage"""
    return """0 HEAD
1 SOUR TEST
1 GEDC
2 VERS 5.5.1
2 FORM LINEAGE-LINKED
1 CHAR UTF-8
0 @I1@ INDI
1 NAME John /Smith/
1 SEX M
1 BIRT
2 DATE 15 JAN 1950
2 PLAC London, England
1 OCCU Engineer
1 FAMS @F1@
0 @I2@ INDI
1 NAME Jane /Doe/
1 SEX F
1 BIRT
2 DATE 3 MAR 1952
1 FAMS @F1@
0 @I3@ INDI
1 NAME Jimmy /Smith/
1 SEX M
1 BIRT
2 DATE 10 JUN 1980
1 FAMC @F1@
0 @F1@ FAM
1 HUSB @I1@
1 WIFE @I2@
1 CHIL @I3@
1 MARR
2 DATE 10 JUN 1985
2 PLAC London
0 TRLR
"""

@pytest.fixture
def broken_reference_gedcom():
    """A family pointing at an individual that does not exist"""
    return """0 HEAD
1 GEDC
2 VERS 5.5.1
0 @I1@ INDI
1 NAME John /Smith/
1 FAMS @F1@
0 @F1@ FAM
1 HUSB @I1@
1 WIFE @I999@
0 TRLR
"""

@pytest.fixture
def sample_people():
    """Married couple with one child"""
    return [
        VamsaPerson(
            id="p-john", first_name="John", last_name="Smith", gender=Gender.MALE,
            date_of_birth=datetime(1950, 1, 15, tzinfo=UTC), birth_place="London",
            profession="Engineer", bio="Loved sailing"
        ),
        VamsaPerson(
            id="p-jane", first_name="Jane", last_name="Doe", gender=Gender.FEMALE,
            date_of_birth=datetime(1952, 3, 3, tzinfo=UTC),
            date_of_passing=datetime(2020, 11, 5, tzinfo=UTC), is_living=False
        ),
        VamsaPerson(id="p-jimmy", first_name="Jimmy", last_name="Smith", gender=Gender.MALE),
    ]

@pytest.fixture
def sample_relationships():
    """Relationships for sample_people"""
    marriage = datetime(1975, 6, 20, tzinfo=UTC)
    return [
        VamsaRelationship(id="r1", person_id="p-john", related_person_id="p-jane",
                          type=RelationshipType.SPOUSE, marriage_date=marriage),
        VamsaRelationship(id="r2", person_id="p-jane", related_person_id="p-john",
                          type=RelationshipType.SPOUSE, marriage_date=marriage),
        VamsaRelationship(id="r3", person_id="p-john", related_person_id="p-jimmy",
                          type=RelationshipType.PARENT),
        VamsaRelationship(id="r4", person_id="p-jimmy", related_person_id="p-john",
                          type=RelationshipType.CHILD),
        VamsaRelationship(id="r5", person_id="p-jane", related_person_id="p-jimmy",
                          type=RelationshipType.PARENT),
        VamsaRelationship(id="r6", person_id="p-jimmy", related_person_id="p-jane",
                          type=RelationshipType.CHILD),
    ]
