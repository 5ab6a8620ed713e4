"""
GEDCOM writer for exporting Vamsa people and relationships to GEDCOM files
"""

from .gedcom_formatter import GEDCOMFileWriter, GEDCOMGenerator
from .gedcom_mapper import GEDCOMMapper
from .logging_config import get_project_logger
from .models import GeneratorConfig, VamsaPerson, VamsaRelationship


logger = get_project_logger(__name__)


class GEDCOMWriter:
    """Write people and relationships to GEDCOM text or files"""

    def __init__(self, config: GeneratorConfig = None, mapper: GEDCOMMapper = None,
                 generator: GEDCOMGenerator = None):
        self.config = config or GeneratorConfig()
        self.mapper = mapper or GEDCOMMapper()
        self.generator = generator or GEDCOMGenerator()
        self.file_writer = GEDCOMFileWriter()

    def generate(self, people: list[VamsaPerson], relationships: list[VamsaRelationship],
                 config: GeneratorConfig = None) -> str:
        """Generate GEDCOM content as a string; config overrides the writer default"""
        individuals, families = self.mapper.map_to_gedcom(people, relationships)
        logger.info(f"Exporting {len(individuals)} individuals and {len(families)} families")
        return self.generator.generate(individuals, families, config or self.config)

    def write_gedcom(self, people: list[VamsaPerson], relationships: list[VamsaRelationship],
                     output_file: str = "family_tree.ged", config: GeneratorConfig = None) -> None:
        """Write people and relationships to a GEDCOM file"""
        content = self.generate(people, relationships, config)
        self.file_writer.write_gedcom_file(content, output_file)
        logger.info(f"GEDCOM file saved: {output_file}")
