"""
Shared GEDCOM import/export utilities
"""

from .encoding import ansel_to_unicode, decode_gedcom, detect_encoding, unicode_to_ansel
from .gedcom_formatter import GEDCOMFileWriter, GEDCOMGenerator
from .gedcom_mapper import GEDCOMMapper
from .gedcom_parser import GEDCOMParser, GedcomParseError
from .gedcom_utils import GedcomDateParser, GedcomNameParser
from .gedcom_validator import GedcomValidator
from .gedcom_writer import GEDCOMWriter


__all__ = [
    'GEDCOMParser', 'GedcomParseError', 'GEDCOMMapper', 'GEDCOMGenerator', 'GEDCOMFileWriter',
    'GEDCOMWriter', 'GedcomValidator', 'GedcomDateParser', 'GedcomNameParser',
    'ansel_to_unicode', 'decode_gedcom', 'detect_encoding', 'unicode_to_ansel'
]
