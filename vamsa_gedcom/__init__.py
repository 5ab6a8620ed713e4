"""
GEDCOM 5.5.1 / 7.0 import and export for the Vamsa family tree
"""

__version__ = "0.1.0"
