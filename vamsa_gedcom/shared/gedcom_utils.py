"""
GEDCOM normalization utilities for names and dates
"""

import calendar
import re

from .models import ParsedName


class GedcomNameParser:
    """Handles the GEDCOM personal name encoding ("Given /Surname/ Suffix")"""

    SURNAME_PATTERN = re.compile(r'/([^/]*)/')

    @classmethod
    def parse_name(cls, value: str) -> ParsedName:
        """
        Split a GEDCOM NAME value into given names and surname
        Returns: ParsedName with None for absent parts
        """
        if not value or not value.strip():
            return ParsedName()

        trimmed = value.strip()
        match = cls.SURNAME_PATTERN.search(trimmed)
        if not match:
            return ParsedName(first_name=trimmed)

        last_name = match.group(1).strip() or None
        # Internal whitespace is kept verbatim, only the outer ends are trimmed
        given = (trimmed[:match.start()] + trimmed[match.end():]).strip()
        return ParsedName(first_name=given or None, last_name=last_name)

    @classmethod
    def format_name(cls, first_name: str | None, last_name: str | None) -> str:
        """Format name parts as a GEDCOM NAME value ("/Smith/" when the given name is absent)"""
        if not last_name:
            return first_name or ""
        if not first_name:
            return f"/{last_name}/"
        return f"{first_name} /{last_name}/"


class GedcomDateParser:
    """Handles GEDCOM 5.5.1 and 7.0 date values"""

    MONTHS = {
        'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
        'JUL': 7, 'AUG': 8, 'SEP': 9, 'SEPT': 9, 'OCT': 10, 'NOV': 11,
        'DEC': 12
    }

    MONTH_NAMES = ['', 'JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN',
                   'JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC']

    QUALIFIERS = ('ABT', 'BEF', 'AFT')

    ISO_PATTERN = re.compile(r'^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?$')
    FULL_PATTERN = re.compile(r'^(\d{1,2})\s+([A-Za-z]+)\s+(\d{4})$')
    MONTH_YEAR_PATTERN = re.compile(r'^([A-Za-z]+)\s+(\d{4})$')
    YEAR_PATTERN = re.compile(r'^(\d{4})$')
    BETWEEN_PATTERN = re.compile(r'^BET\s+(.+?)\s+AND\s+(.+)$', re.IGNORECASE)

    @classmethod
    def parse_date(cls, value: str) -> str | None:
        """
        Convert a GEDCOM date value to canonical ISO form

        "15 JAN 1985" -> "1985-01-15", "JAN 1985" -> "1985-01", "1985" -> "1985".
        Qualified and ranged dates collapse to their (first) date. Returns None
        for anything that cannot be read as a valid calendar date.
        """
        if not value or not value.strip():
            return None

        working = ' '.join(value.split())

        between = cls.BETWEEN_PATTERN.match(working)
        if between:
            return cls.parse_date(between.group(1))

        parts = working.split(' ', 1)
        if len(parts) == 2 and parts[0].upper() in cls.QUALIFIERS:
            return cls.parse_date(parts[1])

        iso = cls.ISO_PATTERN.match(working)
        if iso:
            year, month, day = iso.groups()
            if month and not cls._is_valid(int(year), int(month), int(day) if day else None):
                return None
            return working

        full = cls.FULL_PATTERN.match(working)
        if full:
            day = int(full.group(1))
            month = cls.month_to_number(full.group(2))
            year = int(full.group(3))
            if month is None or not cls._is_valid(year, month, day):
                return None
            return f"{year:04d}-{month:02d}-{day:02d}"

        month_year = cls.MONTH_YEAR_PATTERN.match(working)
        if month_year:
            month = cls.month_to_number(month_year.group(1))
            if month is None:
                return None
            return f"{int(month_year.group(2)):04d}-{month:02d}"

        if cls.YEAR_PATTERN.match(working):
            return working

        return None

    @classmethod
    def is_iso_date(cls, value: str) -> bool:
        """Check whether a raw date value is written in ISO 8601 form"""
        return bool(value and cls.ISO_PATTERN.match(value.strip()))

    @classmethod
    def month_to_number(cls, month_name: str) -> int | None:
        """Convert a month abbreviation to 1-12"""
        return cls.MONTHS.get(month_name.upper())

    @classmethod
    def format_date(cls, year: int, month: int, day: int) -> str:
        """Format date parts as "D MON YYYY" without day padding"""
        return f"{day} {cls.MONTH_NAMES[month]} {year}"

    @staticmethod
    def _is_valid(year: int, month: int, day: int | None) -> bool:
        if not 1 <= month <= 12:
            return False
        if day is None:
            return True
        if year < 1:
            return 1 <= day <= 31
        return 1 <= day <= calendar.monthrange(year, month)[1]
