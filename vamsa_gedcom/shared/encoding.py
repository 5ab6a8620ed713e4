"""
Character set detection and decoding for GEDCOM files, including ANSEL
"""

import codecs
import re
import unicodedata

from .logging_config import get_project_logger


logger = get_project_logger(__name__)

CHAR_PATTERN = re.compile(r'^\s*1\s+CHAR\s+(.+?)\s*$', re.MULTILINE)

# Spacing characters in the ANSEL (ANSI Z39.47) upper half
ANSEL_CHARACTERS = {
    0xA1: '\u0141',  # L with stroke
    0xA2: '\u00D8',  # O with stroke
    0xA3: '\u0110',  # D with stroke
    0xA4: '\u00DE',  # thorn
    0xA5: '\u00C6',  # AE
    0xA6: '\u0152',  # OE
    0xA7: '\u02B9',  # soft sign
    0xA8: '\u00B7',  # middle dot
    0xA9: '\u266D',  # flat
    0xAA: '\u00AE',  # registered
    0xAB: '\u00B1',  # plus-minus
    0xAC: '\u01A0',  # O with horn
    0xAD: '\u01AF',  # U with horn
    0xAE: '\u02BC',  # alif
    0xB0: '\u02BB',  # ayn
    0xB1: '\u0142',  # l with stroke
    0xB2: '\u00F8',  # o with stroke
    0xB3: '\u0111',  # d with stroke
    0xB4: '\u00FE',  # thorn
    0xB5: '\u00E6',  # ae
    0xB6: '\u0153',  # oe
    0xB7: '\u02BA',  # hard sign
    0xB8: '\u0131',  # dotless i
    0xB9: '\u00A3',  # pound
    0xBA: '\u00F0',  # eth
    0xBC: '\u01A1',  # o with horn
    0xBD: '\u01B0',  # u with horn
    0xBE: '\u25A1',  # empty box, GEDCOM extension
    0xBF: '\u25A0',  # black box, GEDCOM extension
    0xC0: '\u00B0',  # degree
    0xC1: '\u2113',  # script l
    0xC2: '\u2117',  # sound recording copyright
    0xC3: '\u00A9',  # copyright
    0xC4: '\u266F',  # sharp
    0xC5: '\u00BF',  # inverted question mark
    0xC6: '\u00A1',  # inverted exclamation mark
    0xCF: '\u00DF',  # sharp s, GEDCOM extension
}

# Non-spacing marks; in ANSEL they precede the character they modify
ANSEL_COMBINING = {
    0xE0: '\u0309',  # hook above
    0xE1: '\u0300',  # grave
    0xE2: '\u0301',  # acute
    0xE3: '\u0302',  # circumflex
    0xE4: '\u0303',  # tilde
    0xE5: '\u0304',  # macron
    0xE6: '\u0306',  # breve
    0xE7: '\u0307',  # dot above
    0xE8: '\u0308',  # diaeresis
    0xE9: '\u030C',  # caron
    0xEA: '\u030A',  # ring above
    0xEB: '\uFE20',  # ligature, left half
    0xEC: '\uFE21',  # ligature, right half
    0xED: '\u0315',  # comma above right
    0xEE: '\u030B',  # double acute
    0xEF: '\u0310',  # candrabindu
    0xF0: '\u0327',  # cedilla
    0xF1: '\u0328',  # ogonek
    0xF2: '\u0323',  # dot below
    0xF3: '\u0324',  # double dot below
    0xF4: '\u0325',  # ring below
    0xF5: '\u0333',  # double underscore
    0xF6: '\u0332',  # underscore
    0xF7: '\u0326',  # comma below
    0xF8: '\u031C',  # right cedilla
    0xF9: '\u032E',  # breve below
    0xFA: '\uFE22',  # double tilde, left half
    0xFB: '\uFE23',  # double tilde, right half
    0xFE: '\u0313',  # comma above
}

UNICODE_TO_ANSEL = {char: byte for byte, char in ANSEL_CHARACTERS.items()}
MARK_TO_ANSEL = {mark: byte for byte, mark in ANSEL_COMBINING.items()}

# Declared CHAR values mapped onto Python codecs
CHARSET_CODECS = {
    'UTF-8': 'utf-8',
    'ASCII': 'ascii',
    'ANSI': 'cp1252',
    'ISO-8859-1': 'latin-1',
    'IBMPC': 'cp437',
    'UNICODE': 'utf-16',
}


def detect_encoding(text: str) -> str:
    """
    Read the declared character set from the HEAD CHAR line

    Returns:
        Normalized name ('UTF-8', 'ANSEL', 'UNICODE', ...); 'UTF-8' when absent
    """
    match = CHAR_PATTERN.search(text)
    if not match:
        return 'UTF-8'

    charset = match.group(1).upper()
    if 'ANSEL' in charset:
        return 'ANSEL'
    if charset in ('UTF8', 'UTF-8'):
        return 'UTF-8'
    if charset in ('UTF-16', 'UNICODE'):
        return 'UNICODE'
    if charset in ('ISO8859-1', 'ISO-8859-1', 'LATIN1'):
        return 'ISO-8859-1'
    return charset


def ansel_to_unicode(data: bytes) -> str:
    """Decode ANSEL bytes, attaching prefix diacritics to the following character"""
    result = []
    pending_marks = []

    for byte in data:
        if byte in ANSEL_COMBINING:
            pending_marks.append(ANSEL_COMBINING[byte])
            continue

        if byte < 0x80:
            char = chr(byte)
        elif byte in ANSEL_CHARACTERS:
            char = ANSEL_CHARACTERS[byte]
        else:
            logger.debug(f"Unmapped ANSEL byte 0x{byte:02X}")
            char = '\uFFFD'

        if pending_marks and char not in '\r\n':
            result.append(char + ''.join(pending_marks))
        else:
            result.extend(pending_marks)
            result.append(char)
        pending_marks = []

    result.extend(pending_marks)
    return unicodedata.normalize('NFC', ''.join(result))


def unicode_to_ansel(text: str) -> bytes:
    """
    Encode text as ANSEL bytes, writing diacritics before the letter they modify

    Characters with no ANSEL equivalent are written as '?'.
    """
    result = bytearray()

    for char in unicodedata.normalize('NFC', text):
        if ord(char) < 0x80:
            result.append(ord(char))
        elif char in UNICODE_TO_ANSEL:
            result.append(UNICODE_TO_ANSEL[char])
        elif char in MARK_TO_ANSEL and result:
            # A mark NFC could not compose goes just before the letter already written
            result.insert(len(result) - 1, MARK_TO_ANSEL[char])
        else:
            result.extend(_encode_decomposed(char))

    return bytes(result)


def _encode_decomposed(char: str) -> bytes:
    base, *marks = unicodedata.normalize('NFD', char)
    base_byte = ord(base) if ord(base) < 0x80 else UNICODE_TO_ANSEL.get(base)

    if not marks or base_byte is None or any(mark not in MARK_TO_ANSEL for mark in marks):
        logger.debug(f"No ANSEL equivalent for U+{ord(char):04X}")
        return b'?'
    return bytes([MARK_TO_ANSEL[mark] for mark in marks] + [base_byte])


def decode_gedcom(data: bytes) -> str:
    """
    Decode raw GEDCOM bytes to text

    A byte order mark wins over the declared CHAR value. ANSEL content is
    converted and its CHAR line rewritten to UTF-8. Content declared UTF-8
    that does not decode falls back to latin-1.
    """
    if data.startswith(codecs.BOM_UTF8):
        return data[len(codecs.BOM_UTF8):].decode('utf-8')
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return data.decode('utf-16')

    # The header is ASCII in every supported charset
    declared = detect_encoding(data[:4096].decode('latin-1'))

    if declared == 'ANSEL':
        text = ansel_to_unicode(data)
        logger.info("Converted ANSEL content to Unicode")
        return CHAR_PATTERN.sub('1 CHAR UTF-8', text, count=1)

    codec = CHARSET_CODECS.get(declared)
    if codec is None:
        logger.warning(f"Unknown GEDCOM character set {declared}, reading as UTF-8")
        codec = 'utf-8'

    try:
        return data.decode(codec)
    except UnicodeDecodeError:
        logger.warning(f"Content is not valid {declared}, falling back to latin-1")
        return data.decode('latin-1')
