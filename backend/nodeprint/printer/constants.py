"""ESC/POS printer constants — command prefixes, enums and lookup tables."""
from enum import IntEnum
from types import MappingProxyType

ESC = b"\x1B"
GS = b"\x1D"
DLE = b"\x10"
HT = b"\x09"

FONT_SIZE_MIN = 1
FONT_SIZE_MAX = 8
UINT16_MAX = 0xFFFF
BLOCK_PAYLOAD_MAX = UINT16_MAX - 2

# GS ( L raster header: tone, x scale, y scale, colour
RASTER_HEADER = b"0\x01\x011"
GRAPHICS_MODE = b"0"
GRAPHICS_STORE = b"p"
GRAPHICS_PRINT = b"2"

BARCODE_SYSTEM_CODE39 = 0x04
TRUTHY_VALUES = frozenset({"true", "1"})
FONT_PARAM_INDEX = 5  # "font:a" -> "a"
NETWORK_PORT = 9100


class Align(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class Language(IntEnum):
    EN = 0
    FR = 1
    DE = 2
    UK = 3
    DA = 4
    SV = 5
    IT = 6
    ES = 7
    JA = 8
    NO = 9


class Font(IntEnum):
    A = 0
    B = 1


class HriPosition(IntEnum):
    NONE = 0
    TOP = 1
    BOTTOM = 2
    BOTH = 3


class HriFont(IntEnum):
    A = 0
    B = 1


class QrErrorCorrection(IntEnum):
    L = 48
    M = 49
    Q = 50
    H = 51


ALIGNMENTS = MappingProxyType({a.name.lower(): a for a in Align})
LANGUAGES = MappingProxyType({lang.name.lower(): lang for lang in Language})
FONTS = MappingProxyType({f.name: f for f in Font})
QR_ERROR_LEVELS = MappingProxyType({e.name: e for e in QrErrorCorrection})

# Character references decoded in text payloads, "&amp;" last
TEXT_REPLACEMENTS = (
    ("&#9;", "\t"),
    ("&#x9;", "\t"),
    ("&#10;", "\n"),
    ("&#xA;", "\n"),
    ("&apos;", "'"),
    ("&quot;", '"'),
    ("&gt;", ">"),
    ("&lt;", "<"),
    ("&amp;", "&"),
)
