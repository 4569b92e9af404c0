"""ESC/POS command builders.

Every builder returns the complete byte sequence for one printer command and
validates its numeric arguments first, so callers can build the command before
touching any state.
"""
from .constants import (
    ESC, GS, DLE, HT,
    FONT_SIZE_MIN, FONT_SIZE_MAX, UINT16_MAX, BLOCK_PAYLOAD_MAX,
    BARCODE_SYSTEM_CODE39,
)
from .errors import InvalidParameterError


def _byte(value: int, name: str, lo: int = 0, hi: int = 0xFF) -> bytes:
    if isinstance(value, bool):
        value = int(value)
    if not isinstance(value, int) or not lo <= value <= hi:
        raise InvalidParameterError(f"Invalid {name}: {value!r} (expected {lo}..{hi})", name)
    return bytes((value,))


def low_high(value: int, name: str = "value") -> bytes:
    """Split a 16-bit value into two bytes, low byte first."""
    if not isinstance(value, int) or not 0 <= value <= UINT16_MAX:
        raise InvalidParameterError(f"Invalid {name}: {value!r} (expected 0..{UINT16_MAX})", name)
    return bytes((value % 256, value // 256))


# ── Printer control ─────────────────────────────────────────────────────

def initialize() -> bytes:
    return ESC + b"@"

def end_of_job() -> bytes:
    return b"\xFA"

def select_print_mode(n: int) -> bytes:
    return ESC + b"!" + _byte(n, "print mode")

def line_spacing(n: int) -> bytes:
    return ESC + b"3" + _byte(n, "line spacing")

def right_side_spacing(n: int) -> bytes:
    return ESC + b" " + _byte(n, "right spacing")

def print_and_feed(n: int) -> bytes:
    return ESC + b"J" + _byte(n, "feed amount")

def feed_lines(n: int = 1) -> bytes:
    return ESC + b"d" + _byte(n, "line count")

def horizontal_tab() -> bytes:
    return HT

def motion_units(x: int, y: int) -> bytes:
    return GS + b"P" + _byte(x, "horizontal unit") + _byte(y, "vertical unit")

def cut() -> bytes:
    return GS + b"VA0"

def pulse() -> bytes:
    return ESC + b"p\x02"

def cash_drawer_kick() -> bytes:
    return ESC + b"p\x00\x02\x04" + DLE + b"\x14\x01\x00\x01"


# ── Character styles ────────────────────────────────────────────────────

def font_size(width: int, height: int) -> bytes:
    w = _byte(width, "font width", FONT_SIZE_MIN, FONT_SIZE_MAX)[0]
    h = _byte(height, "font height", FONT_SIZE_MIN, FONT_SIZE_MAX)[0]
    return GS + b"!" + bytes((((w - 1) << 4) | (h - 1),))

def underline(n: int) -> bytes:
    return ESC + b"-" + _byte(n, "underline", 0, 2)

def emphasize(n: int) -> bytes:
    return ESC + b"G" + _byte(n, "emphasize", 0, 1)

def upside_down(n: int) -> bytes:
    return ESC + b"{" + _byte(n, "upsidedown", 0, 1)

def rotate(n: int) -> bytes:
    return ESC + b"R" + _byte(n, "rotate", 0, 1)

def reverse(n: int) -> bytes:
    return GS + b"B" + _byte(n, "reverse", 0, 1)

def smooth(n: int) -> bytes:
    return GS + b"b" + _byte(n, "smooth", 0, 1)

def select_font(n: int) -> bytes:
    return ESC + b"M" + _byte(n, "font", 0, 1)

def justification(n: int) -> bytes:
    return ESC + b"a" + _byte(n, "align", 0, 2)

def international_charset(n: int) -> bytes:
    return ESC + b"R" + _byte(n, "lang", 0, 9)


# ── Positioning ─────────────────────────────────────────────────────────

def move_absolute_x(x: int) -> bytes:
    return ESC + b"$" + low_high(x, "x")

def move_absolute_y(y: int) -> bytes:
    return GS + b"$" + low_high(y, "y")

def move_relative_x(offset: int) -> bytes:
    if isinstance(offset, int) and -0x8000 <= offset < 0:
        offset &= UINT16_MAX
    return ESC + b"\\" + low_high(offset, "offset")


# ── Barcodes ────────────────────────────────────────────────────────────

def barcode(data: bytes) -> bytes:
    if b"\x00" in data:
        raise InvalidParameterError("Barcode data may not contain NUL", "barcode")
    return GS + b"k" + bytes((BARCODE_SYSTEM_CODE39,)) + data + b"\x00"

def barcode_hri_position(n: int) -> bytes:
    return GS + b"H" + _byte(n, "HRI position", 0, 3)

def barcode_hri_font(n: int) -> bytes:
    return GS + b"f" + _byte(n, "HRI font", 0, 1)

def barcode_height(n: int) -> bytes:
    return GS + b"h" + _byte(n, "barcode height")


# ── Length-prefixed blocks ──────────────────────────────────────────────

def _block(prefix: bytes, m: bytes, fn: bytes, data: bytes) -> bytes:
    if len(m) != 1 or len(fn) != 1:
        raise InvalidParameterError("Block mode and function must be one byte each", "block")
    if len(data) > BLOCK_PAYLOAD_MAX:
        raise InvalidParameterError(
            f"Block payload too large: {len(data)} bytes (max {BLOCK_PAYLOAD_MAX})", "block")
    return prefix + low_high(len(data) + 2, "block length") + m + fn + bytes(data)

def graphics_data(m: bytes, fn: bytes, data: bytes = b"") -> bytes:
    """ESC ( L block: 2-byte length (payload + 2), mode, function, payload."""
    return _block(ESC + b"(L", m, fn, data)

def code2d_data(cn: bytes, fn: bytes, data: bytes = b"") -> bytes:
    """GS ( k block, framed the same way as graphics data."""
    return _block(GS + b"(k", cn, fn, data)


# ── Downloaded bit images ───────────────────────────────────────────────

def define_bitmap(x: int, y: int, data: bytes) -> bytes:
    xb = _byte(x, "bitmap width", 1)
    yb = _byte(y, "bitmap height", 1)
    if len(data) != x * y * 8:
        raise InvalidParameterError(
            f"Bitmap data must be {x * y * 8} bytes, got {len(data)}", "bitmap")
    return GS + b"*" + xb + yb + bytes(data)

def print_bitmap(mode: int = 0) -> bytes:
    return GS + b"/" + _byte(mode, "bitmap mode", 0, 3)
