"""Stateful ESC/POS encoder — printer state plus the output buffer."""
from __future__ import annotations
from dataclasses import dataclass, asdict
import logging

from . import protocol
from .constants import (
    ALIGNMENTS, LANGUAGES, FONTS, QR_ERROR_LEVELS,
    GRAPHICS_MODE, GRAPHICS_STORE, GRAPHICS_PRINT, RASTER_HEADER,
    HriPosition, HriFont,
)
from .errors import InvalidParameterError

log = logging.getLogger(__name__)


@dataclass
class PrinterState:
    width: int = 1
    height: int = 1
    underline: int = 0
    emphasize: int = 0
    upsidedown: int = 0
    rotate: int = 0
    reverse: int = 0
    smooth: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class EscposEncoder:
    """Accumulates ESC/POS bytes while tracking what the printer has been told.

    Setters change ``state`` and emit the matching command in one step; the
    command is built (and validated) before the state is touched, so a rejected
    value leaves both untouched. The buffer only ever grows.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.state = PrinterState()
        self._buffer = bytearray()
        self._text: list[str] = []
        self.reset()

    def reset(self):
        self.state = PrinterState()

    # ── Output buffer ───────────────────────────────────────────────────

    def write_raw(self, data: bytes) -> int:
        self._buffer += data
        return len(data)

    def write(self, text: str) -> int:
        self._text.append(text)
        return self.write_raw(text.encode(self.encoding, errors="replace"))

    def read_bytes(self) -> tuple[int, bytes]:
        return len(self._buffer), bytes(self._buffer)

    def read_text(self) -> str:
        return "".join(self._text)

    def send_to(self, sink) -> int:
        """Write the whole buffer to anything with a ``write(bytes)`` method."""
        return sink.write(bytes(self._buffer))

    def __len__(self) -> int:
        return len(self._buffer)

    # ── Document framing ────────────────────────────────────────────────

    def init(self):
        self.reset()
        self.write_raw(protocol.initialize())
        self.send_emphasize()
        self.set_print_mode(0)
        self.send_rotate()

    def end(self):
        self.write_raw(protocol.end_of_job())

    # ── Stateful primitives ─────────────────────────────────────────────

    def send_font_size(self):
        self.write_raw(protocol.font_size(self.state.width, self.state.height))

    def set_font_size(self, width: int, height: int):
        cmd = protocol.font_size(width, height)
        self.state.width = width
        self.state.height = height
        self.write_raw(cmd)

    def send_underline(self):
        self.write_raw(protocol.underline(self.state.underline))

    def send_emphasize(self):
        self.write_raw(protocol.emphasize(self.state.emphasize))

    def send_upsidedown(self):
        self.write_raw(protocol.upside_down(self.state.upsidedown))

    def send_rotate(self):
        self.write_raw(protocol.rotate(self.state.rotate))

    def send_reverse(self):
        self.write_raw(protocol.reverse(self.state.reverse))

    def send_smooth(self):
        self.write_raw(protocol.smooth(self.state.smooth))

    def _set_toggle(self, field: str, builder, value):
        value = int(value) if isinstance(value, bool) else value
        cmd = builder(value)
        setattr(self.state, field, value)
        self.write_raw(cmd)

    def set_underline(self, value: int):
        self._set_toggle("underline", protocol.underline, value)

    def set_emphasize(self, value: int):
        self._set_toggle("emphasize", protocol.emphasize, value)

    def set_upsidedown(self, value: int):
        self._set_toggle("upsidedown", protocol.upside_down, value)

    def set_rotate(self, value: int):
        self._set_toggle("rotate", protocol.rotate, value)

    def set_reverse(self, value: int):
        self._set_toggle("reverse", protocol.reverse, value)

    def set_smooth(self, value: int):
        self._set_toggle("smooth", protocol.smooth, value)

    def send_default_state(self):
        """Re-send every stateful setting as currently stored."""
        self.send_emphasize()
        self.send_rotate()
        self.send_smooth()
        self.send_reverse()
        self.send_underline()
        self.send_upsidedown()
        self.send_font_size()

    # ── Stateless primitives ────────────────────────────────────────────

    def set_align(self, align: str):
        if align not in ALIGNMENTS:
            raise InvalidParameterError(f"Invalid alignment: {align!r}", "align")
        self.write_raw(protocol.justification(ALIGNMENTS[align]))

    def set_lang(self, lang: str):
        if lang not in LANGUAGES:
            raise InvalidParameterError(f"Invalid language: {lang!r}", "lang")
        self.write_raw(protocol.international_charset(LANGUAGES[lang]))

    def set_font(self, font: str):
        if font not in FONTS:
            raise InvalidParameterError(f"Invalid font: {font!r}", "font")
        self.write_raw(protocol.select_font(FONTS[font]))

    def set_print_mode(self, n: int):
        self.write_raw(protocol.select_print_mode(n))

    def set_line_spacing(self, n: int):
        self.write_raw(protocol.line_spacing(n))

    def set_right_space(self, n: int):
        self.write_raw(protocol.right_side_spacing(n))

    def set_move_size(self, x: int, y: int):
        self.write_raw(protocol.motion_units(x, y))

    def set_location(self, offset: int):
        self.write_raw(protocol.move_absolute_x(offset))

    def set_relocation(self, offset: int):
        self.write_raw(protocol.move_relative_x(offset))

    def send_move_x(self, x: int):
        self.write_raw(protocol.move_absolute_x(x))

    def send_move_y(self, y: int):
        self.write_raw(protocol.move_absolute_y(y))

    def horizontal_tab(self):
        self.write_raw(protocol.horizontal_tab())

    def formfeed_n(self, n: int):
        self.write_raw(protocol.feed_lines(n))

    def formfeed(self):
        self.formfeed_n(1)

    def linefeed(self, n: int = 1):
        self.formfeed_n(n)

    def print_and_feed(self, n: int):
        self.write_raw(protocol.print_and_feed(n))

    def print_split_line(self, n: int, s: str):
        self.write(s * (n + 1))
        self.linefeed(1)

    def cut(self):
        self.write_raw(protocol.cut())

    def pulse(self):
        self.write_raw(protocol.pulse())

    def open_cash_box(self):
        self.write_raw(protocol.cash_drawer_kick())

    # ── Barcodes ────────────────────────────────────────────────────────

    def barcode(self, data: str):
        self.write_raw(protocol.barcode(data.encode(self.encoding, errors="replace")))

    def barcode_hri(self, n: int | HriPosition):
        self.write_raw(protocol.barcode_hri_position(n))

    def barcode_hri_font_size(self, n: int | HriFont):
        self.write_raw(protocol.barcode_hri_font(n))

    def barcode_height(self, n: int):
        self.write_raw(protocol.barcode_height(n))

    def qr_code(self, data: str, size: int = 3, ecc: str = "L"):
        if not 1 <= size <= 16:
            raise InvalidParameterError(f"Invalid QR module size: {size!r}", "size")
        if ecc not in QR_ERROR_LEVELS:
            raise InvalidParameterError(f"Invalid QR error correction: {ecc!r}", "ecc")
        if not data:
            return
        content = data.encode(self.encoding, errors="replace")
        cmds = [
            protocol.code2d_data(b"1", b"A", b"2\x00"),  # model 2
            protocol.code2d_data(b"1", b"C", bytes((size,))),
            protocol.code2d_data(b"1", b"E", bytes((QR_ERROR_LEVELS[ecc],))),
            protocol.code2d_data(b"1", b"P", b"0" + content),
            protocol.code2d_data(b"1", b"Q", b"0"),
        ]
        self.write_raw(b"".join(cmds))

    # ── Graphics ────────────────────────────────────────────────────────

    def graphics_block(self, m: bytes, fn: bytes, data: bytes = b""):
        self.write_raw(protocol.graphics_data(m, fn, data))

    def raster_image(self, raster: bytes):
        """Store a raster payload in the print buffer, then print it."""
        store = protocol.graphics_data(GRAPHICS_MODE, GRAPHICS_STORE, RASTER_HEADER + raster)
        self.write_raw(store)
        self.graphics_block(GRAPHICS_MODE, GRAPHICS_PRINT)

    def download_bitmap(self, x: int, y: int, data: bytes):
        self.write_raw(protocol.define_bitmap(x, y, data))

    def print_downloaded_bitmap(self, mode: int = 0):
        self.write_raw(protocol.print_bitmap(mode))
