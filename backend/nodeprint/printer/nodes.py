"""Node dispatcher — turns (name, params, data) print nodes into encoder calls.

Each node type has its own option parser that checks key presence and value
domains before anything is written, so a node is either applied in full or
rejected with the buffer and printer state left as they were.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping
import base64
import binascii
import logging
import re

from .constants import (
    ALIGNMENTS, LANGUAGES, FONTS, FONT_SIZE_MIN, FONT_SIZE_MAX, UINT16_MAX,
    TRUTHY_VALUES, FONT_PARAM_INDEX, TEXT_REPLACEMENTS, RASTER_HEADER,
    BLOCK_PAYLOAD_MAX,
)
from .encoder import EscposEncoder
from .errors import InvalidParameterError, MalformedPayloadError

log = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class Node:
    name: str
    params: Mapping[str, str] = field(default_factory=dict)
    data: str = ""


def text_replace(data: str) -> str:
    """Decode the character references allowed in text payloads."""
    for ref, char in TEXT_REPLACEMENTS:
        data = data.replace(ref, char)
    return data


def is_truthy(params: Mapping[str, str], key: str) -> bool:
    return params.get(key) in TRUTHY_VALUES


def parse_int(params: Mapping[str, str], key: str, lo: int | None = None,
              hi: int | None = None, required: bool = False) -> int | None:
    raw = params.get(key)
    if raw is None:
        if required:
            raise InvalidParameterError(f"Missing required parameter: {key}", key)
        return None
    if not _INT_RE.fullmatch(raw):
        raise InvalidParameterError(f"Invalid {key}: {raw!r}", key)
    value = int(raw)
    if (lo is not None and value < lo) or (hi is not None and value > hi):
        raise InvalidParameterError(f"Invalid {key}: {value} (expected {lo}..{hi})", key)
    return value


def _enum_param(params: Mapping[str, str], key: str, table: Mapping) -> str | None:
    value = params.get(key)
    if value is not None and value not in table:
        raise InvalidParameterError(f"Invalid {key}: {value!r}", key)
    return value


def _font_param(params: Mapping[str, str]) -> str | None:
    value = params.get("font")
    if value is None:
        return None
    letter = value[FONT_PARAM_INDEX:FONT_PARAM_INDEX + 1].upper()
    if letter not in FONTS:
        raise InvalidParameterError(f"Invalid font: {value!r}", "font")
    return letter


# ── Per-node options ────────────────────────────────────────────────────

@dataclass
class TextOptions:
    align: str | None = None
    lang: str | None = None
    smooth: bool = False
    emphasize: bool = False
    underline: bool = False
    reverse: bool = False
    rotate: bool = False
    font: str | None = None
    double_width: bool = False
    double_height: bool = False
    width: int | None = None
    height: int | None = None
    x: int | None = None
    y: int | None = None

    @classmethod
    def parse(cls, params: Mapping[str, str]) -> TextOptions:
        return cls(
            align=_enum_param(params, "align", ALIGNMENTS),
            lang=_enum_param(params, "lang", LANGUAGES),
            smooth=is_truthy(params, "smooth"),
            emphasize=is_truthy(params, "em"),
            underline=is_truthy(params, "ul"),
            reverse=is_truthy(params, "reverse"),
            rotate=is_truthy(params, "rotate"),
            font=_font_param(params),
            double_width=is_truthy(params, "dw"),
            double_height=is_truthy(params, "dh"),
            width=parse_int(params, "width", FONT_SIZE_MIN, FONT_SIZE_MAX),
            height=parse_int(params, "height", FONT_SIZE_MIN, FONT_SIZE_MAX),
            x=parse_int(params, "x", 0, UINT16_MAX),
            y=parse_int(params, "y", 0, UINT16_MAX),
        )


@dataclass
class FeedOptions:
    lines: int | None = None
    units: int | None = None

    @classmethod
    def parse(cls, params: Mapping[str, str]) -> FeedOptions:
        return cls(
            lines=parse_int(params, "line", 0, 0xFF),
            units=parse_int(params, "unit", 0, UINT16_MAX),
        )


@dataclass
class ImageOptions:
    width: int
    height: int
    raster: bytes
    align: str | None = None

    @classmethod
    def parse(cls, params: Mapping[str, str], data: str) -> ImageOptions:
        align = _enum_param(params, "align", ALIGNMENTS)
        width = parse_int(params, "width", 1, UINT16_MAX, required=True)
        height = parse_int(params, "height", 1, UINT16_MAX, required=True)
        if not data:
            raise MalformedPayloadError("Image payload is empty")
        try:
            # line-wrapped payloads are accepted, any other stray byte is not
            raster = base64.b64decode(data.replace("\r", "").replace("\n", ""), validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedPayloadError(f"Image payload is not valid base64: {e}") from e
        if len(RASTER_HEADER) + len(raster) > BLOCK_PAYLOAD_MAX:
            raise InvalidParameterError(f"Image payload too large: {len(raster)} bytes", "data")
        return cls(width=width, height=height, raster=raster, align=align)


# ── Dispatcher ──────────────────────────────────────────────────────────

class NodeDispatcher:
    """Routes nodes to an :class:`EscposEncoder`; unknown names are ignored."""

    def __init__(self, encoder: EscposEncoder | None = None):
        self.encoder = encoder if encoder is not None else EscposEncoder()
        self._handlers = {
            "text": self.text,
            "feed": self.feed,
            "cut": self.feed_and_cut,
            "pulse": self.pulse,
            "image": self.image,
        }

    def dispatch(self, node: Node):
        self.dispatch_node(node.name, node.params, node.data)

    def dispatch_node(self, name: str, params: Mapping[str, str] | None = None, data: str = ""):
        params = params or {}
        preview = ""
        if data:
            preview = f" => '{data[:40]} ...'" if len(data) > 40 else f" => '{data}'"
        log.info("Write: %s => %s%s", name, dict(params), preview)

        handler = self._handlers.get(name)
        if handler is None:
            log.debug("Ignoring unknown node %r", name)
            return
        if name in ("text", "image"):
            handler(params, data)
        else:
            handler(params)

    def text(self, params: Mapping[str, str], data: str = ""):
        opts = TextOptions.parse(params)
        enc = self.encoder

        if opts.align is not None:
            enc.set_align(opts.align)
        if opts.lang is not None:
            enc.set_lang(opts.lang)
        if opts.smooth:
            enc.set_smooth(1)
        if opts.emphasize:
            enc.set_emphasize(1)
        if opts.underline:
            enc.set_underline(1)
        if opts.reverse:
            enc.set_reverse(1)
        if opts.rotate:
            enc.set_rotate(1)
        if opts.font is not None:
            enc.set_font(opts.font)
        if opts.double_width:
            enc.set_font_size(2, enc.state.height)
        if opts.double_height:
            enc.set_font_size(enc.state.width, 2)
        if opts.width is not None:
            enc.set_font_size(opts.width, enc.state.height)
        if opts.height is not None:
            enc.set_font_size(enc.state.width, opts.height)
        if opts.x is not None:
            enc.send_move_x(opts.x)
        if opts.y is not None:
            enc.send_move_y(opts.y)

        data = text_replace(data)
        if data:
            enc.write(data)

    def feed(self, params: Mapping[str, str]):
        opts = FeedOptions.parse(params)
        enc = self.encoder

        if opts.lines is not None:
            enc.formfeed_n(opts.lines)
        if opts.units is not None:
            enc.send_move_y(opts.units)
        enc.linefeed(1)

        # some printers only pick up the reset when every setting is re-sent
        enc.reset()
        enc.send_default_state()

    def feed_and_cut(self, params: Mapping[str, str]):
        if params.get("type") == "feed":
            self.encoder.formfeed()
        self.encoder.cut()

    def pulse(self, params: Mapping[str, str]):
        self.encoder.pulse()

    def image(self, params: Mapping[str, str], data: str):
        opts = ImageOptions.parse(params, data)
        log.info("Image len:%d w: %d h: %d", len(opts.raster), opts.width, opts.height)
        if opts.align is not None:
            self.encoder.set_align(opts.align)
        self.encoder.raster_image(opts.raster)
