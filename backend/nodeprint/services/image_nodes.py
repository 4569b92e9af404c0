"""Image node builder — uploaded pictures and QR codes → image nodes."""
from __future__ import annotations
import io

import qrcode
from PIL import Image, UnidentifiedImageError

from ..config import get_settings
from ..printer.errors import MalformedPayloadError
from ..printer.nodes import Node
from ..printer.raster import image_node


def _render_qr(value: str, box_size: int, border: int) -> Image.Image:
    qr = qrcode.QRCode(border=border, box_size=box_size)
    qr.add_data(value)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").convert("L")


def qr_image_node(value: str, box_size: int = 4, border: int = 1,
                  align: str | None = None, max_width: int | None = None) -> Node:
    img = _render_qr(value, box_size, border)
    return image_node(img, max_width or get_settings().paper_width_dots, align)


def picture_node(file_bytes: bytes, align: str | None = None,
                 max_width: int | None = None) -> Node:
    try:
        img = Image.open(io.BytesIO(file_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise MalformedPayloadError(f"Unreadable image: {e}") from e
    try:
        return image_node(img, max_width or get_settings().paper_width_dots, align)
    except ValueError as e:
        raise MalformedPayloadError(f"Unsupported image: {e}") from e
