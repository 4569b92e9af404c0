"""Raster image preparation for ESC/POS graphics blocks."""
from __future__ import annotations
import base64

from PIL import Image

from .nodes import Node
from .protocol import low_high


def has_transparency(img: Image.Image) -> bool:
    return img.info.get("transparency", None) is not None


def select_raster_channel(image: Image.Image) -> Image.Image:
    """Reduce any supported mode to "1", where 0 means a printed dot."""
    if image.mode == "P":
        image = image.convert("RGBA") if has_transparency(image) else image.convert("RGB")

    if image.mode == "1":
        return image
    elif image.mode == "L":
        gray = image
    elif image.mode == "RGB":
        gray = image.convert("L")
    elif image.mode in ("RGBA", "LA"):
        # composite onto white so transparent areas stay blank
        rgba = image.convert("RGBA")
        bg = Image.new("RGB", image.size, "white")
        bg.paste(rgba, mask=rgba.split()[3])
        gray = bg.convert("L")
    else:
        # CMYK, I;16, I, F ...
        gray = image.convert("L")
    return gray.point(lambda x: 0xFF if x >= 128 else 0, mode="1")


_RESAMPLE_MODES = ("1", "L", "P", "RGB", "RGBA", "LA")


def prepare_image(image: Image.Image, max_width: int) -> Image.Image:
    if image.mode not in _RESAMPLE_MODES:
        image = image.convert("L")
    if image.width > max_width:
        new_h = max(1, round(image.height * max_width / image.width))
        image = image.resize((max_width, new_h), Image.LANCZOS)
    return select_raster_channel(image)


def compress_row(row: list[int]) -> bytearray:
    bits = bytearray()
    for i in range(0, len(row), 8):
        byte = 0
        for j, dot in enumerate(row[i:i + 8]):
            if dot:
                byte |= 1 << (7 - j)
        bits.append(byte)
    return bits


def raster_image(prepared_image: Image.Image) -> bytearray:
    """Width and height (2 bytes each, little-endian) then MSB-first rows."""
    width, height = prepared_image.size
    buffer = bytearray(low_high(width, "width") + low_high(height, "height"))
    for y in range(height):
        row = [0 if prepared_image.getpixel((x, y)) else 1 for x in range(width)]
        buffer += compress_row(row)
    return buffer


def image_node(image: Image.Image, max_width: int, align: str | None = None) -> Node:
    prepared = prepare_image(image, max_width)
    params = {"width": str(prepared.width), "height": str(prepared.height)}
    if align is not None:
        params["align"] = align
    data = base64.b64encode(bytes(raster_image(prepared))).decode()
    return Node("image", params, data)
