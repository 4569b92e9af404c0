import base64

from PIL import Image

from nodeprint.printer.raster import compress_row, image_node, prepare_image, raster_image


def test_compress_row_msb_first_and_padding():
    assert compress_row([1, 0, 0, 0, 0, 0, 0, 1]) == bytearray(b"\x81")
    assert compress_row([1] * 10) == bytearray(b"\xff\xc0")


def test_raster_header_and_rows():
    img = Image.new("1", (10, 2), 1)
    img.putpixel((0, 0), 0)
    img.putpixel((9, 1), 0)
    data = raster_image(img)
    assert data[:4] == b"\x0a\x00\x02\x00"
    assert data[4:] == b"\x80\x00\x00\x40"


def test_prepare_image_thresholds_rgb():
    img = Image.new("RGB", (4, 1), "white")
    img.putpixel((1, 0), (10, 10, 10))
    prepared = prepare_image(img, 512)
    assert prepared.mode == "1"
    assert raster_image(prepared)[4:] == b"\x40"


def test_prepare_image_transparent_is_blank():
    img = Image.new("RGBA", (8, 1), (0, 0, 0, 0))
    prepared = prepare_image(img, 512)
    assert raster_image(prepared)[4:] == b"\x00"


def test_prepare_image_palette_transparency_is_blank():
    img = Image.new("P", (8, 1), 0)
    img.putpalette([0, 0, 0] * 256)
    img.info["transparency"] = 0
    assert raster_image(prepare_image(img, 512))[4:] == b"\x00"


def test_prepare_image_cmyk_falls_back_to_gray():
    img = Image.new("CMYK", (8, 1), (0, 0, 0, 0))
    img.putpixel((0, 0), (0, 0, 0, 255))
    prepared = prepare_image(img, 512)
    assert prepared.mode == "1"
    assert raster_image(prepared)[4:] == b"\x80"


def test_prepare_image_scales_to_paper_width():
    img = Image.new("L", (1000, 500), 255)
    prepared = prepare_image(img, 500)
    assert prepared.size == (500, 250)


def test_image_node_round_trip_params():
    img = Image.new("L", (16, 3), 0)
    node = image_node(img, 512, align="center")
    assert node.name == "image"
    assert node.params == {"width": "16", "height": "3", "align": "center"}
    raw = base64.b64decode(node.data)
    assert raw[:4] == b"\x10\x00\x03\x00"
    assert raw[4:] == b"\xff" * 6


def test_image_node_dispatches(dispatcher):
    node = image_node(Image.new("L", (8, 1), 0), 512)
    dispatcher.dispatch(node)
    assert dispatcher.encoder.read_bytes()[1] == (
        b"\x1b(L\x0b\x00" b"0p" b"0\x01\x011" b"\x08\x00\x01\x00\xff"
        b"\x1b(L\x02\x00" b"02"
    )
