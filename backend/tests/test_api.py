import base64
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from nodeprint.config import Settings, get_settings
from nodeprint.main import app
from nodeprint.models.schemas import PrintRequest
from nodeprint.printer.errors import TransportError
from nodeprint.printer.nodes import Node
from nodeprint.services import printer_service
from nodeprint.services.image_nodes import qr_image_node
from nodeprint.services.printer_service import render_nodes

client = TestClient(app)


def test_health_ok():
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_render_nodes_with_init_and_end():
    enc = render_nodes([Node("text", {}, "Hi"), Node("cut")], init=True, end=True)
    assert enc.read_bytes()[1] == b"\x1b@\x1bG\x00\x1b!\x00\x1bR\x00" + b"Hi" + b"\x1dVA0" + b"\xfa"


def test_render_endpoint():
    resp = client.post("/api/escpos/render", json={"nodes": [
        {"name": "text", "params": {"em": "1"}, "data": "&lt;b&gt;"},
        {"name": "bogus"},
    ]})
    assert resp.status_code == 200
    body = resp.json()
    assert base64.b64decode(body["data"]) == b"\x1bG\x01<b>"
    assert body["length"] == 6
    assert body["text"] == "<b>"
    assert body["state"]["emphasize"] == 1


def test_render_endpoint_invalid_parameter():
    resp = client.post("/api/escpos/render", json={"nodes": [
        {"name": "text", "params": {"align": "sideways"}, "data": "x"},
    ]})
    assert resp.status_code == 400
    assert "sideways" in resp.json()["detail"]


def test_render_endpoint_malformed_image():
    resp = client.post("/api/escpos/render", json={"nodes": [
        {"name": "image", "params": {"width": "8", "height": "1"}, "data": "%%%"},
    ]})
    assert resp.status_code == 400


class RecordingTransport:
    def __init__(self):
        self.data = b""
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True

    def write(self, data):
        self.data += data
        return len(data)


def test_print_nodes_sends_to_transport(monkeypatch):
    tr = RecordingTransport()
    monkeypatch.setattr(printer_service, "_get_transport", lambda req: tr)
    req = PrintRequest(nodes=[{"name": "pulse"}], host="printer.local")
    assert printer_service.print_nodes(req) == {"status": "ok", "length": 3}
    assert tr.data == b"\x1bp\x02"
    assert tr.closed


def test_print_endpoint_transport_error(monkeypatch):
    class Broken(RecordingTransport):
        def __enter__(self):
            raise TransportError("offline")

    monkeypatch.setattr(printer_service, "_get_transport", lambda req: Broken())
    resp = client.post("/api/escpos/print", json={"nodes": [{"name": "cut"}]})
    assert resp.status_code == 503
    assert resp.json()["detail"] == "offline"


def test_print_endpoint_requires_host(monkeypatch):
    monkeypatch.setattr(printer_service, "get_settings", lambda: Settings(transport_type="network"))
    resp = client.post("/api/escpos/print", json={"nodes": [{"name": "cut"}]})
    assert resp.status_code == 400


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("NODEPRINT_PAPER_WIDTH_DOTS", "384")
    monkeypatch.setenv("NODEPRINT_TRANSPORT_TYPE", "usb")
    settings = Settings()
    assert settings.paper_width_dots == 384
    assert settings.transport_type == "usb"
    assert get_settings() is get_settings()


def test_image_upload_to_node():
    buf = io.BytesIO()
    Image.new("L", (16, 2), 0).save(buf, format="PNG")
    resp = client.post(
        "/api/image/node",
        files={"file": ("logo.png", buf.getvalue(), "image/png")},
        data={"align": "center"},
    )
    assert resp.status_code == 200
    node = resp.json()
    assert node["name"] == "image"
    assert node["params"] == {"width": "16", "height": "2", "align": "center"}


@pytest.mark.parametrize("mode,color,fmt", [
    ("CMYK", (0, 0, 0, 255), "JPEG"),
    ("I;16", 0, "PNG"),
])
def test_image_upload_other_color_spaces(mode, color, fmt):
    buf = io.BytesIO()
    Image.new(mode, (16, 16), color).save(buf, format=fmt)
    resp = client.post("/api/image/node", files={"file": ("pic", buf.getvalue(), "image/*")})
    assert resp.status_code == 200
    node = resp.json()
    assert node["params"] == {"width": "16", "height": "16"}
    raw = base64.b64decode(node["data"])
    assert raw[:4] == b"\x10\x00\x10\x00"
    assert set(raw[4:]) == {0xFF}


def test_image_upload_rejects_garbage():
    resp = client.post("/api/image/node", files={"file": ("x.png", b"not an image", "image/png")})
    assert resp.status_code == 400


@pytest.mark.parametrize("max_width", [None, 64])
def test_qr_image_node_fits_paper(max_width):
    node = qr_image_node("https://example.com", box_size=8, max_width=max_width)
    width = int(node.params["width"])
    assert width <= (max_width or get_settings().paper_width_dots)
    raw = base64.b64decode(node.data)
    assert int.from_bytes(raw[:2], "little") == width


@pytest.mark.parametrize("body", [
    {"value": "hello", "box_size": 0},
    {"value": "hello", "border": -1},
])
def test_qr_node_rejects_bad_geometry(body):
    resp = client.post("/api/image/qr-node", json=body)
    assert resp.status_code == 422


def test_qr_node_endpoint():
    resp = client.post("/api/image/qr-node", json={"value": "hello", "align": "center"})
    assert resp.status_code == 200
    assert resp.json()["params"]["align"] == "center"
