"""Printer service — orchestrates node rendering + printing."""
from __future__ import annotations
from typing import Iterable
import logging

from ..config import get_settings
from ..models.schemas import NodeSchema, PrintRequest
from ..printer.encoder import EscposEncoder
from ..printer.nodes import Node, NodeDispatcher
from ..printer.transport import Transport, USBTransport, NetworkTransport

log = logging.getLogger(__name__)


def to_node(schema: NodeSchema) -> Node:
    return Node(name=schema.name, params=dict(schema.params), data=schema.data)


def render_nodes(nodes: Iterable[Node], init: bool = False, end: bool = False,
                 encoding: str | None = None) -> EscposEncoder:
    """Encode a document's nodes with a fresh encoder and return it undrained."""
    encoder = EscposEncoder(encoding or get_settings().text_encoding)
    dispatcher = NodeDispatcher(encoder)
    if init:
        encoder.init()
    for node in nodes:
        dispatcher.dispatch(node)
    if end:
        encoder.end()
    return encoder


def _get_transport(req: PrintRequest) -> Transport:
    settings = get_settings()
    transport_type = req.transport_type or settings.transport_type
    if transport_type == "network":
        host = req.host or settings.network_host
        if not host:
            raise ValueError("host required for network transport")
        return NetworkTransport(host, req.port or settings.network_port, settings.network_timeout)
    if transport_type == "usb":
        return USBTransport(
            req.usb_vendor_id or settings.usb_vendor_id,
            req.usb_product_id or settings.usb_product_id,
            serial=req.usb_serial,
            out_ep=settings.usb_out_ep,
            in_ep=settings.usb_in_ep,
            timeout_ms=settings.usb_timeout_ms,
        )
    raise ValueError(f"Unknown transport type: {transport_type}")


def print_nodes(req: PrintRequest) -> dict:
    """Render the request's nodes and send the result to the printer."""
    encoder = render_nodes((to_node(n) for n in req.nodes), init=req.init, end=req.end)
    length, _ = encoder.read_bytes()
    with _get_transport(req) as transport:
        encoder.send_to(transport)
    log.info("Sent %d bytes (%d nodes)", length, len(req.nodes))
    return {"status": "ok", "length": length}
