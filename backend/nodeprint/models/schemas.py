"""Pydantic schemas for API request/response models."""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional


class NodeSchema(BaseModel):
    name: str  # text | feed | cut | pulse | image
    params: dict[str, str] = {}
    data: str = ""


class RenderRequest(BaseModel):
    nodes: list[NodeSchema]
    init: bool = False  # prepend ESC @ and reset state
    end: bool = False   # append end-of-job byte


class RenderResponse(BaseModel):
    length: int
    data: str  # base64
    text: str
    state: dict[str, int]


class PrintRequest(RenderRequest):
    transport_type: Optional[str] = None  # network | usb, settings default
    host: Optional[str] = None
    port: Optional[int] = None
    usb_vendor_id: Optional[int] = None
    usb_product_id: Optional[int] = None
    usb_serial: Optional[str] = None


class PrintResponse(BaseModel):
    status: str
    length: int


class QrNodeRequest(BaseModel):
    value: str
    box_size: int = Field(4, gt=0)
    border: int = Field(1, ge=0)
    align: Optional[str] = None
