"""ESC/POS render & print API router."""
from __future__ import annotations
import base64
from fastapi import APIRouter, HTTPException

from ..models.schemas import RenderRequest, RenderResponse, PrintRequest, PrintResponse
from ..printer.errors import EscposError, TransportError
from ..services.printer_service import render_nodes, print_nodes, to_node

router = APIRouter(prefix="/api/escpos", tags=["escpos"])


@router.post("/render", response_model=RenderResponse)
async def render(req: RenderRequest):
    """Encode nodes and return the byte stream as base64."""
    try:
        encoder = render_nodes((to_node(n) for n in req.nodes), init=req.init, end=req.end)
    except EscposError as e:
        raise HTTPException(status_code=400, detail=str(e))
    length, data = encoder.read_bytes()
    return RenderResponse(
        length=length,
        data=base64.b64encode(data).decode(),
        text=encoder.read_text(),
        state=encoder.state.to_dict(),
    )


@router.post("/print", response_model=PrintResponse)
async def print_endpoint(req: PrintRequest):
    """Encode nodes and send them to the printer."""
    try:
        return print_nodes(req)
    except TransportError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except (EscposError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
