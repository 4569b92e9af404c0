"""Image conversion API router."""
from fastapi import APIRouter, UploadFile, File, Form, HTTPException
from typing import Optional

from ..models.schemas import NodeSchema, QrNodeRequest
from ..printer.errors import EscposError
from ..services.image_nodes import picture_node, qr_image_node

router = APIRouter(prefix="/api/image", tags=["image"])


@router.post("/node", response_model=NodeSchema)
async def image_to_node(
    file: UploadFile = File(...),
    align: Optional[str] = Form(None),
    max_width: Optional[int] = Form(None),
):
    """Convert an uploaded picture into an image node."""
    file_bytes = await file.read()
    try:
        node = picture_node(file_bytes, align=align, max_width=max_width)
    except EscposError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return NodeSchema(name=node.name, params=dict(node.params), data=node.data)


@router.post("/qr-node", response_model=NodeSchema)
async def qr_to_node(req: QrNodeRequest):
    """Render a QR code into an image node."""
    try:
        node = qr_image_node(req.value, box_size=req.box_size, border=req.border, align=req.align)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return NodeSchema(name=node.name, params=dict(node.params), data=node.data)
