"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .routers import images, printer

settings = get_settings()
logging.basicConfig(level=settings.log_level)

app = FastAPI(title="ESC/POS Node Printer", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(printer.router)
app.include_router(images.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
