"""Application configuration.

Values come from environment variables prefixed with ``NODEPRINT_`` (or a
``.env`` file); :func:`get_settings` caches the merged result.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NODEPRINT_", env_file=".env", extra="ignore")

    text_encoding: str = "utf-8"
    paper_width_dots: int = 512  # 80mm paper @ 203dpi; 384 for 58mm
    transport_type: str = "network"  # network | usb
    network_host: str | None = None
    network_port: int = 9100
    network_timeout: float = 10.0
    usb_vendor_id: int = 0x04B8
    usb_product_id: int = 0x0202
    usb_out_ep: int = 0x01
    usb_in_ep: int = 0x82
    usb_timeout_ms: int = 5000
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
