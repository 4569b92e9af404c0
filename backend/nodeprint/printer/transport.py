"""Transport abstraction — USB and raw TCP backends."""
from abc import ABC, abstractmethod
from typing import Optional
import logging
import socket

from .constants import NETWORK_PORT
from .errors import TransportError

log = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract byte-level transport to an ESC/POS printer."""

    @abstractmethod
    def connect(self) -> None: ...

    @abstractmethod
    def write(self, data: bytes) -> int: ...

    @abstractmethod
    def read(self, length: int = 0x80) -> bytes: ...

    @abstractmethod
    def close(self) -> None: ...

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *exc):
        self.close()


# ---------------------------------------------------------------------------
# USB Transport
# ---------------------------------------------------------------------------

class USBTransport(Transport):
    def __init__(self, vendor_id: int, product_id: int, serial: Optional[str] = None,
                 out_ep: int = 0x01, in_ep: int = 0x82, timeout_ms: int = 5000):
        self._vendor_id = vendor_id
        self._product_id = product_id
        self._serial = serial
        self._out_ep = out_ep
        self._in_ep = in_ep
        self._timeout_ms = timeout_ms
        self._dev = None

    def connect(self) -> None:
        import usb.core

        for dev in usb.core.find(find_all=True, idVendor=self._vendor_id, idProduct=self._product_id):
            if self._serial and dev.serial_number != self._serial:
                continue
            self._dev = dev
            break

        if self._dev is None:
            raise TransportError(
                f"No USB printer found for {self._vendor_id:04x}:{self._product_id:04x}")

        try:
            if self._dev.is_kernel_driver_active(0):
                self._dev.detach_kernel_driver(0)
            self._dev.set_configuration()
        except usb.core.USBError as e:
            raise TransportError(f"Could not claim USB printer: {e}") from e
        log.info("USB connected: %04x:%04x", self._vendor_id, self._product_id)

    def write(self, data: bytes) -> int:
        import usb.core
        if self._dev is None:
            raise TransportError("USB transport is not connected")
        sent = 0
        try:
            while sent < len(data):
                n = self._dev.write(self._out_ep, data[sent:sent + 0x40], self._timeout_ms)
                if n == 0:
                    raise TransportError("IO timeout while writing to printer")
                sent += n
        except usb.core.USBError as e:
            raise TransportError(f"USB write failed: {e}") from e
        return sent

    def read(self, length: int = 0x80) -> bytes:
        import usb.core
        if self._dev is None:
            raise TransportError("USB transport is not connected")
        try:
            return bytes(self._dev.read(self._in_ep, length, self._timeout_ms))
        except usb.core.USBError as e:
            raise TransportError("IO timeout while reading from printer") from e

    def close(self) -> None:
        if self._dev:
            import usb.util
            usb.util.dispose_resources(self._dev)
            self._dev = None


# ---------------------------------------------------------------------------
# Network Transport (raw TCP, "JetDirect" port)
# ---------------------------------------------------------------------------

class NetworkTransport(Transport):
    def __init__(self, host: str, port: int = NETWORK_PORT, timeout: float = 10.0):
        self._host = host
        self._port = port
        self._timeout = timeout
        self._sock = None

    def connect(self) -> None:
        try:
            self._sock = socket.create_connection((self._host, self._port), timeout=self._timeout)
        except OSError as e:
            raise TransportError(f"Could not connect to {self._host}:{self._port}: {e}") from e
        log.info("TCP connected: %s:%d", self._host, self._port)

    def write(self, data: bytes) -> int:
        if self._sock is None:
            raise TransportError("Network transport is not connected")
        try:
            self._sock.sendall(data)
        except OSError as e:
            raise TransportError(f"Network write failed: {e}") from e
        return len(data)

    def read(self, length: int = 0x80) -> bytes:
        if self._sock is None:
            raise TransportError("Network transport is not connected")
        try:
            return self._sock.recv(length)
        except OSError as e:
            raise TransportError(f"Network read failed: {e}") from e

    def close(self) -> None:
        if self._sock:
            self._sock.close()
            self._sock = None
