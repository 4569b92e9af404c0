import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from nodeprint.printer.encoder import EscposEncoder  # noqa: E402
from nodeprint.printer.nodes import NodeDispatcher  # noqa: E402


@pytest.fixture
def encoder():
    return EscposEncoder()


@pytest.fixture
def dispatcher(encoder):
    return NodeDispatcher(encoder)


class BytesSink:
    def __init__(self):
        self.chunks = []

    def write(self, data):
        self.chunks.append(data)
        return len(data)

    @property
    def data(self):
        return b"".join(self.chunks)


@pytest.fixture
def sink():
    return BytesSink()
