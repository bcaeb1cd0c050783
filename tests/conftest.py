"""Shared test fixtures."""
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `reactform.*` imports work
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class FakeElement:
    """In-memory stand-in for a widget adapter.

    set_value() is silent like the real adapters; edit() plays the user.
    """

    def __init__(self, value=None):
        self.value = value
        self.properties = {}
        self.writes = []
        self._callbacks = []

    def get_value(self):
        return self.value

    def set_value(self, value):
        self.value = value
        self.writes.append(value)

    def on_change(self, callback):
        self._callbacks.append(callback)

    def set_property(self, name, flag):
        self.properties[name] = flag

    def edit(self, value):
        self.value = value
        for callback in list(self._callbacks):
            callback(value)


class EchoElement(FakeElement):
    """An adapter whose set_value() is not silent."""

    def set_value(self, value):
        super().set_value(value)
        for callback in list(self._callbacks):
            callback(value)


class FakePlaceholder:
    def __init__(self):
        self.elements = []
        self.discards = 0
        self.finishes = 0

    def discard_generated(self):
        self.elements = []
        self.discards += 1

    def add_generated(self, element):
        self.elements.append(element)

    def finish_generated(self):
        self.finishes += 1


@pytest.fixture
def logs():
    """(level, message) tuples recorded by the ``log_fn`` fixture."""
    return []


@pytest.fixture
def log_fn(logs):
    return lambda level, message: logs.append((level, message))
