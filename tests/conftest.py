"""Shared pytest configuration for the snowfall test suite."""

import os
import random
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated unit tests")
    config.addinivalue_line("markers", "integration: tests wiring several components together")


@pytest.fixture
def rng():
    """Seeded random source so flake layouts are reproducible."""
    return random.Random(1234)
