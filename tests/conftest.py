"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from blockworld import TextCodec, World
from blockworld.codecs import BinaryCodec
from sample_registry import BORDER, build_registry


@pytest.fixture
def registry():
    """Fresh registry with a handful of block types."""
    return build_registry()


@pytest.fixture
def world(registry):
    """Empty 4x3 world."""
    return World(4, 3, registry, border_block=BORDER)


@pytest.fixture
def binary_codec(registry):
    return BinaryCodec(registry, border_block=BORDER)


@pytest.fixture
def text_codec(registry):
    return TextCodec(registry, border_block=BORDER)
