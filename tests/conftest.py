"""Shared fixtures for the media-sorter tests."""

import random
from pathlib import Path

import pytest
from PIL import Image

from media_sorter.utils.config import Config


def make_pattern_image(path: Path, seed: int, size: int = 64) -> Path:
    """
    Write a JPEG made of an 8x8 grid of black and white cells.

    The cell pattern comes from ``seed``, so equal seeds give images with the
    same average hash and different seeds give different ones.
    """
    bits = random.Random(seed).getrandbits(64) | 1
    cell = size // 8
    img = Image.new("L", (size, size), 0)
    for idx in range(64):
        if bits >> idx & 1:
            row, col = divmod(idx, 8)
            img.paste(255, (col * cell, row * cell, (col + 1) * cell, (row + 1) * cell))
    path.parent.mkdir(parents=True, exist_ok=True)
    img.convert("RGB").save(path, "JPEG", quality=95)
    return path


@pytest.fixture
def make_image():
    """Factory fixture writing pattern images."""
    return make_pattern_image


@pytest.fixture
def config(tmp_path):
    """Configuration stored inside the test's temporary directory."""
    return Config(tmp_path / "settings" / "config.json")
