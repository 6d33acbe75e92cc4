"""Repository layer: DB access over a StorageHandle.

Keep SQL strings here so routes never build queries themselves.
"""
from __future__ import annotations

from .produce_repo import ProduceRepository

__all__ = ["ProduceRepository"]
