"""
Rendering backends.

Contains the renderers that consume a resolution result.
"""

from __future__ import annotations

from .base import CodeBackend
from .info_backend import InfoBackend

__all__ = [
    "CodeBackend",
    "InfoBackend",
]
