"""Codesphere: a terminal coding assistant."""

from .config import VERSION

__version__ = VERSION
