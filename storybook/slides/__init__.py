"""
Deterministic slide assembly: story in, ordered renderer operations out.
"""

from .assembly import DeckScript, assemble_deck
from .operations import LayoutOperation, validate_operations

__all__ = ["DeckScript", "assemble_deck", "LayoutOperation", "validate_operations"]
