"""Canonical player models."""

from .player import PlayerRecord, RosterPlayer

__all__ = ["PlayerRecord", "RosterPlayer"]
