"""Core package for the scrim bot.

This module exposes the persisted models and the store so that consumers of
the package can simply import them from ``scrim_bot``.
"""

from .data.models import Profile, Scrim, ScrimStatus
from .data.store import ScrimStore

__all__ = ["Profile", "Scrim", "ScrimStatus", "ScrimStore"]
