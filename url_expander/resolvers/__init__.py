"""Resolution tiers: redirect probe, page navigation, and the resolver combining them."""

from .base import BaseNavigator, BaseProbe, BaseResolver
from .navigator import PlaywrightNavigator
from .probe import RedirectProbe
from .redirect import RedirectResolver, ResolutionState

__all__ = [
    "BaseNavigator",
    "BaseProbe",
    "BaseResolver",
    "PlaywrightNavigator",
    "RedirectProbe",
    "RedirectResolver",
    "ResolutionState",
]
