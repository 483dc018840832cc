"""Swap venues: simulated, markup wrapper, custodial exchange and on-chain AMM."""

from .markup import MarkupSwapProvider
from .mock import MockPrimaryVenue, MockSecondaryVenue

__all__ = [
    "MarkupSwapProvider",
    "MockPrimaryVenue",
    "MockSecondaryVenue",
]
