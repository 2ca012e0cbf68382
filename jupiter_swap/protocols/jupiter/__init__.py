"""
Jupiter Swap Protocol

Quote and swap-transaction endpoints of the Jupiter aggregator.
"""

from .api import JupiterAPI, slippage_to_bps

__all__ = [
    "JupiterAPI",
    "slippage_to_bps",
]
