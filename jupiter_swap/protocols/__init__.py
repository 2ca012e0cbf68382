"""
Protocol clients for jupiter_swap
"""

from .jupiter import JupiterAPI

__all__ = ["JupiterAPI"]
