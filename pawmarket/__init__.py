"""
PawMarket - Pet and Pet Services Marketplace

This package contains the marketplace pages (pets, services, profile), the
favorites toggle and aggregation, and the backend client behind them.
"""

__version__ = "1.0.0"

from .marketplace import Marketplace

__all__ = ["Marketplace"]
