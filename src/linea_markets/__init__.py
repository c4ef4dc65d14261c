"""Linea DeFi market dashboard: TVL, prices and reward projections."""

__version__ = "0.1.0"
