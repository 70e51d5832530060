"""Collectibles catalog and valuation service."""
