"""Test factories for generating test data."""

from tests.factories.catalog import CategoryFactory, ItemFactory

__all__ = ["CategoryFactory", "ItemFactory"]
