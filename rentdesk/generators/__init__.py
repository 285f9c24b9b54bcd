"""Sample data generators."""

from rentdesk.generators.seed import SeedData, SeedDataGenerator

__all__ = ["SeedData", "SeedDataGenerator"]
