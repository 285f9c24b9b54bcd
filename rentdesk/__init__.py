"""rentdesk - property management core: entities, occupancy and rent rollups."""

__version__ = "0.1.0"
