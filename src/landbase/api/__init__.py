"""HTTP surface for the land-base service."""
