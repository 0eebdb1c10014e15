"""Application services layered on the core."""
