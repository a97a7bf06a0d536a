"""Service layer for ScaleKeeper."""
