"""ScaleKeeper husbandry backend."""
