"""Pydantic schemas for the ScaleKeeper API."""
