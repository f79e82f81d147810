"""Utility helpers shared across payhook modules."""
