"""Utility helpers shared by the routes."""
