"""Pydantic records returned by the stores, and the form models handlers bind."""
