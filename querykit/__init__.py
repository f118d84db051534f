"""Composable, type-aware query building over the SQLAlchemy ORM."""

__version__ = "0.1.0"
