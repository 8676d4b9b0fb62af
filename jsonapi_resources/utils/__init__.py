"""Utility helpers for JSON:API query parsing."""

from .query_params import parse_query_params

__all__ = ["parse_query_params"]
