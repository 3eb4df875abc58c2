"""Catalog service: search query, aggregation and filter helpers."""
