"""Checkout service: order validation, sanitizing and canonical mapping."""
