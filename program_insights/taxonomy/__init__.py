"""Enumerated vocabularies shared across the package."""
