"""Pydantic models for documents exposed by the API adapter."""
