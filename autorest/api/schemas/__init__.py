"""Pydantic schemas for request bodies and error responses."""
