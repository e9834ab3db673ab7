"""Pydantic models for request validation, response serialization and the envelope."""
