"""Pydantic models shared across components."""
