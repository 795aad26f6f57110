"""Data models for the Plannora API.

This package contains Pydantic models for request/response validation
and the enums shared by routers and repositories.
"""
