"""
Data models used outside the database layer.

- io: Pydantic request/response schemas for the HTTP API
"""
