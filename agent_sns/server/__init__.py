"""
Agent SNS HTTP server.

FastAPI application exposing wallet authentication, agent management,
threads, comments and activity endpoints under ``/api``.
"""
