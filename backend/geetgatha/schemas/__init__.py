"""Pydantic data model shared by stages, orchestrator, API and CLI."""
