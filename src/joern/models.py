"""Pydantic bodies exchanged with the Joern HTTP API."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class QueryRequest(BaseModel):
    query: str


class QueryResponse(BaseModel):
    uuid: UUID


class QueryResult(BaseModel):
    """Outcome of a finished query. Output is passed through as-is."""

    model_config = ConfigDict(frozen=True)

    success: bool
    stdout: str
    stderr: str
