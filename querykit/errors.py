"""Error taxonomy for query execution."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryError(Exception):
    code: str
    detail: str

    def __str__(self) -> str:
        return self.detail


class NotFoundError(QueryError):
    def __init__(self, code: str, detail: str):
        super().__init__(code=code, detail=detail)


class AmbiguousResultError(QueryError):
    def __init__(self, code: str, detail: str):
        super().__init__(code=code, detail=detail)


class InvalidConditionError(QueryError):
    def __init__(self, code: str, detail: str):
        super().__init__(code=code, detail=detail)
