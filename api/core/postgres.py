"""
Postgres-backed collections.

All collections share the `documents` table (see `core/db.py`). Predicates
are compiled to SQL here; every value and every field name is a bind
parameter, so nothing caller-supplied is ever spliced into the SQL text.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

import asyncpg

from . import db
from .collection import (
    TEXT_SEARCH_KEY,
    DESCENDING,
    AnyOf,
    Condition,
    Contains,
    DuplicateKeyError,
    Equals,
    FindOptions,
    Populate,
    Predicate,
    Range,
    TextSearch,
    as_utc,
    encode_document,
    project_document,
    referenced_subset,
    utc_now,
)
from .query import new_id


class _Params:
    """Collects bind values and hands out their $n placeholders."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_array_sql(field_sql: str) -> str:
    return (
        f"CASE WHEN jsonb_typeof({field_sql}) = 'array' "
        f"THEN {field_sql} ELSE jsonb_build_array({field_sql}) END"
    )


def _decode(raw: Any) -> dict[str, Any] | None:
    if raw is None:
        return None
    if isinstance(raw, (bytes, str)):
        return json.loads(raw)
    return dict(raw)


class PostgresCollection:
    def __init__(self, name: str, text_fields: tuple[str, ...] = ()) -> None:
        self.name = name
        self.text_fields = tuple(text_fields)

    def _condition_sql(self, field_name: str, condition: Condition, params: _Params) -> str:
        if field_name == TEXT_SEARCH_KEY:
            if not isinstance(condition, TextSearch):
                raise TypeError(f"{TEXT_SEARCH_KEY} requires a TextSearch condition")
            if not self.text_fields or not condition.terms:
                return "false"
            columns = ", ".join(f"d.body ->> {params.add(f)}::text" for f in self.text_fields)
            tsquery = params.add(" | ".join(condition.terms))
            return f"to_tsvector('simple', concat_ws(' ', {columns})) @@ to_tsquery('simple', {tsquery})"

        field_sql = f"(d.body -> {params.add(field_name)}::text)"

        if isinstance(condition, Equals):
            return f"{field_sql} = {params.add(json.dumps(condition.value))}::jsonb"

        if isinstance(condition, AnyOf):
            if not condition.values:
                return "false"
            return f"{field_sql} ?| {params.add(list(condition.values))}::text[]"

        if isinstance(condition, Contains):
            pattern = params.add(f"%{_escape_like(condition.text)}%")
            return (
                f"EXISTS (SELECT 1 FROM jsonb_array_elements_text({_as_array_sql(field_sql)}) AS e(v) "
                f"WHERE e.v ILIKE {pattern})"
            )

        if isinstance(condition, Range):
            moment = f"({field_sql} #>> '{{}}')::timestamptz"
            parts = [f"jsonb_typeof({field_sql}) = 'string'"]
            if condition.gte is not None:
                parts.append(f"{moment} >= {params.add(as_utc(condition.gte))}")
            if condition.lte is not None:
                parts.append(f"{moment} <= {params.add(as_utc(condition.lte))}")
            if condition.lt is not None:
                parts.append(f"{moment} < {params.add(as_utc(condition.lt))}")
            return "(" + " AND ".join(parts) + ")"

        raise TypeError(f"Unsupported condition: {type(condition).__name__}")

    def _where_sql(self, predicate: Predicate, params: _Params) -> str:
        clauses = [f"d.collection = {params.add(self.name)}"]
        for field_name, condition in predicate.items():
            clauses.append(self._condition_sql(field_name, condition, params))
        return " AND ".join(clauses)

    def _join_sql(self, populate: Populate | None, params: _Params) -> tuple[str, str]:
        if populate is None:
            return "", ""
        join = (
            f"LEFT JOIN documents r ON r.collection = {params.add(populate.collection)} "
            f"AND r.id = d.body ->> {params.add(populate.field)}::text"
        )
        return ", r.body AS ref", join

    @staticmethod
    def _apply_populate(row: dict[str, Any], populate: Populate | None, document: dict[str, Any]) -> dict[str, Any]:
        if populate is not None and populate.field in document:
            document[populate.field] = referenced_subset(_decode(row.get("ref")), populate.fields)
        return document

    async def find(self, predicate: Predicate, options: FindOptions | None = None) -> list[dict[str, Any]]:
        options = options or FindOptions()
        params = _Params()
        ref_select, join = self._join_sql(options.populate, params)
        where = self._where_sql(predicate, params)

        order = []
        for field_name, direction in options.sort.items():
            keyword = "DESC" if direction == DESCENDING else "ASC"
            order.append(f"NULLIF(d.body -> {params.add(field_name)}::text, 'null'::jsonb) {keyword} NULLS LAST")
        order.append("d.id ASC")

        sql = f"""
            SELECT d.body{ref_select}
            FROM documents d
            {join}
            WHERE {where}
            ORDER BY {", ".join(order)}
            OFFSET {params.add(options.skip)}
        """
        if options.limit is not None:
            sql += f" LIMIT {params.add(options.limit)}"

        rows = await db.fetch_all(sql, *params.values)
        documents = []
        for row in rows:
            document = project_document(_decode(row["body"]) or {}, options.projection)
            documents.append(self._apply_populate(row, options.populate, document))
        return documents

    async def count(self, predicate: Predicate) -> int:
        params = _Params()
        where = self._where_sql(predicate, params)
        total = await db.fetch_value(f"SELECT count(*) FROM documents d WHERE {where}", *params.values)
        return int(total or 0)

    async def distinct(self, field_name: str, predicate: Predicate | None = None) -> list[Any]:
        params = _Params()
        where = self._where_sql(predicate or {}, params)
        field_sql = f"(d.body -> {params.add(field_name)}::text)"
        rows = await db.fetch_all(
            f"""
            SELECT DISTINCT e.v AS value
            FROM documents d,
                 jsonb_array_elements({_as_array_sql(field_sql)}) AS e(v)
            WHERE {where}
              AND e.v IS NOT NULL
              AND e.v <> 'null'::jsonb
              AND e.v <> '""'::jsonb
            """,
            *params.values,
        )
        return [json.loads(row["value"]) if isinstance(row["value"], str) else row["value"] for row in rows]

    async def get(self, document_id: str, *, populate: Populate | None = None) -> dict[str, Any] | None:
        params = _Params()
        ref_select, join = self._join_sql(populate, params)
        row = await db.fetch_one(
            f"""
            SELECT d.body{ref_select}
            FROM documents d
            {join}
            WHERE d.collection = {params.add(self.name)}
              AND d.id = {params.add(document_id)}
            """,
            *params.values,
        )
        if row is None:
            return None
        return self._apply_populate(row, populate, _decode(row["body"]) or {})

    async def insert(self, document: Mapping[str, Any]) -> dict[str, Any]:
        now = utc_now()
        document_id = new_id()
        body = encode_document({**document, "id": document_id, "createdAt": now, "updatedAt": now})
        try:
            row = await db.fetch_one(
                """
                INSERT INTO documents (collection, id, body)
                VALUES ($1, $2, $3::jsonb)
                RETURNING body
                """,
                self.name,
                document_id,
                body,
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateKeyError(f"Duplicate key in '{self.name}'.") from exc
        if row is None:
            raise RuntimeError(f"Failed to insert into '{self.name}'.")
        return _decode(row["body"]) or {}

    async def update(self, document_id: str, changes: Mapping[str, Any]) -> dict[str, Any] | None:
        patch = {k: v for k, v in changes.items() if k not in ("id", "createdAt")}
        try:
            row = await db.fetch_one(
                """
                UPDATE documents
                SET body = body || $3::jsonb
                WHERE collection = $1
                  AND id = $2
                RETURNING body
                """,
                self.name,
                document_id,
                encode_document({**patch, "updatedAt": utc_now()}),
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateKeyError(f"Duplicate key in '{self.name}'.") from exc
        return _decode(row["body"]) if row is not None else None

    async def delete(self, document_id: str) -> bool:
        status = await db.execute(
            """
            DELETE FROM documents
            WHERE collection = $1
              AND id = $2
            """,
            self.name,
            document_id,
        )
        return status.endswith(" 1")
