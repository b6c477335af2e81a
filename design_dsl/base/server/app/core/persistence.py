# app/core/persistence.py
"""
Data sources used by generated business objects.

A query filter is a dict with optional keys:
    where   field -> value (equality, all must match)
    order   "field", "field DESC", or a list of those
    limit   maximum number of records
    offset  records to skip
"""

import asyncio
import itertools
import logging
from typing import Any, Optional

from sqlmodel import Session, SQLModel, create_engine, func, select

logger = logging.getLogger("ddsl.persistence")


def _order_clauses(order) -> list[tuple]:
    if not order:
        return []
    items = [order] if isinstance(order, str) else list(order)
    clauses = []
    for item in items:
        parts = item.split()
        descending = len(parts) > 1 and parts[1].upper() == "DESC"
        clauses.append((parts[0], descending))
    return clauses


class DataSource:
    def __init__(self, name: str, models: Optional[dict] = None, id_fields: Optional[dict] = None, **options):
        self.name = name
        self.models = dict(models or {})
        self.id_fields = dict(id_fields or {})
        self.options = options

    async def connect(self) -> None:
        logger.info(f"[PERSIST] {self.name} ready")

    async def find(self, entity_name: str, query_filter: dict) -> list[dict]:
        raise NotImplementedError

    async def count(self, entity_name: str, where: dict) -> int:
        raise NotImplementedError

    async def create(self, entity_name: str, items: list[dict]) -> list[dict]:
        raise NotImplementedError

    async def update(self, entity_name: str, where: dict, updates: dict) -> list[dict]:
        raise NotImplementedError

    async def delete(self, entity_name: str, where: dict) -> int:
        raise NotImplementedError


class MemoryDataSource(DataSource):
    """Records kept in process memory; identities are assigned incrementally."""

    def __init__(self, name: str, models: Optional[dict] = None, id_fields: Optional[dict] = None, **options):
        super().__init__(name, models, id_fields, **options)
        self._tables: dict[str, list[dict]] = {}
        self._ids: dict[str, Any] = {}

    def _table(self, entity_name: str) -> list[dict]:
        return self._tables.setdefault(entity_name, [])

    def _select(self, entity_name: str, where: dict) -> list[dict]:
        return [r for r in self._table(entity_name) if all(r.get(k) == v for k, v in (where or {}).items())]

    async def find(self, entity_name, query_filter):
        query_filter = query_filter or {}
        records = self._select(entity_name, query_filter.get("where"))
        for field, descending in reversed(_order_clauses(query_filter.get("order"))):
            records = sorted(records, key=lambda r: (r.get(field) is None, r.get(field)), reverse=descending)
        offset = query_filter.get("offset") or 0
        limit = query_filter.get("limit")
        records = records[offset:offset + limit] if limit else records[offset:]
        return [dict(r) for r in records]

    async def count(self, entity_name, where):
        return len(self._select(entity_name, where))

    async def create(self, entity_name, items):
        id_field = self.id_fields.get(entity_name, "id")
        counter = self._ids.setdefault(entity_name, itertools.count(1))
        created = []
        for item in items:
            record = dict(item)
            if record.get(id_field) is None:
                record[id_field] = next(counter)
            self._table(entity_name).append(record)
            created.append(dict(record))
        return created

    async def update(self, entity_name, where, updates):
        updated = []
        for record in self._select(entity_name, where):
            record.update(updates)
            updated.append(dict(record))
        return updated

    async def delete(self, entity_name, where):
        doomed = self._select(entity_name, where)
        self._tables[entity_name] = [r for r in self._table(entity_name) if r not in doomed]
        return len(doomed)


class SqlDataSource(DataSource):
    """SQLModel tables over a SQLAlchemy engine; calls run in worker threads."""

    def __init__(self, name: str, url: str, models: Optional[dict] = None, id_fields: Optional[dict] = None, **options):
        super().__init__(name, models, id_fields, **options)
        self.url = url
        # data source settings are passed to the SQLAlchemy engine
        engine_options = dict(options)
        if url.startswith("sqlite"):
            engine_options.setdefault("connect_args", {"check_same_thread": False})
        self.engine = create_engine(url, **engine_options)

    async def connect(self) -> None:
        await asyncio.to_thread(SQLModel.metadata.create_all, self.engine)
        logger.info(f"[PERSIST] {self.name} connected to {self.engine.url.render_as_string(hide_password=True)}")

    def _model(self, entity_name: str):
        return self.models[entity_name]

    def _where(self, statement, model, where: dict):
        for field, value in (where or {}).items():
            statement = statement.where(getattr(model, field) == value)
        return statement

    def _find(self, entity_name, query_filter):
        model = self._model(entity_name)
        statement = self._where(select(model), model, query_filter.get("where"))
        for field, descending in _order_clauses(query_filter.get("order")):
            column = getattr(model, field)
            statement = statement.order_by(column.desc() if descending else column)
        if query_filter.get("offset"):
            statement = statement.offset(query_filter["offset"])
        if query_filter.get("limit"):
            statement = statement.limit(query_filter["limit"])
        with Session(self.engine) as session:
            return [row.model_dump() for row in session.exec(statement).all()]

    def _count(self, entity_name, where):
        model = self._model(entity_name)
        statement = self._where(select(func.count()).select_from(model), model, where)
        with Session(self.engine) as session:
            return session.exec(statement).one()

    def _create(self, entity_name, items):
        model = self._model(entity_name)
        rows = [model.model_validate(item) for item in items]
        with Session(self.engine) as session:
            session.add_all(rows)
            session.commit()
            for row in rows:
                session.refresh(row)
            return [row.model_dump() for row in rows]

    def _update(self, entity_name, where, updates):
        model = self._model(entity_name)
        with Session(self.engine) as session:
            rows = session.exec(self._where(select(model), model, where)).all()
            for row in rows:
                for field, value in updates.items():
                    setattr(row, field, value)
                session.add(row)
            session.commit()
            for row in rows:
                session.refresh(row)
            return [row.model_dump() for row in rows]

    def _delete(self, entity_name, where):
        model = self._model(entity_name)
        with Session(self.engine) as session:
            rows = session.exec(self._where(select(model), model, where)).all()
            for row in rows:
                session.delete(row)
            session.commit()
            return len(rows)

    async def find(self, entity_name, query_filter):
        return await asyncio.to_thread(self._find, entity_name, query_filter or {})

    async def count(self, entity_name, where):
        return await asyncio.to_thread(self._count, entity_name, where)

    async def create(self, entity_name, items):
        return await asyncio.to_thread(self._create, entity_name, items)

    async def update(self, entity_name, where, updates):
        return await asyncio.to_thread(self._update, entity_name, where, updates)

    async def delete(self, entity_name, where):
        return await asyncio.to_thread(self._delete, entity_name, where)


DATA_SOURCE_TYPES = {
    "Memory": MemoryDataSource,
    "Sql": SqlDataSource,
    "Sqlite": SqlDataSource,
    "Postgres": SqlDataSource,
    "MySql": SqlDataSource,
}


def create_data_source(name: str, persistence_type: str, url: str = "", models=None, id_fields=None, options=None) -> DataSource:
    cls = DATA_SOURCE_TYPES.get(persistence_type)
    if cls is None:
        raise ValueError(f"Unknown persistence type '{persistence_type}' for data source {name}")
    if cls is MemoryDataSource:
        return cls(name, models, id_fields, **(options or {}))
    return cls(name, url, models, id_fields, **(options or {}))
