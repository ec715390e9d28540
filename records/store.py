"""
records/store.py -- SQLAlchemy-backed persistence layer for records.

Uses SQLAlchemy Core (not ORM) so the Record dataclass in records/models.py
remains the authoritative domain representation.

Pattern: Repository + Data Mapper. RecordStore is the repository; _row_to_record
is the mapper. Route handlers never touch SQL directly.

Query semantics for list_records() follow the usual fake-REST conventions:
  q      -- case-insensitive substring match on title OR description
  sort   -- one of id, title, description (anything else falls back to id)
  order  -- "asc" (default) or "desc"
  page   -- 1-based page number, only applied together with limit
  limit  -- page size; without page it caps the result from the start

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = RecordStore("sqlite:///:memory:")
    record_id = store.create_record(Record(title="T", description="D"))
    records, total = store.list_records(q="react", sort="title", order="desc")
    store.close()
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, or_, select, text
from sqlalchemy.engine import Engine

from core.config import get_settings
from records.models import Record

logger = logging.getLogger("recordkeeper.store")

SORTABLE_FIELDS: tuple[str, ...] = ("id", "title", "description")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_records = Table(
    "records",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class RecordStore:
    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # FastAPI runs sync handlers in a thread pool, so one pooled
            # connection may be used from several threads.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_record(self, record: Record) -> int:
        """Insert a new record and return its assigned ID."""
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _records.insert().values(
                    title=record.title,
                    description=record.description,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def replace_record(self, record_id: int, title: str, description: str) -> bool:
        """Overwrite title and description. Returns False if record_id does not exist."""
        return self.patch_record(record_id, title=title, description=description)

    def patch_record(self, record_id: int, **fields) -> bool:
        """Update any subset of title/description.

        Unknown keys raise ValueError rather than being silently ignored.
        Returns True if a row was updated, False if record_id was not found.
        """
        unknown = set(fields) - {"title", "description"}
        if unknown:
            raise ValueError(f"Unknown record fields: {unknown!r}")
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_records.update().where(_records.c.id == record_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_record(self, record_id: int) -> bool:
        """Delete a record. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_records.delete().where(_records.c.id == record_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record(self, record_id: int) -> Optional[Record]:
        """Fetch a single record by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_records.select().where(_records.c.id == record_id)).fetchone()
        return _row_to_record(row) if row is not None else None

    def list_records(
        self,
        q: Optional[str] = None,
        sort: Optional[str] = None,
        order: str = "asc",
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> tuple[list[Record], int]:
        """Return (records, total) where total counts every match before paging."""
        where = None
        if q:
            where = or_(
                _records.c.title.icontains(q, autoescape=True),
                _records.c.description.icontains(q, autoescape=True),
            )

        column = _records.c[sort] if sort in SORTABLE_FIELDS else _records.c.id
        ordering = column.desc() if order == "desc" else column.asc()

        stmt = _records.select().order_by(ordering, _records.c.id)
        count_stmt = select(func.count()).select_from(_records)
        if where is not None:
            stmt = stmt.where(where)
            count_stmt = count_stmt.where(where)
        if limit is not None:
            stmt = stmt.limit(limit)
            if page is not None:
                stmt = stmt.offset((max(page, 1) - 1) * limit)

        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
            total = conn.execute(count_stmt).scalar() or 0
        return [_row_to_record(r) for r in rows], total

    def count_records(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_records)).scalar() or 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Record store ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_record(row) -> Record:
    return Record(
        id=row.id,
        title=row.title,
        description=row.description,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
