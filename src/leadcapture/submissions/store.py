"""Durable storage for form submissions, backed by SQLAlchemy."""

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool, QueuePool, StaticPool

from leadcapture.lib.exceptions import StoreError
from leadcapture.submissions.models import StoredSubmission, SubmissionFields
from leadcapture.utils.logger import get_logger

store_logger = get_logger("store")

# Storage column names, in record order
RECORD_COLUMNS = (
    "id", "createdAt", "type", "name", "email", "phone",
    "eventDate", "eventLocation", "eventType", "headcount", "message",
)


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_engine(database_url: str) -> Engine:
    """
    Create SQLAlchemy engine with appropriate pooling.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        SQLAlchemy engine
    """
    if database_url.startswith("sqlite"):
        path = database_url.split(":///", 1)[-1] if ":///" in database_url else ""
        if not path or path == ":memory:":
            # In-memory SQLite: a single shared connection keeps the table alive
            return create_engine(
                "sqlite://",
                poolclass=StaticPool,
                connect_args={'check_same_thread': False}
            )
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            database_url,
            poolclass=NullPool,
            connect_args={'check_same_thread': False}
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=3600
    )


class SubmissionStore:
    """
    Write-once store holding one flat record per submission.

    Every column is text; unset optional fields are stored as "". There is
    no update or delete path.
    """

    def __init__(self, engine: Engine, table_name: str = "submissions"):
        self.engine = engine
        self.metadata = MetaData()
        self.table = Table(
            table_name,
            self.metadata,
            Column("id", String(36), primary_key=True),
            *[Column(name, Text, nullable=False, default="") for name in RECORD_COLUMNS[1:]],
        )
        self._ready = False

    @classmethod
    def from_url(cls, database_url: str, table_name: str = "submissions") -> "SubmissionStore":
        """
        Build a store for a database URL.

        Raises:
            StoreError: If the URL is malformed, names an unknown dialect,
                or its driver is not installed
        """
        try:
            engine = build_engine(database_url)
        except (SQLAlchemyError, ImportError, ValueError, OSError) as e:
            raise StoreError("Could not configure database", {"error": str(e)}) from e
        return cls(engine, table_name)

    def create_tables(self) -> None:
        """Create the submissions table if it does not exist."""
        try:
            self.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreError("Could not create submissions table", {"error": str(e)}) from e
        self._ready = True

    def _ensure_table(self) -> None:
        # Retried on every call until the table exists
        if not self._ready:
            self.create_tables()

    def save(self, fields: SubmissionFields) -> StoredSubmission:
        """
        Persist a submission under a freshly generated id and timestamp.

        Args:
            fields: Sanitized, validated submission fields

        Returns:
            The stored submission including id and created_at

        Raises:
            StoreError: If the record could not be written
        """
        stored = StoredSubmission(
            **fields.model_dump(),
            id=str(uuid.uuid4()),
            created_at=utc_timestamp(),
        )

        try:
            self._ensure_table()
            with self.engine.begin() as conn:
                conn.execute(self.table.insert().values(**stored.to_record()))
        except StoreError as e:
            store_logger.error("store_table_unavailable", extra={
                "data": {"id": stored.id, **e.details}
            })
            raise StoreError("Could not save submission", {"id": stored.id}) from e
        except SQLAlchemyError as e:
            store_logger.error("store_write_failed", extra={
                "data": {"id": stored.id, "error_type": type(e).__name__, "error": str(e)}
            })
            raise StoreError("Could not save submission", {"id": stored.id}) from e

        store_logger.info("submission_stored", extra={
            "data": {"id": stored.id, "type": stored.kind.value}
        })
        return stored

    def get(self, submission_id: str) -> Optional[StoredSubmission]:
        """Fetch one stored submission by id."""
        self._ensure_table()
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(self.table).where(self.table.c.id == submission_id)
                ).mappings().first()
        except SQLAlchemyError as e:
            raise StoreError("Could not read submission", {"id": submission_id}) from e
        return StoredSubmission.from_record(dict(row)) if row else None

    def count(self) -> int:
        """Number of stored submissions."""
        self._ensure_table()
        try:
            with self.engine.connect() as conn:
                return conn.execute(select(func.count()).select_from(self.table)).scalar_one()
        except SQLAlchemyError as e:
            raise StoreError("Could not count submissions") from e

    def close(self) -> None:
        """Dispose of the connection pool."""
        if self.engine:
            self.engine.dispose()
