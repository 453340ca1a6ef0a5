"""Transactional storage for bands, occupancy and allocation history.

DuckDB-based storage. The primary key on ``frequencies.value`` is the
only defense against double-booking; every mutation is expected to run
inside :meth:`SpectrumDB.transaction`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

import duckdb

from spectrum_allocator.core.config import FORBIDDEN_HOLDER
from spectrum_allocator.core.exceptions import NotFoundError, StorageError, WriteConflictError
from spectrum_allocator.storage.models import AllocationRecord, Band, Holder, Occupancy

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

logger = logging.getLogger(__name__)

# Path to schema.sql relative to this file
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_OCCUPANCY_COLUMNS = "value, holder_id, email, latitude, longitude, created_at"
_HISTORY_COLUMNS = "id, value, holder_id, email, latitude, longitude, created_at"


class SpectrumDB:
    """Spectrum occupancy store.

    Provides band CRUD, occupancy snapshots, bulk allocation inserts and
    range deletes, all composable inside one transaction.

    Example:
        >>> with SpectrumDB(":memory:") as db:
        ...     with db.transaction():
        ...         taken = db.occupied_in_range(100, 200)
        ...         db.insert_allocations([100, 110], holder)
    """

    def __init__(
        self,
        db_path: Path | str = "data/spectrum.duckdb",
        connection: DuckDBPyConnection | None = None,
    ) -> None:
        """Initialize database handle.

        Args:
            db_path: Path to DuckDB file. Use ":memory:" for in-memory DB.
            connection: Existing connection to bind to instead of opening one.
                Used by :meth:`cursor`.
        """
        self.db_path = Path(db_path) if db_path != ":memory:" else db_path
        self._conn: DuckDBPyConnection | None = connection
        self._in_transaction = False

        # Create parent directory if needed
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def __enter__(self) -> SpectrumDB:
        """Context manager entry."""
        if self._conn is None:
            self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.close()

    def connect(self) -> None:
        """Open database connection and initialize schema."""
        db_path_str = str(self.db_path) if isinstance(self.db_path, Path) else self.db_path
        self._conn = duckdb.connect(db_path_str)
        self.initialize_schema()
        logger.info("Connected to database: %s", db_path_str)

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> DuckDBPyConnection:
        """Get active connection, raising if not connected."""
        if self._conn is None:
            raise RuntimeError("Database not connected. Use context manager or call connect().")
        return self._conn

    def cursor(self) -> SpectrumDB:
        """Open an independent connection to the same database.

        Each concurrent caller (thread) needs its own cursor; transactions
        on different cursors are isolated from each other.
        """
        return SpectrumDB(self.db_path, connection=self.conn.cursor())

    def initialize_schema(self) -> None:
        """Create tables from schema.sql if not exists."""
        self.conn.execute(SCHEMA_PATH.read_text())
        logger.debug("Schema initialized from %s", SCHEMA_PATH)

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    @contextmanager
    def transaction(self) -> Iterator[SpectrumDB]:
        """Run the enclosed block as one transaction.

        Commits on normal exit and rolls back on any exception. Nested use
        joins the outer transaction.

        Raises:
            WriteConflictError: If the commit loses against a concurrent
                transaction.
            StorageError: On any other DuckDB failure inside the block or
                at commit.
        """
        if self._in_transaction:
            yield self
            return

        self.conn.begin()
        self._in_transaction = True
        try:
            yield self
        except (duckdb.ConstraintException, duckdb.TransactionException) as e:
            self._in_transaction = False
            self.conn.rollback()
            raise WriteConflictError(details=str(e)) from e
        except duckdb.Error as e:
            self._in_transaction = False
            self.conn.rollback()
            raise StorageError(type(e).__name__, str(e)) from e
        except BaseException:
            self._in_transaction = False
            self.conn.rollback()
            raise

        self._in_transaction = False
        try:
            self.conn.commit()
        except (duckdb.ConstraintException, duckdb.TransactionException) as e:
            logger.warning("Commit failed on conflict: %s", e)
            raise WriteConflictError(details=str(e)) from e
        except duckdb.Error as e:
            raise StorageError(type(e).__name__, str(e)) from e

    # =========================================================================
    # Band Operations
    # =========================================================================

    def insert_band(self, band: Band) -> str:
        """Insert a new band.

        Args:
            band: Band model to insert.

        Returns:
            Band ID.
        """
        self.conn.execute(
            """
            INSERT INTO bands (id, name, from_hz, to_hz, spacing_hz, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                band.id,
                band.name,
                band.from_hz,
                band.to_hz,
                band.spacing_hz,
                band.created_at,
                band.updated_at,
            ],
        )
        logger.info("Inserted band %s (%s)", band.name, band.id)
        return band.id

    def get_band(self, band_id: str) -> Band:
        """Get band by ID.

        Raises:
            NotFoundError: If no band has this ID.
        """
        result = self.conn.execute("SELECT * FROM bands WHERE id = ?", [band_id]).fetchone()
        if result is None:
            raise NotFoundError("Band", band_id)
        return self._row_to_band(result)

    def find_band_by_name(self, name: str) -> Band | None:
        result = self.conn.execute(
            "SELECT * FROM bands WHERE name = ? ORDER BY created_at LIMIT 1", [name]
        ).fetchone()
        if result is None:
            return None
        return self._row_to_band(result)

    def list_bands(self) -> list[Band]:
        """Get all bands ordered by lower bound."""
        results = self.conn.execute("SELECT * FROM bands ORDER BY from_hz, name").fetchall()
        return [self._row_to_band(row) for row in results]

    def update_band(self, band: Band) -> None:
        """Update an existing band.

        Raises:
            NotFoundError: If the band does not exist.
        """
        band.updated_at = datetime.now()
        updated = self.conn.execute(
            """
            UPDATE bands SET name = ?, from_hz = ?, to_hz = ?, spacing_hz = ?, updated_at = ?
            WHERE id = ?
            """,
            [band.name, band.from_hz, band.to_hz, band.spacing_hz, band.updated_at, band.id],
        ).fetchone()[0]
        if not updated:
            raise NotFoundError("Band", band.id)
        logger.info("Updated band %s (%s)", band.name, band.id)

    def delete_band(self, band_id: str) -> None:
        """Delete a band. Occupancy records are left untouched.

        Raises:
            NotFoundError: If the band does not exist.
        """
        deleted = self.conn.execute("DELETE FROM bands WHERE id = ?", [band_id]).fetchone()[0]
        if not deleted:
            raise NotFoundError("Band", band_id)
        logger.info("Deleted band %s", band_id)

    def _row_to_band(self, row: tuple[Any, ...]) -> Band:
        """Convert database row to Band model."""
        columns = [desc[0] for desc in self.conn.description]
        return Band(**dict(zip(columns, row, strict=False)))

    # =========================================================================
    # Occupancy Operations
    # =========================================================================

    def occupied_in_range(self, start: int, end: int) -> dict[int, Occupancy]:
        """Snapshot of occupied values in ``[start, end]``.

        Read through the active transaction, so later steps of the same
        transaction see a view unaffected by concurrent commits.

        Returns:
            Mapping from channel value to its occupancy record.
        """
        results = self.conn.execute(
            f"""
            SELECT {_OCCUPANCY_COLUMNS} FROM frequencies
            WHERE value BETWEEN ? AND ?
            ORDER BY value
            """,  # noqa: S608
            [start, end],
        ).fetchall()
        snapshot = {occupancy.value: occupancy for occupancy in map(self._row_to_occupancy, results)}
        logger.debug("Snapshot [%d, %d]: %d occupied", start, end, len(snapshot))
        return snapshot

    def occupied_values(self, values: Iterable[int]) -> dict[int, Occupancy]:
        """Snapshot restricted to specific values."""
        wanted = sorted(set(values))
        if not wanted:
            return {}
        snapshot = self.occupied_in_range(wanted[0], wanted[-1])
        return {value: snapshot[value] for value in wanted if value in snapshot}

    def get_occupancy(self, value: int) -> Occupancy | None:
        result = self.conn.execute(
            f"SELECT {_OCCUPANCY_COLUMNS} FROM frequencies WHERE value = ?",  # noqa: S608
            [value],
        ).fetchone()
        if result is None:
            return None
        return self._row_to_occupancy(result)

    def get_holder_channels(self, holder_id: str) -> list[Occupancy]:
        """All values currently held by a holder, ascending."""
        results = self.conn.execute(
            f"""
            SELECT {_OCCUPANCY_COLUMNS} FROM frequencies
            WHERE holder_id = ?
            ORDER BY value
            """,  # noqa: S608
            [holder_id],
        ).fetchall()
        return [self._row_to_occupancy(row) for row in results]

    def insert_allocations(
        self,
        values: list[int],
        holder: Holder,
        created_at: datetime | None = None,
    ) -> list[Occupancy]:
        """Insert occupancy and history records for ``values``.

        All-or-nothing: a unique-key collision on any value fails the whole
        insert. History is not written for the sentinel holder.

        Args:
            values: Channel values to assign.
            holder: Holder metadata stored with each record.
            created_at: Timestamp for the records (default: now).

        Returns:
            The occupancy records written.

        Raises:
            WriteConflictError: If any value is already occupied.
        """
        if not values:
            return []

        timestamp = created_at or datetime.now()
        records = [Occupancy.for_holder(value, holder, timestamp) for value in values]
        try:
            self.conn.executemany(
                f"INSERT INTO frequencies ({_OCCUPANCY_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",  # noqa: S608
                [self._occupancy_params(record) for record in records],
            )
        except (duckdb.ConstraintException, duckdb.TransactionException) as e:
            logger.warning("Insert of %d values for %s conflicted: %s", len(values), holder.holder_id, e)
            raise WriteConflictError(details=str(e)) from e

        if not holder.is_forbidden:
            history = [AllocationRecord.from_occupancy(record) for record in records]
            self.conn.executemany(
                f"INSERT INTO frequency_history ({_HISTORY_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",  # noqa: S608
                [[entry.id, *self._occupancy_params(entry)] for entry in history],
            )

        logger.debug("Inserted %d allocations for %s", len(records), holder.holder_id)
        return records

    def delete_range(self, start: int, end: int, holder_id: str) -> int:
        """Delete the holder's occupancy records in ``[start, end]``.

        History records are not touched.

        Returns:
            Number of records deleted (zero is not an error).
        """
        deleted = self.conn.execute(
            "DELETE FROM frequencies WHERE value BETWEEN ? AND ? AND holder_id = ?",
            [start, end, holder_id],
        ).fetchone()[0]
        logger.debug("Deleted %d values in [%d, %d] for %s", deleted, start, end, holder_id)
        return int(deleted)

    def delete_value(self, value: int, holder_id: str | None = None) -> int:
        """Delete one occupancy record, optionally only if held by ``holder_id``."""
        if holder_id is None:
            result = self.conn.execute("DELETE FROM frequencies WHERE value = ?", [value])
        else:
            result = self.conn.execute(
                "DELETE FROM frequencies WHERE value = ? AND holder_id = ?", [value, holder_id]
            )
        return int(result.fetchone()[0])

    def delete_holder(self, holder_id: str) -> int:
        """Delete every occupancy record of a holder."""
        deleted = self.conn.execute(
            "DELETE FROM frequencies WHERE holder_id = ?", [holder_id]
        ).fetchone()[0]
        return int(deleted)

    def _row_to_occupancy(self, row: tuple[Any, ...]) -> Occupancy:
        """Convert an occupancy row (``_OCCUPANCY_COLUMNS`` order) to a model."""
        value, holder_id, email, latitude, longitude, created_at = row
        return Occupancy(
            value=value,
            holder_id=holder_id,
            email=email,
            latitude=latitude,
            longitude=longitude,
            created_at=created_at,
        )

    @staticmethod
    def _occupancy_params(record: Occupancy | AllocationRecord) -> list[Any]:
        return [
            record.value,
            record.holder_id,
            record.email,
            record.latitude,
            record.longitude,
            record.created_at,
        ]

    # =========================================================================
    # History Operations
    # =========================================================================

    def get_history(self, value: int, limit: int = 1000) -> list[AllocationRecord]:
        """Assignment history for a value, newest first."""
        results = self.conn.execute(
            f"""
            SELECT {_HISTORY_COLUMNS} FROM frequency_history
            WHERE value = ?
            ORDER BY created_at DESC
            LIMIT ?
            """,  # noqa: S608
            [value, limit],
        ).fetchall()
        columns = _HISTORY_COLUMNS.split(", ")
        return [AllocationRecord(**dict(zip(columns, row, strict=True))) for row in results]

    # =========================================================================
    # Query Operations
    # =========================================================================

    def get_statistics(self) -> dict[str, Any]:
        """Get database statistics.

        Returns:
            Dict with table counts and the number of debarred values.
        """
        stats: dict[str, Any] = {}

        for table in ["bands", "frequencies", "frequency_history"]:
            count = self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]  # noqa: S608
            stats[f"{table}_count"] = count

        stats["forbidden_count"] = self.conn.execute(
            "SELECT COUNT(*) FROM frequencies WHERE holder_id = ?", [FORBIDDEN_HOLDER]
        ).fetchone()[0]
        stats["holder_count"] = self.conn.execute(
            "SELECT COUNT(DISTINCT holder_id) FROM frequencies WHERE holder_id != ?",
            [FORBIDDEN_HOLDER],
        ).fetchone()[0]
        return stats
