import asyncio
from abc import ABC, abstractmethod
import sqlite3
import threading
from typing import List, Optional

from supabase import create_async_client, AsyncClient

from app.core.config import Settings
from app.core.errors import StorageError
from app.core.logger import logger
from app.models.db_models import Booking

TABLE = "bookings"
COLUMNS = (
    "name", "email", "phone", "address", "service_type", "sqft",
    "preferred_date", "preferred_time", "notes", "created_at",
)

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT NOT NULL,
    address TEXT NOT NULL,
    service_type TEXT NOT NULL,
    sqft INTEGER,
    preferred_date TEXT NOT NULL,
    preferred_time TEXT NOT NULL,
    notes TEXT,
    created_at TEXT NOT NULL
)
"""


class BookingStore(ABC):
    """Append-only booking table."""

    @abstractmethod
    async def init(self) -> None:
        """Prepares the backend (creates the table or opens the client)."""

    @abstractmethod
    async def append(self, booking: Booking) -> int:
        """Persists the booking and returns its new id. Raises StorageError."""


class SQLiteBookingStore(BookingStore):
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def _init(self):
        with self._lock:
            conn = self._connect()
            try:
                conn.execute(SCHEMA_SQL)
                conn.commit()
            finally:
                conn.close()

    async def init(self) -> None:
        try:
            await asyncio.to_thread(self._init)
            logger.info(f"✅ SQLite store ready at {self.path}")
        except sqlite3.Error as e:
            raise StorageError(f"Cannot initialize {self.path}: {e}") from e

    def _insert(self, row: dict) -> int:
        placeholders = ", ".join("?" for _ in COLUMNS)
        sql = f"INSERT INTO {TABLE} ({', '.join(COLUMNS)}) VALUES ({placeholders})"
        with self._lock:
            conn = self._connect()
            try:
                cursor = conn.execute(sql, [row.get(col) for col in COLUMNS])
                conn.commit()
                return cursor.lastrowid
            finally:
                conn.close()

    async def append(self, booking: Booking) -> int:
        try:
            return await asyncio.to_thread(self._insert, booking.to_row())
        except (sqlite3.Error, OverflowError) as e:
            logger.error(f"❌ DB Error (append): {e}")
            raise StorageError(str(e)) from e

    def _fetch(self, sql: str, params: tuple = ()) -> list:
        conn = self._connect()
        try:
            return [dict(row) for row in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()

    def count(self) -> int:
        return self._fetch(f"SELECT COUNT(*) AS n FROM {TABLE}")[0]["n"]

    def list_recent(self, limit: int = 100) -> List[dict]:
        """Newest first. Used by the admin dashboard only."""
        return self._fetch(f"SELECT * FROM {TABLE} ORDER BY id DESC LIMIT ?", (limit,))


class SupabaseBookingStore(BookingStore):
    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._client: Optional[AsyncClient] = None

    async def get_client(self) -> AsyncClient:
        if not self._client:
            try:
                self._client = await create_async_client(self.url, self.key)
                logger.info("✅ Supabase Async client initialized")
            except Exception as e:
                logger.error(f"❌ Failed to initialize Supabase Async: {e}")
                raise StorageError(str(e)) from e
        return self._client

    async def init(self) -> None:
        await self.get_client()

    async def append(self, booking: Booking) -> int:
        client = await self.get_client()
        try:
            response = await client.table(TABLE).insert(booking.to_row()).execute()
        except Exception as e:
            logger.error(f"❌ DB Error (append): {e}")
            raise StorageError(str(e)) from e

        if not response.data:
            raise StorageError("Supabase insert returned no rows")
        return response.data[0]["id"]


def create_store(settings: Settings) -> BookingStore:
    if settings.SUPABASE_URL and settings.SUPABASE_KEY:
        logger.info("🗄️ Using Supabase booking store")
        return SupabaseBookingStore(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    logger.info("🗄️ Using SQLite booking store")
    return SQLiteBookingStore(settings.DATABASE_PATH)
