"""
PhotoDb - MySQL-backed store for photo records.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import pooling
from retrying import retry

from .db_config import DbConfig
from .photo_record import PhotoRecord, PhotoStatus, utcnow


TABLE = 'photos'

CREATE_TABLE = (
    f"CREATE TABLE IF NOT EXISTS `{TABLE}` ("
    "  id VARCHAR(128) NOT NULL PRIMARY KEY,"
    "  owner_id VARCHAR(128) NOT NULL,"
    "  original_path VARCHAR(1024) NOT NULL,"
    "  variants JSON,"
    "  width INT,"
    "  height INT,"
    "  tile_size INT,"
    "  status VARCHAR(16) NOT NULL DEFAULT 'pending',"
    "  error TEXT,"
    "  updated_at DATETIME,"
    "  INDEX idx_photos_original_path (original_path(255))"
    ") ENGINE=InnoDB"
)

COLUMNS = (
    'id', 'owner_id', 'original_path', 'variants', 'width', 'height',
    'tile_size', 'status', 'error', 'updated_at',
)

UPDATABLE = set(COLUMNS) - {'id', 'owner_id', 'original_path'}


class PhotoDb:
    """
    Document-style access to the photos table.

    Supports query by original path, get by id, partial update by id
    and delete by id. Every update is a single statement.
    """

    def __init__(self, config: DbConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.connection_pool = None

    def initialize_pool(self):
        """
        Initialize the connection pool lazily if it hasn't been created yet.
        """
        if not self.connection_pool:
            self.logger.debug("Initializing connection pool...")
            self.connection_pool = pooling.MySQLConnectionPool(
                pool_name="photoproc_pool",
                pool_size=self.config.pool_size,
                user=self.config.user,
                password=self.config.password,
                host=self.config.host,
                port=self.config.port,
                database=self.config.database,
                connection_timeout=self.config.connect_timeout,
            )

    @retry(retry_on_exception=lambda e: isinstance(e, mysql.connector.Error),
           stop_max_attempt_number=3, wait_exponential_multiplier=1000)
    def get_cursor(self):
        """
        Get a connection from the pool and create a cursor.
        """
        self.initialize_pool()
        connection = self.connection_pool.get_connection()
        return connection.cursor(buffered=True), connection

    def close_connection(self, connection):
        """
        Return a connection to the pool.
        """
        if connection:
            try:
                connection.close()
            except mysql.connector.Error as e:
                self.logger.warning(f"Error closing connection: {e}")

    def _execute(self, sql: str, params: tuple = (), fetch: bool = False) -> Any:
        cursor, connection = None, None
        try:
            cursor, connection = self.get_cursor()
            self.logger.debug(f"SQL: {sql} {params}")
            cursor.execute(sql, params)
            if fetch:
                return cursor.fetchall()
            connection.commit()
            return cursor.rowcount
        except mysql.connector.Error as e:
            self.logger.error(f"Error executing query: {e}")
            raise
        finally:
            if cursor:
                cursor.close()
            if connection:
                self.close_connection(connection)

    def create_tables(self) -> None:
        """Create the photos table if it does not exist."""
        self._execute(CREATE_TABLE)

    def create_photo(self, photo_id: str, owner_id: str, original_path: str) -> None:
        """Insert a new record with an explicit pending status."""
        self._execute(
            f"INSERT INTO `{TABLE}` (id, owner_id, original_path, status, updated_at) "
            "VALUES (%s, %s, %s, %s, %s)",
            (photo_id, owner_id, original_path, PhotoStatus.PENDING.value, utcnow()),
        )

    def find_by_original_path(self, original_path: str, limit: int = 1) -> List[PhotoRecord]:
        """Return up to `limit` records whose original_path matches exactly."""
        rows = self._execute(
            f"SELECT {', '.join(COLUMNS)} FROM `{TABLE}` WHERE original_path = %s LIMIT %s",
            (original_path, int(limit)),
            fetch=True,
        )
        return [self._row_to_record(row) for row in rows]

    def get_photo(self, photo_id: str) -> Optional[PhotoRecord]:
        rows = self._execute(
            f"SELECT {', '.join(COLUMNS)} FROM `{TABLE}` WHERE id = %s",
            (photo_id,),
            fetch=True,
        )
        return self._row_to_record(rows[0]) if rows else None

    def update_photo(self, photo_id: str, fields: Dict[str, Any]) -> int:
        """
        Merge fields into a record with a single UPDATE.

        Args:
            photo_id: Record identifier
            fields: Column -> value; variants is stored as JSON, status may be a PhotoStatus

        Returns:
            Number of rows changed
        """
        unknown = set(fields) - UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update columns: {', '.join(sorted(unknown))}")
        if not fields:
            return 0

        assignments = []
        params = []
        for column, value in fields.items():
            if column == 'variants' and value is not None:
                value = json.dumps(value, sort_keys=True)
            elif isinstance(value, PhotoStatus):
                value = value.value
            assignments.append(f"{column} = %s")
            params.append(value)
        params.append(photo_id)

        return self._execute(
            f"UPDATE `{TABLE}` SET {', '.join(assignments)} WHERE id = %s",
            tuple(params),
        )

    def delete_photo(self, photo_id: str) -> int:
        return self._execute(f"DELETE FROM `{TABLE}` WHERE id = %s", (photo_id,))

    @staticmethod
    def _row_to_record(row: tuple) -> PhotoRecord:
        data = dict(zip(COLUMNS, row))
        variants = data['variants']
        if isinstance(variants, (str, bytes, bytearray)):
            variants = json.loads(variants)
        return PhotoRecord(
            id=data['id'],
            owner_id=data['owner_id'],
            original_path=data['original_path'],
            variants=variants or {},
            width=data['width'],
            height=data['height'],
            tile_size=data['tile_size'],
            status=PhotoStatus(data['status'] or PhotoStatus.PENDING.value),
            error=data['error'],
            updated_at=data['updated_at'],
        )
