from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling

# mysql-connector refuses pools above this size.
_MAX_POOL_SIZE = 32


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
        )

    def connect_kwargs(self) -> dict:
        # Every DATETIME column holds UTC.
        return dict(
            host=self.host,
            port=int(self.port),
            user=self.user,
            password=self.password,
            database=self.database,
            time_zone="+00:00",
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: Each repository call takes its own connection and closes it, so
    batch worker threads never share one. With ``pool_size`` > 0 the
    connections come from a pool and ``close()`` hands them back.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig, *, pool_size: int = 0):
        self._config = config
        self._pool_size = min(max(0, int(pool_size)), _MAX_POOL_SIZE)
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: DBConfig, *, pool_size: int = 0) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config, pool_size=pool_size)
        return cls._instance

    def connect(self):
        if not self._pool_size:
            return mysql.connector.connect(**self._config.connect_kwargs())

        with self._pool_lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=f"punchclock_{self._config.database}",
                    pool_size=self._pool_size,
                    **self._config.connect_kwargs(),
                )
        return self._pool.get_connection()
