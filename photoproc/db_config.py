"""
DbConfig - Connection settings for the photos metadata database.
"""

import os
from dataclasses import dataclass
from typing import List


@dataclass
class DbConfig:
    """
    MySQL connection settings.
    
    Attributes:
        host: Database host
        port: Database port
        user: Database user
        password: Database password
        database: Schema holding the photos table
        pool_size: Connections kept in the pool
        connect_timeout: Seconds to wait for a connection
    """
    host: str = 'localhost'
    port: int = 3306
    user: str = ''
    password: str = ''
    database: str = ''
    pool_size: int = 4
    connect_timeout: int = 10
    
    @classmethod
    def from_env(cls) -> 'DbConfig':
        """Build configuration from SQL_* environment variables."""
        return cls(
            host=os.getenv('SQL_HOST', 'localhost'),
            port=int(os.getenv('SQL_PORT', '3306')),
            user=os.getenv('SQL_USER', ''),
            password=os.getenv('SQL_PASSWORD', ''),
            database=os.getenv('SQL_DATABASE', ''),
            pool_size=int(os.getenv('SQL_POOL_SIZE', '4')),
            connect_timeout=int(os.getenv('SQL_CONNECT_TIMEOUT', '10')),
        )
    
    def validate(self) -> List[str]:
        errors = []
        if not self.user:
            errors.append("SQL_USER is required")
        if not self.database:
            errors.append("SQL_DATABASE is required")
        if self.pool_size < 1:
            errors.append("SQL_POOL_SIZE must be at least 1")
        return errors
