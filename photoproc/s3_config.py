"""
S3Config - Connection settings for the object storage bucket.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'y', 't')


@dataclass
class S3Config:
    """
    S3/MinIO connection settings.
    
    Attributes:
        bucket: Bucket holding originals and variants
        endpoint: Endpoint URL (None for AWS default)
        access_key: Access key id
        secret_key: Secret access key
        region: Region name
        verify_ssl: Verify TLS certificates
        connect_timeout: Seconds to wait for a connection
        read_timeout: Seconds to wait for a response
    """
    bucket: str
    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = 'us-east-1'
    verify_ssl: bool = True
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    
    @classmethod
    def from_env(cls) -> 'S3Config':
        """Build configuration from S3_* environment variables."""
        return cls(
            bucket=os.getenv('S3_BUCKET', ''),
            endpoint=os.getenv('S3_ENDPOINT') or None,
            access_key=os.getenv('S3_ACCESS_KEY') or None,
            secret_key=os.getenv('S3_SECRET_KEY') or None,
            region=os.getenv('S3_REGION', 'us-east-1'),
            verify_ssl=_env_bool('S3_VERIFY_SSL', True),
            connect_timeout=float(os.getenv('S3_CONNECT_TIMEOUT', '10')),
            read_timeout=float(os.getenv('S3_READ_TIMEOUT', '60')),
        )
    
    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []
        if not self.bucket:
            errors.append("S3_BUCKET is required")
        if bool(self.access_key) != bool(self.secret_key):
            errors.append("S3_ACCESS_KEY and S3_SECRET_KEY must be set together")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            errors.append("S3 timeouts must be positive")
        return errors
