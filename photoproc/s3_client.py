"""
S3Client - S3/MinIO operations for downloading, uploading, listing and deleting objects.
"""

import logging
from typing import Dict, Generator, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .s3_config import S3Config


NOT_FOUND_CODES = {'404', 'NoSuchKey', 'NotFound'}


def is_not_found(error: ClientError) -> bool:
    """True if a botocore ClientError means the object does not exist."""
    return str(error.response.get('Error', {}).get('Code')) in NOT_FOUND_CODES


class S3Client:
    """
    Wrapper for S3/MinIO operations.

    Provides methods for downloading originals to local files, uploading
    variant bytes with caching headers, listing by prefix and deleting.
    """

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'},
                connect_timeout=config.connect_timeout,
                read_timeout=config.read_timeout,
                retries={'mode': 'standard'},
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    @property
    def bucket(self) -> str:
        """Name of the bucket this client operates on."""
        return self.config.bucket

    def download_file(self, key: str, destination: str) -> None:
        """Download an object to a local path."""
        self.logger.debug(f"Downloading s3://{self.bucket}/{key} -> {destination}")
        self._client.download_file(self.bucket, key, destination)

    def upload_object(
        self,
        key: str,
        data: bytes,
        content_type: str = 'application/octet-stream',
        cache_control: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Upload bytes to S3.

        Content type, cache directive and user metadata are written with the
        object in a single request.
        """
        params = {
            'Bucket': self.bucket,
            'Key': key,
            'Body': data,
            'ContentType': content_type,
        }
        if cache_control:
            params['CacheControl'] = cache_control
        if metadata:
            params['Metadata'] = metadata

        self.logger.debug(f"Uploading s3://{self.bucket}/{key} ({len(data)} bytes, {content_type})")
        self._client.put_object(**params)

    def list_keys(self, prefix: str) -> Generator[str, None, None]:
        """Yield every object key under a prefix."""
        paginator = self._client.get_paginator('list_objects_v2')
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for obj in page.get('Contents', []):
                yield obj['Key']

    def get_object_metadata(self, key: str) -> Optional[dict]:
        """Get metadata for an S3 object, or None if it does not exist."""
        try:
            response = self._client.head_object(Bucket=self.bucket, Key=key)
            return {
                'size': response['ContentLength'],
                'content_type': response.get('ContentType', 'application/octet-stream'),
                'cache_control': response.get('CacheControl'),
                'metadata': response.get('Metadata', {}),
            }
        except ClientError as e:
            if is_not_found(e):
                return None
            raise

    def delete_object(self, key: str) -> bool:
        """
        Delete an object.

        Returns:
            True if a delete was issued, False if the object was already gone
        """
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if is_not_found(e):
                self.logger.debug(f"Already absent: {key}")
                return False
            raise
