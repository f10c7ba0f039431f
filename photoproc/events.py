"""
ObjectFinalizedEvent - Inbound "object finalized" messages from storage.

Delivery is at-least-once; the pipeline is safe to re-run for the same key.
"""

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import unquote_plus


@dataclass(frozen=True)
class ObjectFinalizedEvent:
    """
    Attributes:
        key: Storage path of the finalized object
        bucket: Bucket the object was written to (None if not reported)
    """
    key: str
    bucket: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'ObjectFinalizedEvent':
        """Parse the simple message form: {"name": ..., "bucket": ...}."""
        return cls(key=data.get('name') or data.get('key') or '', bucket=data.get('bucket'))

    @classmethod
    def from_s3_notification(cls, payload: dict) -> List['ObjectFinalizedEvent']:
        """
        Parse an S3 event notification.

        Only ObjectCreated records are returned. Keys arrive URL-encoded
        and are decoded here.
        """
        events = []
        for record in payload.get('Records', []):
            if not record.get('eventName', '').startswith('ObjectCreated:'):
                continue
            s3 = record.get('s3', {})
            key = s3.get('object', {}).get('key', '')
            events.append(cls(
                key=unquote_plus(key),
                bucket=s3.get('bucket', {}).get('name'),
            ))
        return events

    @classmethod
    def parse(cls, payload: dict) -> List['ObjectFinalizedEvent']:
        """
        Accept either an S3 notification or a single finalized message.

        Raises:
            ValueError: if the payload is not a JSON object
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Event must be a JSON object, got {type(payload).__name__}")
        if 'Records' in payload:
            return cls.from_s3_notification(payload)
        return [cls.from_dict(payload)]
