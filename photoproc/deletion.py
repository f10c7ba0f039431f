"""
DeletionCoordinator - Removes a photo's objects from storage, then its record.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import (
    InternalError,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    Unauthenticated,
)
from .photo_record import PhotoRecord, variant_prefix


@dataclass
class Principal:
    """
    The authenticated caller of a delete request.

    Attributes:
        uid: Caller identifier
        claims: Token claims; admin=True or role='admin' grants elevated access
    """
    uid: str
    claims: dict = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.claims.get('admin') is True or self.claims.get('role') == 'admin'


class DeletionCoordinator:
    """
    Authorizes and executes photo deletion.

    Storage objects are removed first; the record is deleted only once
    every object is gone, so a surviving record signals incomplete cleanup.
    """

    def __init__(self, storage, photo_db, logger: Optional[logging.Logger] = None):
        self.storage = storage
        self.photo_db = photo_db
        self.logger = logger or logging.getLogger(__name__)

    def delete(self, request: dict, principal: Optional[Principal]) -> dict:
        """
        Delete a photo on behalf of a caller.

        Args:
            request: {'photoId': ...}
            principal: Authenticated caller, or None

        Returns:
            {'success': True, 'deleted': <number of objects>}

        Raises:
            Unauthenticated, InvalidArgument, NotFound, PermissionDenied, InternalError
        """
        if principal is None or not principal.uid:
            raise Unauthenticated()

        photo_id = (request or {}).get('photoId')
        if not photo_id:
            raise InvalidArgument()

        try:
            record = self.photo_db.get_photo(photo_id)
        except Exception as e:
            self.logger.error(f"deleteImage lookup error for {photo_id}: {e}")
            raise InternalError() from e
        if record is None:
            raise NotFound()

        if record.owner_id != principal.uid and not principal.is_admin:
            self.logger.warning(f"User {principal.uid} may not delete photo {photo_id}")
            raise PermissionDenied()

        try:
            keys = self.collect_keys(record)
            for key in keys:
                self.storage.delete_object(key)
            self.photo_db.delete_photo(photo_id)
        except Exception as e:
            self.logger.error(f"deleteImage error for {photo_id}: {e}")
            raise InternalError() from e

        self.logger.info(f"Deleted photo {photo_id} ({len(keys)} objects) for {principal.uid}")
        return {'success': True, 'deleted': len(keys)}

    def collect_keys(self, record: PhotoRecord) -> List[str]:
        """
        The original plus everything currently stored under the variants prefix.

        Variants are enumerated from storage, not from record.variants.
        """
        keys = dict.fromkeys([record.original_path] if record.original_path else [])
        keys.update(dict.fromkeys(self.storage.list_keys(variant_prefix(record.id))))
        return list(keys)
