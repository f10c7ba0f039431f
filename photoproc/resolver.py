"""
OriginalResolver - Finds the photo record that owns an uploaded original.
"""

import logging
from typing import Optional

from .photo_record import PhotoRecord, is_variant_path


class OriginalResolver:
    """
    Maps a storage object path to the single record claiming it as its original.
    """

    def __init__(self, photo_db, logger: Optional[logging.Logger] = None):
        self.photo_db = photo_db
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, object_path: str) -> Optional[PhotoRecord]:
        """
        Resolve an object path.

        Returns:
            The owning record, or None when the path should be skipped
            (empty, a derivative, or claimed by no record)
        """
        if not object_path:
            self.logger.info("Event carried no object path, skipping")
            return None

        if is_variant_path(object_path):
            self.logger.info(f"Variant uploaded, skipping processing: {object_path}")
            return None

        # Ask for two so a duplicate claim can be reported
        matches = self.photo_db.find_by_original_path(object_path, limit=2)
        if not matches:
            self.logger.warning(f"No photo record found for original path {object_path}")
            return None

        if len(matches) > 1:
            self.logger.warning(
                f"Multiple photo records claim {object_path}; using {matches[0].id}, "
                f"ignoring {', '.join(m.id for m in matches[1:])}"
            )

        return matches[0]
