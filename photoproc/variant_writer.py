"""
VariantWriter - Uploads derivatives to their fixed paths under variants/{id}/.
"""

import logging
from typing import Dict, Optional

from .photo_record import CACHE_CONTROL, variant_content_type, variant_path


GENERATED_BY = 'photoproc'


class VariantWriter:
    """
    Persists a DerivativeSet to object storage.

    Every object is written with its content type and the immutable
    one-year cache directive. Upload failures propagate.
    """

    def __init__(self, storage, logger: Optional[logging.Logger] = None):
        self.storage = storage
        self.logger = logger or logging.getLogger(__name__)

    def write(self, photo_id: str, derivatives) -> Dict[str, str]:
        """
        Upload all variants of a record.

        Returns:
            Mapping of variant name -> storage path
        """
        paths = {}
        for name, data in derivatives:
            key = variant_path(photo_id, name)
            self.storage.upload_object(
                key,
                data,
                content_type=variant_content_type(name),
                cache_control=CACHE_CONTROL,
                metadata={'generated-by': GENERATED_BY},
            )
            self.logger.debug(f"Uploaded {key} ({len(data)} bytes)")
            paths[name] = key
        return paths
