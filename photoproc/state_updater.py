"""
StateUpdater - Writes terminal processing outcomes onto photo records.
"""

import logging
from typing import Callable, Dict, Optional

from .photo_record import TILE_SIZE, VARIANT_NAMES, PhotoStatus, utcnow


class StateUpdater:
    """
    Records success or failure of a pipeline run.

    Each outcome is one partial update, so readers see either the full
    variants map or none of it.
    """

    def __init__(
        self,
        photo_db,
        clock: Callable = utcnow,
        logger: Optional[logging.Logger] = None
    ):
        self.photo_db = photo_db
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def mark_done(self, photo_id: str, variants: Dict[str, str], width: int, height: int) -> None:
        missing = [name for name in VARIANT_NAMES if not variants.get(name)]
        if missing:
            raise ValueError(f"Refusing partial variants for {photo_id}: missing {', '.join(missing)}")

        self.photo_db.update_photo(photo_id, {
            'variants': {name: variants[name] for name in VARIANT_NAMES},
            'width': width,
            'height': height,
            'tile_size': TILE_SIZE,
            'status': PhotoStatus.DONE,
            'error': None,
            'updated_at': self.clock(),
        })
        self.logger.info(f"Processing done for {photo_id} ({width}x{height})")

    def mark_error(self, photo_id: str, error: BaseException) -> None:
        detail = str(error) or type(error).__name__
        self.photo_db.update_photo(photo_id, {
            'status': PhotoStatus.ERROR,
            'error': detail,
            'updated_at': self.clock(),
        })
        self.logger.info(f"Marked {photo_id} as error: {detail}")
