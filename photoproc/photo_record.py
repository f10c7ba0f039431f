"""
PhotoRecord - Metadata record for one uploaded original and its variants.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional


VARIANTS_PREFIX = 'variants/'

# name -> (filename, content type); order is upload order
VARIANT_FILES = {
    'pyramid': ('pyramid.tif', 'image/tiff'),
    'thumb': ('thumb.jpg', 'image/jpeg'),
    'medium': ('medium.jpg', 'image/jpeg'),
    'webp': ('medium.webp', 'image/webp'),
}

VARIANT_NAMES = tuple(VARIANT_FILES)

CACHE_CONTROL = 'public, max-age=31536000, immutable'

# Must match the tile geometry used when encoding the pyramid
TILE_SIZE = 512


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in DATETIME columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_variant_path(path: str) -> bool:
    """True if the storage path lives under the derivative prefix."""
    return path.startswith(VARIANTS_PREFIX)


def variant_prefix(photo_id: str) -> str:
    return f"{VARIANTS_PREFIX}{photo_id}/"


def variant_path(photo_id: str, name: str) -> str:
    """Storage path of a named variant, e.g. variants/p1/thumb.jpg."""
    filename, _ = VARIANT_FILES[name]
    return f"{variant_prefix(photo_id)}{filename}"


def variant_content_type(name: str) -> str:
    return VARIANT_FILES[name][1]


class PhotoStatus(str, Enum):
    PENDING = 'pending'
    DONE = 'done'
    ERROR = 'error'


@dataclass
class PhotoRecord:
    """
    Record for a single uploaded original.

    Attributes:
        id: Record identifier, namespace for all variant paths
        owner_id: Uploading principal
        original_path: Storage path of the original (immutable)
        variants: Mapping of variant name -> storage path (empty until done)
        width: Original width in pixels
        height: Original height in pixels
        tile_size: Pyramid tile size
        status: Processing status
        error: Error detail when status is error
        updated_at: Time of the last status transition
    """
    id: str
    owner_id: str
    original_path: str
    variants: Dict[str, str] = field(default_factory=dict)
    width: Optional[int] = None
    height: Optional[int] = None
    tile_size: Optional[int] = None
    status: PhotoStatus = PhotoStatus.PENDING
    error: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_done(self) -> bool:
        return self.status == PhotoStatus.DONE

    def has_all_variants(self) -> bool:
        """True if every variant name maps to a non-empty path."""
        return all(self.variants.get(name) for name in VARIANT_NAMES)

    def expected_variants(self) -> Dict[str, str]:
        """Variant paths this record owns once processing completes."""
        return {name: variant_path(self.id, name) for name in VARIANT_NAMES}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'ownerId': self.owner_id,
            'originalPath': self.original_path,
            'variants': dict(self.variants),
            'width': self.width,
            'height': self.height,
            'tileSize': self.tile_size,
            'status': self.status.value,
            'error': self.error,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PhotoRecord':
        """Create from dictionary (accepts to_dict() output)."""
        updated_at = data.get('updatedAt')
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)

        return cls(
            id=data['id'],
            owner_id=data.get('ownerId', ''),
            original_path=data.get('originalPath', ''),
            variants=dict(data.get('variants') or {}),
            width=data.get('width'),
            height=data.get('height'),
            tile_size=data.get('tileSize'),
            status=PhotoStatus(data.get('status') or PhotoStatus.PENDING.value),
            error=data.get('error'),
            updated_at=updated_at,
        )
