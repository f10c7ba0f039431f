"""
Pytest fixtures for photoproc tests.
"""

import io
import logging
from typing import Dict, List, Optional

import pytest
from PIL import Image

from photoproc.photo_record import PhotoRecord, PhotoStatus


class FakeStorage:
    """In-memory stand-in for S3Client."""

    def __init__(self, bucket: str = 'test-bucket'):
        self.bucket = bucket
        self.objects: Dict[str, dict] = {}
        self.fail_uploads = False
        self.fail_deletes = set()

    def put(self, key: str, data: bytes, content_type: str = 'application/octet-stream') -> None:
        self.objects[key] = {
            'data': data,
            'content_type': content_type,
            'cache_control': None,
            'metadata': {},
        }

    def download_file(self, key: str, destination: str) -> None:
        if key not in self.objects:
            raise FileNotFoundError(key)
        with open(destination, 'wb') as f:
            f.write(self.objects[key]['data'])

    def upload_object(self, key, data, content_type='application/octet-stream',
                      cache_control=None, metadata=None) -> None:
        if self.fail_uploads:
            raise IOError(f"upload failed: {key}")
        self.objects[key] = {
            'data': data,
            'content_type': content_type,
            'cache_control': cache_control,
            'metadata': dict(metadata or {}),
        }

    def list_keys(self, prefix: str):
        return iter(sorted(k for k in self.objects if k.startswith(prefix)))

    def get_object_metadata(self, key: str) -> Optional[dict]:
        obj = self.objects.get(key)
        if obj is None:
            return None
        return {
            'size': len(obj['data']),
            'content_type': obj['content_type'],
            'cache_control': obj['cache_control'],
            'metadata': obj['metadata'],
        }

    def delete_object(self, key: str) -> bool:
        if key in self.fail_deletes:
            raise IOError(f"delete failed: {key}")
        return self.objects.pop(key, None) is not None


class FakePhotoDb:
    """In-memory stand-in for PhotoDb with the same partial-update semantics."""

    FIELDS = {
        'variants', 'width', 'height', 'tile_size', 'status', 'error', 'updated_at',
    }

    def __init__(self):
        self.records: Dict[str, PhotoRecord] = {}
        self.updates: List[tuple] = []
        self.fail_updates = False

    def add(self, record: PhotoRecord) -> PhotoRecord:
        self.records[record.id] = record
        return record

    def find_by_original_path(self, original_path: str, limit: int = 1) -> List[PhotoRecord]:
        matches = [r for r in self.records.values() if r.original_path == original_path]
        return matches[:limit]

    def get_photo(self, photo_id: str) -> Optional[PhotoRecord]:
        return self.records.get(photo_id)

    def update_photo(self, photo_id: str, fields: dict) -> int:
        if self.fail_updates:
            raise IOError("metadata store unavailable")
        assert set(fields) <= self.FIELDS
        record = self.records.get(photo_id)
        if record is None:
            return 0
        self.updates.append((photo_id, dict(fields)))
        for name, value in fields.items():
            if name == 'status':
                value = PhotoStatus(value)
            elif name == 'variants':
                value = dict(value or {})
            setattr(record, name, value)
        return 1

    def delete_photo(self, photo_id: str) -> int:
        return 1 if self.records.pop(photo_id, None) else 0


def make_jpeg(width: int, height: int) -> bytes:
    """Encode a noisy test JPEG."""
    img = Image.merge('RGB', [Image.effect_noise((width, height), 40) for _ in range(3)])
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG', quality=90)
    return buffer.getvalue()


@pytest.fixture
def jpeg_factory():
    """Fixture providing the make_jpeg helper."""
    return make_jpeg


@pytest.fixture
def storage():
    """Fixture providing an empty in-memory storage."""
    return FakeStorage()


@pytest.fixture
def photo_db():
    """Fixture providing an empty in-memory photo store."""
    return FakePhotoDb()


@pytest.fixture
def sample_record():
    """Fixture providing a pending record for originals/p1.jpg."""
    return PhotoRecord(id='p1', owner_id='u1', original_path='originals/p1.jpg')


@pytest.fixture
def sample_image_bytes():
    """Fixture providing a 2000x1500 JPEG."""
    return make_jpeg(2000, 1500)


@pytest.fixture
def small_image_bytes():
    """Fixture providing a 400x200 JPEG."""
    return make_jpeg(400, 200)


@pytest.fixture
def sample_png_bytes():
    """Fixture providing PNG bytes with transparency."""
    img = Image.new('RGBA', (100, 100), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def fake_pyramid(mocker):
    """Patch out the ImageMagick pyramid encode."""
    from photoproc.derivative_generator import DerivativeGenerator
    return mocker.patch.object(
        DerivativeGenerator, 'encode_pyramid', return_value=b'II*\x00fake-pyramid'
    )


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')
