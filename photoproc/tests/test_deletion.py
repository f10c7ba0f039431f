"""Tests for DeletionCoordinator."""

import pytest

from photoproc.deletion import DeletionCoordinator, Principal
from photoproc.errors import (
    InternalError,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    Unauthenticated,
)


VARIANT_KEYS = [
    'variants/p1/pyramid.tif',
    'variants/p1/thumb.jpg',
    'variants/p1/medium.jpg',
    'variants/p1/medium.webp',
]


@pytest.fixture
def populated(storage, photo_db, sample_record):
    photo_db.add(sample_record)
    storage.put('originals/p1.jpg', b'orig')
    for key in VARIANT_KEYS:
        storage.put(key, b'v')
    storage.put('variants/p10/thumb.jpg', b'other record')
    return sample_record


@pytest.fixture
def coordinator(storage, photo_db, logger):
    return DeletionCoordinator(storage, photo_db, logger=logger)


class TestPrincipal:

    def test_admin_claims(self):
        assert Principal('u', {'admin': True}).is_admin
        assert Principal('u', {'role': 'admin'}).is_admin
        assert not Principal('u', {'admin': 'yes'}).is_admin
        assert not Principal('u').is_admin


class TestDeletion:

    def test_owner_delete(self, coordinator, storage, photo_db, populated):
        result = coordinator.delete({'photoId': 'p1'}, Principal('u1'))

        assert result == {'success': True, 'deleted': 5}
        assert list(storage.list_keys('variants/p1/')) == []
        assert 'originals/p1.jpg' not in storage.objects
        assert photo_db.get_photo('p1') is None
        # neighbouring prefix untouched
        assert 'variants/p10/thumb.jpg' in storage.objects

    def test_admin_delete(self, coordinator, photo_db, populated):
        result = coordinator.delete({'photoId': 'p1'}, Principal('u9', {'role': 'admin'}))

        assert result['success'] is True
        assert photo_db.get_photo('p1') is None

    def test_sweeps_orphans(self, coordinator, storage, populated):
        storage.put('variants/p1/stale.jpg', b'orphan')

        result = coordinator.delete({'photoId': 'p1'}, Principal('u1'))

        assert result['deleted'] == 6
        assert 'variants/p1/stale.jpg' not in storage.objects

    def test_missing_objects_tolerated(self, coordinator, storage, photo_db, populated):
        del storage.objects['originals/p1.jpg']

        result = coordinator.delete({'photoId': 'p1'}, Principal('u1'))

        assert result['success'] is True
        assert photo_db.get_photo('p1') is None

    def test_record_without_original(self, coordinator, photo_db, populated):
        populated.original_path = ''

        result = coordinator.delete({'photoId': 'p1'}, Principal('u1'))

        assert result['deleted'] == 4

    def test_unauthenticated(self, coordinator, populated):
        with pytest.raises(Unauthenticated) as exc:
            coordinator.delete({'photoId': 'p1'}, None)
        assert exc.value.code == 'unauthenticated'

    def test_invalid_argument(self, coordinator, populated):
        with pytest.raises(InvalidArgument) as exc:
            coordinator.delete({}, Principal('u1'))
        assert exc.value.to_dict() == {'code': 'invalid-argument', 'message': 'photoId required'}

    def test_not_found(self, coordinator):
        with pytest.raises(NotFound) as exc:
            coordinator.delete({'photoId': 'nope'}, Principal('u1'))
        assert exc.value.code == 'not-found'

    def test_permission_denied_leaves_everything(self, coordinator, storage, photo_db, populated):
        before = dict(storage.objects)

        with pytest.raises(PermissionDenied) as exc:
            coordinator.delete({'photoId': 'p1'}, Principal('intruder'))

        assert exc.value.code == 'permission-denied'
        assert storage.objects == before
        assert photo_db.get_photo('p1') is not None

    def test_partial_failure_keeps_record(self, coordinator, storage, photo_db, populated):
        storage.fail_deletes.add('variants/p1/thumb.jpg')

        with pytest.raises(InternalError) as exc:
            coordinator.delete({'photoId': 'p1'}, Principal('u1'))

        assert exc.value.code == 'internal'
        assert photo_db.get_photo('p1') is not None

    def test_redelete_is_not_found(self, coordinator, populated):
        coordinator.delete({'photoId': 'p1'}, Principal('u1'))

        with pytest.raises(NotFound):
            coordinator.delete({'photoId': 'p1'}, Principal('u1'))

    def test_lookup_failure_is_internal(self, coordinator, mocker, storage, populated):
        mocker.patch.object(coordinator.photo_db, 'get_photo', side_effect=IOError("metadata store unavailable"))
        before = dict(storage.objects)

        with pytest.raises(InternalError) as exc:
            coordinator.delete({'photoId': 'p1'}, Principal('u1'))

        assert exc.value.code == 'internal'
        assert isinstance(exc.value.__cause__, OSError)
        assert storage.objects == before

    def test_collect_keys_deduplicates(self, coordinator, storage, sample_record):
        sample_record.original_path = 'variants/p1/thumb.jpg'
        storage.put('variants/p1/thumb.jpg', b'v')
        storage.put('variants/p1/medium.jpg', b'v')

        assert coordinator.collect_keys(sample_record) == [
            'variants/p1/thumb.jpg',
            'variants/p1/medium.jpg',
        ]
