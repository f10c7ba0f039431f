"""Tests for ObjectFinalizedEvent parsing."""

import pytest

from photoproc.events import ObjectFinalizedEvent


S3_NOTIFICATION = {
    'Records': [
        {
            'eventName': 'ObjectCreated:Put',
            's3': {
                'bucket': {'name': 'photos'},
                'object': {'key': 'originals/my+photo%281%29.jpg', 'size': 1024},
            },
        },
        {
            'eventName': 'ObjectRemoved:Delete',
            's3': {
                'bucket': {'name': 'photos'},
                'object': {'key': 'originals/gone.jpg'},
            },
        },
        {
            'eventName': 'ObjectCreated:CompleteMultipartUpload',
            's3': {
                'bucket': {'name': 'photos'},
                'object': {'key': 'variants/p1/thumb.jpg'},
            },
        },
    ]
}


class TestObjectFinalizedEvent:

    def test_from_s3_notification(self):
        events = ObjectFinalizedEvent.from_s3_notification(S3_NOTIFICATION)

        assert events == [
            ObjectFinalizedEvent(key='originals/my photo(1).jpg', bucket='photos'),
            ObjectFinalizedEvent(key='variants/p1/thumb.jpg', bucket='photos'),
        ]

    def test_from_dict(self):
        event = ObjectFinalizedEvent.from_dict({'name': 'originals/p1.jpg', 'bucket': 'photos'})

        assert event.key == 'originals/p1.jpg'
        assert event.bucket == 'photos'

    def test_from_dict_missing_name(self):
        assert ObjectFinalizedEvent.from_dict({}).key == ''

    def test_parse_dispatches(self):
        assert len(ObjectFinalizedEvent.parse(S3_NOTIFICATION)) == 2
        assert ObjectFinalizedEvent.parse({'name': 'a.jpg'}) == [ObjectFinalizedEvent(key='a.jpg')]

    def test_parse_rejects_non_object(self):
        for payload in ([], 'originals/p1.jpg', 42, None):
            with pytest.raises(ValueError):
                ObjectFinalizedEvent.parse(payload)
