"""Tests for StagingArea."""

import os
import shutil

import pytest

from photoproc.staging import StagingArea


class TestStagingArea:

    def test_acquire_creates_and_removes(self, tmp_path):
        staging = StagingArea(root=str(tmp_path))

        with staging.acquire() as scratch:
            assert os.path.isdir(scratch.path)
            assert os.path.dirname(scratch.path) == str(tmp_path)
            assert os.path.basename(scratch.path).startswith('proc-')
            with open(scratch.file('orig'), 'wb') as f:
                f.write(b'data')
            path = scratch.path

        assert not os.path.exists(path)

    def test_removed_on_error(self, tmp_path):
        staging = StagingArea(root=str(tmp_path))

        with pytest.raises(RuntimeError):
            with staging.acquire() as scratch:
                path = scratch.path
                raise RuntimeError("boom")

        assert not os.path.exists(path)

    def test_unique_directories(self, tmp_path):
        staging = StagingArea(root=str(tmp_path))

        with staging.acquire() as first, staging.acquire() as second:
            assert first.path != second.path

    def test_missing_directory_tolerated(self, tmp_path):
        staging = StagingArea(root=str(tmp_path))

        with staging.acquire() as scratch:
            shutil.rmtree(scratch.path)

        assert os.listdir(tmp_path) == []

    def test_file_path(self, tmp_path):
        staging = StagingArea(root=str(tmp_path))
        with staging.acquire() as scratch:
            assert scratch.file('pyramid.tif') == os.path.join(scratch.path, 'pyramid.tif')
