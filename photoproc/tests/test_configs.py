"""Tests for configuration classes."""

from photoproc.db_config import DbConfig
from photoproc.pipeline_config import PipelineConfig
from photoproc.s3_config import S3Config


class TestS3Config:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('S3_BUCKET', 'photos')
        monkeypatch.setenv('S3_ENDPOINT', 'http://minio:9000')
        monkeypatch.setenv('S3_VERIFY_SSL', 'false')
        monkeypatch.setenv('S3_READ_TIMEOUT', '120')

        config = S3Config.from_env()

        assert config.bucket == 'photos'
        assert config.endpoint == 'http://minio:9000'
        assert config.verify_ssl is False
        assert config.read_timeout == 120.0

    def test_validate_requires_bucket(self):
        assert "S3_BUCKET is required" in S3Config(bucket='').validate()

    def test_validate_key_pair(self):
        errors = S3Config(bucket='b', access_key='a').validate()
        assert any('together' in e for e in errors)

    def test_valid(self):
        assert S3Config(bucket='b').validate() == []


class TestDbConfig:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('SQL_HOST', 'db')
        monkeypatch.setenv('SQL_PORT', '3307')
        monkeypatch.setenv('SQL_USER', 'photos')
        monkeypatch.setenv('SQL_DATABASE', 'media')

        config = DbConfig.from_env()

        assert config.host == 'db'
        assert config.port == 3307
        assert config.validate() == []

    def test_validate_missing(self):
        errors = DbConfig().validate()
        assert "SQL_USER is required" in errors
        assert "SQL_DATABASE is required" in errors


class TestPipelineConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('PHOTOPROC_TMP_ROOT', raising=False)
        monkeypatch.delenv('PHOTOPROC_CONVERT_COMMAND', raising=False)

        config = PipelineConfig.from_env()

        assert config.tmp_root is None
        assert config.convert_command == 'convert'
        assert config.validate() == []

    def test_missing_tmp_root(self, tmp_path):
        config = PipelineConfig(tmp_root=str(tmp_path / 'nope'))
        assert config.validate()

    def test_max_pixels(self, monkeypatch):
        monkeypatch.delenv('PHOTOPROC_MAX_PIXELS', raising=False)
        assert PipelineConfig.from_env().max_pixels == 268402689

        monkeypatch.setenv('PHOTOPROC_MAX_PIXELS', '1000')
        assert PipelineConfig.from_env().max_pixels == 1000

        assert "PHOTOPROC_MAX_PIXELS must be positive" in PipelineConfig(max_pixels=0).validate()
