"""
Tests for environment configuration.

Run with: pytest src/nodestore/config_test.py -v
"""

from nodestore.config import DEFAULT_MULTIPART_MIN_PART_SIZE, Config, S3Settings

S3_VARIABLES = [
    "S3_ENDPOINT",
    "S3_ACCESS_KEY",
    "S3_SECRET_KEY",
    "S3_BUCKET_NAME",
    "S3_REGION",
    "S3_MULTIPART_MIN_PART_SIZE",
]


class TestS3Settings:
    """Tests for S3Settings.from_env()"""

    def test_defaults(self, monkeypatch):
        for name in S3_VARIABLES:
            monkeypatch.delenv(name, raising=False)

        settings = S3Settings.from_env()

        assert settings == S3Settings()
        assert settings.endpoint == "http://localhost:9091"
        assert settings.region == "aws-global"
        assert settings.multipart_min_part_size == DEFAULT_MULTIPART_MIN_PART_SIZE

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("S3_ENDPOINT", "http://minio:9000")
        monkeypatch.setenv("S3_ACCESS_KEY", "key")
        monkeypatch.setenv("S3_SECRET_KEY", "secret")
        monkeypatch.setenv("S3_BUCKET_NAME", "media")
        monkeypatch.setenv("S3_REGION", "eu-west-1")
        monkeypatch.setenv("S3_MULTIPART_MIN_PART_SIZE", "1048576")

        settings = S3Settings.from_env()

        assert settings == S3Settings(
            endpoint="http://minio:9000",
            access_key="key",
            secret_key="secret",
            bucket_name="media",
            region="eu-west-1",
            multipart_min_part_size=1048576,
        )


class TestConfig:
    """Tests for Config.from_env()"""

    def test_test_environment_selected(self):
        assert Config.from_env().environment == "test"

    def test_database_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://db:5432/nodes")

        assert Config.from_env().database_url == "postgresql://db:5432/nodes"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("APP_NAME", "nodes")
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_JSON", "TRUE")

        config = Config.from_env()

        assert config.app_name == "nodes"
        assert config.log_level == "WARNING"
        assert config.log_json is True
