import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load the appropriate .env file on module import
env = os.environ.get("NODESTORE_ENV", "development").lower()
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    # Fall back to the default .env file
    load_dotenv()


# S3 requires multipart upload parts of at least 5MB, except the last one.
# Other S3-compatible services may differ, hence the setting.
DEFAULT_MULTIPART_MIN_PART_SIZE = 5 * 1024 * 1024


@dataclass
class S3Settings:
    endpoint: str = "http://localhost:9091"
    access_key: str | None = None
    secret_key: str | None = None
    bucket_name: str = "nodestore"
    region: str = "aws-global"
    multipart_min_part_size: int = DEFAULT_MULTIPART_MIN_PART_SIZE

    @classmethod
    def from_env(cls) -> "S3Settings":
        return cls(
            endpoint=os.environ.get("S3_ENDPOINT", cls.endpoint),
            access_key=os.environ.get("S3_ACCESS_KEY"),
            secret_key=os.environ.get("S3_SECRET_KEY"),
            bucket_name=os.environ.get("S3_BUCKET_NAME", cls.bucket_name),
            region=os.environ.get("S3_REGION", cls.region),
            multipart_min_part_size=int(
                os.environ.get("S3_MULTIPART_MIN_PART_SIZE", DEFAULT_MULTIPART_MIN_PART_SIZE)
            ),
        )


@dataclass
class Config:
    environment: str
    database_url: str
    app_name: str = "nodestoreApp"
    log_level: str = "INFO"
    log_json: bool = False
    s3: S3Settings = field(default_factory=S3Settings)

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            database_url=os.environ.get(
                "DATABASE_URL", "postgresql://localhost:5432/nodestore"
            ),
            app_name=os.environ.get("APP_NAME", "nodestoreApp"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_json=os.environ.get("LOG_JSON", "false").lower() == "true",
            s3=S3Settings.from_env(),
        )


config = Config.from_env()
