"""Pydantic settings models for worker configuration."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "hls-rendition-worker"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class BlobStorageSettings(BaseModel):
    """Object storage settings (S3 or MinIO)."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    provider: Literal["minio", "s3"] = "s3"
    endpoint: str = "s3.amazonaws.com"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = True
    region: str = "us-east-1"
    public_domain: str | None = Field(
        default=None,
        description="Host suffix used in public URLs; defaults to s3.{region}.amazonaws.com",
    )
    chunk_size_bytes: int = Field(default=1024 * 1024, ge=8192)

    @property
    def public_url_domain(self) -> str:
        """Domain appended to the bucket name in public object URLs."""
        return self.public_domain or f"s3.{self.region}.amazonaws.com"


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    provider: Literal["mongodb"] = "mongodb"
    connection_string: str | None = None
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "test"
    auth_source: str = "admin"
    server_selection_timeout_ms: int = Field(default=10000, ge=100)
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class TranscoderSettings(BaseModel):
    """External transcoder (ffmpeg) settings."""

    ffmpeg_path: str = "ffmpeg"
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    segment_seconds: int = Field(default=6, ge=1, le=60)
    master_playlist_name: str = "master.m3u8"
    variant_playlist_name: str = "playlist.m3u8"
    segment_filename: str = "segment%d.ts"


class JobSettings(BaseModel):
    """Inputs describing the single job this process runs."""

    # Numeric-looking IDs and bucket names may be written as JSON numbers
    model_config = ConfigDict(coerce_numbers_to_str=True)

    input_url: str = ""
    output_bucket: str = ""
    video_id: str | None = None
    scratch_dir: str = "/tmp"  # noqa: S108
    output_prefix_template: str = "processed/{video_id}/"


class PipelineSettings(BaseModel):
    """Stage deadlines and failure policy."""

    fetch_timeout_seconds: float | None = Field(default=None, gt=0)
    transcode_timeout_seconds: float | None = Field(default=None, gt=0)
    publish_timeout_seconds: float | None = Field(default=None, gt=0)
    fail_on_catalog_error: bool = False


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    transcoder: TranscoderSettings = Field(default_factory=TranscoderSettings)
    job: JobSettings = Field(default_factory=JobSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HLS_PIPELINE__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
