"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast
from urllib.parse import quote_plus

from src.commons.infrastructure.blob import BlobStorageBase, MinioBlobStorage
from src.commons.infrastructure.documentdb import DocumentDBBase, MongoDBDocumentDB
from src.commons.settings.models import DocumentDBSettings, Settings
from src.commons.telemetry import get_logger
from src.infrastructure.video import FFmpegHlsTranscoder, TranscoderBase


def build_mongo_connection_string(doc_settings: DocumentDBSettings) -> str:
    """Resolve the MongoDB URI from settings.

    An explicit ``connection_string`` wins; otherwise one is assembled from
    host, port and optional credentials.
    """
    if doc_settings.connection_string:
        return doc_settings.connection_string
    if doc_settings.username and doc_settings.password:
        return (
            f"mongodb://{quote_plus(doc_settings.username)}"
            f":{quote_plus(doc_settings.password)}"
            f"@{doc_settings.host}:{doc_settings.port}"
            f"/?authSource={doc_settings.auth_source}"
        )
    return f"mongodb://{doc_settings.host}:{doc_settings.port}"


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        """Settings the factory was built from."""
        return self._settings

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance.

        Returns:
            Configured blob storage provider.
        """
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.endpoint,
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
                public_domain=blob_settings.public_url_domain,
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=build_mongo_connection_string(doc_settings),
                database_name=doc_settings.database,
                server_selection_timeout_ms=doc_settings.server_selection_timeout_ms,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_transcoder(self) -> TranscoderBase:
        """Get HLS transcoder instance.

        Returns:
            Configured transcoder.
        """
        if "transcoder" not in self._instances:
            transcoder_settings = self._settings.transcoder
            self._instances["transcoder"] = FFmpegHlsTranscoder(
                ffmpeg_path=transcoder_settings.ffmpeg_path,
                video_codec=transcoder_settings.video_codec,
                audio_codec=transcoder_settings.audio_codec,
                master_playlist_name=transcoder_settings.master_playlist_name,
                variant_playlist_name=transcoder_settings.variant_playlist_name,
                segment_filename=transcoder_settings.segment_filename,
            )
        return cast("TranscoderBase", self._instances["transcoder"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            if hasattr(instance, "close"):
                try:
                    close_result = instance.close()
                    if hasattr(close_result, "__await__"):
                        await close_result
                except Exception as e:
                    self._logger.warning(
                        f"Failed to close {name}: {e}",
                        extra={"service": name},
                    )

        self._instances.clear()

