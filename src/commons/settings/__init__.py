"""Settings management module."""

from src.commons.settings.loader import SettingsLoader, get_settings, reset_settings
from src.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    JobSettings,
    PipelineSettings,
    Settings,
    TelemetrySettings,
    TranscoderSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    # Storage
    "BlobStorageSettings",
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    # Processing
    "TranscoderSettings",
    "JobSettings",
    "PipelineSettings",
    # Telemetry
    "TelemetrySettings",
]
