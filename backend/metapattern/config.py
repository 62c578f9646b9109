"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    metapattern_env: str = "development"
    metapattern_log_level: str = "debug"

    # Server
    host: str = "127.0.0.1"
    port: int = 3001

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # External metadata binary
    exiftool_path: str = "exiftool"
    exiftool_timeout_s: float = 10.0
    upload_dir: str = "uploads"

    # Extraction cascade
    metadata_service_url: str = "http://localhost:3001/api/extract-metadata"
    metadata_service_timeout_s: float = 5.0
    tag_parse_timeout_s: float = 5.0

    # Rendering
    frame_rate: int = 30
    export_scale: int = 2
    default_frames: int = 30

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
