"""
Application Settings.

Centraliza toda configuração via .env / variáveis de ambiente.
Todos os limites têm valor padrão para rodar sem configuração em dev.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from linkface.core.interfaces.storage_service import StorageBackend

DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    """Configurações carregadas de variáveis de ambiente."""

    # --- App ---
    env: str = "development"
    debug: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    public_app_url: str = "http://localhost:8000"
    log_level: str = "INFO"
    log_json: bool = False

    # --- Data ---
    data_dir: str = "data"
    database_url: str = ""

    # --- Storage ---
    storage_type: StorageBackend = StorageBackend.LOCAL
    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_s3_bucket_name: str = ""
    blob_read_write_token: str = ""
    google_application_credentials: str = ""
    google_drive_folder_id: str = ""

    # --- Image validation ---
    max_image_size: int = 5_242_880          # 5MB
    max_base64_size: int = 7_000_000         # base64 é ~33% maior
    min_image_dimension: int = 200
    allowed_image_types: str = "image/jpeg,image/png,image/webp"

    # --- Image compression ---
    image_codec: str = "opencv"              # "opencv" | "none"
    max_image_width: int = 1920
    max_image_height: int = 1920
    image_quality: int = 85

    # --- Rate limiting ---
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 10

    # --- Admin ---
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    admin_token: str = ""
    admin_session_ttl_seconds: int = 24 * 60 * 60

    # --- Notifications ---
    email_service: str = ""
    sms_service: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def allowed_image_types_list(self) -> list[str]:
        return [t.strip() for t in self.allowed_image_types.split(",") if t.strip()]

    @property
    def uploads_dir(self) -> Path:
        return Path(self.data_dir) / "uploads"

    @property
    def temp_dir(self) -> Path:
        return Path(self.data_dir) / "temp"

    @property
    def resolved_database_url(self) -> str:
        """DATABASE_URL ou SQLite dentro de DATA_DIR."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{Path(self.data_dir) / 'app.db'}"

    def validate_deployment(self) -> list[str]:
        """Lista problemas de configuração (credenciais ausentes, senha padrão em produção)."""
        errors: list[str] = []

        for name in ("max_image_size", "max_base64_size", "min_image_dimension",
                     "rate_limit_window_seconds", "rate_limit_max_requests"):
            if getattr(self, name) <= 0:
                errors.append(f"{name.upper()} deve ser um número positivo")

        if self.is_production and self.admin_password == DEFAULT_ADMIN_PASSWORD:
            errors.append("ADMIN_PASSWORD deve ser alterado em produção!")

        if self.storage_type is StorageBackend.S3:
            if not self.aws_access_key_id:
                errors.append("AWS_ACCESS_KEY_ID é obrigatório para S3")
            if not self.aws_secret_access_key:
                errors.append("AWS_SECRET_ACCESS_KEY é obrigatório para S3")
            if not self.aws_s3_bucket_name:
                errors.append("AWS_S3_BUCKET_NAME é obrigatório para S3")
        elif self.storage_type is StorageBackend.VERCEL_BLOB:
            if not self.blob_read_write_token:
                errors.append("BLOB_READ_WRITE_TOKEN é obrigatório para Vercel Blob")
        elif self.storage_type is StorageBackend.DRIVE:
            if not self.google_application_credentials:
                errors.append("GOOGLE_APPLICATION_CREDENTIALS é obrigatório para Google Drive")
            if not self.google_drive_folder_id:
                errors.append("GOOGLE_DRIVE_FOLDER_ID é obrigatório para Google Drive")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Singleton de settings."""
    return Settings()
