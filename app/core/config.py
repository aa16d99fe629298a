# app/core/config.py
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


# Roles del sistema
class Roles:
    """Constantes para roles de usuario."""
    ADMIN = "ADMIN"
    RH = "RH"
    COORD = "COORD"

    TODOS = (ADMIN, RH, COORD)


class Settings(BaseSettings):
    # --- Core ---
    environment: str = Field("development", alias="ENVIRONMENT")

    # --- Seguridad / JWT ---
    secret_key: str = Field(..., alias="SECRET_KEY")
    algorithm: str = Field("HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(480, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # --- Base de datos ---
    database_url: str = Field(..., alias="DATABASE_URL")

    # --- CORS ---
    backend_cors_origins: str = Field("http://localhost:5173", alias="BACKEND_CORS_ORIGINS")

    # --- Archivos ---
    uploads_dir: Path = Field(Path("uploads"), alias="UPLOADS_DIR")
    max_upload_mb: int = Field(10, alias="MAX_UPLOAD_MB")

    # --- Reglas de negocio ---
    codigo_docente_longitud: int = Field(6, alias="CODIGO_DOCENTE_LONGITUD")
    rfc_validacion_estricta: bool = Field(False, alias="RFC_VALIDACION_ESTRICTA")

    # --- Logging ---
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", alias="LOG_FORMAT")

    # --- Admin inicial ---
    admin_correo: str = Field("admin@umx.edu.mx", alias="ADMIN_CORREO")
    admin_password: str = Field("admin123", alias="ADMIN_PASSWORD")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.backend_cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
