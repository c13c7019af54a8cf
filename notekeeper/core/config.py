"""Configuración central de la aplicación (Pydantic Settings).

- Carga variables desde .env en la raíz del proyecto.
- Agrupa ajustes por área: App, CORS, Mongo, Auth/JWT, Hashing, Timeouts, Logging.
"""
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resuelve el .env ubicado en la raíz del proyecto (independiente del CWD)
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Conjunto de variables de configuración con valores por defecto razonables.

    Nota: los valores pueden sobreescribirse vía variables de entorno (.env).
    """
    # App
    app_name: str = "Notekeeper API"
    api_prefix: str = ""
    log_level: str = "INFO"

    # CORS (frontend Vite/React en localhost)
    cors_origins: list[str] = ["http://localhost:5173"]
    cors_allow_any: bool = False  # Permite todos los orígenes (usa con cuidado)

    # Mongo
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "notekeeper"
    mongo_tls: bool = False
    # TLS relax options (dev only)
    mongo_tls_insecure: bool = False
    mongo_tls_allow_invalid_hostnames: bool = False

    # Auth / JWT
    jwt_secret: str | None = Field(
        None,
        validation_alias=AliasChoices("JWT_SECRET", "ACCESS_TOKEN_SECRET"),
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 3600
    login_rate_per_min: int = 10

    # Argon2id
    password_hash_time_cost: int = 2
    password_hash_memory_cost: int = 51200
    password_hash_parallelism: int = 2

    # Límite para llamadas a Mongo y hashing
    operation_timeout_seconds: float = 10.0

    # --- Utilidades derivadas / helpers ---
    @property
    def api_prefix_normalized(self) -> str:
        """Devuelve `api_prefix` con formato consistente.

        - Siempre inicia con '/'
        - Sin '/' final
        - Si está vacío (o es solo '/'), devuelve ""
        """
        pref = (self.api_prefix or "").strip().rstrip('/')
        if not pref:
            return ""
        if not pref.startswith('/'):
            pref = '/' + pref
        return pref

    @property
    def mongo_use_tls(self) -> bool:
        return self.mongo_tls or self.mongo_uri.startswith("mongodb+srv://")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # no fallar si hay variables no usadas
        populate_by_name=True,
    )


settings = Settings()
