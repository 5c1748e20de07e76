from pydantic import Field, validator
from pydantic_settings import BaseSettings
from functools import lru_cache

from config.constants import Environment, LogLevel


class GeneralSettings(BaseSettings):
    """Configuracion general"""

    ENVIRONMENT: str = Field(
        default="development",
        description="Entorno: development, staging, production"
    )
    DEBUG: bool = Field(
        default=False,
        description="Modo debug (verbose logging)"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Nivel de logging: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    @validator("ENVIRONMENT")
    def validate_environment(cls, v):
        """Solo se aceptan los entornos conocidos"""
        v = v.lower()
        if v not in Environment.list():
            raise ValueError(f"ENVIRONMENT invalido: {v}. Opciones: {Environment.list()}")
        return v

    @validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        """Normalizar nivel a mayusculas y validar"""
        v = v.upper()
        if v not in LogLevel.list():
            raise ValueError(f"LOG_LEVEL invalido: {v}. Opciones: {LogLevel.list()}")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


class EdmsSettings(BaseSettings):
    """Configuracion de conexion con el servidor EDMS (API REST)"""

    EDMS_BASE_URL: str = Field(
        default="http://localhost:8000/api/v4",
        description="URL base de la API REST del EDMS"
    )
    EDMS_USERNAME: str = Field(
        default="",
        description="Usuario para Basic Auth"
    )
    EDMS_PASSWORD: str = Field(
        default="",
        description="Contraseña para Basic Auth"
    )
    EDMS_TIMEOUT: float = Field(
        default=30,
        description="Timeout en segundos para cada request al EDMS"
    )

    @validator("EDMS_BASE_URL")
    def validate_base_url(cls, v):
        """Remover trailing slash de la URL"""
        if v.endswith("/"):
            return v.rstrip("/")
        return v

    @validator("EDMS_TIMEOUT")
    def validate_timeout(cls, v):
        """El timeout debe ser positivo"""
        if v <= 0:
            raise ValueError("EDMS_TIMEOUT debe ser mayor a 0")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


class Settings(BaseSettings):
    """
    Clase principal que agrupa todas las configuraciones
    Uso: from config.settings import settings
         settings.edms.EDMS_BASE_URL, settings.LOG_LEVEL, etc
    """

    # Subconfigurations
    general: GeneralSettings = GeneralSettings()
    edms: EdmsSettings = EdmsSettings()

    # Shortcuts para acceso directo
    @property
    def ENVIRONMENT(self) -> str:
        return self.general.ENVIRONMENT

    @property
    def DEBUG(self) -> bool:
        return self.general.DEBUG

    @property
    def LOG_LEVEL(self) -> str:
        return self.general.LOG_LEVEL

    @property
    def EDMS_BASE_URL(self) -> str:
        return self.edms.EDMS_BASE_URL

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Singleton instance
@lru_cache()
def get_settings() -> Settings:
    """
    Obtener instancia singleton de Settings
    Uso: from config.settings import get_settings
         settings = get_settings()
    """
    return Settings()


# Instancia global (para imports directos)
settings = get_settings()
