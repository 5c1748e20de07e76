from enum import Enum


class LogLevel(str, Enum):
    """Niveles de logging"""
    
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    
    @classmethod
    def list(cls):
        """Retornar lista de niveles"""
        return [level.value for level in cls]


class Environment(str, Enum):
    """Entornos soportados"""
    
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    
    @classmethod
    def list(cls):
        """Retornar lista de entornos"""
        return [e.value for e in cls]


class UploadAction(str, Enum):
    """Acciones aceptadas por el endpoint de archivos del EDMS"""
    
    REPLACE = "replace"
