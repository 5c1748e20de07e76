"""
EDMS - Cliente async para subir y descargar documentos de un EDMS vía REST.

Componentes:
- http/: DocumentClient (crear documento, subir archivo, descargar)
- models: UploadResult
- errors: Jerarquía de excepciones del cliente
- cli: Línea de comandos (python -m edms.cli)
"""

from edms.errors import (
    CreationFailedError,
    DestinationLockedError,
    EdmsError,
    EdmsHttpError,
    InvalidArgumentError,
    UploadFailedError,
)
from edms.http import DocumentClient
from edms.models import UploadResult

__all__ = [
    # Client
    "DocumentClient",
    "UploadResult",
    # Errors
    "EdmsError",
    "InvalidArgumentError",
    "CreationFailedError",
    "DestinationLockedError",
    "UploadFailedError",
    "EdmsHttpError",
]
