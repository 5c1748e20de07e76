"""Modelos de datos devueltos por el cliente EDMS."""

from dataclasses import dataclass, asdict


@dataclass
class UploadResult:
    """Resultado de subida de un documento."""
    file_list_url: str
    document_url: str
    file_name: str = ""
    mime_type: str = ""
    file_id: str = ""
    download_url: str = ""
    
    def to_dict(self) -> dict:
        """Representación serializable (usada por el CLI)."""
        return asdict(self)
