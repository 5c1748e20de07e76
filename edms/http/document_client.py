"""
Document Client - Cliente HTTP async para la API REST del EDMS.

Maneja la comunicación con los endpoints de documentos:
- POST {base_url}/documents/: Crear el registro del documento
- POST <file_list_url>: Adjuntar el contenido binario (multipart)
- GET <url>: Leer metadatos del archivo recién subido
- GET <download_url>: Descargar archivos (a disco o a memoria)

Todas las requests llevan Basic Auth construido por request; nunca se
modifican los headers por defecto del httpx.AsyncClient compartido.
"""

import json
import logging
from pathlib import Path, PurePath
from typing import BinaryIO, Optional, Tuple, Union

import httpx
import portalocker

from config.constants import UploadAction
from config.settings import settings
from edms.errors import (
    CreationFailedError,
    DestinationLockedError,
    EdmsHttpError,
    InvalidArgumentError,
    UploadFailedError,
)
from edms.models import UploadResult

logger = logging.getLogger(__name__)

# Campos de file_latest requeridos para construir el resultado
FILE_LATEST_FIELDS = ("filename", "mimetype", "download_url", "id")


def _require_value(value, argument: str) -> None:
    """Lanzar InvalidArgumentError si el valor es None, vacío o solo espacios."""
    if value is None:
        raise InvalidArgumentError(argument)
    # Path("") se normaliza a "."; sin partes cuenta como vacío
    if isinstance(value, PurePath):
        if not value.parts:
            raise InvalidArgumentError(argument)
    elif not str(value).strip():
        raise InvalidArgumentError(argument)


def _string_field(data: dict, key: str) -> Optional[str]:
    """Leer un campo URL del JSON; ausente, null o vacío cuenta como None."""
    value = data.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _json_or_none(response: httpx.Response):
    """Decodificar JSON de la respuesta, None si el body no es JSON."""
    try:
        return response.json()
    except ValueError:
        return None


class DocumentClient:
    """Cliente HTTP async para subir y descargar documentos del EDMS."""

    # Endpoints
    DOCUMENTS_ENDPOINT = "/documents/"

    # Contrato del formulario de subida
    DOCUMENT_TYPE_ID = 1
    FILE_FIELD = "file_new"
    FILE_CONTENT_TYPE = "application/octet-stream"

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient],
        base_url: str,
        username: str,
        password: str,
        timeout: Optional[float] = None,
    ):
        """
        Inicializar cliente.

        Args:
            http_client: Cliente httpx a reutilizar. Si es None se crea uno
                         propio que se cierra con aclose().
            base_url: URL base de la API (ej: https://edms.local/api/v4)
            username: Usuario para Basic Auth
            password: Contraseña para Basic Auth
            timeout: Timeout en segundos por request. None = default del cliente.
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        # Basic Auth por request, nunca en los headers del cliente compartido
        self._auth = httpx.BasicAuth(username, password)
        self.timeout = timeout

        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(**self._request_options())
        self._client = http_client

    @classmethod
    def from_settings(cls, http_client: Optional[httpx.AsyncClient] = None) -> "DocumentClient":
        """Crear cliente con la configuración EDMS_* de settings."""
        return cls(
            http_client,
            base_url=settings.edms.EDMS_BASE_URL,
            username=settings.edms.EDMS_USERNAME,
            password=settings.edms.EDMS_PASSWORD,
            timeout=settings.edms.EDMS_TIMEOUT,
        )

    async def __aenter__(self) -> "DocumentClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Cerrar el cliente httpx solo si fue creado por esta instancia."""
        if self._owns_client:
            await self._client.aclose()

    # === Operaciones públicas ===

    async def upload_file(
        self,
        document_name: str,
        content: Union[bytes, BinaryIO]
    ) -> UploadResult:
        """
        Crear un documento y subir su contenido.

        Secuencia: crear registro → subir archivo a file_list_url (202) →
        leer el documento y extraer file_latest.

        El registro creado en el primer paso NO se elimina si un paso
        posterior falla; se loguea un warning con su URL.

        Args:
            document_name: Label del documento y filename del archivo
            content: Bytes o archivo binario abierto

        Returns:
            UploadResult con URLs y metadatos del archivo almacenado

        Raises:
            InvalidArgumentError: document_name vacío
            CreationFailedError: la creación no devolvió file_list_url ni url
            UploadFailedError: status de subida != 202 o metadatos incompletos
            EdmsHttpError: GET del documento con status de error
        """
        _require_value(document_name, "document_name")

        file_list_url, document_url = await self._create_document(document_name)

        try:
            await self._upload_content(file_list_url, document_name, content)
            return await self._fetch_upload_result(file_list_url, document_url)
        except Exception:
            logger.warning(
                f"Documento '{document_name}' quedó creado sin archivo válido: "
                f"{document_url or file_list_url}"
            )
            raise

    async def download_to_file(
        self,
        file_url: str,
        destination_path: Union[str, Path]
    ) -> None:
        """
        Descargar un archivo y guardarlo en disco.

        El destino se abre con lock exclusivo no bloqueante; si otro
        escritor lo tiene bloqueado la descarga falla sin modificarlo.
        El body se escribe por chunks y el archivo se cierra (liberando el
        lock) en cualquier salida, incluso si la descarga falla a mitad.

        Raises:
            InvalidArgumentError: file_url o destination_path vacíos
            EdmsHttpError: status de error en el GET
            DestinationLockedError: destino bloqueado por otro escritor
        """
        _require_value(file_url, "file_url")
        _require_value(destination_path, "destination_path")

        destination = Path(destination_path)
        logger.info(f"Descargando {file_url} → {destination}")

        async with self._client.stream(
            "GET",
            file_url,
            auth=self._auth,
            **self._request_options()
        ) as response:
            self._ensure_success(response, file_url)

            written = 0
            # "ab": no truncar hasta tener el lock exclusivo
            with open(destination, "ab") as fh:
                try:
                    portalocker.lock(
                        fh,
                        portalocker.LockFlags.EXCLUSIVE | portalocker.LockFlags.NON_BLOCKING
                    )
                except portalocker.LockException as e:
                    logger.error(f"Destino bloqueado por otro proceso: {destination}")
                    raise DestinationLockedError(str(destination)) from e

                fh.truncate(0)
                async for chunk in response.aiter_bytes():
                    fh.write(chunk)
                    written += len(chunk)

        logger.info(f"Archivo descargado: {destination} ({written} bytes)")

    async def fetch_bytes(self, file_url: str) -> bytes:
        """
        Descargar un archivo completo a memoria.

        No hay límite de tamaño: el caller es responsable del uso de memoria.

        Raises:
            InvalidArgumentError: file_url vacío
            EdmsHttpError: status de error en el GET
        """
        _require_value(file_url, "file_url")

        response = await self._client.get(
            file_url,
            auth=self._auth,
            **self._request_options()
        )
        self._ensure_success(response, file_url)

        logger.debug(f"Descargados {len(response.content)} bytes de {file_url}")
        return response.content

    # === Pasos internos de la subida ===

    async def _create_document(self, document_name: str) -> Tuple[Optional[str], Optional[str]]:
        """
        POST del registro del documento.

        Solo falla si faltan AMBAS URLs; con una sola presente la subida
        continúa y falla más adelante.
        """
        url = f"{self.base_url}{self.DOCUMENTS_ENDPOINT}"
        payload = {
            "document_type_id": self.DOCUMENT_TYPE_ID,
            "label": document_name,
        }
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

        logger.info(f"Creando documento '{document_name}' en {url}")

        response = await self._client.post(
            url,
            content=body,
            headers={"Content-Type": "application/json; charset=utf-8"},
            auth=self._auth,
            **self._request_options()
        )

        data = _json_or_none(response)
        if not isinstance(data, dict):
            data = {}

        file_list_url = _string_field(data, "file_list_url")
        document_url = _string_field(data, "url")

        if file_list_url is None and document_url is None:
            logger.error(
                f"Creación de '{document_name}' sin URLs "
                f"(status {response.status_code}): {response.text[:200]}"
            )
            raise CreationFailedError(document_name)

        logger.info(f"Documento creado: {document_url}")
        return file_list_url, document_url

    async def _upload_content(
        self,
        file_list_url: Optional[str],
        document_name: str,
        content: Union[bytes, BinaryIO]
    ) -> None:
        """POST multipart del contenido; solo 202 Accepted es éxito."""
        if file_list_url is None:
            logger.error(f"Sin file_list_url para '{document_name}', no se puede subir")
            raise UploadFailedError()

        files = {
            self.FILE_FIELD: (document_name, content, self.FILE_CONTENT_TYPE)
        }
        data = {"action_name": UploadAction.REPLACE.value}

        logger.info(f"Subiendo archivo '{document_name}' a {file_list_url}")

        response = await self._client.post(
            file_list_url,
            files=files,
            data=data,
            auth=self._auth,
            **self._request_options()
        )

        if response.status_code != httpx.codes.ACCEPTED:
            logger.error(f"Upload rechazado [{response.status_code}]: {response.text[:200]}")
            raise UploadFailedError(
                f"Failed to upload file. Status code: {response.status_code}, "
                f"Response: {response.text}",
                status_code=response.status_code,
                response_text=response.text,
            )

    async def _fetch_upload_result(
        self,
        file_list_url: str,
        document_url: Optional[str]
    ) -> UploadResult:
        """GET del documento y extracción de file_latest."""
        if document_url is None:
            logger.error("Sin url de documento, no se pueden leer metadatos")
            raise UploadFailedError()

        response = await self._client.get(
            document_url,
            auth=self._auth,
            **self._request_options()
        )
        self._ensure_success(response, document_url)

        data = _json_or_none(response)
        file_latest = data.get("file_latest") if isinstance(data, dict) else None
        if not isinstance(file_latest, dict):
            logger.error(f"Documento sin file_latest: {document_url}")
            raise UploadFailedError()

        values = {key: file_latest.get(key) for key in FILE_LATEST_FIELDS}
        missing = [key for key, value in values.items() if value is None]
        if missing:
            logger.error(f"file_latest incompleto, faltan {missing}: {document_url}")
            raise UploadFailedError()

        result = UploadResult(
            file_list_url=file_list_url,
            document_url=document_url,
            file_name=str(values["filename"]),
            mime_type=str(values["mimetype"]),
            file_id=str(values["id"]),
            download_url=str(values["download_url"]),
        )
        logger.info(f"Archivo subido exitosamente: {result.file_name} (id {result.file_id})")
        return result

    # === Helpers ===

    def _request_options(self) -> dict:
        """Timeout por request; vacío para respetar el default del cliente."""
        if self.timeout is None:
            return {}
        return {"timeout": self.timeout}

    @staticmethod
    def _ensure_success(response: httpx.Response, url: str) -> None:
        """Lanzar EdmsHttpError para status fuera de 2xx."""
        if not response.is_success:
            logger.error(f"GET {url} respondió {response.status_code}")
            raise EdmsHttpError(response.status_code, url)
