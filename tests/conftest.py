import base64

import httpx
import pytest

from edms.http.document_client import DocumentClient


BASE_URL = "https://edms.test/api/v4"
DOCUMENT_URL = f"{BASE_URL}/documents/7/"
FILE_LIST_URL = f"{BASE_URL}/documents/7/files/"
DOWNLOAD_URL = f"{BASE_URL}/documents/7/files/42/download/"

USERNAME = "admin"
PASSWORD = "s3cret"


class FakeEdms:
    """
    Servidor EDMS simulado sobre httpx.MockTransport.

    Cada ruta (método, url) devuelve una respuesta nueva en cada llamada.
    Las requests recibidas quedan en `requests` para inspección.
    """

    BASE_URL = BASE_URL
    DOCUMENT_URL = DOCUMENT_URL
    FILE_LIST_URL = FILE_LIST_URL
    DOWNLOAD_URL = DOWNLOAD_URL

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], tuple[int, dict]] = {}

        # Flujo feliz por defecto
        self.route("POST", f"{BASE_URL}/documents/", 201, json={
            "id": 7,
            "label": "informe.pdf",
            "file_list_url": FILE_LIST_URL,
            "url": DOCUMENT_URL,
        })
        self.route("POST", FILE_LIST_URL, 202, json={})
        self.route("GET", DOCUMENT_URL, 200, json={
            "id": 7,
            "label": "informe.pdf",
            "file_latest": {
                "id": "42",
                "filename": "informe.pdf",
                "mimetype": "application/pdf",
                "download_url": DOWNLOAD_URL,
            },
        })

    def route(self, method: str, url: str, status_code: int, **kwargs) -> None:
        """Registrar (o reemplazar) la respuesta de una ruta."""
        self.routes[(method, url)] = (status_code, kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url))
        if key not in self.routes:
            return httpx.Response(404, text="Not found")
        status_code, kwargs = self.routes[key]
        return httpx.Response(status_code, **kwargs)

    @property
    def calls(self) -> list[tuple[str, str]]:
        """(método, url) de cada request recibida, en orden."""
        return [(r.method, str(r.url)) for r in self.requests]


@pytest.fixture
def fake_edms():
    """Servidor EDMS simulado con el flujo de subida exitoso."""
    return FakeEdms()


@pytest.fixture
def http_client(fake_edms):
    """httpx.AsyncClient conectado al servidor simulado."""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_edms.handler))


@pytest.fixture
def document_client(http_client):
    """DocumentClient con credenciales de prueba."""
    return DocumentClient(http_client, BASE_URL, USERNAME, PASSWORD)


@pytest.fixture
def expected_auth_header():
    """Header Basic Auth esperado para USERNAME:PASSWORD."""
    token = base64.b64encode(f"{USERNAME}:{PASSWORD}".encode()).decode()
    return f"Basic {token}"
