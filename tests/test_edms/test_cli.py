"""
Tests del CLI (edms.cli).

python -m pytest tests/test_edms/test_cli.py
"""

import json
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, patch
from tempfile import TemporaryDirectory

import httpx

from edms.cli import build_parser, create_client, main, run_command
from edms.http.document_client import DocumentClient


class TestParser:
    """Tests del parser de argumentos."""

    def test_upload_args(self):
        args = build_parser().parse_args(["upload", "factura.pdf", "--name", "Factura 001"])

        assert args.command == "upload"
        assert args.path == Path("factura.pdf")
        assert args.name == "Factura 001"

    def test_download_args(self):
        args = build_parser().parse_args(["--timeout", "5", "download", "https://e/f", "copia.pdf"])

        assert args.command == "download"
        assert args.url == "https://e/f"
        assert args.destination == Path("copia.pdf")
        assert args.timeout == 5.0

    def test_command_required(self):
        """Sin subcomando debe terminar con error."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCreateClient:
    """Tests de create_client."""

    @pytest.mark.asyncio
    async def test_args_override_settings(self):
        """Los argumentos deben tener prioridad sobre settings."""
        args = build_parser().parse_args([
            "--base-url", "https://cli.test/api/",
            "-u", "cli-user",
            "-p", "cli-pass",
            "--timeout", "9",
            "fetch", "https://cli.test/f",
        ])

        client = create_client(args)
        try:
            assert client.base_url == "https://cli.test/api"
            assert client.username == "cli-user"
            assert client.password == "cli-pass"
            assert client.timeout == 9
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_falls_back_to_settings(self):
        """Sin argumentos debe usar EDMS_* de settings."""
        args = build_parser().parse_args(["fetch", "https://cli.test/f"])

        with patch("edms.cli.settings") as mock_settings:
            mock_settings.edms.EDMS_BASE_URL = "https://settings.test/api"
            mock_settings.edms.EDMS_USERNAME = "settings-user"
            mock_settings.edms.EDMS_PASSWORD = "settings-pass"
            mock_settings.edms.EDMS_TIMEOUT = 30

            client = create_client(args)

        try:
            assert client.base_url == "https://settings.test/api"
            assert client.username == "settings-user"
            assert client.timeout == 30
        finally:
            await client.aclose()


class TestRunCommand:
    """Tests de ejecución de subcomandos contra el EDMS simulado."""

    @pytest.mark.asyncio
    async def test_upload_prints_result(self, document_client, fake_edms, capsys):
        """upload debe imprimir el UploadResult como JSON."""
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "informe.pdf"
            path.write_bytes(b"%PDF-1.7")
            args = build_parser().parse_args(["upload", str(path)])

            with patch("edms.cli.create_client", return_value=document_client):
                code = await run_command(args)

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["document_url"] == fake_edms.DOCUMENT_URL
        assert output["file_id"] == "42"
        # Sin --name se usa el nombre del archivo
        assert fake_edms.requests[0].content == b'{"document_type_id":1,"label":"informe.pdf"}'

    @pytest.mark.asyncio
    async def test_upload_missing_file(self, document_client, fake_edms):
        """Archivo inexistente debe devolver 1 sin requests."""
        args = build_parser().parse_args(["upload", "/no/existe/informe.pdf"])

        with patch("edms.cli.create_client", return_value=document_client):
            code = await run_command(args)

        assert code == 1
        assert fake_edms.requests == []

    @pytest.mark.asyncio
    async def test_upload_failure_exit_code(self, document_client, fake_edms):
        """Un EdmsError debe traducirse a exit code 1."""
        fake_edms.route("POST", fake_edms.FILE_LIST_URL, 400, text="rechazado")

        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "informe.pdf"
            path.write_bytes(b"x")
            args = build_parser().parse_args(["upload", str(path), "-n", "informe.pdf"])

            with patch("edms.cli.create_client", return_value=document_client):
                code = await run_command(args)

        assert code == 1

    @pytest.mark.asyncio
    async def test_download(self, document_client, fake_edms):
        """download debe escribir el archivo destino."""
        fake_edms.route("GET", fake_edms.DOWNLOAD_URL, 200, content=b"contenido")

        with TemporaryDirectory() as tmpdir:
            destination = Path(tmpdir) / "copia.pdf"
            args = build_parser().parse_args(["download", fake_edms.DOWNLOAD_URL, str(destination)])

            with patch("edms.cli.create_client", return_value=document_client):
                code = await run_command(args)

            assert code == 0
            assert destination.read_bytes() == b"contenido"

    @pytest.mark.asyncio
    async def test_fetch_writes_stdout(self, document_client, fake_edms, capsysbinary):
        """fetch debe escribir los bytes crudos a stdout."""
        fake_edms.route("GET", fake_edms.DOWNLOAD_URL, 200, content=b"\x00binario\xff")
        args = build_parser().parse_args(["fetch", fake_edms.DOWNLOAD_URL])

        with patch("edms.cli.create_client", return_value=document_client):
            code = await run_command(args)

        assert code == 0
        assert capsysbinary.readouterr().out == b"\x00binario\xff"

    @pytest.mark.asyncio
    async def test_fetch_http_error(self, document_client, fake_edms):
        """Status de error debe devolver 1."""
        args = build_parser().parse_args(["fetch", f"{fake_edms.BASE_URL}/no-existe/"])

        with patch("edms.cli.create_client", return_value=document_client):
            code = await run_command(args)

        assert code == 1

    @pytest.mark.asyncio
    async def test_connection_error_exit_code(self, fake_edms, caplog):
        """Errores de conexión deben devolver 1 con mensaje, sin traceback."""
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        client = DocumentClient(http_client, fake_edms.BASE_URL, "u", "p")
        args = build_parser().parse_args(["fetch", fake_edms.DOWNLOAD_URL])

        with patch("edms.cli.create_client", return_value=client):
            code = await run_command(args)

        assert code == 1
        assert "ConnectError" in caplog.text


class TestMain:
    """Tests del entry point."""

    def test_main_returns_command_code(self):
        """main debe configurar logging y devolver el código del comando."""
        with patch("edms.cli.setup_logging") as mock_setup, \
                patch("edms.cli.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = 0

            code = main(["fetch", "https://e/f"])

        assert code == 0
        mock_setup.assert_called_once_with("cli")
        mock_run.assert_called_once()
        assert mock_run.call_args[0][0].url == "https://e/f"
