"""
Línea de comandos para el cliente EDMS.

Uso:
    python -m edms.cli upload ./factura.pdf --name "Factura 001"
    python -m edms.cli download https://edms.local/api/v4/.../download/ ./copia.pdf
    python -m edms.cli fetch https://edms.local/api/v4/.../download/ > copia.pdf

Credenciales y URL base se leen de settings (EDMS_*), y se pueden
sobreescribir con --base-url, --username, --password, --timeout.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import httpx

from config.logging_config import setup_logging
from config.settings import settings
from edms.errors import EdmsError
from edms.http import DocumentClient

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Construir parser con los subcomandos upload, download y fetch."""
    parser = argparse.ArgumentParser(
        prog="edms",
        description="Subir y descargar documentos de un EDMS vía API REST",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos:
  edms upload ./factura.pdf --name "Factura 001"
  edms download <download_url> ./copia.pdf
  edms fetch <download_url> > copia.pdf
        """
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help=f"URL base de la API (default: {settings.edms.EDMS_BASE_URL})"
    )
    parser.add_argument(
        "--username", "-u",
        type=str,
        default=None,
        help="Usuario Basic Auth (default: EDMS_USERNAME)"
    )
    parser.add_argument(
        "--password", "-p",
        type=str,
        default=None,
        help="Contraseña Basic Auth (default: EDMS_PASSWORD)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout en segundos por request (default: EDMS_TIMEOUT)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    upload = subparsers.add_parser("upload", help="Crear documento y subir archivo")
    upload.add_argument("path", type=Path, help="Archivo local a subir")
    upload.add_argument(
        "--name", "-n",
        type=str,
        default=None,
        help="Label del documento (default: nombre del archivo)"
    )

    download = subparsers.add_parser("download", help="Descargar archivo a disco")
    download.add_argument("url", type=str, help="URL del archivo")
    download.add_argument("destination", type=Path, help="Ruta destino")

    fetch = subparsers.add_parser("fetch", help="Descargar archivo a stdout")
    fetch.add_argument("url", type=str, help="URL del archivo")

    return parser


def create_client(args: argparse.Namespace) -> DocumentClient:
    """Crear DocumentClient combinando argumentos y settings."""
    edms_settings = settings.edms
    return DocumentClient(
        None,
        base_url=args.base_url or edms_settings.EDMS_BASE_URL,
        username=args.username if args.username is not None else edms_settings.EDMS_USERNAME,
        password=args.password if args.password is not None else edms_settings.EDMS_PASSWORD,
        timeout=args.timeout or edms_settings.EDMS_TIMEOUT,
    )


async def run_command(args: argparse.Namespace) -> int:
    """
    Ejecutar el subcomando.

    Returns:
        0 si tuvo éxito, 1 si el EDMS, la conexión o los argumentos fallaron
    """
    async with create_client(args) as client:
        try:
            if args.command == "upload":
                if not args.path.is_file():
                    logger.error(f"Archivo no encontrado: {args.path}")
                    return 1
                document_name = args.name or args.path.name
                with open(args.path, "rb") as fh:
                    result = await client.upload_file(document_name, fh)
                print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

            elif args.command == "download":
                await client.download_to_file(args.url, args.destination)
                print(str(args.destination))

            elif args.command == "fetch":
                content = await client.fetch_bytes(args.url)
                sys.stdout.buffer.write(content)
                sys.stdout.buffer.flush()

        except EdmsError as e:
            logger.error(f"[{e.error_code}] {e.message}")
            return 1
        except httpx.HTTPError as e:
            logger.error(f"Error de conexión con el EDMS [{e.__class__.__name__}]: {e}")
            return 1

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point del CLI."""
    args = build_parser().parse_args(argv)
    setup_logging("cli")

    try:
        return asyncio.run(run_command(args))
    except KeyboardInterrupt:
        logger.info("Interrumpido por usuario")
        return 130


if __name__ == "__main__":
    sys.exit(main())
