"""
Subpaquete HTTP - Cliente para comunicación con la API REST del EDMS.

Uso:
    from edms.http import DocumentClient
    
    async with DocumentClient.from_settings() as client:
        result = await client.upload_file("factura.pdf", pdf_bytes)
        await client.download_to_file(result.download_url, "copia.pdf")
"""

from edms.http.document_client import DocumentClient

__all__ = [
    "DocumentClient",
]
