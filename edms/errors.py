"""
Error handling infrastructure for the EDMS document client.

Every public operation either returns a complete result or raises one of
these exceptions. Nothing is retried internally; callers decide whether to
log and abort or retry at a higher layer.

Transport-level failures (httpx.TimeoutException, httpx.ConnectError, ...)
are not wrapped and propagate unchanged.
"""

from typing import Optional


class EdmsError(Exception):
    """Base exception for all EDMS client errors."""
    
    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__


class InvalidArgumentError(EdmsError, ValueError):
    """
    A required caller-supplied string is empty or blank.
    
    Raised before any network or file I/O.
    """
    
    def __init__(self, argument: str, message: Optional[str] = None):
        super().__init__(message or f"{argument} cannot be null or empty")
        self.argument = argument


class CreationFailedError(EdmsError):
    """Document creation response carried neither file_list_url nor url."""
    
    def __init__(self, document_name: str, message: Optional[str] = None):
        super().__init__(message or f"Error creating {document_name}")
        self.document_name = document_name


class UploadFailedError(EdmsError):
    """
    File content could not be attached to the document.
    
    Examples:
    - Upload endpoint answered something other than 202 Accepted
    - Document metadata lacks file_latest or one of its fields
    """
    
    def __init__(
        self,
        message: str = "File upload was not successful",
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class EdmsHttpError(EdmsError):
    """Non-success status on a request that is required to succeed."""
    
    def __init__(self, status_code: int, url: str, message: Optional[str] = None):
        super().__init__(message or f"HTTP {status_code} for GET {url}")
        self.status_code = status_code
        self.url = url


class DestinationLockedError(EdmsError):
    """Download destination is exclusively locked by another writer."""
    
    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Destination file is locked by another writer: {path}")
        self.path = path
