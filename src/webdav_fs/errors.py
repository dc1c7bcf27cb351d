"""Caller-facing errors raised by the filesystem driver."""

from __future__ import annotations


class WebDavFsError(Exception):
    """Base class for all driver-level errors."""


class InvalidArgumentError(WebDavFsError, ValueError):
    """Raised before any request is issued when an argument cannot be used."""


class ResourceDoesNotExistError(WebDavFsError):
    """Raised when the addressed file or folder is absent from the store."""

    def __init__(self, identifier: str, message: str | None = None) -> None:
        super().__init__(message or f"Resource {identifier} does not exist")
        self.identifier = identifier


class FileDoesNotExistError(ResourceDoesNotExistError):
    """Raised when a file identifier does not resolve to a remote file."""


class FolderDoesNotExistError(ResourceDoesNotExistError):
    """Raised when a folder identifier does not resolve to a remote collection."""


class FileOperationError(WebDavFsError):
    """Raised when a mutating request was rejected by the store."""

    def __init__(self, message: str, source: str, destination: str | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.destination = destination
