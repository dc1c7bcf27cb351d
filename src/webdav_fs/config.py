"""Application and storage configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from webdav_fs.dav.urls import build_base_urls, split_credentials
from webdav_fs.errors import InvalidArgumentError

DEFAULT_STORAGE_UID = "0"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_CACHE_CONTAINER = "webdav-fs-state"
DEFAULT_CACHE_BLOB_PREFIX = "directory-listing/"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    ``base_url`` has no default and will cause a KeyError at startup if the
    corresponding environment variable is missing. Everything else has a
    default that can be overridden via environment variables.
    """

    # Required: no default, fail at startup if missing
    base_url: str

    storage_uid: str = DEFAULT_STORAGE_UID
    use_authentication: bool = False
    username: str = ""
    password: str = field(default="", repr=False)
    disable_certificate_verification: bool = False
    enable_zero_byte_files_indexing: bool = True
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    # Listing cache: in-memory unless a storage connection string is given
    cache_connection_string: str | None = field(default=None, repr=False)
    cache_container: str = DEFAULT_CACHE_CONTAINER
    cache_blob_prefix: str = DEFAULT_CACHE_BLOB_PREFIX


@dataclass(frozen=True)
class StorageConfig:
    """Resolved, immutable configuration of one WebDAV storage.

    Built once by :func:`process_configuration`. A reconfiguration builds a new
    instance. ``resource_base_url`` and ``password`` are kept out of ``repr``.
    """

    storage_uid: str
    base_path: str
    public_base_url: str
    resource_base_url: str = field(repr=False)
    use_authentication: bool = False
    username: str = ""
    password: str = field(default="", repr=False)
    verify_ssl: bool = True
    enable_zero_byte_files_indexing: bool = True
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def verify_configuration(raw: Mapping[str, Any]) -> None:
    """Check that a raw storage configuration can be processed.

    Raises:
        InvalidArgumentError: If the base URL is missing or unusable, or if
            authentication is enabled without any username.
    """
    base_url = str(raw.get("base_url") or "").strip()
    if not base_url:
        raise InvalidArgumentError("No base URL configured for WebDAV driver")
    build_base_urls(base_url)
    if _as_bool(raw.get("use_authentication", False)):
        _, embedded_user, _ = split_credentials(base_url)
        if not embedded_user and not str(raw.get("username") or "").strip():
            raise InvalidArgumentError("Authentication is enabled but no username is configured")


def process_configuration(
    raw: Mapping[str, Any], storage_uid: str = DEFAULT_STORAGE_UID
) -> StorageConfig:
    """Build a StorageConfig from a raw configuration mapping.

    Credentials embedded in ``base_url`` take precedence over the separate
    ``username`` / ``password`` keys. Credentials are only used when
    ``use_authentication`` is set; the password is expected already decrypted.

    Args:
        raw: Mapping with ``base_url``, ``use_authentication``, ``username``,
            ``password``, ``disable_certificate_verification``,
            ``enable_zero_byte_files_indexing`` and optionally ``request_timeout``.
        storage_uid: Identity of the storage, part of every listing cache key.

    Returns:
        Configured StorageConfig instance.

    Raises:
        InvalidArgumentError: If the configuration does not pass
            :func:`verify_configuration`.
    """
    verify_configuration(raw)
    base_url = str(raw["base_url"]).strip()
    use_authentication = _as_bool(raw.get("use_authentication", False))

    username = ""
    password = ""
    if use_authentication:
        _, embedded_user, embedded_password = split_credentials(base_url)
        username = embedded_user or str(raw.get("username") or "").strip()
        password = embedded_password or str(raw.get("password") or "")

    base_path, public_base_url, resource_base_url = build_base_urls(base_url, username, password)
    return StorageConfig(
        storage_uid=str(storage_uid),
        base_path=base_path,
        public_base_url=public_base_url,
        resource_base_url=resource_base_url,
        use_authentication=use_authentication,
        username=username,
        password=password,
        verify_ssl=not _as_bool(raw.get("disable_certificate_verification", False)),
        enable_zero_byte_files_indexing=_as_bool(raw.get("enable_zero_byte_files_indexing", True)),
        request_timeout=float(raw.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
    )


def storage_config_from_config(config: AppConfig) -> StorageConfig:
    """Construct a StorageConfig from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured StorageConfig instance.
    """
    return process_configuration(
        {
            "base_url": config.base_url,
            "use_authentication": config.use_authentication,
            "username": config.username,
            "password": config.password,
            "disable_certificate_verification": config.disable_certificate_verification,
            "enable_zero_byte_files_indexing": config.enable_zero_byte_files_indexing,
            "request_timeout": config.request_timeout,
        },
        storage_uid=config.storage_uid,
    )


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        WDFS_BASE_URL: URL of the WebDAV share, optionally with user:password@.

    Optional environment variables (with defaults):
        WDFS_STORAGE_UID: Identity of the storage used in cache keys (default: 0).
        WDFS_USE_AUTHENTICATION: Send credentials with each request (default: false).
        WDFS_USERNAME: Username used when the URL has none.
        WDFS_PASSWORD: Decrypted password used when the URL has none.
        WDFS_DISABLE_CERTIFICATE_VERIFICATION: Skip TLS verification (default: false).
        WDFS_ENABLE_ZERO_BYTE_FILES_INDEXING: List zero-length files (default: true).
        WDFS_REQUEST_TIMEOUT: Socket timeout in seconds (default: 30).
        AzureWebJobsStorage: Azure Storage connection string; enables the blob listing cache.
        WDFS_CACHE_CONTAINER: Blob container for listing cache entries.
        WDFS_CACHE_BLOB_PREFIX: Blob path prefix for listing cache entries.

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        base_url=os.environ["WDFS_BASE_URL"],
        storage_uid=os.environ.get("WDFS_STORAGE_UID", DEFAULT_STORAGE_UID),
        use_authentication=_as_bool(os.environ.get("WDFS_USE_AUTHENTICATION", "false")),
        username=os.environ.get("WDFS_USERNAME", ""),
        password=os.environ.get("WDFS_PASSWORD", ""),
        disable_certificate_verification=_as_bool(
            os.environ.get("WDFS_DISABLE_CERTIFICATE_VERIFICATION", "false")
        ),
        enable_zero_byte_files_indexing=_as_bool(
            os.environ.get("WDFS_ENABLE_ZERO_BYTE_FILES_INDEXING", "true")
        ),
        request_timeout=float(
            os.environ.get("WDFS_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
        ),
        cache_connection_string=os.environ.get("AzureWebJobsStorage") or None,  # noqa: SIM112
        cache_container=os.environ.get("WDFS_CACHE_CONTAINER", DEFAULT_CACHE_CONTAINER),
        cache_blob_prefix=os.environ.get("WDFS_CACHE_BLOB_PREFIX", DEFAULT_CACHE_BLOB_PREFIX),
    )
