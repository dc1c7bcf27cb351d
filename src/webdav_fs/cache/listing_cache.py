"""Directory listing cache keyed by storage identity and folder path."""

from __future__ import annotations

import contextlib
import hashlib
import json
import logging
from typing import Protocol

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobClient, BlobServiceClient

from webdav_fs.config import DEFAULT_CACHE_BLOB_PREFIX, DEFAULT_CACHE_CONTAINER, AppConfig
from webdav_fs.dav.models import DavListing

logger = logging.getLogger(__name__)


def cache_key(storage_uid: str, path: str) -> str:
    """Compute the cache identifier for a folder path inside a storage.

    The path is normalised to ``a/b/`` so that trailing-slash variants of the
    same folder hash identically and a folder never collides with a file of
    the same name. The storage uid is length-prefixed, so a uid containing
    ``:`` cannot shift into the path part.

    Args:
        storage_uid: Identity of the storage.
        path: Folder path or identifier, with or without slashes around it.

    Returns:
        Lowercase hex string of the SHA-1 hash.
    """
    normalized = path.strip("/") + "/"
    key = f"{len(storage_uid)}:{storage_uid}:{normalized}"
    return hashlib.sha1(key.encode()).hexdigest()


class ListingCache(Protocol):
    """Key-value store for directory listings.

    Each operation is expected to be atomic on its own; no sequence of them is.
    """

    def get(self, storage_uid: str, path: str) -> DavListing | None: ...

    def set(self, storage_uid: str, path: str, listing: DavListing) -> None: ...

    def remove(self, storage_uid: str, path: str) -> None: ...


class InMemoryListingCache:
    """Process-local listing cache with no expiry."""

    def __init__(self) -> None:
        self._entries: dict[str, DavListing] = {}

    def get(self, storage_uid: str, path: str) -> DavListing | None:
        return self._entries.get(cache_key(storage_uid, path))

    def set(self, storage_uid: str, path: str, listing: DavListing) -> None:
        self._entries[cache_key(storage_uid, path)] = listing

    def remove(self, storage_uid: str, path: str) -> None:
        self._entries.pop(cache_key(storage_uid, path), None)

    def __len__(self) -> int:
        return len(self._entries)


class BlobListingCache:
    """Listing cache backed by Azure Blob Storage.

    Listings are stored as UTF-8 JSON blobs named by :func:`cache_key`, so the
    cache can be shared by several workers serving the same storage. Expiry is
    left to the container's lifecycle policy.
    """

    def __init__(
        self,
        storage_connection_string: str,
        container: str = DEFAULT_CACHE_CONTAINER,
        blob_prefix: str = DEFAULT_CACHE_BLOB_PREFIX,
    ) -> None:
        """Initialise the listing cache.

        Args:
            storage_connection_string: Azure Storage connection string.
            container: Blob container name for cache storage.
            blob_prefix: Prefix for cache blob paths (e.g. "directory-listing/").
        """
        self._blob_service = BlobServiceClient.from_connection_string(storage_connection_string)
        self._container = container
        self._blob_prefix = blob_prefix

    def _blob_client(self, storage_uid: str, path: str) -> BlobClient:
        container_client = self._blob_service.get_container_client(self._container)
        blob_name = f"{self._blob_prefix}{cache_key(storage_uid, path)}"
        return container_client.get_blob_client(blob_name)

    def get(self, storage_uid: str, path: str) -> DavListing | None:
        """Retrieve a cached listing.

        Returns:
            Cached DavListing, or None if not found.
        """
        try:
            data = self._blob_client(storage_uid, path).download_blob().readall()
        except ResourceNotFoundError:
            logger.info("[listing_cache] cache miss; storage:%s;path:%s", storage_uid, path)
            return None
        logger.info("[listing_cache] cache hit; storage:%s;path:%s", storage_uid, path)
        return DavListing.from_dict(json.loads(data))

    def set(self, storage_uid: str, path: str, listing: DavListing) -> None:
        """Store a listing, creating the container if it does not exist."""
        container_client = self._blob_service.get_container_client(self._container)
        with contextlib.suppress(Exception):
            container_client.create_container()

        payload = json.dumps(listing.to_dict()).encode("utf-8")
        self._blob_client(storage_uid, path).upload_blob(payload, overwrite=True)
        logger.info(
            "[listing_cache] stored; storage:%s;path:%s;entry_count:%d",
            storage_uid,
            path,
            len(listing.entries),
        )

    def remove(self, storage_uid: str, path: str) -> None:
        """Drop a cached listing; a missing entry is not an error."""
        with contextlib.suppress(ResourceNotFoundError):
            self._blob_client(storage_uid, path).delete_blob()
        logger.info("[listing_cache] removed; storage:%s;path:%s", storage_uid, path)


def listing_cache_from_config(config: AppConfig) -> ListingCache:
    """Construct a listing cache from application configuration.

    Uses Azure Blob Storage when a connection string is configured, and a
    process-local cache otherwise.

    Args:
        config: Application configuration instance.

    Returns:
        Configured ListingCache instance.
    """
    if config.cache_connection_string:
        return BlobListingCache(
            storage_connection_string=config.cache_connection_string,
            container=config.cache_container,
            blob_prefix=config.cache_blob_prefix,
        )
    return InMemoryListingCache()
