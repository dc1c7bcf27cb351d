"""Directory frontend: folder listings and entry metadata via depth-1 PROPFIND."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote, urlsplit

from webdav_fs.dav.models import (
    DAV_COLLECTION,
    DAV_GETCONTENTLENGTH,
    DAV_GETCONTENTTYPE,
    DAV_GETLASTMODIFIED,
    DAV_HREF,
    DAV_PROP,
    DAV_PROPSTAT,
    DAV_RESOURCETYPE,
    DAV_RESPONSE,
    DAV_STATUS,
    DavEntry,
    DavListing,
)
from webdav_fs.dav.urls import (
    ROOT_IDENTIFIER,
    parent_of,
    require_folder_identifier,
    server_path,
    to_resource_url,
    validate_identifier,
)
from webdav_fs.errors import (
    FileDoesNotExistError,
    FolderDoesNotExistError,
    InvalidArgumentError,
)

if TYPE_CHECKING:
    from webdav_fs.cache.listing_cache import ListingCache
    from webdav_fs.config import StorageConfig
    from webdav_fs.dav.client import WebDavClient

logger = logging.getLogger(__name__)

PROPFIND_BODY = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<D:propfind xmlns:D="DAV:"><D:prop>'
    "<D:resourcetype/><D:getcontentlength/><D:getlastmodified/><D:getcontenttype/>"
    "</D:prop></D:propfind>"
)
PROPFIND_HEADERS = {"Depth": "1", "Content-Type": "application/xml; charset=utf-8"}


def _successful_prop(response: ET.Element) -> ET.Element | None:
    """Return the <prop> of the propstat reporting 200, or the first one."""
    fallback: ET.Element | None = None
    for propstat in response.findall(DAV_PROPSTAT):
        prop = propstat.find(DAV_PROP)
        if prop is None:
            continue
        status = propstat.findtext(DAV_STATUS) or ""
        if " 200 " in f"{status} ":
            return prop
        if fallback is None:
            fallback = prop
    return fallback


def _parse_timestamp(value: str | None) -> int:
    if not value:
        return 0
    try:
        return int(parsedate_to_datetime(value.strip()).timestamp())
    except (TypeError, ValueError):
        return 0


def _parse_size(value: str | None) -> int:
    try:
        return int((value or "0").strip())
    except ValueError:
        return 0


def parse_multistatus(body: bytes, folder_path: str) -> list[DavEntry]:
    """Parse a depth-1 PROPFIND multistatus body into child entries.

    The folder's own entry is recognised by its decoded href path, not by its
    position in the response.

    Args:
        body: XML response body.
        folder_path: Unencoded path of the listed folder on the remote host.

    Returns:
        One DavEntry per child.

    Raises:
        xml.etree.ElementTree.ParseError: If the body is not well-formed XML.
    """
    root = ET.fromstring(body)
    self_path = folder_path.rstrip("/")
    entries: list[DavEntry] = []
    for response in root.findall(DAV_RESPONSE):
        href = (response.findtext(DAV_HREF) or "").strip()
        path = unquote(urlsplit(href).path).rstrip("/")
        if path == self_path:
            continue
        name = path.rpartition("/")[2]
        if not name:
            continue

        prop = _successful_prop(response)
        if prop is None:
            entries.append(DavEntry(name=name, is_folder=href.endswith("/")))
            continue
        resourcetype = prop.find(DAV_RESOURCETYPE)
        is_folder = resourcetype is not None and resourcetype.find(DAV_COLLECTION) is not None
        entries.append(
            DavEntry(
                name=name,
                is_folder=is_folder,
                size=0 if is_folder else _parse_size(prop.findtext(DAV_GETCONTENTLENGTH)),
                modified=_parse_timestamp(prop.findtext(DAV_GETLASTMODIFIED)),
                content_type=(prop.findtext(DAV_GETCONTENTTYPE) or "").strip(),
            )
        )
    return entries


class WebDavFrontend:
    """Answers listing and metadata questions with one PROPFIND per folder."""

    def __init__(self, client: WebDavClient, config: StorageConfig) -> None:
        """Initialise the frontend.

        Args:
            client: Transport used for PROPFIND requests.
            config: Storage configuration for URLs and indexing policy.
        """
        self._client = client
        self._config = config

    def propfind(self, folder_identifier: str) -> DavListing:
        """Fetch the immediate children of a folder.

        Protocol errors and unparseable bodies resolve to an empty listing
        flagged ``degraded``.

        Raises:
            DavNotFoundError: If the folder does not exist.
            DavTransportError: If the store cannot be reached.
        """
        require_folder_identifier(folder_identifier)
        url = to_resource_url(self._config, folder_identifier)
        response = self._client.execute("PROPFIND", url, PROPFIND_BODY, dict(PROPFIND_HEADERS))
        if not response.ok:
            logger.warning(
                "[propfind] cannot list items in directory; storage:%s;folder:%s;status:%d",
                self._config.storage_uid,
                folder_identifier,
                response.status_code,
            )
            return DavListing(folder_path=folder_identifier, degraded=True)

        try:
            entries = parse_multistatus(
                response.body, server_path(self._config, folder_identifier)
            )
        except ET.ParseError as exc:
            logger.warning(
                "[propfind] unparseable listing response; storage:%s;folder:%s;error:%s",
                self._config.storage_uid,
                folder_identifier,
                exc,
            )
            return DavListing(folder_path=folder_identifier, degraded=True)
        return DavListing(folder_path=folder_identifier, entries=entries)

    def remove_cache_for_path(self, path: str) -> None:
        """Invalidate the listing of ``path``; nothing is cached at this level."""

    def list_file_entries(self, folder_identifier: str) -> list[DavEntry]:
        """Return the file entries of a folder.

        Zero-length files are skipped unless zero-byte indexing is enabled.
        """
        include_empty = self._config.enable_zero_byte_files_indexing
        return [
            entry
            for entry in self.propfind(folder_identifier).files
            if include_empty or entry.size > 0
        ]

    def list_folder_entries(self, folder_identifier: str) -> list[DavEntry]:
        return self.propfind(folder_identifier).folders

    def list_files(self, folder_identifier: str) -> list[str]:
        return [entry.name for entry in self.list_file_entries(folder_identifier)]

    def list_folders(self, folder_identifier: str) -> list[str]:
        return [entry.name for entry in self.list_folder_entries(folder_identifier)]

    def is_folder_empty(self, folder_identifier: str) -> bool:
        return len(self.propfind(folder_identifier).entries) == 0

    def get_file_info(self, identifier: str) -> dict[str, Any]:
        """Return metadata of a file or folder, resolved through its parent's listing.

        Raises:
            InvalidArgumentError: For the root folder, which has no parent listing.
            FileDoesNotExistError: If a file is not in its parent's listing.
            FolderDoesNotExistError: If a folder is not in its parent's listing.
        """
        validate_identifier(identifier)
        if identifier == ROOT_IDENTIFIER:
            raise InvalidArgumentError("The root folder has no parent listing")

        is_folder = identifier.endswith("/")
        name = identifier.rstrip("/").rpartition("/")[2]
        entry = self.propfind(parent_of(identifier)).find(name)
        if entry is None or entry.is_folder != is_folder:
            if is_folder:
                raise FolderDoesNotExistError(identifier)
            raise FileDoesNotExistError(identifier)

        return {
            "identifier": identifier,
            "name": entry.name,
            "size": entry.size,
            "mtime": entry.modified,
            "ctime": entry.modified,
            "mimetype": entry.content_type,
            "storage": self._config.storage_uid,
        }


class CachingWebDavFrontend(WebDavFrontend):
    """WebDavFrontend that serves listings from a ListingCache when it can."""

    def __init__(self, client: WebDavClient, config: StorageConfig, cache: ListingCache) -> None:
        """Initialise the caching frontend.

        Args:
            client: Transport used on cache misses.
            config: Storage configuration; ``storage_uid`` scopes cache keys.
            cache: Listing cache shared by all operations on this storage.
        """
        super().__init__(client, config)
        self._cache = cache

    def propfind(self, folder_identifier: str) -> DavListing:
        """Return the cached listing, fetching and storing it on a miss.

        Degraded listings are returned but not stored.
        """
        require_folder_identifier(folder_identifier)
        cached = self._cache.get(self._config.storage_uid, folder_identifier)
        if cached is not None:
            return cached

        listing = super().propfind(folder_identifier)
        if not listing.degraded:
            self._cache.set(self._config.storage_uid, folder_identifier, listing)
        return listing

    def remove_cache_for_path(self, path: str) -> None:
        """Drop the cached listing of exactly this folder; descendants are untouched."""
        self._cache.remove(self._config.storage_uid, path)
        logger.debug(
            "[remove_cache_for_path] invalidated listing; storage:%s;path:%s",
            self._config.storage_uid,
            path,
        )
