"""Filesystem driver exposing a WebDAV share as a hierarchical virtual filesystem."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from collections.abc import Callable, Iterable
from http import HTTPStatus
from typing import IO, TYPE_CHECKING, Any

from webdav_fs.cache.listing_cache import listing_cache_from_config
from webdav_fs.config import storage_config_from_config
from webdav_fs.dav.client import (
    DavError,
    DavNotFoundError,
    DavTransportError,
    WebDavClient,
    webdav_client_from_config,
)
from webdav_fs.dav.frontend import CachingWebDavFrontend, WebDavFrontend
from webdav_fs.dav.urls import (
    ROOT_IDENTIFIER,
    PublicUrl,
    encode_path,
    parent_of,
    require_file_identifier,
    require_folder_identifier,
    to_public_url,
    to_resource_url,
    validate_identifier,
)
from webdav_fs.errors import (
    FileDoesNotExistError,
    FileOperationError,
    FolderDoesNotExistError,
    InvalidArgumentError,
)

if TYPE_CHECKING:
    from webdav_fs.cache.listing_cache import ListingCache
    from webdav_fs.config import AppConfig, StorageConfig
    from webdav_fs.dav.client import Body
    from webdav_fs.dav.models import DavEntry, DavResponse

logger = logging.getLogger(__name__)

SUPPORTED_HASH_ALGORITHMS = frozenset({"sha1", "md5", "sha256"})
HASH_CHUNK_SIZE = 65536
TEMPFILE_PREFIX = "vfs-tempfile-"

# Sort keys accepted by list_files / list_folders; anything else sorts by name
SORT_NAME = "name"
SORT_SIZE = "size"
SORT_TSTAMP = "tstamp"

# Called as callback(name, identifier, folder_identifier); False drops the item
FilterCallback = Callable[[str, str, str], bool]

_SORT_KEYS: dict[str, Callable[[DavEntry], Any]] = {
    SORT_NAME: lambda entry: entry.name.lower(),
    SORT_SIZE: lambda entry: (entry.size, entry.name.lower()),
    SORT_TSTAMP: lambda entry: (entry.modified, entry.name.lower()),
}


def _validate_name(name: str) -> None:
    if not name or "/" in name:
        raise InvalidArgumentError(f"Invalid file or folder name: {name!r}")


def _sort_entries(entries: list[DavEntry], sort: str, sort_rev: bool) -> list[DavEntry]:
    if not sort:
        return list(reversed(entries)) if sort_rev else list(entries)
    key = _SORT_KEYS.get(sort, _SORT_KEYS[SORT_NAME])
    return sorted(entries, key=key, reverse=sort_rev)


class WebDavDriver:
    """Hierarchical filesystem operations against one WebDAV storage.

    Identifiers are absolute paths; folders end with '/'. Every mutation
    invalidates the cached listing of each folder whose direct contents it
    changes. Conflict handling is left to the caller: MOVE and COPY always
    force overwriting the destination.
    """

    def __init__(
        self,
        config: StorageConfig,
        client: WebDavClient,
        frontend: WebDavFrontend,
    ) -> None:
        """Initialise the driver with fully-formed collaborators.

        Args:
            config: Resolved storage configuration.
            client: Transport for all mutations and reads.
            frontend: Directory frontend answering listing and metadata queries.
        """
        self._config = config
        self._client = client
        self._frontend = frontend

    @property
    def storage_uid(self) -> str:
        return self._config.storage_uid

    # ------------------------------------------------------------------
    # Identifiers and URLs
    # ------------------------------------------------------------------

    def get_public_url(self, identifier: str) -> PublicUrl:
        """Return the URL of a resource without any credentials in it."""
        return to_public_url(self._config, identifier)

    def get_root_level_folder(self) -> str:
        return ROOT_IDENTIFIER

    def get_default_folder(self) -> str:
        return ROOT_IDENTIFIER

    def get_parent_folder_identifier_of_identifier(self, identifier: str) -> str:
        return parent_of(identifier)

    def is_within(self, container_identifier: str, content: str) -> bool:
        """Check whether ``content`` lies inside the folder ``container_identifier``."""
        content = "/" + content.lstrip("/")
        return content.startswith(container_identifier)

    def get_permissions(self, identifier: str) -> dict[str, bool]:
        # Effective permissions are enforced server-side per request.
        return {"r": True, "w": True}

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    def _execute(
        self,
        method: str,
        identifier: str,
        body: Body = None,
        headers: dict[str, str] | None = None,
    ) -> DavResponse:
        url = to_resource_url(self._config, identifier)
        return self._client.execute(method, url, body, headers)

    def _destination_headers(self, target_identifier: str) -> dict[str, str]:
        # The destination is always overwritten.
        destination = encode_path(to_public_url(self._config, target_identifier))
        return {"Destination": destination, "Overwrite": "T"}

    def _remove_cache_for_path(self, path: str) -> None:
        self._frontend.remove_cache_for_path(path)

    @staticmethod
    def _require_success(
        response: DavResponse, action: str, source: str, destination: str | None = None
    ) -> DavResponse:
        if not response.ok:
            target = f" to {destination}" if destination else ""
            raise FileOperationError(
                f"{action} {source}{target} failed with status {response.status_code}",
                source,
                destination,
            )
        return response

    def _transfer(self, method: str, source: str, target: str, action: str) -> DavResponse:
        """Issue a MOVE or COPY from ``source`` to ``target`` with forced overwrite."""
        try:
            response = self._execute(method, source, None, self._destination_headers(target))
        except DavNotFoundError as exc:
            raise FileOperationError(
                f"{action} {source} to {target} failed: source not found", source, target
            ) from exc
        self._require_success(response, action, source, target)
        logger.info(
            "[%s] transfer complete; source:%s;target:%s;overwritten:%s",
            method.lower(),
            source,
            target,
            response.overwritten,
        )
        return response

    def _put(self, identifier: str, body: Body, action: str, source: str) -> DavResponse:
        try:
            response = self._execute("PUT", identifier, body)
        except DavNotFoundError as exc:
            raise FileOperationError(
                f"{action} {identifier} failed: target folder not found", source, identifier
            ) from exc
        finally:
            self._remove_cache_for_path(parent_of(identifier))
        self._require_success(response, action, source, identifier)
        logger.info(
            "[put] file written; identifier:%s;created:%s;overwritten:%s",
            identifier,
            response.created,
            response.overwritten,
        )
        return response

    def _read_to_file(self, identifier: str, handle: IO[bytes]) -> None:
        require_file_identifier(identifier)
        url = to_resource_url(self._config, identifier)
        try:
            self._client.read_to_file(url, handle)
        except DavNotFoundError as exc:
            raise FileDoesNotExistError(identifier) from exc
        except DavTransportError:
            raise
        except DavError as exc:
            raise FileOperationError(f"Reading file {identifier} failed", identifier) from exc

    # ------------------------------------------------------------------
    # Existence
    # ------------------------------------------------------------------

    def resource_exists(self, identifier: str) -> bool:
        """Check if a resource exists in this share with a HEAD request.

        A 404 is a normal outcome here and yields False; transport failures
        propagate.
        """
        validate_identifier(identifier)
        try:
            response = self._execute("HEAD", identifier)
        except DavNotFoundError:
            return False
        return response.status_code < HTTPStatus.BAD_REQUEST

    def file_exists(self, identifier: str) -> bool:
        return not identifier.endswith("/") and self.resource_exists(identifier)

    def file_exists_in_folder(self, file_name: str, folder_identifier: str) -> bool:
        require_folder_identifier(folder_identifier)
        return self.file_exists(folder_identifier + file_name)

    def folder_exists(self, folder_identifier: str) -> bool:
        require_folder_identifier(folder_identifier)
        return self.resource_exists(folder_identifier)

    def folder_exists_in_folder(self, folder_name: str, folder_identifier: str) -> bool:
        require_folder_identifier(folder_identifier)
        return self.resource_exists(f"{folder_identifier}{folder_name}/")

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def create_file(self, file_name: str, parent_folder_identifier: str) -> str:
        """Create an empty file and return its identifier."""
        require_folder_identifier(parent_folder_identifier)
        _validate_name(file_name)
        identifier = parent_folder_identifier + file_name
        self._put(identifier, b"", "Creating file", identifier)
        return identifier

    def get_file_contents(self, identifier: str) -> bytes:
        """Return the complete contents of a file.

        The whole file is loaded into memory.

        Raises:
            FileDoesNotExistError: If the file does not exist.
            FileOperationError: If the store rejected the read.
        """
        require_file_identifier(identifier)
        try:
            response = self._execute("GET", identifier)
        except DavNotFoundError as exc:
            raise FileDoesNotExistError(identifier) from exc
        self._require_success(response, "Reading file", identifier)
        return response.body

    def set_file_contents(self, identifier: str, contents: bytes | str) -> int:
        """Replace the contents of a file and return the number of bytes written."""
        require_file_identifier(identifier)
        data = contents.encode("utf-8") if isinstance(contents, str) else contents
        self._put(identifier, data, "Setting contents of", identifier)
        return len(data)

    def add_file(
        self,
        local_file_path: str,
        target_folder_identifier: str,
        new_file_name: str = "",
        remove_original: bool = True,
    ) -> str:
        """Upload a local file into a folder and return the new identifier.

        Args:
            local_file_path: Path of the file on the local disk.
            target_folder_identifier: Folder to add the file to.
            new_file_name: Name in the store; defaults to the local file name.
            remove_original: Delete the local file after a successful upload.

        Raises:
            InvalidArgumentError: If the local file cannot be opened.
            FileOperationError: If the store rejected the upload.
        """
        require_folder_identifier(target_folder_identifier)
        file_name = new_file_name or os.path.basename(local_file_path)
        _validate_name(file_name)
        identifier = target_folder_identifier + file_name

        try:
            handle = open(local_file_path, "rb")  # noqa: SIM115
        except OSError as exc:
            raise InvalidArgumentError(f"Could not open handle for {local_file_path}") from exc
        with handle:
            self._put(identifier, handle, "Adding file", local_file_path)

        if remove_original:
            os.remove(local_file_path)
        return identifier

    def replace_file(self, identifier: str, local_file_path: str) -> bool:
        """Replace the contents of a file with those of a local file."""
        require_file_identifier(identifier)
        try:
            handle = open(local_file_path, "rb")  # noqa: SIM115
        except OSError as exc:
            raise InvalidArgumentError(f"Could not open handle for {local_file_path}") from exc
        with handle:
            self._put(identifier, handle, "Replacing file", local_file_path)
        return True

    def delete_file(self, identifier: str) -> bool:
        """Delete a file.

        Returns:
            True only if the store answered 204 No Content.

        Raises:
            FileDoesNotExistError: If the file does not exist.
        """
        require_file_identifier(identifier)
        try:
            response = self._execute("DELETE", identifier)
        except DavNotFoundError as exc:
            raise FileDoesNotExistError(identifier) from exc
        finally:
            self._remove_cache_for_path(parent_of(identifier))
        return response.status_code == HTTPStatus.NO_CONTENT

    def rename_file(self, identifier: str, new_name: str) -> str:
        """Rename a file inside its folder and return the new identifier."""
        require_file_identifier(identifier)
        _validate_name(new_name)
        folder = parent_of(identifier)
        target = folder + new_name
        try:
            self._transfer("MOVE", identifier, target, "Renaming")
        finally:
            self._remove_cache_for_path(folder)
        return target

    def move_file_within_storage(
        self, identifier: str, target_folder_identifier: str, new_file_name: str
    ) -> str:
        """Move a file to another folder of this storage and return the new identifier.

        Both the source and the destination folder listings are invalidated.
        """
        require_file_identifier(identifier)
        require_folder_identifier(target_folder_identifier)
        _validate_name(new_file_name)
        target = target_folder_identifier + new_file_name
        try:
            self._transfer("MOVE", identifier, target, "Moving file")
        finally:
            self._remove_cache_for_path(parent_of(identifier))
            self._remove_cache_for_path(target_folder_identifier)
        return target

    def copy_file_within_storage(
        self, identifier: str, target_folder_identifier: str, file_name: str
    ) -> str:
        """Copy a file to a folder of this storage and return the new identifier."""
        require_file_identifier(identifier)
        require_folder_identifier(target_folder_identifier)
        _validate_name(file_name)
        target = target_folder_identifier + file_name
        try:
            self._transfer("COPY", identifier, target, "Copying file")
        finally:
            self._remove_cache_for_path(target_folder_identifier)
        return target

    def hash(self, identifier: str, hash_algorithm: str) -> str:
        """Hash a file by materialising a temporary local copy.

        The temporary copy is removed on every exit path.

        Raises:
            InvalidArgumentError: If the algorithm is not supported; raised
                before any request is made.
        """
        algorithm = hash_algorithm.lower()
        if algorithm not in SUPPORTED_HASH_ALGORITHMS:
            raise InvalidArgumentError(f"Unsupported hash algorithm {hash_algorithm}")
        require_file_identifier(identifier)

        temporary_path = self.copy_file_to_temporary_path(identifier)
        try:
            digest = hashlib.new(algorithm)
            with open(temporary_path, "rb") as handle:
                for chunk in iter(lambda: handle.read(HASH_CHUNK_SIZE), b""):
                    digest.update(chunk)
            return digest.hexdigest()
        finally:
            os.remove(temporary_path)

    def copy_file_to_temporary_path(self, identifier: str) -> str:
        """Download a file to a new temporary path and return that path.

        The caller owns the returned file and must remove it. If the download
        fails the temporary file is removed before the error propagates.
        """
        require_file_identifier(identifier)
        fd, temporary_path = tempfile.mkstemp(prefix=TEMPFILE_PREFIX)
        try:
            with os.fdopen(fd, "wb") as handle:
                self._read_to_file(identifier, handle)
        except BaseException:
            os.remove(temporary_path)
            raise
        return temporary_path

    def get_file_for_local_processing(self, identifier: str, writable: bool = True) -> str:
        """Return the path of a local copy of a file.

        Changes to the copy are not written back. The copy is always fresh,
        whatever ``writable`` says.
        """
        return self.copy_file_to_temporary_path(identifier)

    def dump_file_contents(self, identifier: str, stream: IO[bytes]) -> None:
        """Stream the contents of a file into a writable binary handle."""
        self._read_to_file(identifier, stream)

    def get_file_info_by_identifier(self, identifier: str) -> dict[str, Any]:
        """Return metadata of a file from its parent folder's listing."""
        require_file_identifier(identifier)
        try:
            return self._frontend.get_file_info(identifier)
        except DavNotFoundError as exc:
            raise FileDoesNotExistError(identifier) from exc

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def create_folder(
        self,
        new_folder_name: str,
        parent_folder_identifier: str = ROOT_IDENTIFIER,
        recursive: bool = False,
    ) -> str:
        """Create a folder and return its identifier.

        Args:
            new_folder_name: Name of the new folder. With ``recursive`` it may
                be a relative path such as ``a/b/c``.
            parent_folder_identifier: Folder to create it in.
            recursive: Create missing intermediate folders.

        Raises:
            FileOperationError: If the store rejected the MKCOL.
        """
        require_folder_identifier(parent_folder_identifier)
        if not recursive:
            _validate_name(new_folder_name)
            return self._make_collection(parent_folder_identifier, new_folder_name)

        names = [part for part in new_folder_name.split("/") if part]
        if not names:
            raise InvalidArgumentError(f"Invalid folder name: {new_folder_name!r}")
        folder = parent_folder_identifier
        for name in names:
            candidate = f"{folder}{name}/"
            if self.folder_exists(candidate):
                folder = candidate
            else:
                folder = self._make_collection(folder, name)
        return folder

    def _make_collection(self, parent_folder_identifier: str, name: str) -> str:
        # MKCOL targets always carry the trailing slash.
        identifier = f"{parent_folder_identifier}{name}/"
        try:
            response = self._execute("MKCOL", identifier)
        except DavNotFoundError as exc:
            raise FileOperationError(
                f"Creating folder {identifier} failed: parent not found", identifier
            ) from exc
        finally:
            self._remove_cache_for_path(parent_folder_identifier)
        self._require_success(response, "Creating folder", identifier)
        return identifier

    def delete_folder(self, folder_identifier: str, delete_recursively: bool = False) -> bool:
        """Delete a folder.

        The request always carries ``Depth: infinity``, so the server removes
        the whole subtree. Without ``delete_recursively`` a folder that is not
        known to be empty is refused before any DELETE is sent.

        Returns:
            True only if the store answered 204 No Content.

        Raises:
            FolderDoesNotExistError: If the folder does not exist.
            FileOperationError: If the folder is not empty and
                ``delete_recursively`` is False.
        """
        require_folder_identifier(folder_identifier)
        if folder_identifier == ROOT_IDENTIFIER:
            raise InvalidArgumentError("The root folder cannot be deleted")

        if not delete_recursively:
            # The emptiness check must see the live folder, never a cached listing.
            self._remove_cache_for_path(folder_identifier)
            try:
                listing = self._frontend.propfind(folder_identifier)
            except DavNotFoundError as exc:
                raise FolderDoesNotExistError(folder_identifier) from exc
            if listing.degraded or listing.entries:
                raise FileOperationError(
                    f"Folder {folder_identifier} is not empty", folder_identifier
                )

        try:
            response = self._execute("DELETE", folder_identifier, None, {"Depth": "infinity"})
        except DavNotFoundError as exc:
            raise FolderDoesNotExistError(folder_identifier) from exc
        finally:
            self._remove_cache_for_path(parent_of(folder_identifier))
            self._remove_cache_for_path(folder_identifier)
        return response.status_code == HTTPStatus.NO_CONTENT

    def rename_folder(self, folder_identifier: str, new_name: str) -> str:
        """Rename a folder inside its parent and return the new identifier."""
        require_folder_identifier(folder_identifier)
        _validate_name(new_name)
        if folder_identifier == ROOT_IDENTIFIER:
            raise InvalidArgumentError("The root folder cannot be renamed")
        parent = parent_of(folder_identifier)
        target = f"{parent}{new_name}/"
        try:
            self._transfer("MOVE", folder_identifier, target, "Renaming")
        finally:
            self._remove_cache_for_path(parent)
        return target

    def move_folder_within_storage(
        self,
        source_folder_identifier: str,
        target_folder_identifier: str,
        new_folder_name: str,
    ) -> str:
        """Move a folder into another folder and return its new identifier."""
        require_folder_identifier(source_folder_identifier)
        require_folder_identifier(target_folder_identifier)
        _validate_name(new_folder_name)
        if source_folder_identifier == ROOT_IDENTIFIER:
            raise InvalidArgumentError("The root folder cannot be moved")
        target = f"{target_folder_identifier}{new_folder_name}/"
        try:
            self._transfer("MOVE", source_folder_identifier, target, "Moving folder")
        finally:
            self._remove_cache_for_path(parent_of(source_folder_identifier))
            self._remove_cache_for_path(target_folder_identifier)
        return target

    def copy_folder_within_storage(
        self,
        source_folder_identifier: str,
        target_folder_identifier: str,
        new_folder_name: str,
    ) -> str:
        """Copy a folder into another folder and return the identifier of the copy."""
        require_folder_identifier(source_folder_identifier)
        require_folder_identifier(target_folder_identifier)
        _validate_name(new_folder_name)
        target = f"{target_folder_identifier}{new_folder_name}/"
        try:
            self._transfer("COPY", source_folder_identifier, target, "Copying folder")
        finally:
            self._remove_cache_for_path(target_folder_identifier)
        return target

    def is_folder_empty(self, folder_identifier: str) -> bool:
        try:
            return self._frontend.is_folder_empty(folder_identifier)
        except DavNotFoundError as exc:
            raise FolderDoesNotExistError(folder_identifier) from exc

    def get_folder_info_by_identifier(self, folder_identifier: str) -> dict[str, Any]:
        """Return basic information about a folder.

        Raises:
            FolderDoesNotExistError: If the folder does not exist.
        """
        if not self.folder_exists(folder_identifier):
            raise FolderDoesNotExistError(folder_identifier)
        return {
            "identifier": folder_identifier,
            "name": folder_identifier.rstrip("/").rpartition("/")[2],
            "storage": self._config.storage_uid,
        }

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def _select(
        self,
        entries: list[DavEntry],
        folder_identifier: str,
        suffix: str,
        start: int,
        number_of_items: int,
        filter_callbacks: Iterable[FilterCallback],
        sort: str,
        sort_rev: bool,
    ) -> dict[str, str]:
        callbacks = list(filter_callbacks)
        items: dict[str, str] = {}
        for entry in _sort_entries(entries, sort, sort_rev):
            identifier = f"{folder_identifier}{entry.name}{suffix}"
            if all(callback(entry.name, identifier, folder_identifier) for callback in callbacks):
                items[entry.name] = identifier
        names = list(items)
        end = start + number_of_items if number_of_items > 0 else None
        return {name: items[name] for name in names[start:end]}

    def list_files(
        self,
        folder_identifier: str,
        start: int = 0,
        number_of_items: int = 0,
        filter_callbacks: Iterable[FilterCallback] = (),
        sort: str = "",
        sort_rev: bool = False,
    ) -> dict[str, str]:
        """List the files of a folder as a name → identifier mapping.

        Args:
            folder_identifier: Folder to list.
            start: Offset of the first item to return.
            number_of_items: Maximum number of items; 0 for all.
            filter_callbacks: Callables ``(name, identifier, folder) -> bool``;
                an item is kept only if every callback returns True.
            sort: "" for server order, or "name", "size", "tstamp".
            sort_rev: Reverse the order.

        Raises:
            FolderDoesNotExistError: If the folder does not exist.
        """
        try:
            entries = self._frontend.list_file_entries(folder_identifier)
        except DavNotFoundError as exc:
            raise FolderDoesNotExistError(folder_identifier) from exc
        return self._select(
            entries, folder_identifier, "", start, number_of_items, filter_callbacks, sort, sort_rev
        )

    def list_folders(
        self,
        folder_identifier: str,
        start: int = 0,
        number_of_items: int = 0,
        filter_callbacks: Iterable[FilterCallback] = (),
        sort: str = "",
        sort_rev: bool = False,
    ) -> dict[str, str]:
        """List the sub-folders of a folder as a name → identifier mapping.

        Takes the same arguments as :meth:`list_files`; returned identifiers
        end with '/'.
        """
        try:
            entries = self._frontend.list_folder_entries(folder_identifier)
        except DavNotFoundError as exc:
            raise FolderDoesNotExistError(folder_identifier) from exc
        return self._select(
            entries,
            folder_identifier,
            "/",
            start,
            number_of_items,
            filter_callbacks,
            sort,
            sort_rev,
        )

    def count_files_in_folder(
        self, folder_identifier: str, filter_callbacks: Iterable[FilterCallback] = ()
    ) -> int:
        return len(self.list_files(folder_identifier, filter_callbacks=filter_callbacks))

    def count_folders_in_folder(
        self, folder_identifier: str, filter_callbacks: Iterable[FilterCallback] = ()
    ) -> int:
        return len(self.list_folders(folder_identifier, filter_callbacks=filter_callbacks))

    def get_file_in_folder(self, file_name: str, folder_identifier: str) -> str:
        """Return the identifier of a file listed in a folder.

        Raises:
            FileDoesNotExistError: If the folder listing has no such file.
        """
        files = self.list_files(folder_identifier)
        if file_name not in files:
            raise FileDoesNotExistError(
                folder_identifier + file_name,
                f"{file_name} does not exist in {folder_identifier}",
            )
        return files[file_name]

    def get_folder_in_folder(self, folder_name: str, folder_identifier: str) -> str:
        """Return the identifier of a sub-folder listed in a folder.

        Raises:
            FolderDoesNotExistError: If the folder listing has no such sub-folder.
        """
        folders = self.list_folders(folder_identifier)
        if folder_name not in folders:
            raise FolderDoesNotExistError(
                f"{folder_identifier}{folder_name}/",
                f"{folder_name} does not exist in {folder_identifier}",
            )
        return folders[folder_name]


def webdav_driver_from_config(
    config: AppConfig, cache: ListingCache | None = None
) -> WebDavDriver:
    """Construct a WebDavDriver from application configuration.

    Resolves the storage configuration, then wires a WebDavClient and a
    CachingWebDavFrontend into the driver.

    Args:
        config: Application configuration instance.
        cache: Listing cache to use; built from the configuration when omitted.

    Returns:
        Configured WebDavDriver instance.
    """
    storage = storage_config_from_config(config)
    client = webdav_client_from_config(storage)
    frontend = CachingWebDavFrontend(
        client, storage, cache if cache is not None else listing_cache_from_config(config)
    )
    return WebDavDriver(config=storage, client=client, frontend=frontend)
