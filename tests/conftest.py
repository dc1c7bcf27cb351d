"""Pytest configuration — adds src/ to sys.path and provides a fake WebDAV store."""

import os
import sys
from typing import Any
from urllib.parse import quote, unquote
from xml.sax.saxutils import escape

import pytest

# Add src/ to Python path so tests can import from webdav_fs
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from webdav_fs.cache.listing_cache import InMemoryListingCache  # noqa: E402
from webdav_fs.config import StorageConfig, process_configuration  # noqa: E402
from webdav_fs.dav.client import DavNotFoundError, DavTransportError  # noqa: E402
from webdav_fs.dav.frontend import CachingWebDavFrontend  # noqa: E402
from webdav_fs.dav.models import DavResponse  # noqa: E402
from webdav_fs.dav.urls import ResourceUrl, split_credentials  # noqa: E402
from webdav_fs.driver import WebDavDriver  # noqa: E402

BASE_URL = "https://dav.example.com/remote.php/webdav/"


class FakeDavStore:
    """In-memory WebDAV server speaking the WebDavClient interface.

    Files and folders are keyed by identifier. Every request is recorded in
    ``requests`` as (method, identifier, headers).
    """

    def __init__(self, public_base_url: str = BASE_URL) -> None:
        self.public_base_url = public_base_url
        self.base_path = "/" + public_base_url.split("://", 1)[1].partition("/")[2]
        self.files: dict[str, bytes] = {}
        self.mtimes: dict[str, str] = {}
        self.folders: set[str] = {"/"}
        self.requests: list[tuple[str, str, dict[str, str]]] = []
        self.failures: dict[str, int] = {}
        self.unreachable = False

    # -- helpers -----------------------------------------------------------

    def _identifier(self, url: str) -> str:
        plain, _, _ = split_credentials(url)
        assert plain.startswith(self.public_base_url), plain
        return "/" + unquote(plain[len(self.public_base_url) :])

    @staticmethod
    def _parent(identifier: str) -> str:
        return identifier.rstrip("/").rpartition("/")[0] + "/"

    def _exists(self, identifier: str) -> bool:
        return identifier in self.files or identifier in self.folders

    def _subtree(self, folder: str) -> tuple[list[str], list[str]]:
        files = [f for f in self.files if f.startswith(folder)]
        folders = [d for d in self.folders if d.startswith(folder)]
        return files, folders

    def fail_next(self, method: str, status_code: int) -> None:
        self.failures[method] = status_code

    def count(self, method: str) -> int:
        return sum(1 for m, _, _ in self.requests if m == method)

    def add_file(self, identifier: str, content: bytes = b"", mtime: str = "") -> None:
        self.files[identifier] = content
        if mtime:
            self.mtimes[identifier] = mtime

    def add_folder(self, identifier: str) -> None:
        self.folders.add(identifier)

    # -- WebDavClient interface -------------------------------------------

    def execute(self, method, url: ResourceUrl, body=None, headers=None) -> DavResponse:
        identifier = self._identifier(url.target)
        headers = dict(headers or {})
        self.requests.append((method, identifier, headers))
        if self.unreachable:
            raise DavTransportError(method, url.public, "connection refused")
        if method in self.failures:
            return DavResponse.neutral(self.failures.pop(method))
        handler = getattr(self, f"_do_{method.lower()}")
        return handler(method, url, identifier, body, headers)

    def read_to_file(self, url: ResourceUrl, fileobj) -> None:
        response = self.execute("GET", url)
        fileobj.write(response.body)

    # -- verbs ---------------------------------------------------------------

    def _do_head(self, method, url, identifier, body, headers):
        if not self._exists(identifier):
            raise DavNotFoundError(method, url.public)
        return DavResponse(200)

    def _do_get(self, method, url, identifier, body, headers):
        if identifier not in self.files:
            raise DavNotFoundError(method, url.public)
        return DavResponse(200, {}, self.files[identifier])

    def _do_put(self, method, url, identifier, body, headers):
        if self._parent(identifier) not in self.folders:
            return DavResponse.neutral(409)
        data = body if isinstance(body, bytes) else body.read()
        existed = identifier in self.files
        self.files[identifier] = data
        return DavResponse(204 if existed else 201)

    def _do_delete(self, method, url, identifier, body, headers):
        if not self._exists(identifier):
            raise DavNotFoundError(method, url.public)
        if identifier in self.files:
            del self.files[identifier]
        else:
            files, folders = self._subtree(identifier)
            for f in files:
                del self.files[f]
            self.folders.difference_update(folders)
        return DavResponse(204)

    def _do_mkcol(self, method, url, identifier, body, headers):
        if self._exists(identifier):
            return DavResponse.neutral(405)
        if self._parent(identifier) not in self.folders:
            return DavResponse.neutral(409)
        self.folders.add(identifier)
        return DavResponse(201)

    def _transfer(self, method, url, identifier, headers, remove_source):
        if not self._exists(identifier):
            raise DavNotFoundError(method, url.public)
        target = self._identifier(headers["Destination"])
        if self._parent(target) not in self.folders:
            return DavResponse.neutral(409)
        overwritten = self._exists(target)
        if identifier in self.files:
            self.files[target] = self.files[identifier]
            if remove_source:
                del self.files[identifier]
        else:
            files, folders = self._subtree(identifier)
            for f in files:
                self.files[target + f[len(identifier) :]] = self.files[f]
                if remove_source:
                    del self.files[f]
            for d in folders:
                self.folders.add(target + d[len(identifier) :])
                if remove_source:
                    self.folders.discard(d)
        return DavResponse(204 if overwritten else 201)

    def _do_move(self, method, url, identifier, body, headers):
        return self._transfer(method, url, identifier, headers, remove_source=True)

    def _do_copy(self, method, url, identifier, body, headers):
        return self._transfer(method, url, identifier, headers, remove_source=False)

    def _response_xml(self, identifier: str) -> str:
        href = quote(self.base_path.rstrip("/") + identifier)
        if identifier in self.folders:
            props = "<d:resourcetype><d:collection/></d:resourcetype>"
        else:
            props = (
                "<d:resourcetype/>"
                f"<d:getcontentlength>{len(self.files[identifier])}</d:getcontentlength>"
                "<d:getcontenttype>application/octet-stream</d:getcontenttype>"
            )
            if identifier in self.mtimes:
                props += f"<d:getlastmodified>{self.mtimes[identifier]}</d:getlastmodified>"
        return (
            f"<d:response><d:href>{escape(href)}</d:href>"
            f"<d:propstat><d:prop>{props}</d:prop>"
            "<d:status>HTTP/1.1 200 OK</d:status></d:propstat></d:response>"
        )

    def _do_propfind(self, method, url, identifier, body, headers):
        if identifier not in self.folders:
            raise DavNotFoundError(method, url.public)
        children = [
            item
            for item in [*sorted(self.folders), *sorted(self.files)]
            if item != identifier and self._parent(item) == identifier
        ]
        responses = "".join(self._response_xml(item) for item in [identifier, *children])
        xml = (
            '<?xml version="1.0" encoding="utf-8"?>'
            f'<d:multistatus xmlns:d="DAV:">{responses}</d:multistatus>'
        )
        return DavResponse(207, {"Content-Type": "application/xml"}, xml.encode("utf-8"))


@pytest.fixture
def storage_config() -> StorageConfig:
    return process_configuration(
        {
            "base_url": BASE_URL,
            "use_authentication": True,
            "username": "alice",
            "password": "s3cret",
        },
        storage_uid="7",
    )


@pytest.fixture
def dav_store() -> FakeDavStore:
    return FakeDavStore()


@pytest.fixture
def listing_cache() -> InMemoryListingCache:
    return InMemoryListingCache()


@pytest.fixture
def driver(storage_config, dav_store, listing_cache) -> WebDavDriver:
    client: Any = dav_store
    frontend = CachingWebDavFrontend(client, storage_config, listing_cache)
    return WebDavDriver(config=storage_config, client=client, frontend=frontend)
