"""WebDAV transport client on top of urllib."""

from __future__ import annotations

import base64
import logging
import os
import shutil
import ssl
from http import HTTPStatus
from http.client import HTTPException
from typing import IO, TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError

from webdav_fs.dav.models import DavResponse
from webdav_fs.dav.urls import ResourceUrl, encode_path, split_credentials

if TYPE_CHECKING:
    from webdav_fs.config import StorageConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

Body = bytes | str | IO[bytes] | None


class DavError(Exception):
    """Raised when a WebDAV request cannot produce a usable result."""

    def __init__(
        self, method: str, url: str, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(f"{method} {url} failed: {message}")
        self.method = method
        self.url = url
        self.message = message
        self.status_code = status_code


class DavNotFoundError(DavError):
    """Raised when the store answers 404 for the requested resource."""

    def __init__(self, method: str, url: str) -> None:
        super().__init__(method, url, "resource not found", HTTPStatus.NOT_FOUND)


class DavTransportError(DavError):
    """Raised when the store cannot be reached or its answer is cut off or garbled."""


class WebDavClient:
    """Executes WebDAV verbs and classifies their failures."""

    def __init__(
        self,
        username: str = "",
        password: str = "",
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialise the client.

        Args:
            username: Username for HTTP Basic auth when a URL embeds none.
            password: Password matching ``username``.
            verify_ssl: Verify TLS certificates when True.
            timeout: Socket timeout in seconds for every request.
        """
        self._username = username
        self._password = password
        self._timeout = timeout
        self._ssl_context = ssl.create_default_context()
        if not verify_ssl:
            self._ssl_context.check_hostname = False
            self._ssl_context.verify_mode = ssl.CERT_NONE

    def _build_request(
        self,
        method: str,
        url: ResourceUrl,
        body: Body = None,
        headers: dict[str, str] | None = None,
    ) -> urllib_request.Request:
        """Turn a ResourceUrl into an encoded request with auth headers applied.

        Embedded userinfo is moved into an ``Authorization`` header so that it
        never appears on the request line.
        """
        target, username, password = split_credentials(url.target)
        if username is None:
            username, password = self._username, self._password

        request_headers = dict(headers or {})
        if username:
            token = base64.b64encode(f"{username}:{password or ''}".encode()).decode("ascii")
            request_headers["Authorization"] = f"Basic {token}"

        data: Any = body
        if isinstance(body, str):
            data = body.encode("utf-8")
        elif body is not None and not isinstance(body, bytes):
            request_headers.setdefault("Content-Length", str(os.fstat(body.fileno()).st_size))

        return urllib_request.Request(
            encode_path(target),
            data=data,
            headers=request_headers,
            method=method,
        )

    def _open(self, req: urllib_request.Request) -> Any:
        return urllib_request.urlopen(req, timeout=self._timeout, context=self._ssl_context)

    def execute(
        self,
        method: str,
        url: ResourceUrl,
        body: Body = None,
        headers: dict[str, str] | None = None,
    ) -> DavResponse:
        """Execute a WebDAV request.

        Args:
            method: HTTP/WebDAV verb, e.g. "PROPFIND" or "MOVE".
            url: Unencoded request target.
            body: Request body as bytes, str or a binary file object.
            headers: Extra request headers.

        Returns:
            DavResponse for any 2xx answer, or a neutral DavResponse carrying
            only the status code for any other non-404 HTTP answer.

        Raises:
            DavNotFoundError: If the store answers 404.
            DavTransportError: If the store cannot be reached.
        """
        req = self._build_request(method, url, body, headers)
        logger.debug("[execute] sending request; method:%s;url:%s", method, url.public)
        try:
            with self._open(req) as resp:
                return DavResponse(
                    status_code=resp.status,
                    headers=dict(resp.headers.items()),
                    body=resp.read(),
                )
        except HTTPError as exc:
            if exc.code == HTTPStatus.NOT_FOUND:
                raise DavNotFoundError(method, url.public) from exc
            logger.error(
                "[execute] error while executing DAV request; "
                "method:%s;url:%s;status:%d;message:%s",
                method,
                url.public,
                exc.code,
                exc.reason,
            )
            return DavResponse.neutral(exc.code)
        except (URLError, OSError, HTTPException) as exc:
            reason = getattr(exc, "reason", exc)
            logger.error(
                "[execute] DAV store unreachable; method:%s;url:%s;message:%s",
                method,
                url.public,
                reason,
            )
            raise DavTransportError(method, url.public, str(reason)) from exc

    def read_to_file(self, url: ResourceUrl, fileobj: IO[bytes]) -> None:
        """Stream the body of a GET request into an open binary handle.

        The handle is not closed.

        Raises:
            DavNotFoundError: If the store answers 404.
            DavError: For any other non-2xx answer; there is no neutral result
                for a streamed read.
            DavTransportError: If the store cannot be reached.
        """
        req = self._build_request("GET", url)
        logger.debug("[read_to_file] streaming resource; url:%s", url.public)
        try:
            with self._open(req) as resp:
                shutil.copyfileobj(resp, fileobj)
        except HTTPError as exc:
            if exc.code == HTTPStatus.NOT_FOUND:
                raise DavNotFoundError("GET", url.public) from exc
            logger.error(
                "[read_to_file] error while streaming resource; url:%s;status:%d;message:%s",
                url.public,
                exc.code,
                exc.reason,
            )
            raise DavError("GET", url.public, str(exc.reason), exc.code) from exc
        except (URLError, OSError, HTTPException) as exc:
            reason = getattr(exc, "reason", exc)
            logger.error(
                "[read_to_file] DAV store unreachable; url:%s;message:%s", url.public, reason
            )
            raise DavTransportError("GET", url.public, str(reason)) from exc


def webdav_client_from_config(config: StorageConfig) -> WebDavClient:
    """Construct a WebDavClient from storage configuration.

    Args:
        config: Resolved storage configuration.

    Returns:
        Configured WebDavClient instance.
    """
    return WebDavClient(
        username=config.username,
        password=config.password,
        verify_ssl=config.verify_ssl,
        timeout=config.request_timeout,
    )
