"""Identifier to URL translation for the WebDAV store.

Identifiers are human-readable absolute paths (``/docs/a.txt``, ``/docs/``).
They are only turned into URLs here, and only percent-encoded by the transport
right before a request is sent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NewType
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from webdav_fs.errors import InvalidArgumentError

if TYPE_CHECKING:
    from webdav_fs.config import StorageConfig

ROOT_IDENTIFIER = "/"

PublicUrl = NewType("PublicUrl", str)


@dataclass(frozen=True, repr=False)
class ResourceUrl:
    """Request-only URL that may carry credentials in its userinfo part.

    ``str()`` and ``repr()`` render the redacted form, so passing an instance
    to a log call or an error message never exposes the credentials. The
    credentialed string is only reachable through ``target``.
    """

    target: str

    @property
    def public(self) -> PublicUrl:
        return PublicUrl(redact_url(self.target))

    def __str__(self) -> str:
        return self.public

    def __repr__(self) -> str:
        return f"ResourceUrl({self.public!r})"


def validate_identifier(identifier: str) -> None:
    """Reject empty and relative identifiers.

    Raises:
        InvalidArgumentError: If the identifier is empty or does not start with '/'.
    """
    if not identifier:
        raise InvalidArgumentError("Resource identifier cannot be empty")
    if not identifier.startswith("/"):
        raise InvalidArgumentError(f"Identifier must start with a slash, got {identifier}")


def require_folder_identifier(identifier: str) -> None:
    """Validate a folder identifier; the trailing slash is never added for the caller."""
    validate_identifier(identifier)
    if not identifier.endswith("/"):
        raise InvalidArgumentError(f"Folder identifier must end with a slash, got {identifier}")


def require_file_identifier(identifier: str) -> None:
    """Validate a file identifier (no trailing slash)."""
    validate_identifier(identifier)
    if identifier.endswith("/"):
        raise InvalidArgumentError(f"File identifier must not end with a slash, got {identifier}")


def parent_of(identifier: str) -> str:
    """Return the folder identifier one level up.

    ``/docs/a.txt`` and ``/docs/reports/`` both map to ``/docs/``; a root-level
    identifier (and the root itself) maps to ``/``.
    """
    validate_identifier(identifier)
    stripped = identifier.rstrip("/")
    if not stripped:
        return ROOT_IDENTIFIER
    head = stripped.rpartition("/")[0]
    return f"{head}/"


def join_url(base_url: str, identifier: str) -> str:
    """Append an identifier to a base URL with exactly one slash at the join."""
    return f"{base_url.rstrip('/')}/{identifier.lstrip('/')}"


def _split_url(url: str) -> tuple[str, str, str]:
    """Split into (scheme with '://', netloc, path including leading slash).

    URLs built in this module never carry a query or fragment, so everything
    after the authority is path, including any '?' or '#' from a file name.
    """
    scheme, sep, rest = url.partition("://")
    if not sep:
        return "", "", url
    netloc, slash, path = rest.partition("/")
    return f"{scheme}{sep}", netloc, f"{slash}{path}"


def redact_url(url: str) -> str:
    """Return ``url`` with any userinfo (user:password@) removed."""
    prefix, netloc, path = _split_url(url)
    if not prefix:
        return url
    return f"{prefix}{netloc.rpartition('@')[2]}{path}"


def split_credentials(url: str) -> tuple[str, str | None, str | None]:
    """Separate embedded credentials from a URL.

    Returns:
        Tuple of (url without userinfo, username or None, password or None).
    """
    prefix, netloc, path = _split_url(url)
    userinfo, at, hostport = netloc.rpartition("@")
    if not at:
        return url, None, None
    username, colon, password = userinfo.partition(":")
    return (
        f"{prefix}{hostport}{path}",
        unquote(username),
        unquote(password) if colon else None,
    )


def encode_path(url: str) -> str:
    """Percent-encode each path segment of ``url``; '/' separators are kept."""
    prefix, netloc, path = _split_url(url)
    encoded = "/".join(quote(segment, safe="") for segment in path.split("/"))
    return f"{prefix}{netloc}{encoded}"


def build_base_urls(base_url: str, username: str = "", password: str = "") -> tuple[str, str, str]:
    """Derive the base path and both base URLs from a configured share URL.

    Args:
        base_url: Configured WebDAV share URL, optionally with embedded credentials.
        username: Username to embed in the resource base URL (empty for none).
        password: Password to embed alongside the username.

    Returns:
        Tuple of (base_path, public_base_url, resource_base_url). All three end
        in '/'. Only the resource base URL carries credentials.

    Raises:
        InvalidArgumentError: If the URL has no scheme or host.
    """
    parts = urlsplit(base_url)
    hostport = parts.netloc.rpartition("@")[2]
    if not parts.scheme or not hostport:
        raise InvalidArgumentError(
            f"Invalid base URL configured for WebDAV driver: {redact_url(base_url)}"
        )

    base_path = unquote(parts.path).rstrip("/") + "/"
    public_base_url = urlunsplit((parts.scheme, hostport, base_path, "", ""))

    userinfo = ""
    if username:
        userinfo = quote(username, safe="")
        if password:
            userinfo += ":" + quote(password, safe="")
        userinfo += "@"
    resource_base_url = urlunsplit((parts.scheme, userinfo + hostport, base_path, "", ""))
    return base_path, public_base_url, resource_base_url


def to_resource_url(
    config: StorageConfig, identifier: str, include_credentials: bool = True
) -> ResourceUrl:
    """Build the request target for an identifier.

    Args:
        config: Storage configuration holding both base URLs.
        identifier: Absolute file or folder identifier.
        include_credentials: Use the credentialed base URL when True.

    Returns:
        ResourceUrl wrapping the unencoded absolute URL.
    """
    validate_identifier(identifier)
    base = config.resource_base_url if include_credentials else config.public_base_url
    return ResourceUrl(join_url(base, identifier))


def to_public_url(config: StorageConfig, identifier: str) -> PublicUrl:
    """Build the credential-free URL of an identifier, safe to hand out."""
    validate_identifier(identifier)
    return PublicUrl(join_url(config.public_base_url, identifier))


def server_path(config: StorageConfig, identifier: str) -> str:
    """Return the unencoded path of an identifier on the remote host."""
    return f"{config.base_path.rstrip('/')}/{identifier.lstrip('/')}"
