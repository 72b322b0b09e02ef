"""
=============================================================================
RESOURCE RESOLUTION
=============================================================================

Turns a resource path into everything the response needs to know:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    resolve(path) DECISIONS                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   path == ""            → root page, exists, text/html, 200          │
    │                                                                      │
    │   file missing          → not found, text/html, 404                  │
    │   (whatever extension)                                               │
    │                                                                      │
    │   file exists           → exists, 200, type from extension:          │
    │                             .gif .png .jpg → image/*                 │
    │                             anything else  → text/html               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A missing file is a normal outcome, not an error: resolve() never raises.

=============================================================================
PATH CONFINEMENT
=============================================================================

Request paths are looked up relative to the document root. A path like
"../../etc/passwd" would otherwise walk right out of it. With
confine_to_root on (the default) we resolve the full path, following
".." and symlinks, and refuse anything that lands outside the root:

    root = /srv/www

    "index.html"        → /srv/www/index.html    ✓ inside
    "../secret.txt"     → /srv/secret.txt        ✗ outside → 404
    "/etc/passwd"       → /etc/passwd            ✗ outside → 404

Refused paths are answered exactly like missing files, so a client
cannot tell "outside the root" apart from "does not exist".

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .mime_types import DEFAULT_CONTENT_TYPE, get_content_type, is_binary_type
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving one resource path.

    Attributes:
        path: The resource path as requested ("" for the root page).
        file_path: Filesystem location to read, or None for the root page
            and for paths that were refused or are missing.
        exists: Whether the resource is there to be served.
        content_type: Content-Type to announce and to pick the body writer.
    """

    path: str
    file_path: Optional[Path]
    exists: bool
    content_type: str = DEFAULT_CONTENT_TYPE

    @property
    def is_root(self) -> bool:
        return self.path == ""

    @property
    def status_ok(self) -> bool:
        """True for the root page and for every existing entry."""
        # The root page is always built with exists=True
        return self.exists

    @property
    def status(self) -> HTTPStatus:
        return HTTPStatus.OK if self.status_ok else HTTPStatus.NOT_FOUND

    @property
    def is_binary(self) -> bool:
        return is_binary_type(self.content_type)

    @classmethod
    def not_found(cls, path: str = "") -> "Resolution":
        """
        A 404 outcome for the given path.

        Used when no path could be obtained at all, so even "" is 404 here.
        """
        return cls(path=path, file_path=None, exists=False)


class ResourceResolver:
    """
    Maps resource paths to files under a document root.

    Usage:
        resolver = ResourceResolver("/srv/www")
        resolution = resolver.resolve("photo.gif")
        resolution.status_ok      # True if /srv/www/photo.gif exists
        resolution.content_type   # "image/gif"
    """

    def __init__(self, document_root: Union[str, Path] = ".", confine_to_root: bool = True):
        """
        Args:
            document_root: Directory request paths are relative to.
            confine_to_root: Refuse paths that resolve outside the root.
        """
        self.document_root = Path(document_root).resolve()
        self.confine_to_root = confine_to_root

    def resolve(self, path: str) -> Resolution:
        """
        Resolve a resource path.

        Args:
            path: Resource path from the request line, "" for the root page.

        Returns:
            The resolution. Calling this twice for an unchanged file
            gives equal results.
        """
        if path == "":
            return Resolution(path="", file_path=None, exists=True)

        file_path = self._locate(path)
        if file_path is None or not self._exists(file_path):
            return Resolution.not_found(path)

        # Only existing entries get a type from their extension
        return Resolution(
            path=path,
            file_path=file_path,
            exists=True,
            content_type=get_content_type(path),
        )

    def _locate(self, path: str) -> Optional[Path]:
        """
        Build the filesystem path for a resource path.

        Returns:
            The path to look at, or None if it was refused.
        """
        candidate = self.document_root / path

        if not self.confine_to_root:
            return candidate

        try:
            full_path = candidate.resolve()
        except (OSError, RuntimeError, ValueError) as e:
            # RuntimeError: symlink loop on older Pythons
            # ValueError: embedded NUL byte in the name
            logger.debug(f"Cannot resolve {path!r}: {e}")
            return None

        try:
            full_path.relative_to(self.document_root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {path!r}")
            return None

        return full_path

    def _exists(self, file_path: Path) -> bool:
        try:
            return file_path.exists()
        except (OSError, ValueError):
            # ValueError: embedded NUL byte in the name
            return False
