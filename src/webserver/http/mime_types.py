"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Maps a requested file name to the Content-Type the server announces.

The table is deliberately tiny and fixed:

    ┌────────────────────────────────────────────────────────────────────┐
    │                    CONTENT TYPES                                   │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  .gif    → image/gif      (binary, sent byte for byte)             │
    │  .png    → image/png      (binary, sent byte for byte)             │
    │  .jpg    → image/jpg      (binary, sent byte for byte)             │
    │                                                                     │
    │  anything else, or no extension → text/html                        │
    │                                   (template tokens substituted)    │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

The content type does double duty: it fills the Content-Type header AND
decides how the body is written. Binary types must never go through the
line-oriented text path, which would mangle their bytes.

Matching is case-sensitive: "logo.GIF" is served as text/html.

=============================================================================
"""

DEFAULT_CONTENT_TYPE = "text/html"

CONTENT_TYPES = {
    ".gif": "image/gif",
    ".png": "image/png",
    ".jpg": "image/jpg",
}

# Every type in the table is an image, and every image is binary
BINARY_CONTENT_TYPES = frozenset(CONTENT_TYPES.values())


def get_extension(path: str) -> str:
    """
    Get the substring from the last '.' of a path.

    Returns an empty string when the path has no '.' at all.

        >>> get_extension("images/photo.gif")
        '.gif'
        >>> get_extension("archive.tar.gz")
        '.gz'
        >>> get_extension("README")
        ''
    """
    index = path.rfind(".")
    if index == -1:
        return ""
    return path[index:]


def get_content_type(path: str) -> str:
    """
    Get the content type for a requested path based on its extension.

    This only looks at the name. Whether the file exists is the
    resolver's business.

        >>> get_content_type("photo.gif")
        'image/gif'
        >>> get_content_type("notes.txt")
        'text/html'
    """
    return CONTENT_TYPES.get(get_extension(path), DEFAULT_CONTENT_TYPE)


def is_binary_type(content_type: str) -> bool:
    """Check if a content type must be sent as raw bytes."""
    return content_type in BINARY_CONTENT_TYPES
