"""Rewrite media-host image links into directly fetchable URLs."""

import re
from urllib.parse import unquote

from timeline_pro.config import settings

_WIKI_FILE_PATTERN = re.compile(r"(?:wiki/|File:|title=File:)([^&?#]+)", re.IGNORECASE)
_FILE_PREFIX_PATTERN = re.compile(r"^File:", re.IGNORECASE)
_DRIVE_FILE_PATTERN = re.compile(r"drive\.google\.com/file/d/([a-zA-Z0-9_-]+)")

WIKIMEDIA_FILE_PATH_URL = (
    "https://commons.wikimedia.org/w/index.php?title=Special:FilePath&file={filename}&width={width}"
)
DRIVE_DIRECT_URL = "https://drive.google.com/uc?id={file_id}"


def optimize_image_url(url: str | None, width: int | None = None) -> str:
    """
    Canonicalize an image reference.

    - Wikimedia file pages, ``File:`` names and ``title=File:`` links become
      a Special:FilePath URL scaled to ``width``.
    - Google Drive file links become direct download URLs.
    - Anything else is returned trimmed.
    """
    if not url:
        return ""
    value = url.strip()

    wiki_match = _WIKI_FILE_PATTERN.search(value)
    if wiki_match:
        filename = _FILE_PREFIX_PATTERN.sub("", wiki_match.group(1))
        filename = re.sub(r"\s", "_", unquote(filename))
        return WIKIMEDIA_FILE_PATH_URL.format(
            filename=filename,
            width=width or settings.IMAGE_WIDTH,
        )

    drive_match = _DRIVE_FILE_PATTERN.search(value)
    if drive_match:
        return DRIVE_DIRECT_URL.format(file_id=drive_match.group(1))

    return value
