"""Functions for finding local image references in vault Markdown.

Two syntaxes are recognised, each matched independently against the full text:

* double-bracket embeds: ``![[diagram.png]]``
* bracket links: ``![alt text](attachments/diagram%201.png)``

Remote bracket links (``http://`` / ``https://``) are left alone.
"""

import logging
import re
from functools import lru_cache
from pathlib import PurePosixPath
from typing import Final, List
from urllib.parse import unquote

from pydantic import validate_call

from vault_pub.vault_model import ImageReference, PublishSettings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: Final[tuple[str, ...]] = ("png", "jpg", "jpeg", "gif", "svg")
REMOTE_PREFIXES: Final[tuple[str, ...]] = ("http://", "https://")


@lru_cache(maxsize=8)
def _image_patterns(drawing_extension: str | None) -> tuple[re.Pattern[str], re.Pattern[str]]:
    """Compile the (double-bracket, bracket-link) patterns for the given drawing alias."""
    extensions: list[str] = list(IMAGE_EXTENSIONS)
    if drawing_extension:
        extensions.append(re.escape(drawing_extension))
    ext_group: str = "|".join(extensions)

    # ![[name.ext]]
    wiki_pattern = re.compile(rf"!\[\[([^\[\]]*?\.(?:{ext_group}))\]\]", re.IGNORECASE)
    # ![alt](path.ext) -- the path may contain parentheses ("Screenshot (1).png") but not a
    # newline or the start of another link, so two images on one line stay separate
    md_pattern = re.compile(rf"!\[([^\]]*)\]\(((?:(?!\]\()[^\n])*?\.(?:{ext_group}))\)", re.IGNORECASE)
    return wiki_pattern, md_pattern


def _is_drawing(name: str, settings: PublishSettings) -> bool:
    if not settings.drawing_extension:
        return False
    return name.lower().endswith(f".{settings.drawing_extension.lower()}")


def _display_stem(name: str) -> str:
    """``attachments/my-pic.png`` -> ``my-pic``"""
    return PurePosixPath(name).stem


@validate_call
def resolve_asset_path(name: str, settings: PublishSettings) -> str:
    """Build the vault-relative path of a referenced image.

    The attachment location is joined with ``name``. Drawing-format references
    (e.g. ``sketch.excalidraw``) point at their rendered export, so the render
    extension is appended (``sketch.excalidraw.png``).

    Args:
        name: The decoded path or file name exactly as referenced
        settings: Publish settings carrying the attachment location and drawing alias

    Returns:
        The vault-relative POSIX path of the asset
    """
    if _is_drawing(name, settings):
        name = f"{name}.{settings.drawing_render_extension}"
    return str(PurePosixPath(settings.attachment_location) / name)


@validate_call
def find_image_references(markdown_text: str, settings: PublishSettings) -> List[ImageReference]:
    """Find every local image reference in the text.

    Double-bracket references are listed first, then bracket links, each in
    document order. Repeated markup yields one record per occurrence.

    Args:
        markdown_text: The Markdown content to search
        settings: Publish settings

    Returns:
        List of ImageReference records with an empty result slot

    Raises:
        ValidationError: If markdown_text is None or invalid
    """
    wiki_pattern, md_pattern = _image_patterns(settings.drawing_extension)
    references: List[ImageReference] = []

    for match in wiki_pattern.finditer(markdown_text):
        name: str = match.group(1)
        references.append(
            ImageReference(
                display_name=_display_stem(name),
                resolved_path=resolve_asset_path(name, settings),
                original_span=match.group(0),
            )
        )

    for match in md_pattern.finditer(markdown_text):
        alt_text: str = match.group(1)
        raw_path: str = match.group(2).strip()
        if raw_path.startswith(REMOTE_PREFIXES):
            logger.debug(f"Skipping remote image: {raw_path}")
            continue
        decoded_path: str = unquote(raw_path)
        references.append(
            ImageReference(
                display_name=alt_text or _display_stem(decoded_path),
                resolved_path=resolve_asset_path(decoded_path, settings),
                original_span=match.group(0),
            )
        )

    logger.info(f"Found {len(references)} local image references")
    return references
