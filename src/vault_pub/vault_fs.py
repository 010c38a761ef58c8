"""File-system implementations of the publisher's collaborators.

A vault is a directory of Markdown notes and attachments. All document handles
and asset paths used here are POSIX paths relative to the vault root.
"""

import asyncio
import glob
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Any, Final, List
from urllib.parse import unquote

import typer
import yaml

from vault_pub.vault_model import DocumentHandle, DocumentLink

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX: Final[str] = ".md"

_FRONTMATTER_RE: Final[re.Pattern[str]] = re.compile(r"\A---\r?\n(.*?)\r?\n---\s*(?:\r?\n|\Z)", re.DOTALL)
# [[target]], [[target|alias]], [[target#heading]] -- not ![[embeds]]
_WIKILINK_RE: Final[re.Pattern[str]] = re.compile(r"(?<!!)\[\[([^\[\]|#]*)(#[^\[\]|]*)?(?:\|([^\[\]]*))?\]\]")
# [text](Other%20Note.md) -- not images, not remote links
_MD_LINK_RE: Final[re.Pattern[str]] = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)\s]+?\.md)(#[^)\s]*)?\)")


def _relative_handle(vault_dir: Path, path: Path) -> DocumentHandle:
    return path.relative_to(vault_dir).as_posix()


class FileDocumentSource:
    """The active document is a Markdown file inside the vault, or nothing at all."""

    def __init__(self, vault_dir: Path, markdown_file: Path | None) -> None:
        self._vault_dir = vault_dir.resolve()
        self._markdown_file = markdown_file.resolve() if markdown_file is not None else None

    def get_active_document(self) -> DocumentHandle | None:
        if self._markdown_file is None:
            return None
        try:
            return _relative_handle(self._vault_dir, self._markdown_file)
        except ValueError:
            logger.warning(f"{self._markdown_file} is outside the vault {self._vault_dir}")
            return None

    def get_current_text(self) -> str:
        if self._markdown_file is None:
            return ""
        return self._markdown_file.read_text(encoding="utf-8")

    def set_text(self, text: str) -> None:
        if self._markdown_file is None:
            return
        self._markdown_file.write_text(text, encoding="utf-8")
        logger.info(f"Wrote updated Markdown to: {self._markdown_file}")


class FileStorage:
    """Reads vault assets; blocking file access runs in a worker thread."""

    def __init__(self, vault_dir: Path) -> None:
        self._vault_dir = vault_dir

    def path_of(self, path: str) -> Path:
        return self._vault_dir / path

    def _is_file(self, path: str) -> bool:
        try:
            return self.path_of(path).is_file()
        except OSError as e:
            # e.g. ENAMETOOLONG or EACCES: the asset cannot be used, so it counts as missing
            logger.debug(f"Cannot stat {path}: {e}")
            return False

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._is_file, path)

    async def read_binary(self, path: str) -> bytes:
        return await asyncio.to_thread(self.path_of(path).read_bytes)


def parse_frontmatter(markdown_text: str) -> dict[str, str] | None:
    """Parse the YAML frontmatter block at the start of a document.

    Args:
        markdown_text: Full document text

    Returns:
        Mapping of frontmatter keys to stringified values, or None when the
        document has no frontmatter block or the block is not a YAML mapping
    """
    match = _FRONTMATTER_RE.match(markdown_text)
    if match is None:
        return None
    try:
        data: Any = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.warning(f"Invalid frontmatter: {e}")
        return None
    if not isinstance(data, dict):
        return None
    return {str(key): str(value) for key, value in data.items() if value is not None}


def parse_document_links(markdown_text: str) -> List[DocumentLink]:
    """Find the internal links of a document, in document order.

    Wikilinks display their alias, or the target name when there is none.
    Markdown links to ``.md`` files display their link text.
    """
    found: list[tuple[int, DocumentLink]] = []

    for match in _WIKILINK_RE.finditer(markdown_text):
        target: str = match.group(1).strip()
        heading: str = match.group(2) or ""
        alias: str | None = match.group(3)
        if not target:
            # [[#heading]] points into the same document
            continue
        display_text: str = alias.strip() if alias is not None else f"{target}{heading.replace('#', ' > ')}"
        found.append(
            (match.start(), DocumentLink(original_markup=match.group(0), display_text=display_text, link_target=target))
        )

    for match in _MD_LINK_RE.finditer(markdown_text):
        raw_target: str = match.group(2)
        if "://" in raw_target:
            continue
        found.append(
            (
                match.start(),
                DocumentLink(original_markup=match.group(0), display_text=match.group(1), link_target=unquote(raw_target)),
            )
        )

    found.sort(key=lambda item: item[0])
    return [link for _, link in found]


class VaultLinkIndex:
    """Link metadata for the notes of a vault, read from disk on demand.

    Targets resolve first as a path (relative to the linking note, then to the
    vault root) and then by note name anywhere in the vault, the way Obsidian
    resolves shortest-path wikilinks.
    """

    def __init__(self, vault_dir: Path) -> None:
        self._vault_dir = vault_dir.resolve()

    def _note_path(self, document: DocumentHandle) -> Path:
        return self._vault_dir / document

    def get_links(self, document: DocumentHandle) -> list[DocumentLink]:
        note: Path = self._note_path(document)
        if not note.is_file():
            logger.warning(f"Cannot read links of missing document: {document}")
            return []
        return parse_document_links(note.read_text(encoding="utf-8"))

    def resolve(self, link_target: str, source_document: DocumentHandle | None) -> DocumentHandle | None:
        target: str = link_target.split("#", 1)[0].strip()
        if not target:
            return None
        if not target.lower().endswith(MARKDOWN_SUFFIX):
            target = f"{target}{MARKDOWN_SUFFIX}"

        candidates: list[Path] = []
        if source_document is not None:
            candidates.append(self._note_path(source_document).parent / target)
        candidates.append(self._vault_dir / target)
        for candidate in candidates:
            candidate = candidate.resolve()
            if candidate.is_file() and candidate.is_relative_to(self._vault_dir):
                return _relative_handle(self._vault_dir, candidate)

        name: str = PurePosixPath(target).name
        matches: list[Path] = sorted(self._vault_dir.rglob(glob.escape(name)))
        for match in matches:
            if match.is_file():
                return _relative_handle(self._vault_dir, match)

        logger.debug(f"Unresolved link target: {link_target}")
        return None

    def get_frontmatter(self, document: DocumentHandle) -> dict[str, str] | None:
        note: Path = self._note_path(document)
        if not note.is_file():
            return None
        return parse_frontmatter(note.read_text(encoding="utf-8"))


class LogNotifier:
    """Shows notifications as log records; the duration has no meaning here."""

    def notify(self, message: str, duration_ms: int) -> None:
        logger.info(f"[notice] {message}")


class StdoutSink:
    def write_text(self, text: str) -> None:
        typer.echo(text)


class FileSink:
    def __init__(self, output_file: Path) -> None:
        self._output_file = output_file

    def write_text(self, text: str) -> None:
        self._output_file.write_text(text, encoding="utf-8")
        logger.info(f"Wrote published Markdown to: {self._output_file}")
