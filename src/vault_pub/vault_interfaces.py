"""Collaborator contracts consumed by the publisher.

The publisher never reaches into global state; every host service is passed in
at construction time as one of these protocols. File-system implementations
live in ``vault_pub.vault_fs`` and the HTTP uploader in ``vault_pub.vault_upload``.
"""

from typing import Protocol, runtime_checkable

from vault_pub.vault_model import DocumentHandle, DocumentLink


@runtime_checkable
class DocumentSource(Protocol):
    """The document being published."""

    def get_current_text(self) -> str: ...

    def set_text(self, text: str) -> None:
        """Overwrite the document text. Does nothing when there is no active document."""
        ...

    def get_active_document(self) -> DocumentHandle | None: ...


@runtime_checkable
class Storage(Protocol):
    async def exists(self, path: str) -> bool: ...

    async def read_binary(self, path: str) -> bytes: ...


@runtime_checkable
class Uploader(Protocol):
    async def upload(self, contents: bytes, file_name: str, original_path: str) -> str:
        """Upload ``contents`` and return its public URL.

        Raises:
            Exception: Any error; its message is shown to the user.
        """
        ...


@runtime_checkable
class LinkMetadataProvider(Protocol):
    def get_links(self, document: DocumentHandle) -> list[DocumentLink]:
        """Return the cross-document links of ``document`` in document order."""
        ...

    def resolve(self, link_target: str, source_document: DocumentHandle | None) -> DocumentHandle | None: ...

    def get_frontmatter(self, document: DocumentHandle) -> dict[str, str] | None: ...


@runtime_checkable
class Notifier(Protocol):
    def notify(self, message: str, duration_ms: int) -> None: ...


@runtime_checkable
class TextSink(Protocol):
    def write_text(self, text: str) -> None: ...
