"""Publishing of vault Markdown documents.

``DocumentPublisher`` runs the whole pipeline for one document: extract image
references, upload them, rewrite the text, resolve internal links, and then
perform the requested action. ``publish_md_file`` wires it up for a vault on
disk.
"""

import asyncio
import logging
from pathlib import Path
from typing import Final, List

from pydantic import validate_call

from vault_pub.vault_errors import InvalidActionError
from vault_pub.vault_extract import find_image_references
from vault_pub.vault_fs import FileDocumentSource, FileSink, FileStorage, LogNotifier, StdoutSink, VaultLinkIndex
from vault_pub.vault_interfaces import DocumentSource, LinkMetadataProvider, Notifier, Storage, TextSink, Uploader
from vault_pub.vault_model import Action, DocumentHandle, ImageReference, PublishSettings
from vault_pub.vault_rewrite import replace_image_references, resolve_document_links
from vault_pub.vault_upload import HttpImageUploader, UploadEndpoint, upload_all

logger = logging.getLogger(__name__)

SUCCESS_NOTICE_DURATION_MS: Final[int] = 5000


def _parse_action(action: Action | str) -> Action:
    try:
        return Action(action)
    except ValueError:
        raise InvalidActionError(action) from None


class DocumentPublisher:
    """Publishes the document of a DocumentSource.

    All host services are injected; the publisher keeps no state between
    ``process`` calls.
    """

    def __init__(
        self,
        settings: PublishSettings,
        source: DocumentSource,
        storage: Storage,
        uploader: Uploader,
        links: LinkMetadataProvider,
        notifier: Notifier,
        sink: TextSink,
    ) -> None:
        self._settings = settings
        self._source = source
        self._storage = storage
        self._uploader = uploader
        self._links = links
        self._notifier = notifier
        self._sink = sink

    @property
    def settings(self) -> PublishSettings:
        return self._settings

    async def process(self, action: Action | str) -> str:
        """Rewrite the current document and perform ``action``.

        The source document is written at most once, after every upload has
        settled: when ``replace_original_doc`` is set, or for ``Action.REPLACE``.

        Args:
            action: An Action or its string value

        Returns:
            The rewritten Markdown text

        Raises:
            InvalidActionError: If ``action`` is not a known Action. Nothing is
                uploaded and the document is left untouched.
        """
        requested: Action = _parse_action(action)
        logger.info(f"Processing action {requested.value}")

        text: str = self._source.get_current_text()
        document: DocumentHandle | None = self._source.get_active_document()

        references: List[ImageReference] = find_image_references(text, self._settings)
        if references:
            references = await upload_all(references, self._storage, self._uploader, self._notifier)
        else:
            logger.info("No local image references found")

        text = replace_image_references(text, references, self._settings)
        text = resolve_document_links(text, document, self._links, self._notifier, self._settings.redirect_field)

        if self._settings.replace_original_doc or requested is Action.REPLACE:
            self._source.set_text(text)

        if requested is Action.PUBLISH:
            self._sink.write_text(text)
            self._notifier.notify("Copied published Markdown to output", SUCCESS_NOTICE_DURATION_MS)
        elif requested is Action.REPLACE:
            self._notifier.notify("Replaced local images in document", SUCCESS_NOTICE_DURATION_MS)

        return text


@validate_call
def publish_md_file(
    markdown_file: Path,
    vault_dir: Path,
    settings: PublishSettings,
    endpoint: UploadEndpoint,
    action: str = Action.PUBLISH.value,
    output_file: Path | None = None,
) -> str:
    """Publish a Markdown file from a vault on disk.

    Images are uploaded to ``endpoint``; the published text goes to
    ``output_file`` when given, otherwise to standard output.

    Args:
        markdown_file: Path to the Markdown file, inside ``vault_dir``
        vault_dir: Root directory of the vault
        settings: Publish settings
        endpoint: Upload endpoint for images
        action: Action value to perform, e.g. "PUBLISH"
        output_file: Optional file receiving the published text

    Returns:
        The rewritten Markdown text

    Raises:
        ValidationError: If any parameter is None or invalid
        FileNotFoundError: If the markdown file doesn't exist
        InvalidActionError: If the action is unknown
    """
    if not markdown_file.exists():
        raise FileNotFoundError(f"Markdown file not found: {markdown_file}")

    logger.info(f"Processing Markdown file: {markdown_file}")

    sink: TextSink = FileSink(output_file) if output_file is not None else StdoutSink()
    publisher = DocumentPublisher(
        settings=settings,
        source=FileDocumentSource(vault_dir, markdown_file),
        storage=FileStorage(vault_dir),
        uploader=HttpImageUploader(endpoint),
        links=VaultLinkIndex(vault_dir),
        notifier=LogNotifier(),
        sink=sink,
    )
    return asyncio.run(publisher.process(action))
