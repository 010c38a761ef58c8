"""Functions for rewriting vault Markdown for publication.

Both passes replace the exact matched markup literally (regex metacharacters
in it are escaped), so rewritten text is never re-matched within a pass and
already-escaped text is left untouched. Link replacement skips occurrences
that are part of an ``![[embed]]``.
"""

import logging
import re
from typing import Final, List

from pydantic import validate_call

from vault_pub.vault_errors import (
    LinkResolutionError,
    MissingFrontmatterError,
    MissingRedirectFieldError,
    UnresolvableLinkError,
)
from vault_pub.vault_interfaces import LinkMetadataProvider, Notifier
from vault_pub.vault_model import DocumentHandle, DocumentLink, ImageReference, LinkResolution, PublishSettings

logger = logging.getLogger(__name__)

NOTICE_DURATION_MS: Final[int] = 10000


@validate_call
def format_image_markup(reference: ImageReference, settings: PublishSettings) -> str:
    """Format the remote image markup for an uploaded reference.

    Args:
        reference: An uploaded ImageReference
        settings: Publish settings controlling the alt text

    Returns:
        ``![alt](remote_url)``, with an empty alt when ``image_alt_text`` is off
    """
    alt_text: str = ""
    if settings.image_alt_text:
        alt_text = reference.display_name
        if settings.normalize_alt_text:
            alt_text = alt_text.replace("-", " ").replace("_", " ")
    return f"![{alt_text}]({reference.remote_url})"


@validate_call
def replace_image_references(
    markdown_text: str, references: List[ImageReference], settings: PublishSettings
) -> str:
    """Replace local image markup with remote image markup.

    Every occurrence of each uploaded reference's ``original_span`` is replaced.
    References whose upload failed, or never ran, are left as they are.

    Args:
        markdown_text: The original Markdown content
        references: References returned by ``upload_all``
        settings: Publish settings

    Returns:
        Updated Markdown text
    """
    updated_text: str = markdown_text

    for reference in references:
        if not reference.uploaded:
            logger.debug(f"Not replacing {reference.original_span}: {reference.result}")
            continue
        replacement: str = format_image_markup(reference, settings)
        updated_text = updated_text.replace(reference.original_span, replacement)
        logger.info(f"Replaced {reference.original_span} with {replacement}")

    return updated_text


def resolve_link(
    link: DocumentLink,
    source_document: DocumentHandle | None,
    provider: LinkMetadataProvider,
    redirect_field: str,
) -> LinkResolution:
    """Resolve one internal link to the redirect URL of its target document.

    Raises:
        UnresolvableLinkError: If the link target does not resolve to a document
        MissingFrontmatterError: If the target document has no frontmatter
        MissingRedirectFieldError: If the frontmatter has no ``redirect_field`` value
    """
    target: DocumentHandle | None = provider.resolve(link.link_target, source_document)
    if target is None:
        raise UnresolvableLinkError(link.link_target)

    frontmatter: dict[str, str] | None = provider.get_frontmatter(target)
    if frontmatter is None:
        raise MissingFrontmatterError(target)

    redirect_url: str | None = frontmatter.get(redirect_field)
    if not redirect_url:
        raise MissingRedirectFieldError(target, redirect_field)

    return LinkResolution(
        original_markup=link.original_markup,
        display_text=link.display_text,
        target_document=target,
        redirect_url=redirect_url,
    )


def resolve_document_links(
    markdown_text: str,
    source_document: DocumentHandle | None,
    provider: LinkMetadataProvider,
    notifier: Notifier,
    redirect_field: str,
) -> str:
    """Turn the internal links of a document into external links.

    Links whose target cannot supply a redirect URL are replaced with their
    display text and reported through the notifier; they never fail the pass.

    Args:
        markdown_text: Markdown content to rewrite
        source_document: Handle of the document the links belong to, or None
        provider: Link metadata provider
        notifier: Receives one message per stripped link
        redirect_field: Frontmatter key holding the external URL

    Returns:
        Updated Markdown text
    """
    if source_document is None:
        logger.info("No active document, skipping link resolution")
        return markdown_text

    updated_text: str = markdown_text

    for link in provider.get_links(source_document):
        try:
            resolution: LinkResolution = resolve_link(link, source_document, provider, redirect_field)
        except LinkResolutionError as e:
            logger.warning(str(e))
            notifier.notify(str(e), NOTICE_DURATION_MS)
            resolution = LinkResolution(original_markup=link.original_markup, display_text=link.display_text)

        # [[Other]] inside ![[Other]] is an embed, not a link
        replacement: str = resolution.replacement
        updated_text = re.sub(
            rf"(?<!!){re.escape(resolution.original_markup)}", lambda _: replacement, updated_text
        )
        logger.info(f"Replaced {resolution.original_markup} with {resolution.replacement}")

    return updated_text
