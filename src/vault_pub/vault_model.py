"""Core data model for publishing vault Markdown documents.

Defines the image reference record produced by extraction, the tagged upload
results that fill its single result slot, the cross-document link shapes used
by link resolution, the publish settings, and the Action enumeration accepted
by the dispatcher.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

DocumentHandle: TypeAlias = str
"""Vault-relative POSIX path of a Markdown document (e.g. ``"notes/My Note.md"``)."""


class Action(str, Enum):
    """Commands accepted by ``DocumentPublisher.process``.

    Values:
        PUBLISH: Write the rewritten text to the output sink.
        REPLACE: Write the rewritten text back into the source document.
    """

    PUBLISH = "PUBLISH"
    REPLACE = "REPLACE"


class UploadSuccess(BaseModel):
    """An upload that returned a public URL."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    url: str = Field(..., min_length=1, description="Public URL returned by the upload host")


class UploadFailure(BaseModel):
    """An upload that failed; ``reason`` is the human-readable error message."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: str = Field(..., description="Error message reported by the upload transport")


UploadResult: TypeAlias = Annotated[UploadSuccess | UploadFailure, Field(discriminator="kind")]


class ImageReference(BaseModel):
    """Immutable record of one image reference matched in a document.

    Every occurrence of a matching markup produces its own record; identical
    ``original_span`` values are replaced together because identical markup
    points at the same asset.

    The ``result`` slot is written once, by the upload step, through
    ``with_result``. Since the model is frozen this returns a new record.

    Attributes:
        display_name: Alt text of the reference, or the filename stem when the alt text is empty.
        resolved_path: Vault-relative path of the local asset.
        original_span: The exact matched substring, used as the literal replace key.
        result: ``None`` until the upload settles, then an UploadSuccess or UploadFailure.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(..., description="Alt text or filename stem")
    resolved_path: str = Field(..., min_length=1, description="Vault-relative path of the local asset")
    original_span: str = Field(..., min_length=1, description="Exact matched markup")
    result: UploadResult | None = Field(default=None, description="Write-once upload result")

    @property
    def remote_url(self) -> str:
        """The uploaded URL, or an empty string until a successful upload is recorded."""
        if isinstance(self.result, UploadSuccess):
            return self.result.url
        return ""

    @property
    def uploaded(self) -> bool:
        return isinstance(self.result, UploadSuccess)

    def with_result(self, result: UploadSuccess | UploadFailure) -> ImageReference:
        """Return a copy of this reference with the result slot filled.

        Raises:
            ValueError: If the result slot has already been filled.
        """
        if self.result is not None:
            raise ValueError(f"Upload result already recorded for {self.resolved_path}")
        return self.model_copy(update={"result": result})


class DocumentLink(BaseModel):
    """One cross-document link reported by the link metadata provider."""

    model_config = ConfigDict(frozen=True)

    original_markup: str = Field(..., min_length=1, description="Literal link markup, e.g. '[[Note|alias]]'")
    display_text: str = Field(..., description="Text shown for the link")
    link_target: str = Field(..., description="Link target as written, e.g. 'Note#Heading'")


class LinkResolution(BaseModel):
    """Outcome of resolving one DocumentLink against its target document's frontmatter."""

    model_config = ConfigDict(frozen=True)

    original_markup: str = Field(..., min_length=1)
    display_text: str
    target_document: DocumentHandle | None = None
    redirect_url: str | None = None

    @property
    def replacement(self) -> str:
        """External Markdown link when a redirect URL is known, otherwise the plain display text."""
        if self.redirect_url:
            return f"[{self.display_text}]({self.redirect_url})"
        return self.display_text


class PublishSettings(BaseModel):
    """Immutable publish configuration.

    Attributes:
        attachment_location: Vault-relative directory under which image paths are resolved.
        replace_original_doc: Write the rewritten text back into the source document.
        image_alt_text: Keep the display name as alt text; when False the alt text is empty.
        normalize_alt_text: Replace ``-`` and ``_`` with spaces in the alt text.
        redirect_field: Frontmatter key of a linked document holding its external URL.
        drawing_extension: Drawing-format alias whose assets are stored as rendered images, or None.
        drawing_render_extension: Extension appended to drawing-format references.
    """

    model_config = ConfigDict(frozen=True)

    attachment_location: str = ""
    replace_original_doc: bool = False
    image_alt_text: bool = True
    normalize_alt_text: bool = False
    redirect_field: str = Field(default="url", min_length=1)
    drawing_extension: str | None = "excalidraw"
    drawing_render_extension: str = Field(default="png", min_length=1)
