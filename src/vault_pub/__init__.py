"""vault-pub - Publish vault Markdown with remotely hosted images and external links."""

from vault_pub.vault_errors import (
    InvalidActionError,
    MissingAssetError,
    MissingFrontmatterError,
    MissingRedirectFieldError,
    UnresolvableLinkError,
    UploadError,
    VaultPublishError,
)
from vault_pub.vault_extract import find_image_references, resolve_asset_path
from vault_pub.vault_model import (
    Action,
    DocumentLink,
    ImageReference,
    LinkResolution,
    PublishSettings,
    UploadFailure,
    UploadSuccess,
)
from vault_pub.vault_publish import DocumentPublisher, publish_md_file
from vault_pub.vault_rewrite import (
    format_image_markup,
    replace_image_references,
    resolve_document_links,
    resolve_link,
)
from vault_pub.vault_upload import HttpImageUploader, UploadEndpoint, upload_all

__all__ = [
    "Action",
    "DocumentLink",
    "DocumentPublisher",
    "HttpImageUploader",
    "ImageReference",
    "InvalidActionError",
    "LinkResolution",
    "MissingAssetError",
    "MissingFrontmatterError",
    "MissingRedirectFieldError",
    "PublishSettings",
    "UnresolvableLinkError",
    "UploadEndpoint",
    "UploadError",
    "UploadFailure",
    "UploadSuccess",
    "VaultPublishError",
    "find_image_references",
    "format_image_markup",
    "publish_md_file",
    "replace_image_references",
    "resolve_asset_path",
    "resolve_document_links",
    "resolve_link",
    "upload_all",
]
