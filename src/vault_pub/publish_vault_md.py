#!/usr/bin/env python3
"""Script to publish vault Markdown files with remotely hosted images.

Uploads locally referenced images, replaces their references with the remote
URLs, and turns internal note links into external links.

Example:
    publish-vault-md -m notes/post.md -v ~/vault -u https://img.example/upload -t your-token -a attachments
"""

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from vault_pub.vault_model import Action, PublishSettings
from vault_pub.vault_publish import publish_md_file
from vault_pub.vault_upload import UploadEndpoint

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)8s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = typer.Typer()


def validate_markdown_file(markdown_file: Path) -> None:
    """Validate that the markdown file exists and is readable.

    Args:
        markdown_file: Path to the markdown file to validate

    Raises:
        typer.Exit: If validation fails (file doesn't exist, isn't a file, or isn't readable UTF-8 text)
    """
    if not markdown_file.exists():
        logger.error(f"Markdown file not found: {markdown_file}")
        raise typer.Exit(code=1)

    if not markdown_file.is_file():
        logger.error(f"Path is not a file: {markdown_file}")
        raise typer.Exit(code=1)

    try:
        markdown_file.read_text(encoding="utf-8")
    except PermissionError:
        logger.error(f"Permission denied reading file: {markdown_file}")
        raise typer.Exit(code=1)
    except UnicodeDecodeError as e:
        logger.error(f"Markdown file is not valid UTF-8: {markdown_file} ({e.reason} at byte {e.start})")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"Cannot read file {markdown_file}: {e}")
        raise typer.Exit(code=1)


def validate_vault_dir(vault_dir: Path, markdown_file: Path) -> None:
    """Validate that the vault is a directory containing the markdown file.

    Args:
        vault_dir: Root directory of the vault
        markdown_file: Path to the markdown file being published

    Raises:
        typer.Exit: If the vault doesn't exist, isn't a directory, or doesn't contain the file
    """
    if not vault_dir.exists():
        logger.error(f"Vault directory not found: {vault_dir}")
        raise typer.Exit(code=1)

    if not vault_dir.is_dir():
        logger.error(f"Vault path is not a directory: {vault_dir}")
        raise typer.Exit(code=1)

    if not markdown_file.resolve().is_relative_to(vault_dir.resolve()):
        logger.error(f"Markdown file {markdown_file} is not inside the vault {vault_dir}")
        raise typer.Exit(code=1)


@app.command()
def main(
    markdown_file: Annotated[Path, typer.Option("--markdown-file", "-m", help="Path to the Markdown file to publish")],
    vault_dir: Annotated[Path, typer.Option("--vault", "-v", envvar="VAULT_PUB_VAULT", help="Root directory of the vault")],
    upload_url: Annotated[
        str,
        typer.Option(
            "--upload-url",
            "-u",
            envvar="VAULT_PUB_UPLOAD_URL",
            help="Endpoint that accepts multipart image uploads and answers with JSON",
        ),
    ],
    api_bearer_token: Annotated[
        str | None,
        typer.Option(
            "--token",
            "-t",
            envvar="VAULT_PUB_TOKEN",
            help="Bearer token for the upload endpoint",
        ),
    ] = None,
    attachment_location: Annotated[
        str,
        typer.Option(
            "--attachments",
            "-a",
            envvar="VAULT_PUB_ATTACHMENTS",
            help="Vault-relative directory holding image attachments",
        ),
    ] = "",
    replace_original_doc: Annotated[
        bool,
        typer.Option("--replace/--no-replace", help="Write the rewritten text back into the Markdown file"),
    ] = False,
    image_alt_text: Annotated[
        bool,
        typer.Option("--alt-text/--no-alt-text", help="Keep image names as alt text"),
    ] = True,
    normalize_alt_text: Annotated[
        bool,
        typer.Option("--normalize-alt", help="Replace '-' and '_' with spaces in alt text"),
    ] = False,
    redirect_field: Annotated[
        str,
        typer.Option(
            "--redirect-field",
            envvar="VAULT_PUB_REDIRECT_FIELD",
            help="Frontmatter field of linked notes holding their published URL",
        ),
    ] = "url",
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the published Markdown here instead of standard output"),
    ] = None,
    action: Annotated[
        str,
        typer.Option("--action", help="PUBLISH writes to the output, REPLACE rewrites the Markdown file"),
    ] = Action.PUBLISH.value,
) -> None:
    """Publish a vault Markdown file with remotely hosted images.

    Uploads every local image the file references, replaces the references
    with the remote URLs, and replaces internal note links with the URL found
    in the linked note's frontmatter.
    """
    validate_markdown_file(markdown_file)
    validate_vault_dir(vault_dir, markdown_file)

    try:
        settings = PublishSettings(
            attachment_location=attachment_location,
            replace_original_doc=replace_original_doc,
            image_alt_text=image_alt_text,
            normalize_alt_text=normalize_alt_text,
            redirect_field=redirect_field,
        )
        endpoint = UploadEndpoint(upload_url=upload_url, api_bearer_token=api_bearer_token)
        publish_md_file(markdown_file, vault_dir, settings, endpoint, action, output_file)
    except Exception as e:
        logger.error(f"Error processing file: {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
