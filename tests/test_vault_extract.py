import logging
from typing import List

import pytest
from pydantic import ValidationError

from vault_pub.vault_extract import find_image_references, resolve_asset_path
from vault_pub.vault_model import ImageReference, PublishSettings

logger = logging.getLogger(__name__)

SETTINGS: PublishSettings = PublishSettings(attachment_location="attachments")


class TestFindDoubleBracketReferences:
    """Tests for ![[name.ext]] references."""

    def test_finds_single_reference(self) -> None:
        """Test finding one double-bracket image."""
        references: List[ImageReference] = find_image_references("Intro\n![[pic.png]]\n", SETTINGS)

        assert len(references) == 1
        assert references[0].display_name == "pic"
        assert references[0].resolved_path == "attachments/pic.png"
        assert references[0].original_span == "![[pic.png]]"
        assert references[0].result is None
        assert references[0].remote_url == ""

    def test_duplicates_produce_one_record_each(self) -> None:
        """Test that repeated markup is not deduplicated."""
        references: List[ImageReference] = find_image_references("![[pic.png]] and ![[pic.png]]", SETTINGS)

        assert len(references) == 2
        assert references[0] == references[1]

    def test_all_image_extensions(self) -> None:
        """Test png, jpg, jpeg, gif and svg are matched, case-insensitively."""
        markdown_text: str = "![[a.png]] ![[b.jpg]] ![[c.jpeg]] ![[d.gif]] ![[e.svg]] ![[F.PNG]]"

        references: List[ImageReference] = find_image_references(markdown_text, SETTINGS)

        assert [reference.display_name for reference in references] == ["a", "b", "c", "d", "e", "F"]

    def test_ignores_non_image_embeds(self) -> None:
        """Test that note embeds and other files are ignored."""
        markdown_text: str = "![[Other Note]] ![[report.pdf]] [[link.png]]"

        assert find_image_references(markdown_text, SETTINGS) == []

    def test_drawing_alias_resolves_to_rendered_image(self) -> None:
        """Test that a drawing reference points at its rendered png export."""
        references: List[ImageReference] = find_image_references("![[sketch.excalidraw]]", SETTINGS)

        assert len(references) == 1
        assert references[0].display_name == "sketch"
        assert references[0].resolved_path == "attachments/sketch.excalidraw.png"
        assert references[0].original_span == "![[sketch.excalidraw]]"

    def test_drawing_alias_can_be_disabled(self) -> None:
        """Test that without a drawing alias drawing references are not images."""
        settings: PublishSettings = PublishSettings(drawing_extension=None)

        assert find_image_references("![[sketch.excalidraw]]", settings) == []


class TestFindBracketLinkReferences:
    """Tests for ![alt](path.ext) references."""

    def test_keeps_alt_text(self) -> None:
        """Test that alt text becomes the display name."""
        references: List[ImageReference] = find_image_references("![A flower](img/flower.jpg)", SETTINGS)

        assert len(references) == 1
        assert references[0].display_name == "A flower"
        assert references[0].resolved_path == "attachments/img/flower.jpg"
        assert references[0].original_span == "![A flower](img/flower.jpg)"

    def test_empty_alt_uses_decoded_file_stem(self) -> None:
        """Test that the display name is derived from the percent-decoded path."""
        references: List[ImageReference] = find_image_references("![](img/my%20pic.png)", PublishSettings())

        assert references[0].display_name == "my pic"
        assert references[0].resolved_path == "img/my pic.png"
        assert references[0].original_span == "![](img/my%20pic.png)"

    def test_skips_remote_images(self) -> None:
        """Test that http and https images are not local references."""
        markdown_text: str = """
        ![remote](https://example.com/image.png)
        ![insecure](http://example.com/image.gif)
        ![local](local.png)
        """

        references: List[ImageReference] = find_image_references(markdown_text, SETTINGS)

        assert len(references) == 1
        assert references[0].display_name == "local"

    def test_two_images_on_one_line(self) -> None:
        """Test that two images on the same line are two references."""
        references: List[ImageReference] = find_image_references("![a](a.png) and ![b](b.jpg)", SETTINGS)

        assert [reference.original_span for reference in references] == ["![a](a.png)", "![b](b.jpg)"]

    def test_parentheses_in_path(self) -> None:
        """Test that a path containing parentheses is captured whole."""
        references: List[ImageReference] = find_image_references("Shot: ![](Screenshot (1).png) done", SETTINGS)

        assert len(references) == 1
        assert references[0].original_span == "![](Screenshot (1).png)"
        assert references[0].display_name == "Screenshot (1)"
        assert references[0].resolved_path.endswith("Screenshot (1).png")

    def test_parentheses_in_path_next_to_another_image(self) -> None:
        """Test that a parenthesised path does not swallow a following image on the same line."""
        markdown_text: str = "![](a (1).png) ![b](b.png)"

        references: List[ImageReference] = find_image_references(markdown_text, SETTINGS)

        assert [reference.original_span for reference in references] == ["![](a (1).png)", "![b](b.png)"]

    def test_ignores_plain_links(self) -> None:
        """Test that non-image links are not references."""
        markdown_text: str = "[a link](pic.png) ![doc](file.pdf)"

        assert find_image_references(markdown_text, SETTINGS) == []


class TestFindImageReferences:
    """Tests covering both syntaxes together."""

    def test_double_bracket_references_come_first(self) -> None:
        """Test that double-bracket matches are listed before bracket links."""
        markdown_text: str = "![first](first.png)\n![[second.png]]"

        references: List[ImageReference] = find_image_references(markdown_text, SETTINGS)

        assert [reference.display_name for reference in references] == ["second", "first"]

    def test_empty_markdown_returns_empty_list(self) -> None:
        """Test that empty markdown returns empty list."""
        assert find_image_references("", SETTINGS) == []

    def test_markdown_without_images_returns_empty_list(self) -> None:
        """Test that markdown without images returns empty list."""
        assert find_image_references("# Heading\n\nSome text without any images.", SETTINGS) == []

    def test_none_markdown_raises_validation_error(self) -> None:
        """Test that None text raises ValidationError."""
        with pytest.raises(ValidationError):
            find_image_references(None, SETTINGS)  # type: ignore[arg-type]


class TestResolveAssetPath:
    """Tests for resolve_asset_path."""

    def test_joins_attachment_location(self) -> None:
        """Test joining the attachment location with the name."""
        assert resolve_asset_path("pic.png", SETTINGS) == "attachments/pic.png"

    def test_empty_attachment_location(self) -> None:
        """Test that an empty attachment location leaves the name unchanged."""
        assert resolve_asset_path("pic.png", PublishSettings()) == "pic.png"

    def test_custom_render_extension(self) -> None:
        """Test that the drawing render extension is configurable."""
        settings: PublishSettings = PublishSettings(drawing_render_extension="svg")

        assert resolve_asset_path("sketch.excalidraw", settings) == "sketch.excalidraw.svg"
