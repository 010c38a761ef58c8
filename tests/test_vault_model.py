"""Tests for the vault_model module."""

import logging

import pytest
from pydantic import ValidationError

from vault_pub.vault_model import (
    Action,
    ImageReference,
    LinkResolution,
    PublishSettings,
    UploadFailure,
    UploadSuccess,
)

logger = logging.getLogger(__name__)


def _reference() -> ImageReference:
    return ImageReference(display_name="pic", resolved_path="attachments/pic.png", original_span="![[pic.png]]")


class TestImageReference:
    """Tests for the ImageReference model."""

    def test_new_reference_has_no_result(self) -> None:
        """Test that a freshly extracted reference has an empty result slot."""
        reference: ImageReference = _reference()

        assert reference.result is None
        assert reference.remote_url == ""
        assert not reference.uploaded

    def test_with_success_result(self) -> None:
        """Test that a success result exposes the remote URL on a new record."""
        reference: ImageReference = _reference()

        uploaded: ImageReference = reference.with_result(UploadSuccess(url="https://cdn.example/pic.png"))

        assert uploaded.remote_url == "https://cdn.example/pic.png"
        assert uploaded.uploaded
        assert reference.result is None

    def test_with_failure_result(self) -> None:
        """Test that a failure result leaves the remote URL empty."""
        failed: ImageReference = _reference().with_result(UploadFailure(reason="boom"))

        assert failed.remote_url == ""
        assert not failed.uploaded
        assert isinstance(failed.result, UploadFailure)
        assert failed.result.reason == "boom"

    def test_result_is_write_once(self) -> None:
        """Test that a filled result slot cannot be filled again."""
        uploaded: ImageReference = _reference().with_result(UploadSuccess(url="https://cdn.example/pic.png"))

        with pytest.raises(ValueError, match="already recorded"):
            uploaded.with_result(UploadFailure(reason="late"))

    def test_immutability(self) -> None:
        """Test that ImageReference is immutable."""
        reference: ImageReference = _reference()
        with pytest.raises(ValidationError):
            reference.display_name = "changed"  # type: ignore[misc]

    def test_result_is_discriminated_by_kind(self) -> None:
        """Test that the result slot validates from its tagged dict form."""
        reference: ImageReference = ImageReference.model_validate(
            {
                "display_name": "pic",
                "resolved_path": "pic.png",
                "original_span": "![[pic.png]]",
                "result": {"kind": "failure", "reason": "timeout"},
            }
        )

        assert isinstance(reference.result, UploadFailure)

    def test_empty_original_span_raises_validation_error(self) -> None:
        """Test that an empty span is rejected."""
        with pytest.raises(ValidationError):
            ImageReference(display_name="pic", resolved_path="pic.png", original_span="")


class TestLinkResolution:
    """Tests for the LinkResolution model."""

    def test_replacement_with_redirect_url(self) -> None:
        """Test that a redirect URL produces an external Markdown link."""
        resolution: LinkResolution = LinkResolution(
            original_markup="[[Other|see other]]",
            display_text="see other",
            target_document="Other.md",
            redirect_url="https://blog.example/other",
        )

        assert resolution.replacement == "[see other](https://blog.example/other)"

    def test_replacement_without_redirect_url(self) -> None:
        """Test that a missing redirect URL produces plain display text."""
        resolution: LinkResolution = LinkResolution(original_markup="[[Other]]", display_text="Other")

        assert resolution.replacement == "Other"


class TestSettingsAndAction:
    """Tests for PublishSettings and Action."""

    def test_default_settings(self) -> None:
        """Test the default publish settings."""
        settings: PublishSettings = PublishSettings()

        assert settings.attachment_location == ""
        assert settings.replace_original_doc is False
        assert settings.image_alt_text is True
        assert settings.normalize_alt_text is False
        assert settings.redirect_field == "url"
        assert settings.drawing_extension == "excalidraw"

    def test_empty_redirect_field_raises_validation_error(self) -> None:
        """Test that the redirect field must be non-empty."""
        with pytest.raises(ValidationError):
            PublishSettings(redirect_field="")

    def test_action_from_string(self) -> None:
        """Test that actions are looked up by their string value."""
        assert Action("PUBLISH") is Action.PUBLISH
        assert Action("REPLACE") is Action.REPLACE

        with pytest.raises(ValueError):
            Action("UNKNOWN")
