"""Exceptions raised while publishing a vault document.

Asset- and link-level errors are caught by the publisher, reported through the
notifier, and degrade the output. ``InvalidActionError`` is fatal.
"""


class VaultPublishError(Exception):
    """Base class for all vault publishing errors."""


class MissingAssetError(VaultPublishError):
    """A referenced image does not exist in storage."""

    def __init__(self, display_name: str, path: str) -> None:
        self.display_name = display_name
        self.path = path
        super().__init__(
            f"Cannot locate {display_name} at {path}, check the image path or the attachment location setting"
        )


class UploadError(VaultPublishError):
    """The upload host did not return a usable URL."""


class LinkResolutionError(VaultPublishError):
    """An internal link could not be turned into an external link."""

    def __init__(self, link_target: str, message: str) -> None:
        self.link_target = link_target
        super().__init__(message)


class UnresolvableLinkError(LinkResolutionError):
    def __init__(self, link_target: str) -> None:
        super().__init__(link_target, f"Cannot resolve link target {link_target}, link replaced with plain text")


class MissingFrontmatterError(LinkResolutionError):
    def __init__(self, link_target: str) -> None:
        super().__init__(link_target, f"{link_target} has no frontmatter, link replaced with plain text")


class MissingRedirectFieldError(LinkResolutionError):
    def __init__(self, link_target: str, field: str) -> None:
        self.field = field
        super().__init__(
            link_target, f"{link_target} has no '{field}' field in its frontmatter, link replaced with plain text"
        )


class InvalidActionError(VaultPublishError, ValueError):
    """The dispatcher was asked to perform an unknown action."""

    def __init__(self, action: object) -> None:
        self.action = action
        super().__init__(f"invalid action: {action!r}")
