"""Asset upload for vault image references.

``upload_all`` checks, reads and uploads every referenced image concurrently;
``HttpImageUploader`` is the default upload transport, posting images to an
HTTP endpoint that answers with the public URL in a JSON body.
"""

import asyncio
import logging
from pathlib import PurePosixPath
from typing import Any, Final, List, cast

import requests
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from vault_pub.vault_errors import MissingAssetError, UploadError
from vault_pub.vault_interfaces import Notifier, Storage, Uploader
from vault_pub.vault_model import ImageReference, UploadFailure, UploadSuccess

logger = logging.getLogger(__name__)

NOTICE_DURATION_MS: Final[int] = 10000


class UploadEndpoint(BaseModel):
    """Immutable description of an image upload endpoint.

    Pydantic ensures that ``upload_url`` is a valid http(s) URL.
    Once created, instances cannot be modified (frozen).
    """

    model_config = ConfigDict(frozen=True)

    upload_url: HttpUrl
    api_bearer_token: str | None = None
    file_field: str = Field(default="file", min_length=1, description="Multipart form field carrying the image")
    url_field: str = Field(default="url", min_length=1, description="JSON response field carrying the public URL")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    def __str__(self) -> str:
        """Return the upload URL string."""
        return str(self.upload_url)


class HttpImageUploader:
    """Uploader that POSTs images as multipart form data.

    ``requests`` is synchronous, so each request runs in a worker thread via
    ``asyncio.to_thread`` and uploads can overlap on the event loop.
    """

    def __init__(self, endpoint: UploadEndpoint) -> None:
        self._endpoint = endpoint

    @property
    def endpoint(self) -> UploadEndpoint:
        return self._endpoint

    def _request_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._endpoint.api_bearer_token:
            headers["Authorization"] = f"Bearer {self._endpoint.api_bearer_token}"
        return headers

    def url_from_response_json(self, response_json: Any) -> str:
        """Extract the public URL from a decoded JSON response.

        Raises:
            UploadError: If the response has no non-empty URL field.
        """
        if not isinstance(response_json, dict):
            raise UploadError(f"Unexpected upload response: {response_json!r}")
        payload: dict[str, Any] = cast(dict[str, Any], response_json)
        url: Any = payload.get(self._endpoint.url_field)
        if not isinstance(url, str) or not url:
            raise UploadError(f"Upload response has no '{self._endpoint.url_field}' field: {payload!r}")
        return url

    def upload_sync(self, contents: bytes, file_name: str, original_path: str) -> str:
        """Upload one image and return its public URL.

        Raises:
            requests.exceptions.ConnectionError: If unable to connect to the endpoint
            requests.exceptions.HTTPError: If the endpoint returns a non-200 status
            UploadError: If the response does not carry a URL
        """
        logger.debug(f"endpoint: {self._endpoint}, file_name: {file_name}, original_path: {original_path}")

        response: requests.Response = requests.post(
            str(self._endpoint),
            files={self._endpoint.file_field: (file_name, contents)},
            headers=self._request_headers(),
            timeout=self._endpoint.timeout,
        )

        if response.status_code == 200:
            url: str = self.url_from_response_json(response.json())
            logger.info(f"Uploaded {original_path} -> {url}")
            return url
        else:
            error_msg: str = f"Upload failed. Status Code: {response.status_code}, Response: {response.text}"
            logger.error(error_msg)
            raise requests.exceptions.HTTPError(error_msg)

    async def upload(self, contents: bytes, file_name: str, original_path: str) -> str:
        return await asyncio.to_thread(self.upload_sync, contents, file_name, original_path)


async def _upload_one(
    reference: ImageReference, storage: Storage, uploader: Uploader, notifier: Notifier
) -> ImageReference:
    """Read and upload one asset; every outcome, including an exception, becomes a tagged result."""
    file_name: str = PurePosixPath(reference.resolved_path).name
    try:
        contents: bytes = await storage.read_binary(reference.resolved_path)
        url: str = await uploader.upload(contents, file_name, reference.resolved_path)
    except Exception as e:
        logger.error(f"Failed to upload {reference.resolved_path}: {e}")
        notifier.notify(
            f"Upload {reference.resolved_path} failed, remote server returned an error: {e}", NOTICE_DURATION_MS
        )
        return reference.with_result(UploadFailure(reason=str(e)))
    return reference.with_result(UploadSuccess(url=url))


async def upload_all(
    references: List[ImageReference],
    storage: Storage,
    uploader: Uploader,
    notifier: Notifier,
) -> List[ImageReference]:
    """Upload every referenced image concurrently.

    References are checked in order and each read-and-upload is started as its
    own task without waiting for earlier ones. The first reference whose asset
    is missing stops scheduling: the user is notified, no later reference is
    uploaded, and the uploads already started are still awaited.

    Args:
        references: Image references as returned by ``find_image_references``
        storage: Storage used for existence checks and reads
        uploader: Upload transport
        notifier: Receives missing-asset and upload-failure messages

    Returns:
        The scheduled references, in order, each with its result slot filled
    """
    tasks: List[asyncio.Task[ImageReference]] = []

    try:
        for reference in references:
            if not await storage.exists(reference.resolved_path):
                missing = MissingAssetError(reference.display_name, reference.resolved_path)
                logger.warning(f"{missing} (remaining {len(references) - len(tasks) - 1} references not uploaded)")
                notifier.notify(str(missing), NOTICE_DURATION_MS)
                break

            tasks.append(asyncio.create_task(_upload_one(reference, storage, uploader, notifier)))
    finally:
        # started uploads are always awaited, even when the storage check itself raises
        settled: List[ImageReference] = await asyncio.gather(*tasks)

    results: List[ImageReference] = list(settled)
    uploaded: int = sum(1 for reference in results if reference.uploaded)
    logger.info(f"Uploaded {uploaded} of {len(references)} images")
    return results
