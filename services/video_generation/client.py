"""
Video Job Client

Async client for the /v1/videos generation API:
- Create and remix generation jobs
- List, fetch and delete jobs
- Download rendered video content

Failures are never raised to the caller. Each operation returns a safe
default (None, [] or False), passes it to the optional completion callback,
and reports the error through the notifier.
"""

import logging
import uuid
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict

from core.config import get_config
from services.auth import CredentialStore
from services.notifications import Notifier

if TYPE_CHECKING:
    from .job_tracker import JobTracker

logger = logging.getLogger(__name__)


class VideoAPIError(Exception):
    """Raised internally when the video API rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class VideoModel(str, Enum):
    """Available video generation models."""
    SORA_2 = "sora-2"            # Fast tier
    SORA_2_PRO = "sora-2-pro"


class VideoResolution(str, Enum):
    """Output sizes accepted by the API (width x height)."""
    PORTRAIT_720P = "720x1280"
    LANDSCAPE_720P = "1280x720"
    PORTRAIT_1080P = "1024x1792"
    LANDSCAPE_1080P = "1792x1024"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class JobStatus(str, Enum):
    """Lifecycle status of a video job."""
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = {JobStatus.COMPLETED.value, JobStatus.FAILED.value}


class VideoError(BaseModel):
    """Error payload explaining why generation failed."""
    code: Optional[str] = None
    message: Optional[str] = None


class VideoJob(BaseModel):
    """
    A video job as returned by the API.

    Records are only ever replaced whole with the latest server response.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    object: Optional[str] = None
    model: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[float] = None
    seconds: Optional[str] = None
    size: Optional[str] = None
    created_at: Optional[int] = None
    completed_at: Optional[int] = None
    expires_at: Optional[int] = None
    error: Optional[VideoError] = None
    remixed_from_video_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        """True once the job will make no further progress."""
        return (
            (self.progress or 0) >= 100
            or self.error is not None
            or self.status in TERMINAL_STATUSES
        )


class VideoJobPage(BaseModel):
    """List envelope for GET /videos."""
    data: list[VideoJob] = []
    has_more: bool = False
    first_id: Optional[str] = None
    last_id: Optional[str] = None


# USD per second of generated video
FAST_TIER_COST = 0.1
STANDARD_720P_COST = 0.3
STANDARD_HD_COST = 0.5

_720P_RESOLUTIONS = (VideoResolution.PORTRAIT_720P, VideoResolution.LANDSCAPE_720P)


def estimate_cost(
    duration_seconds: float,
    resolution: Union[VideoResolution, str],
    model: Union[VideoModel, str],
) -> float:
    """
    Estimate generation cost in USD.

    The fast model is billed flat per second; the pro model is billed by
    resolution, with the two 720p sizes cheaper than everything else.
    """
    if model == VideoModel.SORA_2:
        return FAST_TIER_COST * duration_seconds
    if resolution in _720P_RESOLUTIONS:
        return STANDARD_720P_COST * duration_seconds
    return STANDARD_HD_COST * duration_seconds


def _api_error(exc: httpx.HTTPStatusError) -> VideoAPIError:
    """Convert an HTTP error status, preferring the API's own error message."""
    try:
        body = exc.response.json()
    except ValueError:
        body = None

    message = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
    return VideoAPIError(message or str(exc), status_code=exc.response.status_code)


def _complete(completion: Optional[Callable[[Any], None]], value: Any):
    if completion is None:
        return
    try:
        completion(value)
    except Exception as e:
        logger.warning(f"Completion callback failed: {e}")


class VideoJobClient:
    """
    Client for the video generation API.

    Usage:
        client = VideoJobClient(credentials, notifier, tracker)

        job = await client.create_job(
            prompt="A golden retriever running through a field",
            model=VideoModel.SORA_2_PRO,
            resolution=VideoResolution.LANDSCAPE_1080P,
        )

        # Reconcile in-flight jobs every 15s
        await client.start_status_refresh()
        ...
        await client.aclose()
    """

    def __init__(
        self,
        credentials: CredentialStore,
        notifier: Notifier,
        tracker: "JobTracker",
        config: Optional[Any] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the video job client.

        Args:
            credentials: Source of the bearer token
            notifier: Sink for user-visible outcomes
            tracker: In-flight job state updated on create/remix
            config: Optional config override
            transport: Optional httpx transport (tests inject a mock)
        """
        self.config = config or get_config()
        self.credentials = credentials
        self.notifier = notifier
        self.tracker = tracker
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def api_base(self) -> str:
        return self.config.api.api_base.rstrip("/")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.api.request_timeout,
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self):
        """Stop the status refresh and close the HTTP client."""
        await self.stop_status_refresh()
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "VideoJobClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    def _headers(self, json_body: bool = True) -> dict[str, str]:
        headers = self.credentials.auth_headers()
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(self, method: str, path: str, json_body: bool = True, **kwargs) -> httpx.Response:
        client = await self._get_client()
        headers = kwargs.pop("headers", None) or self._headers(json_body)
        response = await client.request(method, f"{self.api_base}{path}", headers=headers, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise _api_error(e) from e
        return response

    def _report_failure(self, action: str, exc: Exception):
        message = str(exc) or type(exc).__name__
        logger.error(f"Failed to {action}: {type(exc).__name__}: {message}")
        self.notifier.error(f"Failed to {action}. Please try again. Error details: {message}")

    def estimate_cost(
        self,
        duration_seconds: float,
        resolution: Union[VideoResolution, str],
        model: Union[VideoModel, str],
    ) -> float:
        """Estimate generation cost in USD."""
        return estimate_cost(duration_seconds, resolution, model)

    async def create_job(
        self,
        prompt: str,
        model: Union[VideoModel, str] = VideoModel.SORA_2,
        image_ref: Optional[Union[str, bytes]] = None,
        duration: int = 4,
        resolution: Union[VideoResolution, str] = VideoResolution.PORTRAIT_720P,
    ) -> Optional[VideoJob]:
        """
        Start a video generation job.

        Args:
            prompt: Text description of the video to generate
            model: Generation model
            image_ref: First-frame reference; bytes are uploaded as a file
            duration: Clip length in seconds
            resolution: Output size

        Returns:
            The created job, or None if the request failed
        """
        fields = {
            "prompt": prompt,
            "model": _value(model),
            "seconds": str(duration),
            "size": _value(resolution),
        }

        try:
            if isinstance(image_ref, bytes):
                response = await self._request(
                    "POST",
                    "/videos",
                    headers=self._headers(json_body=False),
                    data=fields,
                    files={"input_reference": ("input_reference", image_ref)},
                )
            else:
                body = dict(fields)
                if image_ref is not None:
                    body["input_reference"] = image_ref
                response = await self._request("POST", "/videos", json=body)
            job = VideoJob.model_validate(response.json())
        except (httpx.HTTPError, VideoAPIError, ValueError) as e:
            self._report_failure("generate video", e)
            return None

        logger.info(f"Video job created: {job.id} (model={job.model}, status={job.status})")
        if job.id:
            self.tracker.track(job)
            self.notifier.info("Video generation started. This may take a few minutes.")
        return job

    async def remix_job(self, job_id: str, prompt: str) -> Optional[VideoJob]:
        """
        Start a remix of an existing job.

        Args:
            job_id: Source job to remix
            prompt: Description of the change to apply

        Returns:
            The new remix job, or None if the request failed
        """
        try:
            response = await self._request("POST", f"/videos/{job_id}/remix", json={"prompt": prompt})
            job = VideoJob.model_validate(response.json())
        except (httpx.HTTPError, VideoAPIError, ValueError) as e:
            self._report_failure("remix video", e)
            return None

        logger.info(f"Remix job created: {job.id} from {job_id}")
        if job.id:
            self.tracker.track(job)
            self.notifier.info("Video remix started. This may take a few minutes.")
        return job

    async def list_jobs(
        self,
        completion: Optional[Callable[[list[VideoJob]], None]] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
        order: Optional[Union[SortOrder, str]] = None,
    ) -> list[VideoJob]:
        """
        List jobs, newest first unless an order is given.

        Args:
            completion: Called with the jobs, or [] on failure
            after: Pagination cursor (id of the last job seen)
            limit: Page size
            order: Sort order by creation time

        Returns:
            The jobs on this page, or [] on failure
        """
        params = {}
        if after:
            params["after"] = after
        if limit:
            params["limit"] = str(limit)
        if order:
            params["order"] = _value(order)

        try:
            response = await self._request("GET", "/videos", params=params)
            jobs = VideoJobPage.model_validate(response.json()).data
        except (httpx.HTTPError, VideoAPIError, ValueError) as e:
            _complete(completion, [])
            self._report_failure("list videos", e)
            return []

        _complete(completion, jobs)
        return jobs

    async def delete_job(self, job_id: str) -> bool:
        """
        Delete a job and its content.

        Returns:
            True if the API confirmed the deletion
        """
        try:
            await self._request("DELETE", f"/videos/{job_id}")
        except (httpx.HTTPError, VideoAPIError, ValueError) as e:
            self._report_failure("delete video", e)
            return False

        self.tracker.forget(job_id)
        self.notifier.info("Video deleted successfully.")
        return True

    async def fetch_binary_content(
        self,
        job_id: str,
        completion: Optional[Callable[[Optional[bytes]], None]] = None,
    ) -> Optional[bytes]:
        """
        Fetch the rendered video bytes.

        Returns:
            The raw content, or None on failure
        """
        try:
            response = await self._request("GET", f"/videos/{job_id}/content", json_body=False)
        except (httpx.HTTPError, VideoAPIError, ValueError) as e:
            _complete(completion, None)
            self._report_failure("get video data", e)
            return None

        content = response.content
        _complete(completion, content)
        return content

    async def fetch_job(
        self,
        job_id: str,
        completion: Optional[Callable[[Optional[VideoJob]], None]] = None,
    ) -> Optional[VideoJob]:
        """
        Fetch the current state of a single job.

        Returns:
            The job, or None on failure
        """
        try:
            response = await self._request("GET", f"/videos/{job_id}")
            job = VideoJob.model_validate(response.json())
        except (httpx.HTTPError, VideoAPIError, ValueError) as e:
            _complete(completion, None)
            self._report_failure("fetch video", e)
            return None

        _complete(completion, job)
        return job

    async def download_content(
        self,
        job_id: str,
        output_dir: str = "output",
        filename: Optional[str] = None,
    ) -> Optional[str]:
        """
        Download a job's video to local storage.

        Args:
            job_id: Completed job to download
            output_dir: Directory to write into (created if missing)
            filename: Custom filename (defaults to <job_id>.mp4)

        Returns:
            Local path to the downloaded file, or None if failed
        """
        content = await self.fetch_binary_content(job_id)
        if content is None:
            return None

        base_dir = Path(output_dir)
        output_path = base_dir / (filename or f"{job_id or uuid.uuid4().hex[:8]}.mp4")
        try:
            base_dir.mkdir(parents=True, exist_ok=True)
            with open(output_path, "wb") as f:
                f.write(content)
        except OSError as e:
            self._report_failure("save video", e)
            return None

        logger.info(f"Video downloaded: {output_path} ({len(content) / 1024 / 1024:.1f} MB)")
        return str(output_path)

    async def start_status_refresh(self):
        """Begin periodic reconciliation of in-flight jobs."""
        await self.tracker.start(self.fetch_job)

    async def stop_status_refresh(self):
        await self.tracker.stop()


def _value(member: Union[Enum, str]) -> str:
    return member.value if isinstance(member, Enum) else member

