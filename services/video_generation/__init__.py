"""
Video Generation Service

Client for the /v1/videos API plus local tracking of in-flight jobs:
- VideoJobClient: create, remix, list, fetch, download, delete
- JobTracker: persisted in-flight ids and periodic status reconciliation
- create_video_client: wires both to storage, credentials and notifier
"""

from .client import (
    VideoJobClient,
    VideoJob,
    VideoJobPage,
    VideoError,
    VideoAPIError,
    VideoModel,
    VideoResolution,
    SortOrder,
    JobStatus,
    estimate_cost,
)
from .job_tracker import JobTracker
from .factory import create_video_client

__all__ = [
    "VideoJobClient",
    "VideoJob",
    "VideoJobPage",
    "VideoError",
    "VideoAPIError",
    "VideoModel",
    "VideoResolution",
    "SortOrder",
    "JobStatus",
    "estimate_cost",
    "JobTracker",
    "create_video_client",
]
