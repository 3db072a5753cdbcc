"""
Video Job Client Services

- auth: bearer token storage
- notifications: user-visible info/error toasts
- video_generation: /v1/videos API client and in-flight job tracking
"""

from .video_generation import (
    VideoJobClient,
    JobTracker,
    create_video_client,
)

__all__ = [
    "VideoJobClient",
    "JobTracker",
    "create_video_client",
]
