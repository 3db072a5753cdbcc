"""
Factory for wiring a video job client with its collaborators.
"""
import logging
from typing import Optional

import httpx

from core.config import Config, get_config
from core.storage import KeyValueStore
from services.auth import CredentialStore
from services.notifications import Notifier

from .client import VideoJobClient
from .job_tracker import JobTracker

logger = logging.getLogger(__name__)


def create_video_client(
    config: Optional[Config] = None,
    store: Optional[KeyValueStore] = None,
    notifier: Optional[Notifier] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> VideoJobClient:
    """
    Build a client sharing one storage backend between credentials and tracker.

    Any collaborator passed in is used as-is; the rest come from config.
    """
    config = config or get_config()
    for issue in config.validate():
        logger.warning(f"Configuration issue: {issue}")

    store = store or KeyValueStore(config.storage.path or None)
    notifier = notifier or Notifier(
        info_delay_seconds=config.notifications.info_delay_seconds,
        error_delay_seconds=config.notifications.error_delay_seconds,
    )

    return VideoJobClient(
        credentials=CredentialStore(store, key=config.storage.token_key),
        notifier=notifier,
        tracker=JobTracker(
            store,
            key=config.storage.videos_key,
            poll_interval_seconds=config.polling.interval_seconds,
            notifier=notifier,
        ),
        config=config,
        transport=transport,
    )
