"""
Local State Tests - storage, credentials, notifications, configuration.

Run with:
    python -m pytest tests/test_local_state.py -v
"""

import json
import logging
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import Config, get_config, reload_config
from core.logging import configure_logging
from core.storage import KeyValueStore
from services.auth import CredentialStore
from services.notifications import Notifier, NotificationToast


class TestKeyValueStore:
    """Test the JSON-file backed store."""

    def test_memory_only(self):
        store = KeyValueStore()
        assert store.get("missing") is None

        store.set("k", "v")
        store.set("k", "v2")
        assert store.get("k") == "v2"

        store.remove("k")
        assert store.get("k") is None

    def test_persists_to_disk(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"

        KeyValueStore(str(path)).set("generated_videos", '["v1"]')

        assert json.loads(path.read_text()) == {"generated_videos": '["v1"]'}
        assert KeyValueStore(str(path)).get("generated_videos") == '["v1"]'

    def test_malformed_file_is_treated_as_empty(self, tmp_path, caplog):
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            store = KeyValueStore(str(path))
            assert store.get("anything") is None

        assert "unreadable storage file" in caplog.text

        store.set("k", "v")
        assert KeyValueStore(str(path)).get("k") == "v"

    def test_non_object_file_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]")

        assert KeyValueStore(str(path)).get("0") is None


class TestCredentialStore:
    """Test bearer token storage."""

    def test_unset_token(self):
        assert CredentialStore(KeyValueStore()).get() is None

    def test_round_trip(self):
        credentials = CredentialStore(KeyValueStore())
        credentials.set("sk-first")
        credentials.set("sk-second")
        assert credentials.get() == "sk-second"

    def test_uses_named_key(self):
        store = KeyValueStore()
        CredentialStore(store).set("sk-test")
        assert store.get("openAI_bearer_token") == "sk-test"

    def test_auth_headers(self):
        credentials = CredentialStore(KeyValueStore())
        credentials.set("sk-test")
        assert credentials.auth_headers() == {"Authorization": "Bearer sk-test"}


class TestNotifier:
    """Test toast collection."""

    def test_info_and_error_delays(self):
        notifier = Notifier()
        notifier.info("Started")
        notifier.error("Broken")

        info, error = notifier.toasts
        assert (info.text, info.delay_seconds, info.error) == ("Started", 7.0, False)
        assert (error.text, error.delay_seconds, error.error) == ("Broken", 10.0, True)

    def test_remove_only_that_toast(self):
        notifier = Notifier()
        notifier.info("same")
        notifier.info("same")
        first, second = notifier.toasts

        notifier.remove(first)

        assert notifier.toasts == [second]

    def test_active_drops_expired(self):
        notifier = Notifier(info_delay_seconds=1.0, error_delay_seconds=5.0)
        notifier.info("short")
        notifier.error("long")
        created = notifier.toasts[0].created_at

        assert len(notifier.active(now=created)) == 2
        assert [t.text for t in notifier.active(now=created + 2)] == ["long"]

    def test_expired_toasts_are_not_retained(self):
        notifier = Notifier(info_delay_seconds=1.0, error_delay_seconds=1.0)
        for i in range(1000):
            notifier.error(f"Failed to fetch video {i}")
        far_future = notifier.toasts[-1].created_at + 3600

        assert notifier.active(now=far_future) == []
        assert notifier.toasts == []

    def test_push_drops_expired(self):
        notifier = Notifier(info_delay_seconds=0.0)
        notifier.info("gone")
        notifier.info("also gone")

        # Zero delay expires immediately, so only the newest is kept
        assert [t.text for t in notifier.toasts] == ["also gone"]

    def test_subscribers_receive_toasts(self):
        notifier = Notifier()
        seen: list[NotificationToast] = []
        notifier.subscribe(seen.append)

        notifier.error("Broken")

        assert [t.text for t in seen] == ["Broken"]

    def test_failing_subscriber_does_not_propagate(self):
        notifier = Notifier()

        def broken(toast):
            raise RuntimeError("ui gone")

        notifier.subscribe(broken)
        notifier.info("still delivered")

        assert notifier.toasts[0].text == "still delivered"

    def test_notifications_are_logged(self, caplog):
        with caplog.at_level(logging.INFO):
            Notifier().error("Failed to delete video.")
        assert "Failed to delete video." in caplog.text


class TestConfig:
    """Test environment-driven configuration."""

    def teardown_method(self):
        reload_config()

    def test_defaults(self, monkeypatch):
        for name in ("VIDEO_API_BASE", "VIDEO_API_TIMEOUT", "VIDEO_POLL_INTERVAL"):
            monkeypatch.delenv(name, raising=False)

        config = Config()

        assert config.api.api_base == "https://api.openai.com/v1"
        assert config.api.request_timeout is None
        assert config.polling.interval_seconds == 15.0
        assert config.storage.token_key == "openAI_bearer_token"
        assert config.storage.videos_key == "generated_videos"
        assert config.validate() == []

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("VIDEO_API_BASE", "http://localhost:8080/v1")
        monkeypatch.setenv("VIDEO_API_TIMEOUT", "30")
        monkeypatch.setenv("VIDEO_POLL_INTERVAL", "5")
        monkeypatch.setenv("VIDEO_CLIENT_STORAGE_PATH", "/tmp/video-client.json")

        reload_config()
        config = get_config()

        assert config.api.api_base == "http://localhost:8080/v1"
        assert config.api.request_timeout == 30.0
        assert config.polling.interval_seconds == 5.0
        assert config.storage.path == "/tmp/video-client.json"

    def test_validate_reports_issues(self, monkeypatch):
        monkeypatch.setenv("VIDEO_API_BASE", "ftp://example.com")
        monkeypatch.setenv("VIDEO_POLL_INTERVAL", "0")

        issues = Config().validate()

        assert len(issues) == 2

    def test_get_config_is_cached(self):
        assert get_config() is get_config()


def test_configure_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        configure_logging(logging.DEBUG)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
