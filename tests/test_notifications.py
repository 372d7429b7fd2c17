from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest
import requests

from watchlink.config import NotificationSettings
from watchlink.errors import NotificationError
from watchlink.models import Match, MediaKind, PublishFailure, PublishResult
from watchlink.notifications import (
    NOTHING_TO_PROCESS,
    SYMLINKS_CREATED,
    GenericWebhookTarget,
    NotificationEvent,
    NotificationService,
    NotificationTarget,
    SlackTarget,
    build_event,
    build_summary_message,
)


class FakeResponse:
    def __init__(self, status_code: int, payload: Dict[str, Any] | None = None):
        self.status_code = status_code
        self.text = json.dumps(payload) if payload is not None else ""


class FailingTarget(NotificationTarget):
    name = "failing"

    def send(self, event: NotificationEvent) -> None:
        raise NotificationError("target unavailable")


class RecordingTarget(NotificationTarget):
    name = "recording"

    def __init__(self) -> None:
        self.messages: List[str] = []

    def send(self, event: NotificationEvent) -> None:
        self.messages.append(event.message)


def _failure(external_id: str, reason: str, destination: str = "") -> PublishFailure:
    match = Match(kind=MediaKind.MOVIE, external_id=external_id, source_path="/movies/X", destination_leaf_name="X")
    return PublishFailure(match=match, reason=reason, stage="symlink", destination=destination)


class TestSummaryMessage:
    def test_nothing_to_process_sentinel(self) -> None:
        assert build_summary_message(PublishResult()) == NOTHING_TO_PROCESS

    def test_created_destinations_are_listed_verbatim(self) -> None:
        result = PublishResult(created=["/out/Alpha (2020)", "/out/Delta"])

        message = build_summary_message(result)

        assert message == f"{SYMLINKS_CREATED} \n/out/Alpha (2020)\n/out/Delta\n"

    def test_failures_are_appended(self) -> None:
        result = PublishResult(created=["/out/Alpha"], failures=[_failure("tt2", "source does not exist", "/out/Beta")])

        message = build_summary_message(result)

        assert message.startswith(SYMLINKS_CREATED)
        assert "Failures:\n/out/Beta: source does not exist" in message

    def test_only_failures(self) -> None:
        result = PublishResult(failures=[_failure("tt2", "boom")])

        message = build_summary_message(result)

        assert message.startswith("Watchlink complete, no symlinks created")
        assert "tt2: boom" in message

    def test_dry_run_prefix(self) -> None:
        assert build_summary_message(PublishResult(), dry_run=True) == f"[Dry-Run] {NOTHING_TO_PROCESS}"

    def test_build_event(self) -> None:
        result = PublishResult(created=["/out/Alpha"], failures=[_failure("tt2", "boom")])

        event = build_event(result)

        assert event.created == ["/out/Alpha"]
        assert event.failures == ["boom"]
        assert event.event_type == "error"
        assert build_event(PublishResult()).event_type == "empty"


def test_slack_target_posts_text(monkeypatch) -> None:
    calls: List[Dict[str, Any]] = []

    def fake_post(url: str, json: Dict[str, Any], timeout: float) -> FakeResponse:
        calls.append({"url": url, "json": json, "timeout": timeout})
        return FakeResponse(200)

    monkeypatch.setattr("watchlink.notifications.slack.requests.post", fake_post)

    SlackTarget("https://hooks.slack.test/abc", timeout=3).send(NotificationEvent(message="hello"))

    assert calls == [{"url": "https://hooks.slack.test/abc", "json": {"text": "hello"}, "timeout": 3}]


def test_slack_target_raises_on_error_status(monkeypatch) -> None:
    monkeypatch.setattr(
        "watchlink.notifications.slack.requests.post",
        lambda *args, **kwargs: FakeResponse(500, {"error": "nope"}),
    )

    with pytest.raises(NotificationError, match="500"):
        SlackTarget("https://hooks.slack.test/abc").send(NotificationEvent(message="hello"))


def test_slack_target_raises_on_connection_error(monkeypatch) -> None:
    def fake_post(*args: Any, **kwargs: Any) -> FakeResponse:
        raise requests.ConnectionError("refused")

    monkeypatch.setattr("watchlink.notifications.slack.requests.post", fake_post)

    with pytest.raises(NotificationError, match="refused"):
        SlackTarget("https://hooks.slack.test/abc").send(NotificationEvent(message="hello"))


def test_webhook_target_posts_flattened_event(monkeypatch) -> None:
    captured: Dict[str, Any] = {}

    def fake_request(method: str, url: str, json: Dict[str, Any], headers: Any, timeout: float) -> FakeResponse:
        captured.update(method=method, url=url, json=json, headers=headers)
        return FakeResponse(204)

    monkeypatch.setattr("watchlink.notifications.webhook.requests.request", fake_request)

    target = GenericWebhookTarget("https://hooks.test/run", method="put", headers={"X-Token": "abc"})
    target.send(NotificationEvent(message="done", created=["/out/Alpha"]))

    assert captured["method"] == "PUT"
    assert captured["headers"] == {"X-Token": "abc"}
    assert captured["json"]["message"] == "done"
    assert captured["json"]["created"] == ["/out/Alpha"]
    assert captured["json"]["event_type"] == "new"


def test_service_builds_targets_from_settings() -> None:
    settings = NotificationSettings(slack_webhook_url="https://hooks.slack.test/abc", webhook_url="https://hooks.test")

    service = NotificationService(settings)

    assert service.enabled is True
    assert service.target_names == ["slack", "webhook"]


def test_service_without_targets_is_disabled() -> None:
    service = NotificationService(NotificationSettings())

    assert service.enabled is False
    assert service.notify(NotificationEvent(message="hello")) is False


def test_service_disabled_flag_skips_targets() -> None:
    target = RecordingTarget()
    service = NotificationService(NotificationSettings(), enabled=False, targets=[target])

    assert service.notify(NotificationEvent(message="hello")) is False
    assert target.messages == []


def test_failing_target_does_not_stop_others(caplog) -> None:
    recording = RecordingTarget()
    service = NotificationService(NotificationSettings(), targets=[FailingTarget(), recording])

    assert service.notify(NotificationEvent(message="hello")) is True
    assert recording.messages == ["hello"]
    assert "target unavailable" in caplog.text


def test_all_targets_failing_returns_false() -> None:
    service = NotificationService(NotificationSettings(), targets=[FailingTarget()])

    assert service.notify(NotificationEvent(message="hello")) is False
