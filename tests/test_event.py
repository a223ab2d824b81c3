import pytest

from pipeline_doctor.event import EventType, NormalizedEvent, Platform


def test_github_platform_id():
    event = NormalizedEvent(Platform.GITHUB, "42", "7", EventType.JOB_FAILED, None)
    assert event.platform_id == "github#42"


def test_gitlab_platform_id():
    event = NormalizedEvent(Platform.GITLAB, "99", None, EventType.JOB_STARTED)
    assert event.platform_id == "gitlab#99"


def test_defaults():
    event = NormalizedEvent(Platform.GITHUB, "1", None, EventType.UNKNOWN)
    assert event.metadata == {}
    assert event.logs_uri is None
    assert event.raw_event_type is None
    assert event.trigger_source is None
    assert event.job_id is None


def test_metadata_not_shared_between_events():
    first = NormalizedEvent(Platform.GITHUB, "1", None, EventType.UNKNOWN)
    second = NormalizedEvent(Platform.GITHUB, "2", None, EventType.UNKNOWN)
    first.metadata["repository"] = "owner/repo"
    assert second.metadata == {}


def test_fields_kept():
    event = NormalizedEvent(
        Platform.GITLAB, "5", "11", EventType.JOB_SUCCEEDED, "https://example.com/logs"
    )
    assert event.platform is Platform.GITLAB
    assert event.pipeline_id == "5"
    assert event.job_id == "11"
    assert event.event_type is EventType.JOB_SUCCEEDED
    assert event.logs_uri == "https://example.com/logs"


@pytest.mark.parametrize("event_type", list(EventType))
def test_every_event_type_is_kept(event_type):
    event = NormalizedEvent(Platform.GITHUB, "3", None, event_type)
    assert event.event_type is event_type
    assert event.platform_id == "github#3"