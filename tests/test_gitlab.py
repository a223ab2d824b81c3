import json

import pytest

from pipeline_doctor.errors import BadRequest, Unauthorized
from pipeline_doctor.event import EventType, Platform
from pipeline_doctor.gitlab import parse_gitlab_payload, verify_token


def _payload(**attribute_overrides):
    attributes = {
        "id": "501",
        "pipeline_id": "77",
        "status": "failed",
        "name": "unit-tests",
        "stage": "test",
    }
    attributes.update(attribute_overrides)
    return {
        "object_attributes": attributes,
        "project": {
            "web_url": "https://git.example.com/group/app",
            "path_with_namespace": "group/app",
        },
        "commit": {"id": "deadbeef"},
    }


def _encode(data) -> bytes:
    return json.dumps(data).encode()


def test_matching_token_accepted_and_other_rejected():
    assert verify_token("token", "token") is None
    with pytest.raises(Unauthorized):
        verify_token("placeholder", "token")


def test_empty_token_is_rejected():
    with pytest.raises(Unauthorized):
        verify_token("", "token")


def test_non_ascii_token_is_rejected_without_error():
    with pytest.raises(Unauthorized):
        verify_token("tökén", "token")


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        ("pending", EventType.JOB_STARTED),
        ("running", EventType.JOB_STARTED),
        ("success", EventType.JOB_SUCCEEDED),
        ("failed", EventType.JOB_FAILED),
        ("canceled", EventType.JOB_FAILED),
        ("manual", EventType.JOB_FAILED),
    ],
)
def test_status_mapping(status, expected):
    event = parse_gitlab_payload(_encode(_payload(status=status)))
    assert event.event_type is expected


def test_parsed_fields():
    data = _payload()
    event = parse_gitlab_payload(_encode(data))
    attributes = data["object_attributes"]
    assert event.platform is Platform.GITLAB
    assert event.pipeline_id == attributes["pipeline_id"]
    assert event.job_id == attributes["id"]
    assert event.platform_id == "gitlab#" + attributes["pipeline_id"]
    assert event.logs_uri == data["project"]["web_url"] + "/-/jobs/" + attributes["id"]
    assert event.metadata == {
        "project": "group/app",
        "commit_sha": "deadbeef",
        "job_name": "unit-tests",
        "stage": "test",
    }


def test_numeric_id_is_rejected():
    with pytest.raises(BadRequest) as info:
        parse_gitlab_payload(_encode(_payload(id=501)))
    assert str(info.value).startswith("Bad request: Invalid GitLab payload:")


def test_missing_commit_is_rejected():
    data = _payload()
    del data["commit"]
    with pytest.raises(BadRequest) as info:
        parse_gitlab_payload(_encode(data))
    assert "commit" in str(info.value)


def test_missing_stage_is_rejected():
    data = _payload()
    del data["object_attributes"]["stage"]
    with pytest.raises(BadRequest):
        parse_gitlab_payload(_encode(data))


def test_malformed_json_is_rejected():
    with pytest.raises(BadRequest):
        parse_gitlab_payload(b"not json at all")


def test_non_object_json_is_rejected():
    with pytest.raises(BadRequest):
        parse_gitlab_payload(b'"a string"')


def test_unknown_fields_are_ignored():
    data = _payload()
    data["object_kind"] = "build"
    data["project"]["id"] = 12
    event = parse_gitlab_payload(_encode(data))
    assert event.metadata["project"] == "group/app"