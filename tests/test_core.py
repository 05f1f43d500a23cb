import hashlib
import hmac

import pytest

from portfolio_api.core.allow_list import load_allow_list, owner_overrides, sorted_entries
from portfolio_api.core.exceptions import UpstreamError
from portfolio_api.core.github import check_artifact_metadata, error_message, is_rate_limited
from portfolio_api.core.webhook import touches_artifact, verify_signature


@pytest.mark.parametrize(
    "status,headers,body,expected",
    [
        (403, {}, {"message": "API rate limit exceeded for user ID 1."}, True),
        (403, {"X-RateLimit-Remaining": "0"}, None, True),
        (429, {}, {"message": "API Rate Limit Exceeded"}, True),
        (403, {"X-RateLimit-Remaining": "12"}, {"message": "Forbidden"}, False),
        (500, {"X-RateLimit-Remaining": "0"}, {"message": "rate limit exceeded"}, False),
        (403, {}, ["rate limit exceeded"], False),
    ],
)
def test_is_rate_limited(status, headers, body, expected):
    assert is_rate_limited(status, headers, body) is expected


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"message": "Not Found"}, "Not Found"),
        ({"message": 404}, None),
        ({"documentation_url": "https://docs.github.com"}, None),
        ("Not Found", None),
        (None, None),
    ],
)
def test_error_message(body, expected):
    assert error_message(body) == expected


def test_load_allow_list():
    entries = load_allow_list(
        {
            "projects": {
                "exodrive": {"order": 2, "owner": "gunvir103", "libraries": ["React"]},
                "PersonalWebsite": {"order": 1, "title": "Personal Website", "in_progress": True},
            },
            "software": {
                "CoursePlanner": {"order": 1},
                "exodrive": {"order": 9},
            },
        }
    )
    assert set(entries) == {"exodrive", "PersonalWebsite", "CoursePlanner"}
    assert entries["exodrive"].section == "projects"
    assert entries["exodrive"].order == 2
    assert entries["exodrive"].libraries == ("React",)
    assert entries["PersonalWebsite"].in_progress
    assert owner_overrides(entries) == {
        "exodrive": "gunvir103",
        "PersonalWebsite": None,
        "CoursePlanner": None,
    }


def test_sorted_entries():
    entries = load_allow_list(
        {
            "projects": {"second": {"order": 2}, "first": {"order": 1}},
            "software": {"tool": {"order": 0, "libraries": ["Qt"]}},
        }
    )
    ordered = sorted_entries(entries)
    assert [entry.name for entry in ordered] == ["first", "second", "tool"]
    assert ordered[2].to_dict() == {
        "name": "tool",
        "section": "software",
        "order": 0,
        "owner": None,
        "title": None,
        "description": None,
        "libraries": ["Qt"],
        "inProgress": False,
    }


def test_load_allow_list_from_config():
    assert owner_overrides(load_allow_list()) == {"A": "ownerX", "B": None}


def sign(body: bytes, secret: str) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def test_verify_signature():
    body = b'{"ref": "refs/heads/main"}'
    assert verify_signature(body, sign(body, "s3cret"), secret="s3cret")
    assert not verify_signature(body, sign(body, "other"), secret="s3cret")
    assert not verify_signature(body, None, secret="s3cret")
    # unsigned deliveries are accepted when no secret is configured
    assert verify_signature(body, None, secret="")


@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"ref": "refs/heads/main", "commits": [{"modified": ["resume.pdf"]}]}, True),
        ({"ref": "refs/heads/main", "commits": [{"added": ["resume.pdf"], "modified": None}]}, True),
        ({"ref": "refs/heads/main", "commits": [{"modified": ["README.md"]}]}, False),
        ({"ref": "refs/heads/dev", "commits": [{"modified": ["resume.pdf"]}]}, False),
        ({"ref": "refs/heads/main"}, False),
        ({"ref": "refs/heads/main", "commits": [{"modified": "resume.pdf"}]}, False),
        ({"ref": "refs/heads/main", "commits": [{"added": {"resume.pdf": 1}}]}, False),
        ({"ref": "refs/heads/main", "commits": [{"modified": 3}, {"added": ["resume.pdf"]}]}, True),
        ({"ref": "refs/heads/main", "commits": "resume.pdf"}, False),
        ({"ref": "refs/heads/main", "commits": ["resume.pdf"]}, False),
        ({"zen": "Keep it logically awesome."}, False),
    ],
)
def test_touches_artifact(payload, expected):
    assert touches_artifact(payload) is expected


@pytest.mark.parametrize(
    "body",
    [
        None,
        ["resume.pdf"],
        {"commit": "oops"},
        {"commit": {"committer": ["2024-05-01"]}},
        {"size": "52314"},
        {"size": True},
    ],
)
def test_check_artifact_metadata_rejects(body):
    with pytest.raises(UpstreamError):
        check_artifact_metadata(body)


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"size": None, "commit": None},
        {"size": 12, "commit": {"committer": {"date": "2024-05-01T10:00:00Z"}}},
    ],
)
def test_check_artifact_metadata_accepts(body):
    assert check_artifact_metadata(body) is body
