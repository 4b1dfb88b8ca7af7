"""Tests for the GitHub contents HTTP client."""

import base64
import json
from datetime import UTC, datetime

import httpx
import pytest

from geekcal.client.api import GitHubContentsClient, RevisionInfo, parse_github_time
from geekcal.core.config import RemoteConfig
from geekcal.core.errors import (
    ConflictError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    RemoteDataError,
    UnauthorizedError,
)

CONTENTS_URL = "https://api.github.com/repos/alice/cal/contents/calendar.json"
COMMITS_URL = "https://api.github.com/repos/alice/cal/commits"


def make_config(api_url: str = "https://api.github.com") -> RemoteConfig:
    """Create a RemoteConfig for testing."""
    return RemoteConfig(owner="alice", repo="cal", path="calendar.json", token="t0ken", api_url=api_url)


def contents_payload(text: str, sha: str = "blob1") -> dict:
    return {
        "type": "file",
        "path": "calendar.json",
        "sha": sha,
        "encoding": "base64",
        # GitHub wraps base64 content at 60 characters
        "content": "\n".join(
            base64.b64encode(text.encode()).decode()[i : i + 60]
            for i in range(0, len(base64.b64encode(text.encode())), 60)
        ),
    }


def commit_payload(sha: str, date: str, message: str = "Sync") -> dict:
    return {"sha": sha, "commit": {"message": message, "committer": {"date": date}}}


class TestRevisionInfo:
    """Tests for RevisionInfo dataclass."""

    def test_from_dict(self) -> None:
        """Should create RevisionInfo from a commit object."""
        info = RevisionInfo.from_dict(commit_payload("abc123", "2024-03-01T10:00:00Z", "Initial"))

        assert info.revision_id == "abc123"
        assert info.timestamp == datetime(2024, 3, 1, 10, 0, 0, tzinfo=UTC)
        assert info.message == "Initial"

    def test_parse_github_time_is_aware(self) -> None:
        """GitHub timestamps parse as UTC-aware datetimes."""
        assert parse_github_time("2024-01-01T00:00:00Z").tzinfo is not None


class TestFetchCurrent:
    """Tests for fetch_current."""

    def test_returns_content_and_revision(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should decode content and combine blob sha with latest commit."""
        text = json.dumps([{"year": 2024, "month": 0, "day": 1, "text": "a"}], indent=2)
        httpx_mock.add_response(url=CONTENTS_URL, json=contents_payload(text, sha="blob1"))
        httpx_mock.add_response(
            url=f"{COMMITS_URL}?path=calendar.json&per_page=1",
            json=[commit_payload("c1", "2024-05-01T12:00:00Z")],
        )

        with GitHubContentsClient(make_config()) as client:
            remote = client.fetch_current("calendar.json")

        assert remote is not None
        assert remote.content == text
        assert remote.revision.content_hash == "blob1"
        assert remote.revision.revision_id == "c1"
        assert remote.revision.last_change_time == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def test_missing_file_returns_none(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A 404 means the remote file does not exist yet."""
        httpx_mock.add_response(url=CONTENTS_URL, status_code=404, json={"message": "Not Found"})

        with GitHubContentsClient(make_config()) as client:
            assert client.fetch_current("calendar.json") is None

    def test_no_commits_gives_unknown_time(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Without history the revision time and id are unknown."""
        httpx_mock.add_response(url=CONTENTS_URL, json=contents_payload("[]"))
        httpx_mock.add_response(url=f"{COMMITS_URL}?path=calendar.json&per_page=1", json=[])

        with GitHubContentsClient(make_config()) as client:
            remote = client.fetch_current("calendar.json")

        assert remote is not None
        assert remote.revision.last_change_time is None
        assert remote.revision.revision_id is None

    def test_directory_is_rejected(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A directory listing is not a calendar file."""
        httpx_mock.add_response(url=CONTENTS_URL, json=[{"type": "file", "name": "x"}])

        with GitHubContentsClient(make_config()) as client, pytest.raises(RemoteDataError):
            client.fetch_current("calendar.json")

    def test_large_file_is_rejected(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Files over 1 MB come back without content and are reported as too large."""
        payload = {**contents_payload("[]"), "encoding": "none", "content": ""}
        httpx_mock.add_response(url=CONTENTS_URL, json=payload)

        with GitHubContentsClient(make_config()) as client, pytest.raises(RemoteDataError, match="too large"):
            client.fetch_current("calendar.json")

    def test_sends_bearer_token(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Requests carry the configured token."""
        httpx_mock.add_response(url=CONTENTS_URL, status_code=404, json={"message": "Not Found"})

        with GitHubContentsClient(make_config()) as client:
            client.fetch_current("calendar.json")

        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == "Bearer t0ken"


class TestFetchHistory:
    """Tests for fetch_history and fetch_at_revision."""

    def test_history_most_recent_first(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should keep GitHub's most-recent-first ordering."""
        httpx_mock.add_response(
            url=f"{COMMITS_URL}?path=calendar.json&per_page=3",
            json=[
                commit_payload("c3", "2024-01-03T00:00:00Z", "third"),
                commit_payload("c2", "2024-01-02T00:00:00Z", "second"),
                commit_payload("c1", "2024-01-01T00:00:00Z", "first"),
            ],
        )

        with GitHubContentsClient(make_config()) as client:
            history = client.fetch_history("calendar.json", limit=3)

        assert [r.revision_id for r in history] == ["c3", "c2", "c1"]
        assert history[0].message == "third"

    def test_fetch_at_revision(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should request the content at the given ref."""
        httpx_mock.add_response(url=f"{CONTENTS_URL}?ref=c2", json=contents_payload("[]"))

        with GitHubContentsClient(make_config()) as client:
            assert client.fetch_at_revision("calendar.json", "c2") == "[]"

    def test_fetch_at_revision_not_a_file(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should fail when the revision points at something other than a file."""
        httpx_mock.add_response(
            url=f"{CONTENTS_URL}?ref=c2",
            json={"type": "submodule", "sha": "x", "path": "calendar.json"},
        )

        with GitHubContentsClient(make_config()) as client, pytest.raises(RemoteDataError):
            client.fetch_at_revision("calendar.json", "c2")


class TestUpdateContent:
    """Tests for update_content."""

    def test_create_without_sha(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Creating a file sends no sha."""
        httpx_mock.add_response(
            method="PUT", url=CONTENTS_URL, status_code=201, json={"commit": {"sha": "new1"}}
        )

        with GitHubContentsClient(make_config()) as client:
            revision = client.update_content("calendar.json", "[]", "Initial calendar data")

        assert revision == "new1"
        body = json.loads(httpx_mock.get_request().content)
        assert "sha" not in body
        assert body["message"] == "Initial calendar data"
        assert base64.b64decode(body["content"]).decode() == "[]"

    def test_update_with_expected_hash(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Updating sends the expected blob sha."""
        httpx_mock.add_response(method="PUT", url=CONTENTS_URL, json={"commit": {"sha": "new2"}})

        with GitHubContentsClient(make_config()) as client:
            client.update_content("calendar.json", "[]", "msg", expected_hash="blob1")

        body = json.loads(httpx_mock.get_request().content)
        assert body["sha"] == "blob1"

    def test_stale_hash_raises_conflict(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """409 is an optimistic-concurrency conflict."""
        httpx_mock.add_response(
            method="PUT",
            url=CONTENTS_URL,
            status_code=409,
            json={"message": "calendar.json does not match blob1"},
        )

        with GitHubContentsClient(make_config()) as client, pytest.raises(ConflictError):
            client.update_content("calendar.json", "[]", "msg", expected_hash="blob1")

    def test_missing_sha_raises_conflict(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """422 about a missing sha means the file appeared meanwhile."""
        httpx_mock.add_response(
            method="PUT",
            url=CONTENTS_URL,
            status_code=422,
            json={"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'},
        )

        with GitHubContentsClient(make_config()) as client, pytest.raises(ConflictError):
            client.update_content("calendar.json", "[]", "msg")


class TestErrorMapping:
    """Tests for HTTP status classification."""

    def test_unauthorized(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """401 raises UnauthorizedError."""
        httpx_mock.add_response(url=CONTENTS_URL, status_code=401, json={"message": "Bad credentials"})

        with GitHubContentsClient(make_config()) as client, pytest.raises(UnauthorizedError):
            client.fetch_current("calendar.json")

    def test_forbidden(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """403 raises ForbiddenError."""
        httpx_mock.add_response(
            url=CONTENTS_URL, status_code=403, json={"message": "Resource not accessible"}
        )

        with GitHubContentsClient(make_config()) as client, pytest.raises(ForbiddenError) as exc:
            client.fetch_current("calendar.json")
        assert "Access denied" in str(exc.value)

    def test_rate_limited(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A 403 with an exhausted rate limit names the rate limit."""
        httpx_mock.add_response(
            url=CONTENTS_URL,
            status_code=403,
            headers={"x-ratelimit-remaining": "0"},
            json={"message": "API rate limit exceeded"},
        )

        with GitHubContentsClient(make_config()) as client, pytest.raises(ForbiddenError) as exc:
            client.fetch_current("calendar.json")
        assert "rate limit" in str(exc.value)

    def test_server_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """5xx is a plain network error."""
        httpx_mock.add_response(url=CONTENTS_URL, status_code=502, text="Bad Gateway")

        with GitHubContentsClient(make_config()) as client, pytest.raises(NetworkError) as exc:
            client.fetch_current("calendar.json")
        assert exc.value.status_code == 502
        assert not isinstance(exc.value, NotFoundError)

    def test_timeout(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Transport timeouts are network errors."""
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"), url=CONTENTS_URL)

        with GitHubContentsClient(make_config()) as client, pytest.raises(NetworkError):
            client.fetch_current("calendar.json")

    def test_api_url_trailing_slash(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should handle trailing slash in the API URL."""
        httpx_mock.add_response(url=CONTENTS_URL, status_code=404, json={"message": "Not Found"})

        with GitHubContentsClient(make_config("https://api.github.com/")) as client:
            assert client.fetch_current("calendar.json") is None
