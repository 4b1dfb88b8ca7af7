"""HTTP client for the GitHub contents API.

This module provides:
- GitHubContentsClient: Read, list history of, and update one file in a repository
- RemoteRevision: Concurrency token and history position of the remote file
- RemoteFile: Current remote content with its revision
- RevisionInfo: One entry of the remote file history

Only three remote operations are consumed: get-content-at-path (optionally
at a revision), list-commits-for-path, and create-or-update-content with
an optional expected blob SHA.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from geekcal.core.config import RemoteConfig
from geekcal.core.errors import (
    ConflictError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    RemoteDataError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


def parse_github_time(value: str) -> datetime:
    """Parse a GitHub ISO 8601 timestamp (``2024-01-01T10:00:00Z``)."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class RemoteRevision:
    """Version signals of the remote file.

    The two signals are independent and must stay separate: the content
    hash authorizes updates, the revision id and time place the file in
    history.

    Attributes:
        content_hash: Blob SHA required to update the file.
        last_change_time: Committer date of the latest commit touching the file.
        revision_id: SHA of the latest commit touching the file.
    """

    content_hash: str
    last_change_time: datetime | None
    revision_id: str | None


@dataclass(frozen=True)
class RemoteFile:
    """Remote file content and its revision."""

    content: str
    revision: RemoteRevision


@dataclass(frozen=True)
class RevisionInfo:
    """A commit in the history of the remote file."""

    revision_id: str
    timestamp: datetime
    message: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RevisionInfo:
        """Create from a GitHub commit object."""
        commit = data["commit"]
        return cls(
            revision_id=data["sha"],
            timestamp=parse_github_time(commit["committer"]["date"]),
            message=commit.get("message", ""),
        )


class GitHubContentsClient:
    """HTTP client for one repository on the GitHub REST API."""

    def __init__(self, config: RemoteConfig) -> None:
        """Initialize the client.

        Args:
            config: Remote configuration with owner, repo and token.
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.api_url,
            timeout=config.timeout,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    @property
    def config(self) -> RemoteConfig:
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> GitHubContentsClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _repo_url(self, suffix: str) -> str:
        return f"/repos/{self._config.owner}/{self._config.repo}/{suffix}"

    def _contents_url(self, path: str) -> str:
        return self._repo_url(f"contents/{quote(path.strip('/'))}")

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport failures to NetworkError."""
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e
        return self._handle_response(response)

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        try:
            return str(response.json().get("message", default))
        except (ValueError, AttributeError):
            return default

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        status = response.status_code
        if status == 401:
            raise UnauthorizedError("Invalid or expired GitHub token", 401)
        if status in (403, 429):
            message = self._error_message(response, "Forbidden")
            if status == 429 or response.headers.get("x-ratelimit-remaining") == "0" or (
                "rate limit" in message.lower()
            ):
                raise ForbiddenError(f"GitHub rate limit exceeded: {message}", status)
            raise ForbiddenError(f"Access denied: {message}", status)
        if status == 404:
            raise NotFoundError(self._error_message(response, "Not Found"), 404)
        if status == 409:
            raise ConflictError(self._error_message(response, "Conflict"), 409)
        if status == 422:
            message = self._error_message(response, "Unprocessable Entity")
            # GitHub answers 422 when a sha is required but was not supplied
            if "sha" in message.lower():
                raise ConflictError(message, 422)
            raise NetworkError(message, 422)
        if status >= 400:
            raise NetworkError(
                f"GitHub API error {status}: {self._error_message(response, response.reason_phrase)}",
                status,
            )
        return response

    @staticmethod
    def _decode_file(data: Any, path: str) -> tuple[str, str]:
        """Extract (content, blob sha) from a contents API payload."""
        if not isinstance(data, dict) or data.get("type") != "file":
            raise RemoteDataError(f"{path} does not reference a plain file")
        if data.get("encoding") != "base64":
            # Files over 1 MB come back with encoding "none" and empty content
            raise RemoteDataError(f"{path} is too large for the GitHub contents API (limit 1 MB)")
        try:
            raw = base64.b64decode(data.get("content") or "")
            return raw.decode("utf-8"), data["sha"]
        except (binascii.Error, UnicodeDecodeError, KeyError) as e:
            raise RemoteDataError(f"Cannot decode remote content of {path}: {e}") from e

    # === Read operations ===

    def fetch_current(self, path: str) -> RemoteFile | None:
        """Fetch the current content and revision of a file.

        Args:
            path: File path in the repository.

        Returns:
            RemoteFile, or None if the path does not exist.
        """
        try:
            response = self._request("GET", self._contents_url(path))
        except NotFoundError:
            logger.debug(f"Remote file {path} does not exist")
            return None
        content, content_hash = self._decode_file(response.json(), path)

        history = self.fetch_history(path, limit=1)
        latest = history[0] if history else None
        return RemoteFile(
            content=content,
            revision=RemoteRevision(
                content_hash=content_hash,
                last_change_time=latest.timestamp if latest else None,
                revision_id=latest.revision_id if latest else None,
            ),
        )

    def fetch_history(self, path: str, limit: int = 10) -> list[RevisionInfo]:
        """List commits touching a file, most recent first.

        Args:
            path: File path in the repository.
            limit: Maximum number of revisions (GitHub caps a page at 100).

        Returns:
            List of revisions, empty if the file has no history.
        """
        try:
            response = self._request(
                "GET",
                self._repo_url("commits"),
                params={"path": path, "per_page": str(max(1, min(limit, 100)))},
            )
        except NotFoundError:
            return []
        return [RevisionInfo.from_dict(c) for c in response.json()[:limit]]

    def fetch_at_revision(self, path: str, revision_id: str) -> str:
        """Fetch file content as of a historical revision.

        Raises:
            RemoteDataError: If the revision does not reference a plain file.
            NotFoundError: If the path or revision does not exist.
        """
        response = self._request(
            "GET",
            self._contents_url(path),
            params={"ref": revision_id},
        )
        content, _ = self._decode_file(response.json(), path)
        return content

    # === Write operations ===

    def update_content(
        self,
        path: str,
        content: str,
        message: str,
        expected_hash: str | None = None,
    ) -> str:
        """Create or update a file.

        Args:
            path: File path in the repository.
            content: New file content.
            message: Commit message.
            expected_hash: Blob SHA the file must currently have. Omit to
                create a file that does not exist yet.

        Returns:
            SHA of the new commit.

        Raises:
            ConflictError: If expected_hash is stale or missing.
        """
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if expected_hash is not None:
            body["sha"] = expected_hash

        response = self._request("PUT", self._contents_url(path), json=body)
        commit_sha: str = response.json()["commit"]["sha"]
        logger.info(f"Committed {path} to {self._config.owner}/{self._config.repo} ({commit_sha[:7]})")
        return commit_sha
