"""Bounded retry for optimistic-concurrency conflicts.

This module provides:
- update_with_conflict_retry: Push content, retrying once on a stale hash

Policy on ConflictError:
1. Re-fetch the current remote file once.
2. If it already holds the content being pushed, the push is done.
3. Otherwise retry the update exactly once with the fresh hash.
4. A second conflict propagates. There is no retry loop: a persistent
   divergence needs a human, not another attempt.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geekcal.core.errors import ConflictError
from geekcal.core.models import collections_equal, parse_events

if TYPE_CHECKING:
    from geekcal.client.sync.types import RemoteStore
    from geekcal.core.models import Event

logger = logging.getLogger(__name__)

MAX_CONFLICT_RETRIES = 1


def _matches(remote_content: str, events: list[Event]) -> bool:
    try:
        return collections_equal(parse_events(remote_content), events)
    except ValueError:
        return False


def update_with_conflict_retry(
    store: RemoteStore,
    path: str,
    events: list[Event],
    content: str,
    message: str,
    expected_hash: str | None,
) -> str | None:
    """Create or update the remote file with a single conflict retry.

    Args:
        store: Remote store client.
        path: Remote file path.
        events: Collection being pushed (used for the idempotency check).
        content: Serialized collection.
        message: Commit message.
        expected_hash: Known blob SHA, or None if the file did not exist.

    Returns:
        Revision id that now holds the content (None if the store could
        not report one for an already-matching file).

    Raises:
        ConflictError: If the retry conflicts as well.
    """
    attempt = 0
    while True:
        try:
            return store.update_content(path, content, message, expected_hash)
        except ConflictError as e:
            if attempt >= MAX_CONFLICT_RETRIES:
                logger.error(f"Remote {path} changed again during retry: {e}")
                raise
            attempt += 1
            logger.warning(f"Remote {path} changed since it was read ({e}); re-fetching")

        current = store.fetch_current(path)
        if current is not None and _matches(current.content, events):
            logger.info(f"Remote {path} already holds the pushed content")
            return current.revision.revision_id
        if current is None:
            expected_hash = None
        else:
            expected_hash = current.revision.content_hash
