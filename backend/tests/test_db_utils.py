from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from service_manager.utils.db_utils import commit_with_retry, dump_json, load_json


def test_json_helpers():
    assert dump_json(None) is None
    assert load_json(dump_json({"a": [1, 2]})) == {"a": [1, 2]}
    assert load_json(None, []) == []
    assert load_json("{not json", {}) == {}


@pytest.mark.asyncio
async def test_commit_retries_when_locked():
    session = AsyncMock()
    session.commit.side_effect = [
        OperationalError("COMMIT", {}, Exception("database is locked")),
        None,
    ]
    await commit_with_retry(session, base_delay=0)
    assert session.commit.await_count == 2


@pytest.mark.asyncio
async def test_commit_raises_other_errors_immediately():
    session = AsyncMock()
    session.commit.side_effect = OperationalError("COMMIT", {}, Exception("no such table: x"))
    with pytest.raises(OperationalError):
        await commit_with_retry(session, base_delay=0)
    assert session.commit.await_count == 1
