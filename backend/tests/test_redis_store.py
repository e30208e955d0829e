"""RedisMessageStore command mapping and error wrapping (client mocked)."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.errors import StorageError
from app.core.redis_store import (
    ATTACH_SCRIPT,
    GET_AND_DELETE_SCRIPT,
    PLACEHOLDER,
    RedisMessageStore,
)


@pytest.fixture
def scripts():
    return {"attach": AsyncMock(return_value=1), "get_and_delete": AsyncMock(return_value=None)}


@pytest.fixture
def redis_client(scripts):
    client = MagicMock()
    client.set = AsyncMock(return_value=True)
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()

    def register(source):
        return scripts["attach"] if source == ATTACH_SCRIPT else scripts["get_and_delete"]

    client.register_script = MagicMock(side_effect=register)
    return client


@pytest.fixture
def redis_store(redis_client):
    return RedisMessageStore(redis_client, key_prefix="t:")


def test_scripts_registered(redis_client, redis_store):
    sources = [c.args[0] for c in redis_client.register_script.call_args_list]
    assert sources == [ATTACH_SCRIPT, GET_AND_DELETE_SCRIPT]


@pytest.mark.asyncio()
async def test_reserve_uses_set_nx_with_ttl(redis_client, redis_store):
    assert await redis_store.reserve_code("ABCDEFGH", 60) is True
    redis_client.set.assert_awaited_once_with("t:ABCDEFGH", PLACEHOLDER, nx=True, px=60000)


@pytest.mark.asyncio()
async def test_reserve_collision(redis_client, redis_store):
    redis_client.set.return_value = None
    assert await redis_store.reserve_code("ABCDEFGH", 60) is False


@pytest.mark.asyncio()
async def test_attach_passes_payload_ttl_and_placeholder(scripts, redis_store):
    assert await redis_store.attach_cipher("ABCDEFGH", "cipher", 3600) is True
    scripts["attach"].assert_awaited_once_with(
        keys=["t:ABCDEFGH"], args=["cipher", 3600000, PLACEHOLDER]
    )


@pytest.mark.asyncio()
async def test_attach_conflict(scripts, redis_store):
    scripts["attach"].return_value = 0
    assert await redis_store.attach_cipher("ABCDEFGH", "cipher", 3600) is False


@pytest.mark.asyncio()
async def test_get_and_delete(scripts, redis_store):
    assert await redis_store.get_and_delete("ABCDEFGH") is None
    scripts["get_and_delete"].return_value = b"cipher"
    assert await redis_store.get_and_delete("ABCDEFGH") == "cipher"
    scripts["get_and_delete"].assert_awaited_with(keys=["t:ABCDEFGH"], args=[PLACEHOLDER])


@pytest.mark.asyncio()
async def test_errors_are_wrapped(redis_client, scripts, redis_store):
    failure = RedisConnectionError("down")
    redis_client.set.side_effect = failure
    redis_client.ping.side_effect = failure
    scripts["attach"].side_effect = failure
    scripts["get_and_delete"].side_effect = failure

    with pytest.raises(StorageError):
        await redis_store.reserve_code("ABCDEFGH", 60)
    with pytest.raises(StorageError):
        await redis_store.attach_cipher("ABCDEFGH", "cipher", 3600)
    with pytest.raises(StorageError):
        await redis_store.get_and_delete("ABCDEFGH")
    with pytest.raises(StorageError):
        await redis_store.ping()


@pytest.mark.asyncio()
async def test_close(redis_client, redis_store):
    await redis_store.close()
    redis_client.aclose.assert_awaited_once()


def test_subsecond_ttl_is_at_least_one_millisecond():
    from app.core.redis_store import _ttl_ms

    assert _ttl_ms(0.0001) == 1
    assert _ttl_ms(1.5) == 1500
