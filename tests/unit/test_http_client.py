import pytest

from config import Config
from utils.http_client import HTTPClientManager


@pytest.mark.anyio
async def test_clients_are_shared_until_closed():
    """Given repeated lookups, the same pooled client should be returned until close_all."""
    search = HTTPClientManager.get_search_client()
    general = HTTPClientManager.get_general_client()

    assert HTTPClientManager.get_search_client() is search
    assert search is not general
    assert search.headers["User-Agent"] == Config.USER_AGENT

    await HTTPClientManager.close_all()

    assert search.is_closed
    assert HTTPClientManager.get_search_client() is not search
    await HTTPClientManager.close_all()
