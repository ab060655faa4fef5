import asyncio
import base64

import pytest
from aiohttp import web
from aiohttp import test_utils

from ixdecoder.errors import AccountFetchError
from ixdecoder.rpc import SolanaRpcClient


def serve(response, call):
    """Run call(client) against a local JSON-RPC endpoint that answers with response."""
    seen = []

    async def handler(request):
        seen.append(await request.json())
        return web.json_response(response)

    async def run():
        app = web.Application()
        app.router.add_post("/", handler)
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            return await call(SolanaRpcClient(str(server.make_url("/")), timeout=5.0))
        finally:
            await server.close()

    return asyncio.run(run()), seen


def test_account_data_is_base64_decoded():
    payload = {"jsonrpc": "2.0", "id": 1, "result": {
        "context": {"slot": 1},
        "value": {"data": [base64.b64encode(b"\x01\x02\x03").decode(), "base64"], "owner": "x"},
    }}
    data, seen = serve(payload, lambda client: client.get_account_data("addr"))
    assert data == b"\x01\x02\x03"
    assert seen[0]["method"] == "getAccountInfo"
    assert seen[0]["params"] == ["addr", {"encoding": "base64"}]


def test_missing_account_is_none():
    payload = {"jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": None}}
    data, _ = serve(payload, lambda client: client.get_account_data("addr"))
    assert data is None


def test_rpc_error_raises():
    payload = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}}
    with pytest.raises(AccountFetchError, match="Invalid param"):
        serve(payload, lambda client: client.get_account_data("addr"))


def test_unexpected_encoding_raises():
    payload = {"jsonrpc": "2.0", "id": 1, "result": {"value": {"data": "raw"}}}
    with pytest.raises(AccountFetchError):
        serve(payload, lambda client: client.get_account_data("addr"))


def test_unreachable_node():
    client = SolanaRpcClient("http://127.0.0.1:9", timeout=2.0)
    with pytest.raises(AccountFetchError):
        asyncio.run(client.get_account_data("addr"))


@pytest.mark.parametrize("payload", [
    ["not", "an", "object"],
    {"jsonrpc": "2.0", "id": 1, "result": ["value"]},
    {"jsonrpc": "2.0", "id": 1, "result": {"value": "raw"}},
])
def test_malformed_response_raises(payload):
    with pytest.raises(AccountFetchError, match="Malformed"):
        serve(payload, lambda client: client.get_account_data("addr"))
