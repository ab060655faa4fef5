from concurrent.futures import ThreadPoolExecutor

import pytest

from ixdecoder.config import DecoderConfig
from ixdecoder.decoder import DecoderFactory, TransactionDecoder
from ixdecoder.rpc import SolanaRpcClient


@pytest.fixture
def factory(registry, fake_fetcher_cls):
    config = DecoderConfig(rpc_url="http://default", native_symbol="XNT")
    return DecoderFactory(registry, config, fetcher_factory=lambda endpoint: fake_fetcher_cls())


def test_one_decoder_per_endpoint(factory):
    first = factory.get("http://a")
    assert isinstance(first, TransactionDecoder)
    assert factory.get("http://a") is first
    assert factory.get("http://b") is not first
    assert len(factory) == 2


def test_default_endpoint_and_settings(factory):
    decoder = factory.get()
    assert factory.get("http://default") is decoder
    assert decoder.dispatcher.native_symbol == "XNT"
    assert decoder.multisig_program_id == factory.config.multisig_program_id


def test_clear(factory):
    first = factory.get("http://a")
    factory.clear()
    assert len(factory) == 0
    assert factory.get("http://a") is not first


def test_concurrent_get_builds_once(factory):
    with ThreadPoolExecutor(max_workers=8) as pool:
        decoders = list(pool.map(lambda _: factory.get("http://shared"), range(32)))
    assert all(d is decoders[0] for d in decoders)
    assert len(factory) == 1


def test_rpc_fetcher_by_default(registry):
    factory = DecoderFactory(registry, DecoderConfig(request_timeout=5.0))
    fetcher = factory.get("http://node").fetcher
    assert isinstance(fetcher, SolanaRpcClient)
    assert fetcher.rpc_url == "http://node"
    assert fetcher.timeout == 5.0
