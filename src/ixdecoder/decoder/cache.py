"""Per-endpoint cache of transaction decoders."""

import logging
import threading
from typing import Callable, Dict, Optional

from ..config import DecoderConfig
from ..rpc import SolanaRpcClient
from ..schema import SchemaRegistry
from .dispatcher import InstructionDispatcher
from .transaction import AccountFetcher, TransactionDecoder

logger = logging.getLogger(__name__)


class DecoderFactory:
    """
    Builds one TransactionDecoder per RPC endpoint and reuses it.

    The factory is created by the application and passed around; the registry
    it holds must be fully populated before the first get().
    """

    def __init__(self, registry: SchemaRegistry, config: Optional[DecoderConfig] = None,
                 fetcher_factory: Optional[Callable[[str], AccountFetcher]] = None):
        self.registry = registry
        self.config = config or DecoderConfig()
        self._fetcher_factory = fetcher_factory or self._rpc_fetcher
        self._decoders: Dict[str, TransactionDecoder] = {}
        self._lock = threading.Lock()

    def _rpc_fetcher(self, endpoint: str) -> AccountFetcher:
        return SolanaRpcClient(endpoint, timeout=self.config.request_timeout)

    def get(self, endpoint: Optional[str] = None) -> TransactionDecoder:
        endpoint = endpoint or self.config.rpc_url
        with self._lock:
            decoder = self._decoders.get(endpoint)
            if decoder is None:
                logger.debug("Creating decoder for %s", endpoint)
                dispatcher = InstructionDispatcher(
                    self.registry, native_symbol=self.config.native_symbol
                )
                decoder = TransactionDecoder(
                    dispatcher,
                    self._fetcher_factory(endpoint),
                    self.config.multisig_program_id,
                )
                self._decoders[endpoint] = decoder
            return decoder

    def clear(self) -> None:
        with self._lock:
            self._decoders.clear()

    def __len__(self) -> int:
        return len(self._decoders)
