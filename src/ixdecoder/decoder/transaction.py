"""
Multisig transaction decoder.

Reads a multisig transaction account, works out which container it is
(vault transaction, config transaction or batch) and turns it into a
DecodedTransaction. Vault messages are decoded instruction by instruction
through the dispatcher; config and batch accounts become one synthetic
instruction each.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from ..errors import AccountFetchError, DecoderError
from ..multisig import (
    BatchAccount,
    ConfigTransactionAccount,
    VaultTransactionAccount,
    VaultTransactionMessage,
    config_actions_to_display,
    get_transaction_pda,
)
from ..programs.base import COMPUTE_BUDGET_PROGRAM_ID, SQUADS_V4_PROGRAM_ID
from ..programs.compute_budget import SET_COMPUTE_UNIT_LIMIT
from ..models import AccountKey, DecodedInstruction, DecodedTransaction
from .dispatcher import InstructionDispatcher

logger = logging.getLogger(__name__)

UNKNOWN_ADDRESS = "Unknown"
MULTISIG_PROGRAM_NAME = "Squads Multisig V4"


class AccountFetcher(Protocol):
    async def get_account_data(self, address: str) -> Optional[bytes]:
        ...


@dataclass
class AttemptResult:
    """Outcome of reading account bytes as one container kind."""
    transaction: Optional[DecodedTransaction] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.transaction is not None


class TransactionDecoder:
    """Decodes multisig transaction accounts into instruction trees."""

    def __init__(self, dispatcher: InstructionDispatcher, fetcher: Optional[AccountFetcher] = None,
                 multisig_program_id: str = SQUADS_V4_PROGRAM_ID):
        self.dispatcher = dispatcher
        self.fetcher = fetcher
        self.multisig_program_id = multisig_program_id
        self._attempts: List[Callable[[bytes], AttemptResult]] = [
            self._attempt_vault,
            self._attempt_config,
            self._attempt_batch,
        ]

    async def decode(self, account_address: str) -> DecodedTransaction:
        """Fetch a transaction account and decode it."""
        if self.fetcher is None:
            return DecodedTransaction.failed("No account fetcher configured")
        try:
            data = await self.fetcher.get_account_data(account_address)
        except AccountFetchError as e:
            logger.warning("Failed to fetch %s: %s", account_address, e)
            return DecodedTransaction.failed(f"Failed to fetch transaction: {e}")
        if data is None:
            return DecodedTransaction.failed(f"Account not found: {account_address}")
        return self.decode_account_data(data)

    async def decode_proposal(self, multisig: str, transaction_index: int) -> DecodedTransaction:
        """Decode the transaction stored at transaction_index of a multisig."""
        try:
            pda, _ = get_transaction_pda(multisig, transaction_index, self.multisig_program_id)
        except ValueError as e:
            return DecodedTransaction.failed(f"Invalid multisig address: {e}")
        return await self.decode(str(pda))

    def decode_account_data(self, data: bytes) -> DecodedTransaction:
        """Try each container kind in turn; the first that fits wins."""
        reasons = []
        for attempt in self._attempts:
            result = attempt(bytes(data))
            if result.ok:
                return result.transaction
            logger.debug("%s: %s", attempt.__name__, result.reason)
            reasons.append(result.reason)
        return DecodedTransaction.failed("Failed to decode transaction: " + "; ".join(reasons))

    def _attempt_vault(self, data: bytes) -> AttemptResult:
        try:
            account = VaultTransactionAccount.from_bytes(data)
        except DecoderError as e:
            return AttemptResult(reason=f"vault transaction: {e}")
        return AttemptResult(self.decode_vault_message(account.message))

    def _attempt_config(self, data: bytes) -> AttemptResult:
        try:
            account = ConfigTransactionAccount.from_bytes(data)
        except DecoderError as e:
            return AttemptResult(reason=f"config transaction: {e}")
        return AttemptResult(self.decode_config_transaction(account))

    def _attempt_batch(self, data: bytes) -> AttemptResult:
        try:
            account = BatchAccount.from_bytes(data)
        except DecoderError as e:
            return AttemptResult(reason=f"batch: {e}")
        return AttemptResult(self.decode_batch(account))

    def _account_key(self, message: VaultTransactionMessage, index: int) -> AccountKey:
        if index >= len(message.account_keys):
            # Address lookup table references are not resolved
            return AccountKey(UNKNOWN_ADDRESS)
        return AccountKey(
            pubkey=message.account_keys[index],
            is_signer=index < message.num_signers,
            is_writable=(
                index < message.num_writable_signers
                or message.num_signers <= index < message.num_signers + message.num_writable_non_signers
            ),
        )

    def decode_vault_message(self, message: VaultTransactionMessage) -> DecodedTransaction:
        instructions = []
        for compiled in message.instructions:
            if compiled.program_id_index < len(message.account_keys):
                program_id = message.account_keys[compiled.program_id_index]
            else:
                program_id = UNKNOWN_ADDRESS
            accounts = [self._account_key(message, i) for i in compiled.account_indexes]
            instructions.append(self.dispatcher.parse_instruction(program_id, compiled.data, accounts))

        return DecodedTransaction(
            instructions=instructions,
            signers=list(message.account_keys[:message.num_signers]),
            fee_payer=message.account_keys[0] if message.account_keys else None,
            compute_units=_compute_unit_limit(instructions),
        )

    def decode_config_transaction(self, config: ConfigTransactionAccount) -> DecodedTransaction:
        creator = config.creator or UNKNOWN_ADDRESS
        instruction = self._synthetic(
            "ConfigTransaction",
            "Config Transaction",
            {
                "transactionIndex": str(config.index),
                "creator": creator,
                "actions": config_actions_to_display(config.actions),
            },
        )
        return DecodedTransaction(instructions=[instruction], signers=[creator])

    def decode_batch(self, batch: BatchAccount) -> DecodedTransaction:
        creator = batch.creator or UNKNOWN_ADDRESS
        size = batch.size or 0
        executed = batch.executed_transaction_index or 0
        instruction = self._synthetic(
            "BatchTransaction",
            "Batch Transaction",
            {
                "transactionIndex": str(batch.index),
                "creator": creator,
                "vaultIndex": batch.vault_index,
                "size": size,
                "executedTransactionIndex": executed,
                "summary": f"Batch contains {size} transactions, {executed} executed",
            },
        )
        return DecodedTransaction(instructions=[instruction], signers=[creator])

    def _synthetic(self, name: str, title: str, args: Any) -> DecodedInstruction:
        return DecodedInstruction(
            program_id=self.multisig_program_id,
            program_name=MULTISIG_PROGRAM_NAME,
            instruction_name=name,
            instruction_title=title,
            args=args,
        )


def _compute_unit_limit(instructions: List[DecodedInstruction]) -> Optional[int]:
    for ix in instructions:
        if ix.program_id == COMPUTE_BUDGET_PROGRAM_ID and "units" in ix.args:
            if ix.raw_data_hex[:2] == f"{SET_COMPUTE_UNIT_LIMIT:02x}":
                return ix.args["units"]
    return None
