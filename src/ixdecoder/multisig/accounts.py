"""
On-chain multisig transaction accounts.

Each container account starts with its 8-byte Anchor account discriminator,
sha256("account:<Name>")[:8], followed by the Borsh-encoded fields.
"""

import hashlib
from dataclasses import dataclass, field
from typing import Any, List

from borsh_construct import CStruct, U8, U32, U64, Vec
from construct import Construct, Container, ConstructError

from ..codec import pubkey_to_str
from ..errors import AccountLayoutError
from .actions import PUBKEY, ConfigAction, ConfigActionLayout, config_action_from_layout


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode("utf-8")).digest()[:8]


VAULT_TRANSACTION_DISCRIMINATOR = account_discriminator("VaultTransaction")
CONFIG_TRANSACTION_DISCRIMINATOR = account_discriminator("ConfigTransaction")
BATCH_DISCRIMINATOR = account_discriminator("Batch")

CompiledInstructionLayout = CStruct(
    "program_id_index" / U8,
    "account_indexes" / Vec(U8),
    "data" / Vec(U8),
)

MessageAddressTableLookupLayout = CStruct(
    "account_key" / PUBKEY,
    "writable_indexes" / Vec(U8),
    "readonly_indexes" / Vec(U8),
)

VaultTransactionMessageLayout = CStruct(
    "num_signers" / U8,
    "num_writable_signers" / U8,
    "num_writable_non_signers" / U8,
    "account_keys" / Vec(PUBKEY),
    "instructions" / Vec(CompiledInstructionLayout),
    "address_table_lookups" / Vec(MessageAddressTableLookupLayout),
)

VaultTransactionLayout = CStruct(
    "multisig" / PUBKEY,
    "creator" / PUBKEY,
    "index" / U64,
    "bump" / U8,
    "vault_index" / U8,
    "vault_bump" / U8,
    "ephemeral_signer_bumps" / Vec(U8),
    "message" / VaultTransactionMessageLayout,
)

ConfigTransactionLayout = CStruct(
    "multisig" / PUBKEY,
    "creator" / PUBKEY,
    "index" / U64,
    "bump" / U8,
    "actions" / Vec(ConfigActionLayout),
)

BatchLayout = CStruct(
    "multisig" / PUBKEY,
    "creator" / PUBKEY,
    "index" / U64,
    "bump" / U8,
    "vault_index" / U8,
    "vault_bump" / U8,
    "size" / U32,
    "executed_transaction_index" / U32,
)


def _pubkey(raw: Any) -> str:
    return pubkey_to_str(bytes(raw))


def _parse(layout: Construct, data: bytes, discriminator: bytes, name: str) -> Container:
    data = bytes(data)
    if data[:8] != discriminator:
        raise AccountLayoutError(f"not a {name} account")
    try:
        return layout.parse(data[8:])
    except ConstructError as e:
        raise AccountLayoutError(f"malformed {name} account: {e}") from e


@dataclass
class CompiledInstruction:
    program_id_index: int
    account_indexes: List[int]
    data: bytes

    @classmethod
    def from_layout(cls, parsed: Container) -> "CompiledInstruction":
        return cls(
            program_id_index=parsed.program_id_index,
            account_indexes=list(parsed.account_indexes),
            data=bytes(parsed.data),
        )


@dataclass
class MessageAddressTableLookup:
    account_key: str
    writable_indexes: List[int]
    readonly_indexes: List[int]

    @classmethod
    def from_layout(cls, parsed: Container) -> "MessageAddressTableLookup":
        return cls(
            account_key=_pubkey(parsed.account_key),
            writable_indexes=list(parsed.writable_indexes),
            readonly_indexes=list(parsed.readonly_indexes),
        )


@dataclass
class VaultTransactionMessage:
    """A transaction message stored by the multisig for later execution."""
    num_signers: int
    num_writable_signers: int
    num_writable_non_signers: int
    account_keys: List[str] = field(default_factory=list)
    instructions: List[CompiledInstruction] = field(default_factory=list)
    address_table_lookups: List[MessageAddressTableLookup] = field(default_factory=list)

    @classmethod
    def from_layout(cls, parsed: Container) -> "VaultTransactionMessage":
        return cls(
            num_signers=parsed.num_signers,
            num_writable_signers=parsed.num_writable_signers,
            num_writable_non_signers=parsed.num_writable_non_signers,
            account_keys=[_pubkey(k) for k in parsed.account_keys],
            instructions=[CompiledInstruction.from_layout(ix) for ix in parsed.instructions],
            address_table_lookups=[
                MessageAddressTableLookup.from_layout(lookup)
                for lookup in parsed.address_table_lookups
            ],
        )


@dataclass
class VaultTransactionAccount:
    multisig: str
    creator: str
    index: int
    bump: int
    vault_index: int
    vault_bump: int
    ephemeral_signer_bumps: List[int]
    message: VaultTransactionMessage

    @classmethod
    def from_bytes(cls, data: bytes) -> "VaultTransactionAccount":
        parsed = _parse(VaultTransactionLayout, data, VAULT_TRANSACTION_DISCRIMINATOR, "VaultTransaction")
        return cls(
            multisig=_pubkey(parsed.multisig),
            creator=_pubkey(parsed.creator),
            index=parsed.index,
            bump=parsed.bump,
            vault_index=parsed.vault_index,
            vault_bump=parsed.vault_bump,
            ephemeral_signer_bumps=list(parsed.ephemeral_signer_bumps),
            message=VaultTransactionMessage.from_layout(parsed.message),
        )


@dataclass
class ConfigTransactionAccount:
    multisig: str
    creator: str
    index: int
    bump: int
    actions: List[ConfigAction]

    @classmethod
    def from_bytes(cls, data: bytes) -> "ConfigTransactionAccount":
        parsed = _parse(ConfigTransactionLayout, data, CONFIG_TRANSACTION_DISCRIMINATOR, "ConfigTransaction")
        return cls(
            multisig=_pubkey(parsed.multisig),
            creator=_pubkey(parsed.creator),
            index=parsed.index,
            bump=parsed.bump,
            actions=[config_action_from_layout(action) for action in parsed.actions],
        )


@dataclass
class BatchAccount:
    multisig: str
    creator: str
    index: int
    bump: int
    vault_index: int
    vault_bump: int
    size: int
    executed_transaction_index: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "BatchAccount":
        parsed = _parse(BatchLayout, data, BATCH_DISCRIMINATOR, "Batch")
        return cls(
            multisig=_pubkey(parsed.multisig),
            creator=_pubkey(parsed.creator),
            index=parsed.index,
            bump=parsed.bump,
            vault_index=parsed.vault_index,
            vault_bump=parsed.vault_bump,
            size=parsed.size,
            executed_transaction_index=parsed.executed_transaction_index,
        )
