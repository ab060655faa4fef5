"""Multisig container accounts, config actions and address derivation."""

from .accounts import (
    BATCH_DISCRIMINATOR,
    CONFIG_TRANSACTION_DISCRIMINATOR,
    VAULT_TRANSACTION_DISCRIMINATOR,
    BatchAccount,
    BatchLayout,
    CompiledInstruction,
    ConfigTransactionAccount,
    ConfigTransactionLayout,
    MessageAddressTableLookup,
    VaultTransactionAccount,
    VaultTransactionLayout,
    VaultTransactionMessage,
    account_discriminator,
)
from .actions import (
    AddMember,
    AddSpendingLimit,
    ChangeThreshold,
    ConfigAction,
    ConfigActionLayout,
    RemoveMember,
    RemoveSpendingLimit,
    SetTimeLock,
    Unrecognized,
    config_action_from_layout,
    config_actions_to_display,
    parse_config_action,
    read_config_action,
)
from .pda import get_transaction_pda

__all__ = [
    "BATCH_DISCRIMINATOR",
    "CONFIG_TRANSACTION_DISCRIMINATOR",
    "VAULT_TRANSACTION_DISCRIMINATOR",
    "BatchAccount",
    "BatchLayout",
    "CompiledInstruction",
    "ConfigTransactionAccount",
    "ConfigTransactionLayout",
    "MessageAddressTableLookup",
    "VaultTransactionAccount",
    "VaultTransactionLayout",
    "VaultTransactionMessage",
    "account_discriminator",
    "AddMember",
    "AddSpendingLimit",
    "ChangeThreshold",
    "ConfigAction",
    "ConfigActionLayout",
    "RemoveMember",
    "RemoveSpendingLimit",
    "SetTimeLock",
    "Unrecognized",
    "config_action_from_layout",
    "config_actions_to_display",
    "parse_config_action",
    "read_config_action",
    "get_transaction_pda",
]
