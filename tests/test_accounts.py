import pytest

from ixdecoder.errors import AccountLayoutError
from ixdecoder.multisig import (
    BatchAccount,
    ChangeThreshold,
    ConfigTransactionAccount,
    VaultTransactionAccount,
    account_discriminator,
)
from ixdecoder.multisig.accounts import VAULT_TRANSACTION_DISCRIMINATOR

from builders import batch, compiled_instruction, config_transaction, key, u8, u16, vault_message, vault_transaction


def test_account_discriminator():
    assert account_discriminator("VaultTransaction") == VAULT_TRANSACTION_DISCRIMINATOR
    assert len(account_discriminator("Batch")) == 8


class TestVaultTransaction:
    def test_fields(self):
        message = vault_message([key(1), key(2)], [compiled_instruction(1, [0], b"\x07")])
        account = VaultTransactionAccount.from_bytes(vault_transaction(message, index=9))
        assert account.multisig == key(40)
        assert account.creator == key(41)
        assert account.index == 9
        assert (account.bump, account.vault_index, account.vault_bump) == (255, 0, 254)
        assert account.ephemeral_signer_bumps == []
        assert account.message.account_keys == [key(1), key(2)]
        ix = account.message.instructions[0]
        assert (ix.program_id_index, ix.account_indexes, ix.data) == (1, [0], b"\x07")
        assert account.message.address_table_lookups == []

    def test_wrong_discriminator(self):
        with pytest.raises(AccountLayoutError, match="not a VaultTransaction"):
            VaultTransactionAccount.from_bytes(batch(size=1, executed=0))

    def test_truncated(self):
        data = vault_transaction(vault_message([key(1)], []))
        with pytest.raises(AccountLayoutError, match="malformed"):
            VaultTransactionAccount.from_bytes(data[:60])


def test_config_transaction_actions():
    account = ConfigTransactionAccount.from_bytes(config_transaction([u8(2) + u16(3)], index=4))
    assert account.index == 4
    assert account.actions == [ChangeThreshold(new_threshold=3)]


def test_batch():
    account = BatchAccount.from_bytes(batch(size=3, executed=1, vault_index=2))
    assert (account.size, account.executed_transaction_index, account.vault_index) == (3, 1, 2)
