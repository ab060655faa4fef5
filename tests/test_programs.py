import pytest

from ixdecoder.models import AccountKey
from ixdecoder.programs import (
    AddressLookupTableDecoder,
    AssociatedTokenDecoder,
    ComputeBudgetDecoder,
    MemoProgramDecoder,
    StakeProgramDecoder,
    SystemProgramDecoder,
    TokenProgramDecoder,
    VoteProgramDecoder,
    default_program_decoders,
    known_program_name,
    label_accounts,
)
from ixdecoder.programs.base import (
    ADDRESS_LOOKUP_TABLE_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    COMPUTE_BUDGET_PROGRAM_ID,
    MEMO_PROGRAM_ID,
    STAKE_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    VOTE_PROGRAM_ID,
)

from builders import bincode_string, i64, key, key_bytes, u32, u64


def names(decoded):
    return [acc.name for acc in decoded.accounts]


class TestSystem:
    decoder = SystemProgramDecoder()

    def test_transfer(self, accounts):
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, u32(2) + u64(1_500_000_000), accounts[:2])
        assert decoded.instruction_name == "Transfer"
        assert decoded.program_name == "System Program"
        assert decoded.args == {"lamports": "1500000000"}
        assert names(decoded) == ["From", "To"]
        assert decoded.human_readable_summary == f"Transfer 1.5 SOL from {key(1)} to {key(2)}"

    def test_native_symbol_in_summary(self, accounts):
        decoder = SystemProgramDecoder(native_symbol="XNT")
        decoded = decoder.decode(SYSTEM_PROGRAM_ID, u32(2) + u64(2_000_000_000), accounts[:2])
        assert decoded.human_readable_summary.startswith("Transfer 2 XNT from ")

    def test_create_account(self, accounts):
        data = u32(0) + u64(2039280) + u64(165) + key_bytes(7)
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, data, accounts[:2])
        assert decoded.instruction_name == "Create Account"
        assert decoded.args == {"lamports": "2039280", "space": "165", "owner": key(7)}
        assert decoded.human_readable_summary is None

    def test_create_account_with_seed(self, accounts):
        data = u32(3) + key_bytes(8) + bincode_string("stake:0") + u64(10) + u64(200) + key_bytes(9)
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, data, accounts[:3])
        assert decoded.args == {
            "base": key(8), "seed": "stake:0", "lamports": "10", "space": "200", "owner": key(9),
        }
        assert names(decoded) == ["Funding Account", "Created Account", "Base Account"]

    def test_transfer_with_seed_summary(self, accounts):
        data = u32(11) + u64(1_000_000_000) + bincode_string("s") + key_bytes(5)
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, data, accounts[:3])
        assert decoded.args["fromSeed"] == "s"
        assert decoded.human_readable_summary == f"Transfer 1 SOL from {key(1)} to {key(3)}"

    def test_allocate(self, accounts):
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, u32(8) + u64(64), accounts[:1])
        assert decoded.instruction_name == "Allocate"
        assert decoded.args == {"space": "64"}

    def test_unknown_tag(self, accounts):
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, u32(99), accounts[:2])
        assert decoded.instruction_name == "Unknown System Instruction"
        assert names(decoded) == ["Account 0", "Account 1"]

    def test_truncated_payload_keeps_name(self, accounts):
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, u32(2) + b"\x01\x02", accounts[:2])
        assert decoded.instruction_name == "Transfer"
        assert decoded.args == {}
        assert decoded.human_readable_summary is None

    def test_empty_payload(self):
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, b"", [])
        assert decoded.instruction_name == "Unknown System Instruction"
        assert decoded.raw_data_hex == ""

    def test_summary_with_missing_account(self):
        decoded = self.decoder.decode(SYSTEM_PROGRAM_ID, u32(2) + u64(1), [AccountKey(key(1))])
        assert decoded.human_readable_summary.endswith("to Unknown")


class TestToken:
    decoder = TokenProgramDecoder()

    def test_transfer_checked(self, accounts):
        data = bytes([12]) + u64(1_500_000) + bytes([6])
        decoded = self.decoder.decode(TOKEN_PROGRAM_ID, data, accounts)
        assert decoded.instruction_name == "Transfer Checked"
        assert decoded.args == {"amount": "1500000", "decimals": 6}
        assert names(decoded) == ["Source", "Mint", "Destination", "Authority"]
        assert decoded.human_readable_summary == f"Transfer 1.5 tokens from {key(1)} to {key(3)}"

    def test_transfer(self, accounts):
        decoded = self.decoder.decode(TOKEN_PROGRAM_ID, bytes([3]) + u64(42), accounts[:3])
        assert decoded.args == {"amount": "42"}
        assert decoded.human_readable_summary == f"Transfer 42 tokens from {key(1)} to {key(2)}"

    def test_token_2022_name(self, accounts):
        decoded = self.decoder.decode(TOKEN_2022_PROGRAM_ID, bytes([9]), accounts[:3])
        assert decoded.program_name == "Token-2022 Program"
        assert decoded.instruction_name == "Close Account"

    def test_set_authority(self, accounts):
        data = bytes([6, 2, 1]) + key_bytes(4)
        decoded = self.decoder.decode(TOKEN_PROGRAM_ID, data, accounts[:2])
        assert decoded.args == {"authorityType": "AccountOwner", "newAuthority": key(4)}

    def test_initialize_mint_without_freeze_authority(self, accounts):
        data = bytes([20, 9]) + key_bytes(2) + b"\x00"
        decoded = self.decoder.decode(TOKEN_PROGRAM_ID, data, accounts[:1])
        assert decoded.args == {"decimals": 9, "mintAuthority": key(2), "freezeAuthority": None}

    def test_unknown(self, accounts):
        decoded = self.decoder.decode(TOKEN_PROGRAM_ID, bytes([200]), accounts[:1])
        assert decoded.instruction_name == "Unknown Token Instruction"


class TestMemo:
    decoder = MemoProgramDecoder()

    def test_utf8_memo(self, accounts):
        decoded = self.decoder.decode(MEMO_PROGRAM_ID, "gm ☀".encode(), accounts[:2])
        assert decoded.instruction_name == "Memo"
        assert decoded.args["memo"] == "gm ☀"
        assert names(decoded) == ["Signer 1", "Signer 2"]

    def test_binary_memo_falls_back_to_hex(self):
        decoded = self.decoder.decode(MEMO_PROGRAM_ID, b"\xff\xfe", [])
        assert decoded.args == {"memo": "fffe", "hexData": "fffe"}


class TestComputeBudget:
    decoder = ComputeBudgetDecoder()

    def test_unit_limit(self):
        decoded = self.decoder.decode(COMPUTE_BUDGET_PROGRAM_ID, bytes([2]) + u32(200_000), [])
        assert decoded.instruction_name == "Set Compute Unit Limit"
        assert decoded.args == {"units": 200_000}

    def test_unit_price(self):
        decoded = self.decoder.decode(COMPUTE_BUDGET_PROGRAM_ID, bytes([3]) + u64(5000), [])
        assert decoded.args == {"microLamports": "5000"}


class TestAssociatedToken:
    decoder = AssociatedTokenDecoder()

    def test_empty_payload_is_create(self, accounts):
        decoded = self.decoder.decode(ASSOCIATED_TOKEN_PROGRAM_ID, b"", accounts)
        assert decoded.instruction_name == "Create Associated Token Account"
        assert names(decoded) == ["Funding Account", "Associated Token Account", "Wallet", "Token Mint"]

    def test_create_idempotent(self, accounts):
        decoded = self.decoder.decode(ASSOCIATED_TOKEN_PROGRAM_ID, b"\x01", accounts)
        assert decoded.instruction_name == "Create Idempotent"


class TestLookupTable:
    decoder = AddressLookupTableDecoder()

    def test_extend(self, accounts):
        data = u32(2) + u64(2) + key_bytes(5) + key_bytes(6)
        decoded = self.decoder.decode(ADDRESS_LOOKUP_TABLE_PROGRAM_ID, data, accounts)
        assert decoded.instruction_name == "Extend Lookup Table"
        assert decoded.args == {"numberOfAddresses": 2, "addresses": [key(5), key(6)]}

    def test_create(self, accounts):
        data = u32(0) + u64(123) + b"\xfe"
        decoded = self.decoder.decode(ADDRESS_LOOKUP_TABLE_PROGRAM_ID, data, accounts)
        assert decoded.args == {"recentSlot": "123", "bumpSeed": 254}


class TestStake:
    decoder = StakeProgramDecoder()

    def test_initialize_without_custodian(self, accounts):
        data = u32(0) + key_bytes(2) + key_bytes(3) + i64(0) + u64(0) + bytes(32)
        decoded = self.decoder.decode(STAKE_PROGRAM_ID, data, accounts[:2])
        assert decoded.args == {
            "authorized": {"staker": key(2), "withdrawer": key(3)},
            "lockup": {"unixTimestamp": "0", "epoch": "0", "custodian": None},
        }

    def test_authorize(self, accounts):
        decoded = self.decoder.decode(STAKE_PROGRAM_ID, u32(1) + key_bytes(4) + u32(1), accounts)
        assert decoded.instruction_name == "Authorize"
        assert decoded.args == {"newAuthority": key(4), "authorizeType": "Withdrawer"}

    def test_withdraw(self, accounts):
        decoded = self.decoder.decode(STAKE_PROGRAM_ID, u32(4) + u64(77), accounts)
        assert decoded.args == {"lamports": "77"}
        assert names(decoded)[:2] == ["Stake Account", "Recipient"]

    def test_deactivate(self, accounts):
        decoded = self.decoder.decode(STAKE_PROGRAM_ID, u32(5), accounts[:3])
        assert decoded.instruction_name == "Deactivate"


class TestVote:
    decoder = VoteProgramDecoder()

    def test_authorize(self, accounts):
        decoded = self.decoder.decode(VOTE_PROGRAM_ID, u32(1) + key_bytes(6) + u32(0), accounts)
        assert decoded.args == {"newAuthority": key(6), "authorityType": "Voter"}

    def test_update_commission(self, accounts):
        decoded = self.decoder.decode(VOTE_PROGRAM_ID, u32(5) + b"\x0a", accounts[:2])
        assert decoded.args == {"commission": 10}


def test_default_decoders_cover_every_program_id():
    decoders = default_program_decoders()
    assert isinstance(decoders[TOKEN_2022_PROGRAM_ID], TokenProgramDecoder)
    assert decoders[TOKEN_PROGRAM_ID] is decoders[TOKEN_2022_PROGRAM_ID]
    assert set(decoders) >= {
        SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, MEMO_PROGRAM_ID, COMPUTE_BUDGET_PROGRAM_ID,
        ASSOCIATED_TOKEN_PROGRAM_ID, ADDRESS_LOOKUP_TABLE_PROGRAM_ID, STAKE_PROGRAM_ID, VOTE_PROGRAM_ID,
    }


def test_label_accounts_fills_gaps(accounts):
    labelled = label_accounts(["Payer", ""], accounts[:3])
    assert [a.name for a in labelled] == ["Payer", "Account 1", "Account 2"]
    assert labelled[0].is_signer and labelled[0].is_writable


@pytest.mark.parametrize("program_id,expected", [
    (SYSTEM_PROGRAM_ID, "System Program"),
    ("Config1111111111111111111111111111111111111", "Config Program"),
    (key(77), None),
])
def test_known_program_name(program_id, expected):
    assert known_program_name(program_id) == expected
