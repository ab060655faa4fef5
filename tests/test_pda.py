from solders.pubkey import Pubkey

from ixdecoder.multisig import get_transaction_pda
from ixdecoder.programs.base import SQUADS_V4_PROGRAM_ID

from builders import key


def test_matches_manual_derivation():
    multisig = Pubkey.from_string(key(40))
    program = Pubkey.from_string(SQUADS_V4_PROGRAM_ID)
    expected = Pubkey.find_program_address(
        [b"multisig", bytes(multisig), b"transaction", (12).to_bytes(8, "little")],
        program,
    )
    assert get_transaction_pda(key(40), 12, SQUADS_V4_PROGRAM_ID) == expected
    assert get_transaction_pda(multisig, 12, program) == expected


def test_index_changes_address():
    first, _ = get_transaction_pda(key(40), 1, SQUADS_V4_PROGRAM_ID)
    second, _ = get_transaction_pda(key(40), 2, SQUADS_V4_PROGRAM_ID)
    assert first != second
    assert not first.is_on_curve()
