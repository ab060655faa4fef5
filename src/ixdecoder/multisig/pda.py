"""Program-derived addresses for multisig accounts."""

from typing import Tuple, Union

from solders.pubkey import Pubkey

SEED_PREFIX = b"multisig"
SEED_TRANSACTION = b"transaction"


def _pubkey(value: Union[str, Pubkey]) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    return Pubkey.from_string(value)


def get_transaction_pda(multisig: Union[str, Pubkey], transaction_index: int,
                        program_id: Union[str, Pubkey]) -> Tuple[Pubkey, int]:
    """Address of the transaction account at transaction_index."""
    seeds = [
        SEED_PREFIX,
        bytes(_pubkey(multisig)),
        SEED_TRANSACTION,
        int(transaction_index).to_bytes(8, "little"),
    ]
    return Pubkey.find_program_address(seeds, _pubkey(program_id))
