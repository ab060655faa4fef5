"""Display helpers for decoded instructions."""

import re
from decimal import Decimal
from typing import Union

LAMPORTS_PER_SOL = 1_000_000_000

# Names that the generic splitting rules would render badly
_SPECIAL_TITLES = {
    "transferchecked": "Transfer Checked",
    "mintto": "Mint To",
    "burnfrom": "Burn From",
    "initializemint": "Initialize Mint",
    "initializeaccount": "Initialize Account",
    "closeaccount": "Close Account",
    "freezeaccount": "Freeze Account",
    "thawaccount": "Thaw Account",
    "syncnative": "Sync Native",
    "addmemo": "Add Memo",
    "createata": "Create ATA",
    "createidempotent": "Create Idempotent",
    "recovernested": "Recover Nested",
    "swapbasein": "Swap Base In",
    "swapbaseout": "Swap Base Out",
    "addliquidity": "Add Liquidity",
    "removeliquidity": "Remove Liquidity",
    "increaseliquidity": "Increase Liquidity",
    "decreaseliquidity": "Decrease Liquidity",
    "collectfees": "Collect Fees",
    "claimrewards": "Claim Rewards",
    "liquidunstake": "Liquid Unstake",
    "exactoutroute": "Exact Out Route",
    "createmultisig": "Create Multisig",
    "createproposal": "Create Proposal",
    "executeproposal": "Execute Proposal",
    "cancelproposal": "Cancel Proposal",
    "createmetadataaccount": "Create Metadata Account",
    "updatemetadataaccount": "Update Metadata Account",
    "createmasteredition": "Create Master Edition",
    "mintneweditionfrommastereditionviatoken": "Mint Edition From Master",
}


def format_instruction_name(name: str) -> str:
    """snake_case to PascalCase: transfer_checked -> TransferChecked."""
    return "".join(word[:1].upper() + word[1:].lower() for word in name.split("_"))


def format_instruction_title(name: str) -> str:
    """Human-friendly title: TransferChecked -> Transfer Checked, CreateNFT -> Create NFT."""
    if not name:
        return ""

    special = _SPECIAL_TITLES.get(name.lower())
    if special:
        return special

    if "_" in name:
        return " ".join(word[:1].upper() + word[1:].lower() for word in name.split("_") if word)

    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", name)
    spaced = re.sub(r"([A-Z])([A-Z][a-z])", r"\1 \2", spaced)

    words = []
    for word in spaced.split(" "):
        if not word:
            continue
        if len(word) > 1 and word == word.upper():
            words.append(word)  # acronym
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


def format_token_amount(amount: Union[int, str], decimals: int) -> str:
    """Scale a raw integer amount by decimals, without trailing zeros."""
    value = Decimal(int(amount)).scaleb(-int(decimals))
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_native_amount(lamports: Union[int, str], symbol: str = "SOL") -> str:
    return f"{format_token_amount(lamports, 9)} {symbol}"


def shorten_address(address: str, chars: int = 4) -> str:
    if len(address) <= chars * 2 + 3:
        return address
    return f"{address[:chars]}...{address[-chars:]}"


def truncated_hex(data: bytes) -> str:
    """Hex preview: first 50 bytes, with '...' when the payload is longer."""
    text = data.hex()[:100]
    if len(data) > 50:
        text += "..."
    return text
