"""
Multisig config actions.

A config transaction carries a list of actions that change the multisig
itself. Actions arrive either as tagged dicts (SDK-style records with a
"__kind" or "kind" key) or as Borsh bytes from the on-chain account; both map
onto the same closed set of variants.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from borsh_construct import CStruct, Option, U8, U16, U32, U64, Vec
from construct import Container, GreedyBytes, Struct, Switch, this

from ..codec import pubkey_to_str

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddMember:
    member: str
    permissions: Dict[str, Any] = field(default_factory=dict)

    def to_display(self) -> Dict[str, Any]:
        return {"type": "Add Member", "member": self.member, "permissions": dict(self.permissions)}


@dataclass(frozen=True)
class RemoveMember:
    member: str

    def to_display(self) -> Dict[str, Any]:
        return {"type": "Remove Member", "member": self.member}


@dataclass(frozen=True)
class ChangeThreshold:
    new_threshold: int

    def to_display(self) -> Dict[str, Any]:
        return {"type": "Change Threshold", "newThreshold": self.new_threshold}


@dataclass(frozen=True)
class SetTimeLock:
    time_lock: int

    def to_display(self) -> Dict[str, Any]:
        return {"type": "Set Time Lock", "timeLock": self.time_lock}


@dataclass(frozen=True)
class AddSpendingLimit:
    create_key: Optional[str]
    vault_index: Optional[int]
    mint: Optional[str]
    amount: Optional[str]
    period: Optional[int]
    members: List[str] = field(default_factory=list)
    destinations: List[str] = field(default_factory=list)

    def to_display(self) -> Dict[str, Any]:
        return {
            "type": "Add Spending Limit",
            "createKey": self.create_key,
            "vaultIndex": self.vault_index,
            "mint": self.mint,
            "amount": self.amount,
            "period": self.period,
            "members": list(self.members),
            "destinations": list(self.destinations),
        }


@dataclass(frozen=True)
class RemoveSpendingLimit:
    spending_limit_key: Optional[str]

    def to_display(self) -> Dict[str, Any]:
        return {"type": "Remove Spending Limit", "spendingLimitKey": self.spending_limit_key}


@dataclass(frozen=True)
class Unrecognized:
    """An action kind without a dedicated variant. kind is None when the record had no tag."""
    kind: Optional[str]
    raw: Any = None

    def to_display(self) -> Dict[str, Any]:
        if not isinstance(self.raw, dict) and self.kind is None:
            return {"type": "Unknown", "data": self.raw}
        if self.kind is None:
            return {"type": "Unknown Action", "rawData": self.raw}
        return {"type": self.kind, "data": self.raw}


ConfigAction = Union[
    AddMember,
    RemoveMember,
    ChangeThreshold,
    SetTimeLock,
    AddSpendingLimit,
    RemoveSpendingLimit,
    Unrecognized,
]


def _key(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _normalize_kind(kind: str) -> str:
    return kind[:1].upper() + kind[1:]


def parse_config_action(action: Any) -> ConfigAction:
    """Map an SDK-style action record onto a variant."""
    if not isinstance(action, dict):
        return Unrecognized(None, action)

    kind = action.get("__kind") or action.get("kind")
    if not kind:
        logger.debug("Config action without a kind: %s", action)
        return Unrecognized(None, action)

    normalized = _normalize_kind(str(kind))
    if normalized == "AddMember":
        new_member = action.get("newMember") or {}
        permissions = new_member.get("permissions") or {}
        return AddMember(
            member=_key(new_member.get("key")) or "Unknown",
            permissions={"mask": permissions.get("mask", 0), **permissions},
        )
    if normalized == "RemoveMember":
        return RemoveMember(member=_key(action.get("oldMember")) or "Unknown")
    if normalized == "ChangeThreshold":
        return ChangeThreshold(new_threshold=action.get("newThreshold") or 0)
    if normalized == "SetTimeLock":
        return SetTimeLock(time_lock=action.get("timeLock", action.get("newTimeLock")) or 0)
    if normalized == "AddSpendingLimit":
        # Records either nest the fields under spendingLimit or carry them directly
        limit = action.get("spendingLimit")
        if not isinstance(limit, dict):
            limit = action
        amount = limit.get("amount")
        return AddSpendingLimit(
            create_key=_key(limit.get("createKey")),
            vault_index=limit.get("vaultIndex"),
            mint=_key(limit.get("mint")),
            amount=None if amount is None else str(amount),
            period=limit.get("period"),
            members=[str(m) for m in limit.get("members") or []],
            destinations=[str(d) for d in limit.get("destinations") or []],
        )
    if normalized == "RemoveSpendingLimit":
        return RemoveSpendingLimit(spending_limit_key=_key(action.get("spendingLimit")))

    data = {k: v for k, v in action.items() if k not in ("__kind", "kind")}
    return Unrecognized(str(kind), data)


PUBKEY = U8[32]

MemberLayout = CStruct(
    "key" / PUBKEY,
    "permissions" / CStruct("mask" / U8),
)

CONFIG_ACTION_VARIANTS = {
    0: CStruct("new_member" / MemberLayout),
    1: CStruct("old_member" / PUBKEY),
    2: CStruct("new_threshold" / U16),
    3: CStruct("new_time_lock" / U32),
    4: CStruct(
        "create_key" / PUBKEY,
        "vault_index" / U8,
        "mint" / PUBKEY,
        "amount" / U64,
        "period" / U8,
        "members" / Vec(PUBKEY),
        "destinations" / Vec(PUBKEY),
    ),
    5: CStruct("spending_limit" / PUBKEY),
    6: CStruct("new_rent_collector" / Option(PUBKEY)),
}

# Layout of later variants is unknown, so the rest of the buffer stays opaque
ConfigActionLayout = Struct(
    "variant" / U8,
    "value" / Switch(this.variant, CONFIG_ACTION_VARIANTS, default=GreedyBytes),
)


def _pubkey(raw: Any) -> str:
    return pubkey_to_str(bytes(raw))


def config_action_from_layout(parsed: Container) -> ConfigAction:
    """Map a parsed ConfigActionLayout onto a variant."""
    variant, value = parsed["variant"], parsed["value"]
    if variant == 0:
        member = value["new_member"]
        return AddMember(member=_pubkey(member["key"]),
                         permissions={"mask": member["permissions"]["mask"]})
    if variant == 1:
        return RemoveMember(member=_pubkey(value["old_member"]))
    if variant == 2:
        return ChangeThreshold(new_threshold=value["new_threshold"])
    if variant == 3:
        return SetTimeLock(time_lock=value["new_time_lock"])
    if variant == 4:
        return AddSpendingLimit(
            create_key=_pubkey(value["create_key"]),
            vault_index=value["vault_index"],
            mint=_pubkey(value["mint"]),
            amount=str(value["amount"]),
            period=value["period"],
            members=[_pubkey(m) for m in value["members"]],
            destinations=[_pubkey(d) for d in value["destinations"]],
        )
    if variant == 5:
        return RemoveSpendingLimit(spending_limit_key=_pubkey(value["spending_limit"]))
    if variant == 6:
        collector = value["new_rent_collector"]
        return Unrecognized("SetRentCollector", {
            "newRentCollector": None if collector is None else _pubkey(collector),
        })
    return Unrecognized(f"Unknown({variant})", {"rawData": bytes(value).hex()})


def read_config_action(data: bytes) -> ConfigAction:
    """Decode one Borsh-encoded action (u8 variant index)."""
    return config_action_from_layout(ConfigActionLayout.parse(bytes(data)))


def config_actions_to_display(actions: List[Any]) -> List[Dict[str, Any]]:
    """Display dicts for a mix of variants and raw records."""
    result = []
    for action in actions:
        if not hasattr(action, "to_display"):
            action = parse_config_action(action)
        result.append(action.to_display())
    return result
