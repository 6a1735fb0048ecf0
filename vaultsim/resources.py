"""In-memory resources: rules, buckets, vaults, proofs and a ledger of resource managers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Mapping

from vaultsim.amount import Amount

DIVISIBILITY_NONE = 0
DIVISIBILITY_MAXIMUM = 18


class ResourceError(Exception):
    """A resource operation could not be carried out."""


class AuthorizationError(ResourceError):
    """The presented badges do not satisfy a rule."""


class Action(enum.Enum):
    MINT = "mint"
    BURN = "burn"
    WITHDRAW = "withdraw"
    UPDATE_METADATA = "update_metadata"
    UPDATE_NON_FUNGIBLE_DATA = "update_non_fungible_data"


@dataclass(frozen=True)
class Proof:
    """Evidence that some quantity of a resource is held."""

    resource_address: str
    amount: Amount
    non_fungible_ids: tuple = ()


@dataclass(frozen=True)
class Rule:
    """An access rule: allow everyone, deny everyone, or require any of some badges."""

    kind: str
    resources: frozenset = frozenset()

    @classmethod
    def allow_all(cls) -> "Rule":
        return cls("allow")

    @classmethod
    def deny_all(cls) -> "Rule":
        return cls("deny")

    @classmethod
    def require_any(cls, *args: str) -> "Rule":
        return cls("require", frozenset(args))

    def permits(self, badges: Iterable[Proof]) -> bool:
        if self.kind == "allow":
            return True
        if self.kind == "deny":
            return False
        return any(p.resource_address in self.resources and not p.amount.is_zero() for p in badges)


def _authorize(rule: Rule, badges: Iterable[Proof], what: str) -> None:
    if not rule.permits(badges):
        raise AuthorizationError(f"not authorized to {what}")


class Bucket:
    """A transient container of one resource."""

    def __init__(self, resource_address: str, amount: Amount | int = 0, ids: Iterable[Hashable] | None = None):
        self.resource_address = resource_address
        self._ids: list | None = None if ids is None else list(ids)
        self._amount = Amount(len(self._ids)) if self._ids is not None else Amount(amount)

    @property
    def amount(self) -> Amount:
        return self._amount

    @property
    def is_non_fungible(self) -> bool:
        return self._ids is not None

    def take(self, amount: Amount | int) -> "Bucket":
        amount = Amount(amount)
        if amount < 0:
            raise ResourceError("cannot take a negative amount")
        if amount > self._amount:
            raise ResourceError("insufficient balance")
        if self._ids is not None:
            if amount.raw % Amount(1).raw:
                raise ResourceError("non-fungible amounts must be whole")
            count = amount.raw // Amount(1).raw
            taken, self._ids = self._ids[:count], self._ids[count:]
            self._amount = Amount(len(self._ids))
            return Bucket(self.resource_address, ids=taken)
        self._amount = self._amount - amount
        return Bucket(self.resource_address, amount)

    def take_non_fungible(self, nf_id: Hashable) -> "Bucket":
        if self._ids is None or nf_id not in self._ids:
            raise ResourceError(f"non-fungible {nf_id!r} not found")
        self._ids.remove(nf_id)
        self._amount = Amount(len(self._ids))
        return Bucket(self.resource_address, ids=[nf_id])

    def put(self, other: "Bucket") -> None:
        if other.resource_address != self.resource_address:
            raise ResourceError("resource mismatch")
        if self._ids is not None:
            self._ids.extend(other._ids or ())
            self._amount = Amount(len(self._ids))
            other._ids = []
        else:
            self._amount = self._amount + other._amount
        other._amount = Amount(0)

    def non_fungible_ids(self) -> list:
        if self._ids is None:
            raise ResourceError("fungible resource has no ids")
        return list(self._ids)

    def is_empty(self) -> bool:
        return self._amount.is_zero()

    def create_proof(self) -> Proof:
        return Proof(self.resource_address, self._amount, tuple(self._ids or ()))

    def __repr__(self) -> str:
        return f"Bucket({self.resource_address!r}, {self._amount})"


class Vault:
    """A persistent container whose withdrawals obey the resource's withdraw rule."""

    def __init__(self, manager: "ResourceManager", bucket: Bucket | None = None):
        self.manager = manager
        self._bucket = Bucket(manager.address, ids=[] if not manager.fungible else None)
        if bucket is not None:
            self.put(bucket)

    @property
    def resource_address(self) -> str:
        return self.manager.address

    @property
    def amount(self) -> Amount:
        return self._bucket.amount

    def put(self, bucket: Bucket) -> None:
        self._bucket.put(bucket)

    def take(self, amount: Amount | int, badges: Iterable[Proof] = ()) -> Bucket:
        _authorize(self.manager.rule(Action.WITHDRAW), badges, "withdraw")
        self.manager._check_divisibility(Amount(amount))
        return self._bucket.take(amount)

    def take_all(self, badges: Iterable[Proof] = ()) -> Bucket:
        return self.take(self._bucket.amount, badges)

    def take_non_fungible(self, nf_id: Hashable, badges: Iterable[Proof] = ()) -> Bucket:
        _authorize(self.manager.rule(Action.WITHDRAW), badges, "withdraw")
        return self._bucket.take_non_fungible(nf_id)

    def non_fungible_ids(self) -> list:
        return self._bucket.non_fungible_ids()

    def create_proof(self) -> Proof:
        return self._bucket.create_proof()


_DEFAULT_RULES = {
    Action.MINT: Rule.deny_all(),
    Action.BURN: Rule.deny_all(),
    Action.WITHDRAW: Rule.allow_all(),
    Action.UPDATE_METADATA: Rule.deny_all(),
    Action.UPDATE_NON_FUNGIBLE_DATA: Rule.deny_all(),
}


@dataclass
class ResourceManager:
    """Supply, metadata and access rules of one resource."""

    address: str
    fungible: bool
    divisibility: int = DIVISIBILITY_MAXIMUM
    metadata: dict = field(default_factory=dict)
    total_supply: Amount = field(default_factory=Amount)
    _rules: dict = field(default_factory=dict)
    _mutability: dict = field(default_factory=dict)
    _data: dict = field(default_factory=dict)

    def rule(self, action: Action) -> Rule:
        return self._rules.get(action, _DEFAULT_RULES[action])

    def is_locked(self, action: Action) -> bool:
        return self._mutability.get(action) is None

    def _check_divisibility(self, amount: Amount) -> None:
        if amount.raw % (10 ** (18 - self.divisibility)):
            raise ResourceError(f"amount {amount} exceeds divisibility {self.divisibility}")

    def _issue(self, amount: Amount) -> Bucket:
        if amount < 0:
            raise ResourceError("cannot mint a negative amount")
        self._check_divisibility(amount)
        self.total_supply = self.total_supply + amount
        return Bucket(self.address, amount)

    def _issue_non_fungible(self, nf_id: Hashable, data: Any) -> Bucket:
        if nf_id in self._data:
            raise ResourceError(f"non-fungible {nf_id!r} already exists")
        self._data[nf_id] = data
        self.total_supply = self.total_supply + 1
        return Bucket(self.address, ids=[nf_id])

    def mint(self, amount: Amount | int, badges: Iterable[Proof] = ()) -> Bucket:
        if not self.fungible:
            raise ResourceError("use mint_non_fungible for non-fungible resources")
        _authorize(self.rule(Action.MINT), badges, "mint")
        return self._issue(Amount(amount))

    def mint_non_fungible(self, nf_id: Hashable, data: Any, badges: Iterable[Proof] = ()) -> Bucket:
        if self.fungible:
            raise ResourceError("resource is fungible")
        _authorize(self.rule(Action.MINT), badges, "mint")
        return self._issue_non_fungible(nf_id, data)

    def burn(self, bucket: Bucket, badges: Iterable[Proof] = ()) -> None:
        if bucket.resource_address != self.address:
            raise ResourceError("resource mismatch")
        _authorize(self.rule(Action.BURN), badges, "burn")
        if bucket.is_non_fungible:
            for nf_id in bucket.non_fungible_ids():
                self._data.pop(nf_id, None)
        self.total_supply = self.total_supply - bucket.amount
        bucket.take(bucket.amount)

    def set_rule(self, action: Action, rule: Rule, badges: Iterable[Proof] = ()) -> None:
        changer = self._mutability.get(action)
        if changer is None:
            raise ResourceError(f"{action.value} rule is locked")
        _authorize(changer, badges, f"change the {action.value} rule")
        self._rules[action] = rule

    def lock(self, action: Action, badges: Iterable[Proof] = ()) -> None:
        changer = self._mutability.get(action)
        if changer is None:
            raise ResourceError(f"{action.value} rule is locked")
        _authorize(changer, badges, f"lock the {action.value} rule")
        self._mutability[action] = None

    def update_metadata(self, metadata: Mapping[str, str], badges: Iterable[Proof] = ()) -> None:
        _authorize(self.rule(Action.UPDATE_METADATA), badges, "update metadata")
        self.metadata = dict(metadata)

    def update_non_fungible_data(self, nf_id: Hashable, data: Any, badges: Iterable[Proof] = ()) -> None:
        if nf_id not in self._data:
            raise ResourceError(f"non-fungible {nf_id!r} not found")
        _authorize(self.rule(Action.UPDATE_NON_FUNGIBLE_DATA), badges, "update non-fungible data")
        self._data[nf_id] = data

    def non_fungible_data(self, nf_id: Hashable) -> Any:
        try:
            return self._data[nf_id]
        except KeyError:
            raise ResourceError(f"non-fungible {nf_id!r} not found") from None


RuleSpec = Mapping[Action, "tuple[Rule, Rule | None]"]


class Ledger:
    """Registry of resources, including a native token that the ledger can issue freely."""

    def __init__(self) -> None:
        self._managers: dict[str, ResourceManager] = {}
        self.native_address = self._register(True, DIVISIBILITY_MAXIMUM, {"name": "Radix", "symbol": "XRD"}, None).address

    def _register(self, fungible: bool, divisibility: int, metadata, rules: RuleSpec | None) -> ResourceManager:
        if not 0 <= divisibility <= 18:
            raise ResourceError("divisibility must be between 0 and 18")
        address = f"resource_{len(self._managers) + 1}"
        manager = ResourceManager(address, fungible, divisibility, dict(metadata or {}))
        for action, (rule, changer) in (rules or {}).items():
            manager._rules[action] = rule
            manager._mutability[action] = changer
        self._managers[address] = manager
        return manager

    def new_fungible(self, divisibility=DIVISIBILITY_MAXIMUM, metadata=None, initial_supply=None, rules=None):
        """Create a fungible resource; return its initial bucket, or its address if no supply is given.

        ``rules`` maps an action to ``(rule, changer)``; a changer of ``None`` locks the rule.
        """
        manager = self._register(True, divisibility, metadata, rules)
        if initial_supply is None:
            return manager.address
        return manager._issue(Amount(initial_supply))

    def new_non_fungible(self, metadata=None, entries=None, rules=None):
        """Create a non-fungible resource; return a bucket of ``entries`` (id to data), or the address."""
        manager = self._register(False, DIVISIBILITY_NONE, metadata, rules)
        if entries is None:
            return manager.address
        bucket = Bucket(manager.address, ids=[])
        for nf_id, data in entries.items():
            bucket.put(manager._issue_non_fungible(nf_id, data))
        return bucket

    def manager(self, address: str) -> ResourceManager:
        try:
            return self._managers[address]
        except KeyError:
            raise ResourceError(f"unknown resource {address}") from None

    def mint_native(self, amount: Amount | int) -> Bucket:
        return self._managers[self.native_address]._issue(Amount(amount))