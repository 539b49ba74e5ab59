"""Caveats: additive restrictions attached to a delegation.

Each caveat names an enforcer contract and the ``terms`` it checks. Terms are
packed exactly as the enforcers decode them:

* ``allowedTargets`` - concatenated 20-byte addresses
* ``allowedMethods`` - concatenated 4-byte function selectors
* ``timestamp``      - ``uint128 after || uint128 before``; ``0`` means no
  bound on that side
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from eth_utils import function_signature_to_4byte_selector, is_address, to_checksum_address
from pydantic import BaseModel, ConfigDict, Field

from oneshot_agent.delegation.environment import DelegationEnvironment
from oneshot_agent.exceptions import ActionValidationError

_SELECTOR_RE = re.compile(r"^0x[0-9a-fA-F]{8}$")
_UINT128_MAX = 2**128 - 1

ALLOWED_TARGETS = "allowedTargets"
ALLOWED_METHODS = "allowedMethods"
TIMESTAMP = "timestamp"


class Caveat(BaseModel):
    """A single restriction. ``kind`` is local bookkeeping and is not serialized."""

    model_config = ConfigDict(frozen=True)

    enforcer: str
    terms: str
    args: str = "0x"
    kind: Optional[str] = Field(default=None, exclude=True)

    @property
    def terms_bytes(self) -> bytes:
        return bytes.fromhex(self.terms[2:])


def _targets_terms(addresses: Iterable[str]) -> str:
    packed = b""
    for address in addresses:
        if not is_address(address):
            raise ActionValidationError(f"Invalid contract address: {address!r}")
        packed += bytes.fromhex(to_checksum_address(address)[2:])
    return "0x" + packed.hex()


def method_selector(method: str) -> bytes:
    """Accept either a ``0x``-prefixed selector or a function signature."""
    method = method.strip()
    if _SELECTOR_RE.match(method):
        return bytes.fromhex(method[2:])
    if "(" in method and method.endswith(")"):
        return function_signature_to_4byte_selector(method.replace(" ", ""))
    raise ActionValidationError(
        f"Invalid method {method!r}: use a 4-byte selector (0x12345678) "
        "or a signature like transfer(address,uint256)"
    )


def _methods_terms(methods: Iterable[str]) -> str:
    return "0x" + b"".join(method_selector(m) for m in methods).hex()


def _timestamp_terms(after: int, before: int) -> str:
    for label, value in (("startTime", after), ("endTime", before)):
        if value < 0 or value > _UINT128_MAX:
            raise ActionValidationError(f"{label} out of range: {value}")
    if after and before and after >= before:
        raise ActionValidationError(
            f"startTime ({after}) must be earlier than endTime ({before})"
        )
    return "0x" + after.to_bytes(16, "big").hex() + before.to_bytes(16, "big").hex()


class CaveatBuilder:
    """Accumulates caveats for one delegation.

    ``allow_empty`` must be set explicitly for an unrestricted grant to
    build; otherwise an empty set is treated as a mistake.
    """

    def __init__(self, environment: DelegationEnvironment, allow_empty: bool = False) -> None:
        self.environment = environment
        self.allow_empty = allow_empty
        self._caveats: list[Caveat] = []

    def add_caveat(self, kind: str, *args) -> CaveatBuilder:
        env = self.environment
        if kind == ALLOWED_TARGETS:
            (targets,) = args
            caveat = Caveat(enforcer=env.allowed_targets_enforcer, terms=_targets_terms(targets), kind=kind)
        elif kind == ALLOWED_METHODS:
            (methods,) = args
            caveat = Caveat(enforcer=env.allowed_methods_enforcer, terms=_methods_terms(methods), kind=kind)
        elif kind == TIMESTAMP:
            after, before = args
            caveat = Caveat(enforcer=env.timestamp_enforcer, terms=_timestamp_terms(after, before), kind=kind)
        else:
            raise ValueError(f"Unknown caveat kind: {kind!r}")
        self._caveats.append(caveat)
        return self

    def build(self) -> tuple[Caveat, ...]:
        if not self._caveats and not self.allow_empty:
            raise ValueError("No caveats added; pass allow_empty=True for an unrestricted delegation")
        return tuple(self._caveats)


def build_caveats(
    environment: DelegationEnvironment,
    contract_addresses: list[str] | None = None,
    methods: list[str] | None = None,
    start_time: int | None = None,
    end_time: int | None = None,
) -> tuple[Caveat, ...]:
    """Build the caveat set for a delegation from optional restrictions.

    Empty lists and missing times add nothing; with no restrictions at all
    the result is an empty tuple (unrestricted grant).
    """
    builder = CaveatBuilder(environment, allow_empty=True)

    if contract_addresses:
        builder.add_caveat(ALLOWED_TARGETS, contract_addresses)

    if methods:
        builder.add_caveat(ALLOWED_METHODS, methods)

    if start_time is not None and end_time is not None:
        builder.add_caveat(TIMESTAMP, start_time, end_time)
    elif start_time is not None:
        builder.add_caveat(TIMESTAMP, start_time, 0)
    elif end_time is not None:
        builder.add_caveat(TIMESTAMP, 0, end_time)

    return builder.build()


def decode_timestamp_terms(terms: str) -> tuple[int, int]:
    """Inverse of the timestamp packing: ``(after, before)``."""
    raw = bytes.fromhex(terms[2:])
    return int.from_bytes(raw[:16], "big"), int.from_bytes(raw[16:32], "big")
