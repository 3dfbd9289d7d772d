"""
OFR Operator Filter — Code Lookup and Fingerprints
====================================================
A code fingerprint identifies an implementation rather than a
deployment: every address running the same bytecode shares it.

Addresses with no code (plain accounts) fingerprint to ZERO_CODE_HASH.
"""

from __future__ import annotations

import hashlib
from typing import Mapping, Protocol

from engines.operator_filter.constants import ZERO_CODE_HASH
from engines.operator_filter.models import canonical_address


def compute_code_hash(code: bytes) -> str:
    """Fingerprint bytecode as 0x-prefixed SHA-256 hex."""
    if not isinstance(code, (bytes, bytearray)):
        raise ValueError("code must be bytes.")
    if not code:
        return ZERO_CODE_HASH
    return "0x" + hashlib.sha256(bytes(code)).hexdigest()


class CodeProvider(Protocol):
    def get_code(self, address: str) -> bytes:
        ...


class InMemoryCodeProvider:
    """
    Deterministic in-memory code lookup used for bootstrap/tests.
    Unknown addresses have no code.
    """

    def __init__(self, code_by_address: Mapping[str, bytes] | None = None):
        self._code: dict[str, bytes] = {}
        for address, code in (code_by_address or {}).items():
            self.set_code(address, code)

    def set_code(self, address: str, code: bytes) -> None:
        if not isinstance(code, (bytes, bytearray)):
            raise ValueError("code must be bytes.")
        self._code[canonical_address(address)] = bytes(code)

    def get_code(self, address: str) -> bytes:
        return self._code.get(canonical_address(address), b"")
