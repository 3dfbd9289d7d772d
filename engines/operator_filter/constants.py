"""
OFR Operator Filter — Constants
=================================
Sentinel values and collection names shared by the registry,
its stores and its tests.
"""

from __future__ import annotations

import re


# ══════════════════════════════════════════════════════════════
# SENTINELS
# ══════════════════════════════════════════════════════════════

# The "empty" address. Never a valid subscription target.
ZERO_ADDRESS = "0x" + "0" * 40

# Fingerprint of an address that carries no code. Never filterable.
ZERO_CODE_HASH = "0x" + "0" * 64

CODE_HASH_PATTERN = re.compile(r"^0x[0-9a-f]{64}$")


# ══════════════════════════════════════════════════════════════
# STORE COLLECTIONS
# ══════════════════════════════════════════════════════════════

COLLECTION_OPERATORS = "operators"
COLLECTION_CODE_HASHES = "code_hashes"
COLLECTION_SUBSCRIBERS = "subscribers"

VALID_COLLECTIONS = frozenset({
    COLLECTION_OPERATORS,
    COLLECTION_CODE_HASHES,
    COLLECTION_SUBSCRIBERS,
})
