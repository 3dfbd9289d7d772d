"""
OFR Bootstrap — Invariant Checks
==================================
Each function verifies one registry law against persisted state.
If any check fails → SystemBootstrapError is raised.

These checks do NOT:
- Auto-fix anything
- Run migrations
- Silence failures
- Create tables
"""

import logging
from collections import defaultdict

from django.db import connection

from core.bootstrap.errors import SystemBootstrapError
from engines.operator_filter.constants import COLLECTION_SUBSCRIBERS

logger = logging.getLogger("ofr.bootstrap")

REQUIRED_TABLES = ("ofr_registrations", "ofr_set_members")


# ══════════════════════════════════════════════════════════════
# CHECK 1: Filter Store Tables Exist
# ══════════════════════════════════════════════════════════════

def check_filter_store_tables():
    """
    Verify the filter store tables exist.
    If missing → refuse start. No auto-migration.
    """
    table_names = set(connection.introspection.table_names())
    missing = [table for table in REQUIRED_TABLES if table not in table_names]

    if missing:
        raise SystemBootstrapError(
            invariant="FILTER_STORE_TABLES",
            detail=(
                f"Tables {missing} do not exist. "
                "Run migrations before starting the registry."
            ),
        )

    logger.info("✓ Filter store tables exist.")


# ══════════════════════════════════════════════════════════════
# CHECK 2: Set Member Positions Are Contiguous
# ══════════════════════════════════════════════════════════════

def check_set_positions():
    """
    Every (collection, owner) set must occupy positions 0..n-1 exactly.
    A gap breaks indexed lookups.
    """
    from core.filter_store.models import SetMember

    positions: dict[tuple[str, str], list[int]] = defaultdict(list)
    rows = SetMember.objects.order_by("collection", "owner", "position").values_list(
        "collection", "owner", "position"
    )
    for collection, owner, position in rows:
        positions[(collection, owner)].append(position)

    for (collection, owner), found in positions.items():
        if found != list(range(len(found))):
            raise SystemBootstrapError(
                invariant="SET_POSITIONS",
                detail=(
                    f"Set '{collection}' of '{owner}' has non-contiguous "
                    f"positions {found}."
                ),
            )

    logger.info(f"✓ Set positions contiguous ({len(positions)} sets).")


# ══════════════════════════════════════════════════════════════
# CHECK 3: Subscriber Index Matches Registrations
# ══════════════════════════════════════════════════════════════

def check_subscriber_index():
    """
    a ∈ subscribers[s]  ⟺  registration[a].subscription == s
    """
    from core.filter_store.models import RegistrationRecord, SetMember

    expected: dict[str, set[str]] = defaultdict(set)
    subscribed = RegistrationRecord.objects.exclude(subscription__isnull=True).values_list(
        "address", "subscription"
    )
    for address, subscription in subscribed:
        if subscription:
            expected[subscription].add(address)

    indexed: dict[str, set[str]] = defaultdict(set)
    rows = SetMember.objects.filter(collection=COLLECTION_SUBSCRIBERS).values_list(
        "owner", "value"
    )
    for owner, value in rows:
        indexed[owner].add(value)

    targets = set(expected) | set(indexed)
    for target in sorted(targets):
        if expected.get(target, set()) != indexed.get(target, set()):
            raise SystemBootstrapError(
                invariant="SUBSCRIBER_INDEX",
                detail=(
                    f"Subscriber index of '{target}' is "
                    f"{sorted(indexed.get(target, set()))}, registrations say "
                    f"{sorted(expected.get(target, set()))}."
                ),
            )

    logger.info(f"✓ Subscriber index consistent ({len(targets)} targets).")
