"""
OFR Bootstrap — Self-Check Orchestrator
=========================================
Runs all invariant checks at system startup.
If any check fails → SystemBootstrapError propagates → system refuses to start.

Check order:
1. Filter store tables exist
2. Set member positions are contiguous
3. Subscriber index matches registrations

No auto-fix. No fallback. No silence.
"""

import logging

from core.bootstrap.invariants import (
    check_filter_store_tables,
    check_set_positions,
    check_subscriber_index,
)

logger = logging.getLogger("ofr.bootstrap")


def run_bootstrap_checks():
    """
    Execute all system invariant checks.
    Called once at startup via AppConfig.ready().
    """
    logger.info("═══ OFR Bootstrap Self-Check Starting ═══")

    check_filter_store_tables()
    check_set_positions()
    check_subscriber_index()

    logger.info("═══ OFR Bootstrap Self-Check PASSED ═══")
