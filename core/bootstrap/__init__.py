"""
OFR Bootstrap — System Self-Defense
=====================================
Ensures the registry never serves from an inconsistent store.
"""

from core.bootstrap.errors import SystemBootstrapError
from core.bootstrap.self_check import run_bootstrap_checks

__all__ = [
    "SystemBootstrapError",
    "run_bootstrap_checks",
]
