"""
OFR Bootstrap — App Configuration
===================================
Validates registry configuration and runs the store self-check
once Django finishes loading.

Rules:
- OPERATOR_FILTER setting is always validated (bad keys refuse boot)
- Store checks skip during migrations and tests (tables may not exist)
- If self-check fails → SystemBootstrapError prevents startup
"""

import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger("ofr.bootstrap")

# Management commands that run before tables are guaranteed to exist
SKIP_COMMANDS = {
    "migrate",
    "makemigrations",
    "showmigrations",
    "sqlmigrate",
    "flush",
    "shell",
    "dbshell",
    "test",
    "check",
}


def _is_management_command_skip() -> bool:
    return len(sys.argv) >= 2 and sys.argv[1] in SKIP_COMMANDS


def _is_pytest_context() -> bool:
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or "pytest" in sys.modules
    )


class BootstrapConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.bootstrap"
    label = "bootstrap"
    verbose_name = "OFR Bootstrap"

    def ready(self):
        from core.bootstrap.errors import SystemBootstrapError
        from engines.operator_filter.config import load_registry_config

        try:
            config = load_registry_config()
        except ValueError as exc:
            raise SystemBootstrapError(
                invariant="REGISTRY_CONFIG",
                detail=str(exc),
            ) from exc
        logger.info(
            f"Registry config loaded (guard_reentrant_calls="
            f"{config.guard_reentrant_calls})."
        )

        if _is_management_command_skip() or _is_pytest_context():
            logger.info(
                "Bootstrap self-check skipped for management/test context."
            )
            return

        from core.bootstrap.self_check import run_bootstrap_checks
        run_bootstrap_checks()
