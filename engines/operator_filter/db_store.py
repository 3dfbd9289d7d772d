"""
OFR Operator Filter - DB-backed Store
=====================================
RegistryStore over the core.filter_store relational tables.

Transactions map onto Django's transaction.atomic() (savepoints when
nested) and post-commit hooks onto transaction.on_commit(), so a
rolled-back call never publishes notifications.
"""

from __future__ import annotations

import logging
from typing import Callable

from django.db import transaction

from engines.operator_filter.errors import IndexOutOfRange
from engines.operator_filter.models import UNREGISTERED, Registration
from engines.operator_filter.store import validate_collection

logger = logging.getLogger("ofr.store")


class DbRegistryStore:
    def __init__(self, using: str | None = None):
        self._using = using

    def _members(self, collection: str, owner: str):
        validate_collection(collection)
        from core.filter_store.models import SetMember

        return SetMember.objects.using(self._using).filter(
            collection=collection,
            owner=owner,
        )

    # ── Registrations ─────────────────────────────────────────

    def get_registration(self, address: str) -> Registration:
        from core.filter_store.models import RegistrationRecord

        row = (
            RegistrationRecord.objects.using(self._using)
            .filter(address=address)
            .first()
        )
        if row is None:
            return UNREGISTERED
        return Registration(registered=True, subscription=row.subscription or None)

    def put_registration(self, address: str, registration: Registration) -> None:
        if not registration.registered:
            self.delete_registration(address)
            return

        from core.filter_store.models import RegistrationRecord

        RegistrationRecord.objects.using(self._using).update_or_create(
            address=address,
            defaults={"subscription": registration.subscription},
        )

    def delete_registration(self, address: str) -> None:
        from core.filter_store.models import RegistrationRecord

        RegistrationRecord.objects.using(self._using).filter(address=address).delete()

    def registrations(self) -> tuple[tuple[str, Registration], ...]:
        from core.filter_store.models import RegistrationRecord

        rows = RegistrationRecord.objects.using(self._using).order_by("address")
        return tuple(
            (
                row.address,
                Registration(registered=True, subscription=row.subscription or None),
            )
            for row in rows
        )

    # ── Sets ──────────────────────────────────────────────────

    def set_add(self, collection: str, owner: str, value: str) -> bool:
        members = self._members(collection, owner)
        if members.filter(value=value).exists():
            return False

        from core.filter_store.models import SetMember

        SetMember.objects.using(self._using).create(
            collection=collection,
            owner=owner,
            value=value,
            position=members.count(),
        )
        return True

    def set_remove(self, collection: str, owner: str, value: str) -> bool:
        members = self._members(collection, owner)
        with transaction.atomic(using=self._using):
            row = members.select_for_update().filter(value=value).first()
            if row is None:
                return False

            freed_position = row.position
            row.delete()

            last = members.select_for_update().order_by("-position").first()
            if last is not None and last.position > freed_position:
                last.position = freed_position
                last.save(update_fields=["position"])
        return True

    def set_contains(self, collection: str, owner: str, value: str) -> bool:
        return self._members(collection, owner).filter(value=value).exists()

    def set_length(self, collection: str, owner: str) -> int:
        return self._members(collection, owner).count()

    def set_at(self, collection: str, owner: str, index: int) -> str:
        members = self._members(collection, owner)
        length = members.count()
        if not isinstance(index, int) or index < 0 or index >= length:
            raise IndexOutOfRange(index, length)
        return members.get(position=index).value

    def set_values(self, collection: str, owner: str) -> tuple[str, ...]:
        return tuple(
            self._members(collection, owner)
            .order_by("position")
            .values_list("value", flat=True)
        )

    # ── Transactions ──────────────────────────────────────────

    def atomic(self):
        return transaction.atomic(using=self._using)

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback, using=self._using)
