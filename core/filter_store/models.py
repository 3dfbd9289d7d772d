"""
OFR Filter Store - Relational Registry State
============================================
RegistrationRecord: one row per registered address.
SetMember:          one row per member of a named enumerable set
                    (operators, code_hashes, subscribers) owned by an
                    address. position keeps enumeration order stable
                    across reads so indexed lookups are deterministic.
"""

from __future__ import annotations

from django.db import models


class RegistrationRecord(models.Model):
    address = models.CharField(max_length=128, primary_key=True)
    subscription = models.CharField(max_length=128, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ofr_registrations"
        ordering = ["address"]
        indexes = [
            models.Index(fields=["subscription"], name="idx_ofr_reg_subscription"),
        ]

    def __str__(self) -> str:
        if self.subscription:
            return f"{self.address} -> {self.subscription}"
        return self.address


class SetMember(models.Model):
    collection = models.CharField(max_length=32)
    owner = models.CharField(max_length=128)
    value = models.CharField(max_length=128)
    position = models.PositiveIntegerField()

    class Meta:
        db_table = "ofr_set_members"
        ordering = ["collection", "owner", "position"]
        indexes = [
            models.Index(fields=["collection", "owner"], name="idx_ofr_member_owner"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["collection", "owner", "value"],
                name="uq_ofr_member_value",
            ),
            models.UniqueConstraint(
                fields=["collection", "owner", "position"],
                name="uq_ofr_member_position",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.collection}:{self.owner}[{self.position}]={self.value}"
