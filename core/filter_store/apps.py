"""
OFR Filter Store - App Configuration
====================================
Persistent registrations, filter lists and subscriber index.
"""

from django.apps import AppConfig


class CoreFilterStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.filter_store"
    label = "core_filter_store"
    verbose_name = "OFR Filter Store"
