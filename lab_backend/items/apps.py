# items/apps.py

"""
ITEMS APP CONFIG

Item registry + lot ledger:
- ItemDefinition (what can be stocked)
- Lot (one received batch, its own quantity and expiry)
- FEFO allocation and the derived stock view
"""

from django.apps import AppConfig


class ItemsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "items"
    verbose_name = "Items & Lots"
