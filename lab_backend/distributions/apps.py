# distributions/apps.py

"""
DISTRIBUTIONS APP CONFIG

Every way stock leaves the lots:
- Distribution (handed to a recipient / department)
- WasteRecord (disposed: expired, contaminated, damaged, recalled)
- UsageRecord (consumed in-house)
"""

from django.apps import AppConfig


class DistributionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "distributions"
    verbose_name = "Distributions, Waste & Usage"
