"""计费与疫苗自动计费。"""
from vet_clinic.billing.models import (
    BillingItem,
    Invoice,
    InvoiceStatus,
    ServiceCatalogItem,
    ServiceCategory,
)
from vet_clinic.billing.service import VACCINE_SKU_MAP, BillingService

__all__ = [
    "BillingItem",
    "BillingService",
    "Invoice",
    "InvoiceStatus",
    "ServiceCatalogItem",
    "ServiceCategory",
    "VACCINE_SKU_MAP",
]
