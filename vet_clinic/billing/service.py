"""计费：服务目录查询、未付账单与疫苗自动计费。"""
import logging
from typing import List, Optional

from vet_clinic.billing.models import (
    BillingItem,
    Invoice,
    InvoiceStatus,
    ServiceCatalogItem,
)
from vet_clinic.care.models import CareKind
from vet_clinic.store.records import RecordStore

logger = logging.getLogger(__name__)

CATALOG_TABLE = "service_catalog"
INVOICE_TABLE = "billing_invoices"
ITEM_TABLE = "billing_items"

# 疫苗 → 服务目录 SKU
VACCINE_SKU_MAP = {
    CareKind.DHPPL: "VAC-DHPPL",
    CareKind.CORONA: "VAC-COR",
    CareKind.KENNEL_COUGH: "VAC-KC",
    CareKind.RABIES: "VAC-RAB",
    CareKind.FVRCP_C: "VAC-CVRP",
    CareKind.FVRCP_C_LEUKEMIA: "VAC-CVRP",
    CareKind.INFLUENZA: "VAC-CIV",
}


class BillingService:
    """基于记录存储的计费操作。"""

    def __init__(self, records: RecordStore):
        self.records = records

    def add_catalog_item(self, item: ServiceCatalogItem) -> ServiceCatalogItem:
        row = self.records.insert(CATALOG_TABLE, item.model_dump(mode="json", exclude_none=True))
        return ServiceCatalogItem.model_validate(row)

    def find_by_sku(self, sku: str) -> Optional[ServiceCatalogItem]:
        """按 SKU 查找目录条目（不区分大小写）。"""
        wanted = sku.strip().lower()
        for row in self.records.select(CATALOG_TABLE):
            if (row.get("sku_code") or "").strip().lower() == wanted:
                return ServiceCatalogItem.model_validate(row)
        return None

    def open_invoice(self, patient_id: str, create: bool = True) -> Optional[Invoice]:
        """返回患者当前未付账单；没有时按需新建。"""
        row = self.records.get(INVOICE_TABLE, patient_id=patient_id, status=InvoiceStatus.UNPAID.value)
        if row is None:
            if not create:
                return None
            row = self.records.insert(
                INVOICE_TABLE,
                Invoice(patient_id=patient_id).model_dump(mode="json", exclude_none=True),
            )
            logger.info("新建未付账单: patient=%s invoice=%s", patient_id, row["id"])
        return Invoice.model_validate(row)

    def add_line(self, invoice_id: str, catalog_item: ServiceCatalogItem, quantity: int = 1) -> BillingItem:
        """按目录条目向账单追加一条明细。"""
        item = BillingItem(
            invoice_id=invoice_id,
            service_id=catalog_item.id,
            item_name=catalog_item.name,
            category=catalog_item.category,
            unit_price=catalog_item.default_price,
            quantity=quantity,
            total_price=catalog_item.default_price * quantity,
        )
        row = self.records.insert(ITEM_TABLE, item.model_dump(mode="json", exclude_none=True))
        return BillingItem.model_validate(row)

    def add_vaccine_charge(self, patient_id: str, kind) -> Optional[BillingItem]:
        """登记疫苗接种后自动计费。无 SKU 或目录中无对应条目时不计费。"""
        sku = VACCINE_SKU_MAP.get(CareKind(kind))
        if not sku:
            return None
        catalog_item = self.find_by_sku(sku)
        if catalog_item is None:
            logger.info("服务目录中没有 %s，跳过自动计费", sku)
            return None
        invoice = self.open_invoice(patient_id)
        return self.add_line(invoice.id, catalog_item)

    def items_for_invoice(self, invoice_id: str) -> List[BillingItem]:
        return [BillingItem.model_validate(r) for r in self.records.select(ITEM_TABLE, invoice_id=invoice_id)]

    def invoice_total(self, invoice_id: str) -> float:
        """账单合计（扣除折扣）。"""
        return sum(i.total_price - i.discount_amount for i in self.items_for_invoice(invoice_id))

    def mark_paid(self, invoice_id: str) -> Optional[Invoice]:
        row = self.records.update(INVOICE_TABLE, invoice_id, {"status": InvoiceStatus.PAID.value})
        return Invoice.model_validate(row) if row else None
