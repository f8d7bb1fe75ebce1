"""计费数据模型：服务目录、账单与账单明细。"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ServiceCategory(str, Enum):
    """服务目录分类。"""
    CONSULTATION = "CONSULTATION"
    LABORATORY = "LABORATORY"
    PROCEDURE = "PROCEDURE"
    PHARMACY = "PHARMACY"
    HOSPITALIZATION = "HOSPITALIZATION"
    SUPPLIES = "SUPPLIES"
    PREVENTION = "PREVENTION"
    FOOD = "FOOD"
    IMAGING = "IMAGING"


class InvoiceStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class ServiceCatalogItem(BaseModel):
    """服务目录条目。"""
    id: Optional[str] = Field(None, description="条目 ID")
    category: ServiceCategory = Field(..., description="分类")
    subcategory: Optional[str] = Field(None, description="子分类")
    name: str = Field(..., description="名称")
    sku_code: Optional[str] = Field(None, description="SKU 编码")
    default_price: float = Field(..., ge=0, description="默认单价")
    cost_price: Optional[float] = Field(None, ge=0, description="成本价")

    model_config = ConfigDict(use_enum_values=True)


class Invoice(BaseModel):
    """患者账单；同一患者同一时间最多一张未付账单。"""
    id: Optional[str] = Field(None, description="账单 ID")
    patient_id: str = Field(..., description="患者 ID")
    status: InvoiceStatus = Field(InvoiceStatus.UNPAID, description="状态")
    created_at: Optional[str] = Field(None, description="创建时间 ISO")

    model_config = ConfigDict(use_enum_values=True)


class BillingItem(BaseModel):
    """账单明细。"""
    id: Optional[str] = Field(None, description="明细 ID")
    invoice_id: str = Field(..., description="所属账单")
    service_id: Optional[str] = Field(None, description="服务目录条目")
    item_name: str = Field(..., description="名称")
    category: str = Field(..., description="分类")
    unit_price: float = Field(..., ge=0, description="单价")
    quantity: int = Field(1, gt=0, description="数量")
    discount_amount: float = Field(0, ge=0, description="折扣金额")
    total_price: float = Field(..., description="合计")
    created_at: Optional[str] = Field(None, description="创建时间 ISO")

    model_config = ConfigDict(use_enum_values=True)
