"""周期护理提醒数据模型。"""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from vet_clinic.config import DEFAULT_MED_INTERVAL_DAYS


class Species(str, Enum):
    """物种。"""
    DOG = "Dog"
    CAT = "Cat"
    RABBIT = "Rabbit"
    BIRD = "Bird"
    OTHER = "Other"


class CareKind(str, Enum):
    """护理项目：驱虫、定期服务与疫苗。"""
    HEARTWORM = "heartworm"      # 心丝虫预防
    EXTERNAL = "external"        # 体外驱虫
    INTERNAL = "internal"        # 体内驱虫
    SCALING = "scaling"          # 洗牙
    ANTIBODY = "antibody"        # 抗体检测
    MED = "med"                  # 长期用药
    DHPPL = "DHPPL"
    CORONA = "Corona"
    KENNEL_COUGH = "Kennel Cough"
    INFLUENZA = "Influenza"
    RABIES = "Rabies"
    FVRCP_C = "FVRC P+C"
    FVRCP_C_LEUKEMIA = "FVRC P+C + Leukemia"


PARASITE_KINDS = (CareKind.HEARTWORM, CareKind.INTERNAL, CareKind.EXTERNAL)
SERVICE_KINDS = (CareKind.SCALING, CareKind.ANTIBODY, CareKind.MED)
CANINE_VACCINES = (
    CareKind.DHPPL,
    CareKind.CORONA,
    CareKind.KENNEL_COUGH,
    CareKind.INFLUENZA,
    CareKind.RABIES,
)
FELINE_VACCINES = (CareKind.FVRCP_C, CareKind.FVRCP_C_LEUKEMIA, CareKind.RABIES)
VACCINE_KINDS = frozenset(CANINE_VACCINES + FELINE_VACCINES)


def vaccines_for_species(species) -> list:
    """按物种返回疫苗清单；犬猫以外的物种没有固定疫苗。"""
    species = Species(species)
    if species == Species.DOG:
        return list(CANINE_VACCINES)
    if species == Species.CAT:
        return list(FELINE_VACCINES)
    return []


def is_round_based(kind) -> bool:
    """疫苗按针次计数，其余项目没有针次。"""
    return CareKind(kind) in VACCINE_KINDS


class DueStatus(str, Enum):
    """到期状态，用于列表着色。"""
    NONE = "none"            # 未设置
    OVERDUE = "overdue"      # 已过期
    SOON = "soon"            # 即将到期
    SCHEDULED = "scheduled"  # 尚早


class CareItem(BaseModel):
    """单个患者的一项周期护理记录，按 (patient_id, kind) 唯一。"""
    patient_id: str = Field(..., description="患者 ID")
    kind: CareKind = Field(..., description="护理项目")
    last_date: Optional[date] = Field(None, description="上次执行日期")
    next_date: Optional[date] = Field(None, description="下次到期日期")
    current_round: Optional[int] = Field(None, ge=0, description="已接种针次，仅疫苗")
    interval_days: Optional[int] = Field(None, gt=0, description="用药间隔天数，仅长期用药")
    med_info: Optional[str] = Field(None, description="长期用药说明")
    updated_at: Optional[str] = Field(None, description="更新时间 ISO")

    model_config = ConfigDict(use_enum_values=True)

    @classmethod
    def create(
        cls,
        patient_id: str,
        kind,
        interval_days: Optional[int] = None,
    ) -> "CareItem":
        """新建一条尚无日期的护理记录。"""
        kind = CareKind(kind)
        item = cls(patient_id=patient_id, kind=kind)
        if is_round_based(kind):
            item.current_round = 0
        if kind == CareKind.MED:
            item.interval_days = interval_days or DEFAULT_MED_INTERVAL_DAYS
        return item

    @property
    def care_kind(self) -> CareKind:
        return CareKind(self.kind)
