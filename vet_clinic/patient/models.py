"""患者与 SOAP 病历数据模型。"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from vet_clinic.care.models import Species


class Patient(BaseModel):
    """患者档案（基础）。"""
    id: str = Field(..., description="患者唯一 ID")
    chart_number: Optional[str] = Field(None, description="病历号，用于影像归档检索")
    name: str = Field(..., description="名字")
    species: Species = Field(Species.DOG, description="物种")
    breed: str = Field("", description="品种")
    birth_date: Optional[date] = Field(None, description="出生日期")
    gender: str = Field("", description="性别")
    weight_kg: Optional[float] = Field(None, ge=0, description="体重 kg")
    owner: str = Field("", description="主人姓名")
    phone: str = Field("", description="联系电话")
    address: Optional[str] = Field(None, description="地址")
    chip_number: Optional[str] = Field(None, description="芯片号")
    medical_memo: Optional[str] = Field(None, description="诊疗备注")
    created_at: Optional[str] = Field(None, description="创建时间 ISO")
    updated_at: Optional[str] = Field(None, description="更新时间 ISO")

    model_config = ConfigDict(use_enum_values=True)


class SoapNote(BaseModel):
    """SOAP 病历：主观 / 客观 / 评估 / 计划。"""
    patient_id: str = Field(..., description="患者 ID")
    cc: str = Field("", description="主诉")
    subjective: str = Field("", description="S")
    objective: str = Field("", description="O")
    assessment_problems: str = Field("", description="A：问题列表")
    assessment_ddx: List[str] = Field(default_factory=list, description="A：鉴别诊断")
    plan_tx: str = Field("", description="P：处置")
    plan_rx: str = Field("", description="P：处方")
    plan_summary: str = Field("", description="P：小结")
    lab_results: dict = Field(default_factory=dict, description="检验结果")

    model_config = ConfigDict(use_enum_values=True)
