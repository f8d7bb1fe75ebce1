"""患者档案存储（记录存储中的 patients 表）。"""
import uuid
from datetime import date
from typing import List, Optional

from vet_clinic.patient.age import Age, age_from_birth_date, birth_date_from_age
from vet_clinic.patient.models import Patient
from vet_clinic.store.records import RecordStore

PATIENT_TABLE = "patients"


class PatientStore:
    """患者档案的保存、读取与检索。"""

    def __init__(self, records: RecordStore):
        self.records = records

    def list_ids(self) -> List[str]:
        """列出所有患者 ID。"""
        return [r["id"] for r in self.records.select(PATIENT_TABLE)]

    def load(self, patient_id: str) -> Optional[Patient]:
        """加载一位患者。"""
        row = self.records.get(PATIENT_TABLE, id=patient_id)
        return Patient.model_validate(row) if row else None

    def save(self, patient: Patient) -> Patient:
        """保存患者档案（按 id 覆盖）。"""
        data = patient.model_dump(mode="json", exclude={"created_at", "updated_at"})
        row = self.records.upsert(PATIENT_TABLE, data, on_conflict=("id",))
        return Patient.model_validate(row)

    def delete(self, patient_id: str) -> bool:
        """删除档案。"""
        return self.records.delete(PATIENT_TABLE, patient_id)

    def register(
        self,
        name: str,
        species,
        age_years: int = 0,
        age_months: int = 0,
        today: Optional[date] = None,
        **fields,
    ) -> Patient:
        """接诊登记：按填写的年龄推算出生日期。"""
        patient = Patient(
            id=fields.pop("id", None) or uuid.uuid4().hex,
            name=name.strip(),
            species=species,
            birth_date=birth_date_from_age(age_years, age_months, today),
            **fields,
        )
        return self.save(patient)

    def search(self, term: str) -> List[Patient]:
        """按名字、主人或病历号模糊检索。"""
        term = term.strip().lower()
        out = []
        for row in self.records.select(PATIENT_TABLE):
            p = Patient.model_validate(row)
            haystack = (p.name, p.owner, p.chart_number or "")
            if not term or any(term in h.lower() for h in haystack):
                out.append(p)
        return out

    def age_of(self, patient: Patient, today: Optional[date] = None) -> Optional[Age]:
        if patient.birth_date is None:
            return None
        return age_from_birth_date(patient.birth_date, today)
