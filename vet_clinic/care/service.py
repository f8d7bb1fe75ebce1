"""周期护理提醒服务：登记执行日期、手动改到期日、针次与用药间隔。"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from vet_clinic.care.models import (
    PARASITE_KINDS,
    SERVICE_KINDS,
    CareItem,
    CareKind,
    DueStatus,
    is_round_based,
    vaccines_for_species,
)
from vet_clinic.care.schedule import compute_next_due, due_status, record_dose
from vet_clinic.settings.models import ClinicSettings
from vet_clinic.store.records import RecordStore

logger = logging.getLogger(__name__)

CARE_TABLE = "care_items"
CARE_KEY = ("patient_id", "kind")


class CareReminderService:
    """护理记录的读取与更新，按 (patient_id, kind) upsert。"""

    def __init__(
        self,
        records: RecordStore,
        settings: Optional[ClinicSettings] = None,
        billing=None,
    ):
        self.records = records
        self.settings = settings or ClinicSettings()
        self.billing = billing

    def _upsert(self, patient_id: str, kind: CareKind, **fields) -> CareItem:
        values = {"patient_id": patient_id, "kind": kind.value}
        if self.records.get(CARE_TABLE, **values) is None:
            # 首次写入：以新建记录为底，疫苗针次从 0 起，长期用药带默认间隔
            fresh = CareItem.create(patient_id, kind, self.settings.default_med_interval_days)
            values.update(fresh.model_dump(mode="json", exclude={"updated_at"}))
        for name, value in fields.items():
            values[name] = value.isoformat() if isinstance(value, date) else value
        row = self.records.upsert(CARE_TABLE, values, on_conflict=CARE_KEY)
        return CareItem.model_validate(row)

    def get(self, patient_id: str, kind) -> Optional[CareItem]:
        row = self.records.get(CARE_TABLE, patient_id=patient_id, kind=CareKind(kind).value)
        return CareItem.model_validate(row) if row else None

    def list_for_patient(self, patient_id: str) -> List[CareItem]:
        """患者已有的护理记录。"""
        return [CareItem.model_validate(r) for r in self.records.select(CARE_TABLE, patient_id=patient_id)]

    def checklist(self, patient_id: str, species) -> List[CareItem]:
        """该物种适用的全部项目；尚未登记的项目返回空白记录（不保存）。"""
        stored = {CareKind(i.kind): i for i in self.list_for_patient(patient_id)}
        kinds = list(PARASITE_KINDS) + list(SERVICE_KINDS) + vaccines_for_species(species)
        return [
            stored.get(k) or CareItem.create(patient_id, k, self.settings.default_med_interval_days)
            for k in kinds
        ]

    def _interval_for(self, item: Optional[CareItem]) -> int:
        if item is not None and item.interval_days:
            return item.interval_days
        return self.settings.default_med_interval_days

    def record_performed(
        self,
        patient_id: str,
        kind,
        performed_on: Optional[date],
        next_override: Optional[date] = None,
    ) -> CareItem:
        """登记执行日期。

        疫苗针次 +1；next_override 不为空时原样保存，否则按规则计算下次到期日。
        performed_on 为 None 时清空执行日期与到期日，针次不变。
        """
        kind = CareKind(kind)
        existing = self.get(patient_id, kind)
        fields = {"last_date": performed_on}
        current_round = None
        if is_round_based(kind):
            current_round = record_dose(existing.current_round if existing else 0, performed_on is None)
            fields["current_round"] = current_round
        if kind == CareKind.MED and existing is not None and not existing.interval_days:
            fields["interval_days"] = self.settings.default_med_interval_days

        if next_override is not None:
            fields["next_date"] = next_override
        elif performed_on is not None:
            fields["next_date"] = compute_next_due(
                kind, performed_on, current_round or 0, self._interval_for(existing)
            )
        else:
            fields["next_date"] = None

        item = self._upsert(patient_id, kind, **fields)
        logger.info(
            "登记护理: patient=%s kind=%s last=%s next=%s round=%s",
            patient_id, kind.value, item.last_date, item.next_date, item.current_round,
        )
        if performed_on is not None and is_round_based(kind):
            self._bill_vaccine(patient_id, kind)
        return item

    def _bill_vaccine(self, patient_id: str, kind: CareKind) -> None:
        if self.billing is None:
            return
        # 计费失败只记录日志，不回滚已保存的提醒
        try:
            self.billing.add_vaccine_charge(patient_id, kind)
        except Exception:
            logger.exception("疫苗自动计费失败: patient=%s kind=%s", patient_id, kind.value)

    def override_due(self, patient_id: str, kind, next_date: Optional[date]) -> CareItem:
        """手动设置到期日：原样保存，不重新计算，不改针次与执行日期。"""
        kind = CareKind(kind)
        item = self._upsert(patient_id, kind, next_date=next_date)
        logger.info("手动到期日: patient=%s kind=%s next=%s", patient_id, kind.value, next_date)
        return item

    def set_round(self, patient_id: str, kind, current_round: int) -> CareItem:
        """修正疫苗针次；已有执行日期时按新针次重新计算到期日。"""
        kind = CareKind(kind)
        if not is_round_based(kind):
            raise ValueError(f"{kind.value} 不按针次计数")
        if current_round < 0:
            raise ValueError("针次不能为负数")
        existing = self.get(patient_id, kind)
        fields = {"current_round": current_round}
        if existing is not None and existing.last_date is not None:
            fields["next_date"] = compute_next_due(kind, existing.last_date, current_round)
        return self._upsert(patient_id, kind, **fields)

    def set_interval(self, patient_id: str, interval_days: int) -> CareItem:
        """修改长期用药间隔；不重新计算已有到期日。"""
        if interval_days <= 0:
            raise ValueError("用药间隔必须大于 0")
        return self._upsert(patient_id, CareKind.MED, interval_days=interval_days)

    def set_med_info(self, patient_id: str, med_info: Optional[str]) -> CareItem:
        return self._upsert(patient_id, CareKind.MED, med_info=(med_info or "").strip() or None)

    def due_items(self, patient_id: str, today: Optional[date] = None) -> List[CareItem]:
        """返回已到期（到期日不晚于今天）的项目。"""
        today = today or date.today()
        return [i for i in self.list_for_patient(patient_id) if i.next_date and i.next_date <= today]

    def upcoming(self, patient_id: str, today: Optional[date] = None) -> List[Tuple[CareItem, DueStatus]]:
        """有到期日的项目及其状态，按到期日排序。"""
        items = [i for i in self.list_for_patient(patient_id) if i.next_date]
        items.sort(key=lambda i: i.next_date)
        return [(i, due_status(i.next_date, today)) for i in items]
