"""周期护理提醒：驱虫、定期服务与疫苗。"""
from vet_clinic.care.models import (
    CareItem,
    CareKind,
    DueStatus,
    Species,
    is_round_based,
    vaccines_for_species,
)
from vet_clinic.care.schedule import compute_next_due, due_status, record_dose
from vet_clinic.care.service import CareReminderService

__all__ = [
    "CareItem",
    "CareKind",
    "CareReminderService",
    "DueStatus",
    "Species",
    "compute_next_due",
    "due_status",
    "is_round_based",
    "record_dose",
    "vaccines_for_species",
]
