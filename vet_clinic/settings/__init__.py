"""诊所设置。"""
from vet_clinic.settings.models import ClinicSettings
from vet_clinic.settings.store import SettingsStore

__all__ = ["ClinicSettings", "SettingsStore"]
