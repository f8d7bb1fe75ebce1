"""患者档案与年龄换算。"""
from vet_clinic.patient.age import Age, age_from_birth_date, birth_date_from_age, format_age
from vet_clinic.patient.models import Patient, SoapNote
from vet_clinic.patient.store import PatientStore

__all__ = [
    "Age",
    "Patient",
    "PatientStore",
    "SoapNote",
    "age_from_birth_date",
    "birth_date_from_age",
    "format_age",
]
