"""周期护理提醒服务测试。"""
import tempfile
from datetime import date
from pathlib import Path

import pytest

from vet_clinic.billing.models import ServiceCatalogItem, ServiceCategory
from vet_clinic.billing.service import BillingService
from vet_clinic.care.models import CareItem, CareKind, DueStatus, Species
from vet_clinic.care.service import CareReminderService
from vet_clinic.settings.models import ClinicSettings
from vet_clinic.store.records import RecordStore


@pytest.fixture
def records():
    with tempfile.TemporaryDirectory() as tmp:
        yield RecordStore(base_dir=Path(tmp))


def test_recording_dose_increments_round(records) -> None:
    service = CareReminderService(records)
    first = service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 1))
    assert first.current_round == 1
    assert first.last_date == date(2024, 3, 1)
    assert first.next_date == date(2024, 3, 15)

    second = service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 15))
    assert second.current_round == 2
    assert second.next_date == date(2024, 3, 29)


def test_round_check_uses_incremented_round(records) -> None:
    service = CareReminderService(records)
    # 首针记录后针次为 1（< 2）：14 天后
    first = service.record_performed("pet1", CareKind.CORONA, date(2024, 1, 10))
    assert first.next_date == date(2024, 1, 24)
    # 第二针记录后针次为 2：一年后加强
    second = service.record_performed("pet1", CareKind.CORONA, date(2024, 1, 24))
    assert second.current_round == 2
    assert second.next_date == date(2025, 1, 24)


def test_override_due_keeps_round_and_last_date(records) -> None:
    service = CareReminderService(records)
    service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 1))
    edited = service.override_due("pet1", CareKind.DHPPL, date(2024, 4, 1))
    assert edited.current_round == 1
    assert edited.last_date == date(2024, 3, 1)
    assert edited.next_date == date(2024, 4, 1)
    assert service.get("pet1", CareKind.DHPPL).next_date == date(2024, 4, 1)


def test_override_alongside_performed_date_is_stored_verbatim(records) -> None:
    service = CareReminderService(records)
    item = service.record_performed("pet1", CareKind.HEARTWORM, date(2024, 1, 31), next_override=date(2024, 2, 10))
    assert item.last_date == date(2024, 1, 31)
    assert item.next_date == date(2024, 2, 10)


def test_override_creates_item(records) -> None:
    service = CareReminderService(records)
    item = service.override_due("pet2", CareKind.SCALING, date(2025, 1, 1))
    assert item.last_date is None
    assert item.next_date == date(2025, 1, 1)
    assert len(service.list_for_patient("pet2")) == 1


def test_parasite_and_service_offsets(records) -> None:
    service = CareReminderService(records)
    assert service.record_performed("pet1", CareKind.INTERNAL, date(2024, 11, 30)).next_date == date(2025, 2, 28)
    assert service.record_performed("pet1", CareKind.SCALING, date(2024, 2, 29)).next_date == date(2025, 2, 28)
    heartworm = service.record_performed("pet1", CareKind.HEARTWORM, date(2024, 5, 1))
    assert heartworm.next_date == date(2024, 6, 1)
    assert heartworm.current_round is None


def test_clearing_performed_date_clears_due(records) -> None:
    service = CareReminderService(records)
    service.record_performed("pet1", CareKind.EXTERNAL, date(2024, 5, 1))
    cleared = service.record_performed("pet1", CareKind.EXTERNAL, None)
    assert cleared.last_date is None
    assert cleared.next_date is None


def test_clearing_vaccine_date_keeps_round(records) -> None:
    service = CareReminderService(records)
    service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 1))
    cleared = service.record_performed("pet1", CareKind.DHPPL, None)
    assert cleared.current_round == 1
    assert cleared.last_date is None
    assert cleared.next_date is None
    # 清空不算一针：下一针仍是第 2 针，14 天后
    again = service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 20))
    assert again.current_round == 2
    assert again.next_date == date(2024, 4, 3)


def test_override_created_vaccine_starts_at_round_zero(records) -> None:
    service = CareReminderService(records)
    item = service.override_due("pet1", CareKind.DHPPL, date(2024, 4, 1))
    assert item.current_round == 0
    assert item.last_date is None
    assert item.next_date == date(2024, 4, 1)
    first = service.record_performed("pet1", CareKind.DHPPL, date(2024, 4, 1))
    assert first.current_round == 1


def test_set_round_without_prior_row(records) -> None:
    service = CareReminderService(records)
    item = service.set_round("cat1", CareKind.FVRCP_C, 2)
    assert item.current_round == 2
    assert item.next_date is None
    assert service.get("cat1", "FVRC P+C").current_round == 2


def test_first_write_for_med_carries_interval(records) -> None:
    service = CareReminderService(records, ClinicSettings(default_med_interval_days=14))
    item = service.override_due("pet1", CareKind.MED, date(2024, 5, 1))
    assert item.interval_days == 14
    assert service.set_med_info("pet2", "Vetmedin").interval_days == 14
    parasite = service.override_due("pet1", CareKind.HEARTWORM, date(2024, 5, 1))
    assert parasite.current_round is None
    assert parasite.interval_days is None


def test_medication_interval_from_settings_and_item(records) -> None:
    service = CareReminderService(records, ClinicSettings(default_med_interval_days=45))
    item = service.record_performed("pet1", CareKind.MED, date(2024, 12, 20))
    assert item.interval_days == 45
    assert item.next_date == date(2025, 2, 3)

    service.set_interval("pet1", 10)
    # 修改间隔不重算已有到期日
    assert service.get("pet1", CareKind.MED).next_date == date(2025, 2, 3)
    again = service.record_performed("pet1", CareKind.MED, date(2025, 1, 1))
    assert again.interval_days == 10
    assert again.next_date == date(2025, 1, 11)


def test_medication_default_interval(records) -> None:
    service = CareReminderService(records)
    item = service.record_performed("pet1", CareKind.MED, date(2024, 1, 31))
    assert item.interval_days == 30
    assert item.next_date == date(2024, 3, 1)


def test_med_info_partial_update(records) -> None:
    service = CareReminderService(records)
    service.record_performed("pet1", CareKind.MED, date(2024, 1, 1))
    item = service.set_med_info("pet1", "  Apoquel 5.4mg SID ")
    assert item.med_info == "Apoquel 5.4mg SID"
    assert item.last_date == date(2024, 1, 1)


def test_invalid_interval_rejected(records) -> None:
    service = CareReminderService(records)
    with pytest.raises(ValueError):
        service.set_interval("pet1", 0)


def test_set_round_recomputes_from_last_date(records) -> None:
    service = CareReminderService(records)
    service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 1))
    item = service.set_round("pet1", CareKind.DHPPL, 5)
    assert item.current_round == 5
    assert item.next_date == date(2025, 3, 1)
    with pytest.raises(ValueError):
        service.set_round("pet1", CareKind.HEARTWORM, 1)


def test_items_survive_reload(records) -> None:
    CareReminderService(records).record_performed("pet1", CareKind.FVRCP_C, date(2024, 2, 20))
    reloaded = CareReminderService(RecordStore(base_dir=records.base_dir)).get("pet1", "FVRC P+C")
    assert reloaded is not None
    assert reloaded.current_round == 1
    assert reloaded.next_date == date(2024, 3, 12)


def test_checklist_by_species(records) -> None:
    service = CareReminderService(records)
    service.record_performed("cat1", CareKind.RABIES, date(2024, 1, 1))
    cat = service.checklist("cat1", Species.CAT)
    kinds = [i.kind for i in cat]
    assert len(cat) == 9
    assert "FVRC P+C" in kinds and "DHPPL" not in kinds
    rabies = next(i for i in cat if i.kind == CareKind.RABIES)
    assert rabies.current_round == 1
    assert len(service.checklist("bun1", Species.RABBIT)) == 6
    med = next(i for i in service.checklist("dog1", "Dog") if i.kind == CareKind.MED)
    assert med.interval_days == 30


def test_create_factory() -> None:
    vaccine = CareItem.create("pet1", CareKind.DHPPL)
    assert vaccine.current_round == 0
    assert vaccine.next_date is None
    parasite = CareItem.create("pet1", CareKind.HEARTWORM)
    assert parasite.current_round is None
    assert parasite.interval_days is None


def test_due_items_and_upcoming(records) -> None:
    service = CareReminderService(records)
    service.record_performed("pet1", CareKind.HEARTWORM, date(2024, 5, 1))  # 6/1
    service.record_performed("pet1", CareKind.INTERNAL, date(2024, 5, 1))   # 8/1
    service.override_due("pet1", CareKind.SCALING, date(2024, 6, 20))
    today = date(2024, 6, 15)
    assert [i.kind for i in service.due_items("pet1", today)] == ["heartworm"]
    upcoming = service.upcoming("pet1", today)
    assert [(i.kind, s) for i, s in upcoming] == [
        ("heartworm", DueStatus.OVERDUE),
        ("scaling", DueStatus.SOON),
        ("internal", DueStatus.SCHEDULED),
    ]


def _seed_dhppl(billing: BillingService) -> None:
    billing.add_catalog_item(
        ServiceCatalogItem(category=ServiceCategory.PREVENTION, name="DHPPL vaccine", sku_code="vac-dhppl", default_price=35000)
    )


def test_vaccine_record_bills_open_invoice(records) -> None:
    billing = BillingService(records)
    _seed_dhppl(billing)
    service = CareReminderService(records, billing=billing)
    service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 1))
    service.record_performed("pet1", CareKind.DHPPL, date(2024, 3, 15))
    invoice = billing.open_invoice("pet1", create=False)
    assert invoice is not None
    items = billing.items_for_invoice(invoice.id)
    assert len(items) == 2
    assert items[0].item_name == "DHPPL vaccine"
    assert billing.invoice_total(invoice.id) == 70000


def test_due_date_edit_does_not_bill(records) -> None:
    billing = BillingService(records)
    _seed_dhppl(billing)
    service = CareReminderService(records, billing=billing)
    service.override_due("pet1", CareKind.DHPPL, date(2024, 4, 1))
    service.record_performed("pet1", CareKind.HEARTWORM, date(2024, 4, 1))
    assert billing.open_invoice("pet1", create=False) is None


class _BrokenBilling:
    def add_vaccine_charge(self, patient_id, kind):
        raise RuntimeError("catalog offline")


def test_billing_failure_does_not_block_reminder(records) -> None:
    service = CareReminderService(records, billing=_BrokenBilling())
    item = service.record_performed("pet1", CareKind.RABIES, date(2024, 1, 1))
    assert item.next_date == date(2025, 1, 1)
    assert service.get("pet1", CareKind.RABIES).current_round == 1
