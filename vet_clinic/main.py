"""命令行入口：登记护理日期、查看到期项目、年龄换算与诊所设置。"""
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import click

from vet_clinic import __version__
from vet_clinic.billing.service import BillingService
from vet_clinic.care.models import CareKind
from vet_clinic.care.schedule import due_status
from vet_clinic.care.service import CareReminderService
from vet_clinic.config import DATA_DIR, LOG_LEVEL
from vet_clinic.patient.age import age_from_birth_date, birth_date_from_age, format_age
from vet_clinic.settings.store import SettingsStore
from vet_clinic.store.records import RecordStore

KIND_CHOICE = click.Choice([k.value for k in CareKind], case_sensitive=False)
DATE = click.DateTime(formats=["%Y-%m-%d"])


def build_services(data_dir: Path) -> CareReminderService:
    """按数据目录组装记录存储、诊所设置与计费。"""
    records = RecordStore(base_dir=data_dir / "records")
    settings = SettingsStore(base_dir=data_dir / "settings").load()
    return CareReminderService(records, settings, billing=BillingService(records))


def _kind(value: str) -> CareKind:
    for k in CareKind:
        if k.value.lower() == value.lower():
            return k
    raise click.BadParameter(value)


def _as_date(value) -> Optional[date]:
    return value.date() if value is not None else None


def _echo_item(item) -> None:
    round_part = f" round={item.current_round}" if item.current_round is not None else ""
    click.echo(f"{item.kind}: last={item.last_date or '-'} next={item.next_date or '-'}{round_part}")


@click.group()
@click.version_option(__version__)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DATA_DIR,
    show_default=True,
    help="数据目录",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path) -> None:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ctx.obj = {"data_dir": data_dir}


@cli.command()
@click.argument("patient_id")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("performed_on", type=DATE)
@click.option("--next", "next_override", type=DATE, default=None, help="手动指定下次到期日")
@click.pass_context
def record(ctx: click.Context, patient_id: str, kind: str, performed_on, next_override) -> None:
    """登记执行日期（疫苗针次 +1）。"""
    service = build_services(ctx.obj["data_dir"])
    item = service.record_performed(patient_id, _kind(kind), _as_date(performed_on), _as_date(next_override))
    _echo_item(item)


@cli.command()
@click.argument("patient_id")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("next_date", type=DATE)
@click.pass_context
def override(ctx: click.Context, patient_id: str, kind: str, next_date) -> None:
    """手动设置下次到期日。"""
    service = build_services(ctx.obj["data_dir"])
    _echo_item(service.override_due(patient_id, _kind(kind), _as_date(next_date)))


@cli.command("set-round")
@click.argument("patient_id")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("current_round", type=click.IntRange(min=0))
@click.pass_context
def set_round(ctx: click.Context, patient_id: str, kind: str, current_round: int) -> None:
    """修正疫苗针次。"""
    service = build_services(ctx.obj["data_dir"])
    try:
        item = service.set_round(patient_id, _kind(kind), current_round)
    except ValueError as e:
        raise click.ClickException(str(e))
    _echo_item(item)


@cli.command()
@click.argument("patient_id")
@click.argument("interval_days", type=click.IntRange(min=1))
@click.pass_context
def interval(ctx: click.Context, patient_id: str, interval_days: int) -> None:
    """修改长期用药间隔（天）。"""
    service = build_services(ctx.obj["data_dir"])
    _echo_item(service.set_interval(patient_id, interval_days))


@cli.command()
@click.argument("patient_id")
@click.option("--today", type=DATE, default=None)
@click.pass_context
def show(ctx: click.Context, patient_id: str, today) -> None:
    """列出患者所有有到期日的项目及状态。"""
    service = build_services(ctx.obj["data_dir"])
    for item, status in service.upcoming(patient_id, _as_date(today)):
        click.echo(f"[{status.value}] {item.kind}: {item.next_date}")


@cli.command()
@click.argument("patient_id")
@click.option("--today", type=DATE, default=None)
@click.pass_context
def due(ctx: click.Context, patient_id: str, today) -> None:
    """列出已到期的项目。"""
    service = build_services(ctx.obj["data_dir"])
    today = _as_date(today) or date.today()
    items = service.due_items(patient_id, today)
    if not items:
        click.echo("没有到期项目")
        return
    for item in items:
        click.echo(f"[{due_status(item.next_date, today).value}] {item.kind}: {item.next_date}")


@cli.command()
@click.argument("birth_date", type=DATE)
@click.option("--today", type=DATE, default=None)
def age(birth_date, today) -> None:
    """出生日期 → 年龄。"""
    click.echo(format_age(age_from_birth_date(_as_date(birth_date), _as_date(today))))


@cli.command()
@click.argument("years", type=click.IntRange(min=0))
@click.argument("months", type=click.IntRange(min=0, max=11))
@click.option("--today", type=DATE, default=None)
def birthdate(years: int, months: int, today) -> None:
    """年龄 → 出生日期。"""
    click.echo(birth_date_from_age(years, months, _as_date(today)).isoformat())


@cli.command()
@click.option("--med-interval", type=click.IntRange(min=1), default=None, help="长期用药默认间隔")
@click.option("--lunch", nargs=2, default=None, help="午休开始与结束 HH:MM HH:MM")
@click.option("--lunch-enabled/--lunch-disabled", default=None)
@click.option("--image-server", default=None)
@click.pass_context
def settings(ctx: click.Context, med_interval, lunch, lunch_enabled, image_server) -> None:
    """查看或修改诊所设置。"""
    store = SettingsStore(base_dir=ctx.obj["data_dir"] / "settings")
    changes = {}
    if med_interval is not None:
        changes["default_med_interval_days"] = med_interval
    if lunch:
        changes["lunch_start_time"], changes["lunch_end_time"] = lunch
    if lunch_enabled is not None:
        changes["is_lunch_enabled"] = lunch_enabled
    if image_server is not None:
        changes["image_server_url"] = image_server
    try:
        current = store.update(**changes) if changes else store.load()
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(current.model_dump_json(indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
