"""下次到期日计算：固定偏移规则与疫苗针次阈值。

月、年偏移使用 relativedelta：保持原日号，目标月没有该日时取当月最后一天
（1 月 31 日 + 1 个月 = 2 月最后一天，2024-02-29 + 1 年 = 2025-02-28）。
"""
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from vet_clinic.config import DEFAULT_MED_INTERVAL_DAYS, DUE_SOON_DAYS
from vet_clinic.care.models import CareKind, DueStatus

# 非疫苗项目的固定偏移
FIXED_OFFSETS = {
    CareKind.HEARTWORM: relativedelta(months=1),
    CareKind.EXTERNAL: relativedelta(months=1),
    CareKind.INTERNAL: relativedelta(months=3),
    CareKind.SCALING: relativedelta(years=1),
    CareKind.ANTIBODY: relativedelta(years=1),
    CareKind.RABIES: relativedelta(years=1),
}

# 基础免疫疫苗：(未完成时的间隔天数, 完成所需针次)
SERIES = {
    CareKind.DHPPL: (14, 5),
    CareKind.CORONA: (14, 2),
    CareKind.KENNEL_COUGH: (14, 2),
    CareKind.INFLUENZA: (14, 2),
    CareKind.FVRCP_C: (21, 3),
    CareKind.FVRCP_C_LEUKEMIA: (21, 3),
}

BOOSTER = relativedelta(years=1)


def series_threshold(kind) -> Optional[int]:
    """基础免疫完成所需针次；不分针次的项目返回 None。"""
    series = SERIES.get(CareKind(kind))
    return series[1] if series else None


def compute_next_due(
    kind,
    last_date: date,
    current_round: int = 0,
    interval_days: Optional[int] = None,
) -> date:
    """根据上次执行日期计算下次到期日。

    current_round 为本次接种记录之后的针次；interval_days 仅用于长期用药，
    未设置时取默认 30 天。
    """
    kind = CareKind(kind)
    if kind == CareKind.MED:
        return last_date + timedelta(days=interval_days or DEFAULT_MED_INTERVAL_DAYS)
    if kind in SERIES:
        days, threshold = SERIES[kind]
        if (current_round or 0) >= threshold:
            return last_date + BOOSTER
        return last_date + timedelta(days=days)
    return last_date + FIXED_OFFSETS[kind]


def record_dose(existing_round: Optional[int], is_manual_due_date_edit: bool) -> int:
    """记录新的执行日期时针次 +1；只改到期日时针次不变。"""
    current = existing_round or 0
    if is_manual_due_date_edit:
        return current
    return current + 1


def due_status(next_date: Optional[date], today: Optional[date] = None) -> DueStatus:
    """到期状态：已过期 / 7 天内 / 尚早。"""
    if next_date is None:
        return DueStatus.NONE
    today = today or date.today()
    remaining = (next_date - today).days
    if remaining < 0:
        return DueStatus.OVERDUE
    if remaining <= DUE_SOON_DAYS:
        return DueStatus.SOON
    return DueStatus.SCHEDULED
