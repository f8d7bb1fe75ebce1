"""年龄（岁、月）与出生日期互算，按日历月计算而不是按天数折算。"""
from datetime import date
from typing import NamedTuple, Optional

from dateutil.relativedelta import relativedelta


class Age(NamedTuple):
    years: int
    months: int


def age_from_birth_date(birth_date: date, today: Optional[date] = None) -> Age:
    """出生日期 → (岁, 月)。

    今天的日号早于出生日号时少算一个月；月数为负时向年借 12 个月。
    出生日期在未来时返回 (0, 0)。
    """
    today = today or date.today()
    years = today.year - birth_date.year
    months = today.month - birth_date.month
    if today.day < birth_date.day:
        months -= 1
    if months < 0:
        years -= 1
        months += 12
    if years < 0:
        return Age(0, 0)
    return Age(years, months)


def birth_date_from_age(years: int, months: int, today: Optional[date] = None) -> date:
    """(岁, 月) → 出生日期，以当月 1 日为基准，避免 31 日溢出。"""
    if years < 0 or months < 0:
        raise ValueError("年龄不能为负数")
    today = today or date.today()
    return today.replace(day=1) - relativedelta(years=years, months=months)


def format_age(age: Age) -> str:
    return f"{age.years}y {age.months}m"
