from __future__ import annotations
import calendar
import math
from datetime import date
from typing import Any, Optional

from .types import AgeData

_DAYS_PER_YEAR = 365.25


def _safe_number(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(num) or num == 0:
        return None
    return int(num)


def _birth_date(year: int, month: int, day: int) -> date:
    # keep the reference day inside the birth month (e.g. 31 -> 30 in April)
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def _shift_months(d: date, months: int) -> date:
    total = d.year * 12 + (d.month - 1) - months
    year, month = divmod(total, 12)
    return _birth_date(year, month + 1, d.day)


def _decimal_years(today: date, born: date) -> float:
    return (today - born).days / _DAYS_PER_YEAR


def get_age_data(
    birth_month: Any,
    birth_year: Any,
    age: Any,
    age_months: Any,
    today: Optional[date] = None,
) -> AgeData:
    """Fill in age, age in months and birth month/year from partial inputs.

    Precedence: birth month + year, birth year alone, age in months, age in
    years. Zero, empty and non-numeric inputs count as missing. A birth month
    without a birth year is not enough to place the participant.
    """

    today = today or date.today()
    bm = _safe_number(birth_month)
    by = _safe_number(birth_year)
    years_old = _safe_number(age)
    age_m = _safe_number(age_months)

    data = AgeData(age=years_old, age_months=age_m, birth_month=None, birth_year=None)

    if bm and by:
        born = _birth_date(by, bm, today.day)
        decimal_year = _decimal_years(today, born)
        data.birth_month, data.birth_year = bm, by
        data.age = math.floor(decimal_year)
        data.age_months = age_m or math.floor(decimal_year * 12)
    elif by:
        born = _birth_date(by, today.month, today.day)
        decimal_year = _decimal_years(today, born)
        data.birth_month, data.birth_year = today.month, by
        data.age = math.floor(decimal_year)
        data.age_months = age_m or math.floor(decimal_year * 12)
    elif age_m:
        born = _shift_months(today, age_m)
        data.birth_month, data.birth_year = born.month, born.year
        data.age = math.floor(_decimal_years(today, born))
    elif years_old:
        data.birth_month = today.month
        data.birth_year = today.year - years_old
        data.age_months = years_old * 12
    return data


def get_grade(input_grade: Any, grade_min: float = 0, grade_max: float = 12) -> float:
    """Clamp a grade to ``[grade_min, grade_max]``.

    Non-numeric labels (K, TK, Pre-K) count as the lowest grade. A missing
    or blank grade reads as 0 and fractional grades are kept as they are.
    """

    if input_grade is None or (isinstance(input_grade, str) and not input_grade.strip()):
        parsed = 0.0
    else:
        try:
            parsed = float(input_grade)
        except (TypeError, ValueError):
            return grade_min
    if math.isnan(parsed) or parsed < grade_min:
        return grade_min
    if parsed > grade_max:
        return grade_max
    return int(parsed) if parsed.is_integer() else parsed
