from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from core import settings
from core.filters import DashboardFilters, filter_employees, filter_sleep, normalize_filters

logger = logging.getLogger(__name__)

RANDOM_SEED = 12345
LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280

EMPLOYEE_COUNT = 50
SLEEP_DAYS = 30
REFERENCE_DATE = date(2023, 12, 30)

DEPARTMENTS = ("Engineering", "Marketing", "Sales", "HR", "Finance")
# "other" is accepted by filters but never produced: generation alternates on i % 2.
GENDERS = ("male", "female", "other")

BASE_HEIGHT = {"male": 175, "female": 165}
BASE_WEIGHT = {"male": 75, "female": 60}
HEIGHT_VARIATION = 10
WEIGHT_VARIATION = 15

EMPLOYEE_COLUMNS = ["id", "name", "department", "age", "gender", "height", "weight"]
SLEEP_COLUMNS = [
    "employee_id",
    "date",
    "duration",
    "efficiency",
    "deep_sleep_pct",
    "rem_sleep_pct",
    "light_sleep_pct",
]


@dataclass(frozen=True)
class Employee:
    id: int
    name: str
    department: str
    age: int
    gender: str
    height: int  # cm
    weight: int  # kg


@dataclass(frozen=True)
class SleepRecord:
    employee_id: int
    date: str  # YYYY-MM-DD
    duration: float  # hours
    efficiency: float  # percent
    deep_sleep_pct: float
    rem_sleep_pct: float
    light_sleep_pct: float  # 100 - deep - rem, not clamped


@dataclass(frozen=True)
class SleepDataset:
    """One generated roster plus its sleep records. Never mutated after construction."""

    employees: Tuple[Employee, ...]
    sleep_records: Tuple[SleepRecord, ...]

    def employees_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(e) for e in self.employees], columns=EMPLOYEE_COLUMNS)

    def sleep_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(r) for r in self.sleep_records], columns=SLEEP_COLUMNS)

    @property
    def dates(self) -> List[str]:
        return sorted({r.date for r in self.sleep_records})


def seeded_random(seed: int) -> Callable[[], float]:
    """Linear congruential generator returning floats in [0, 1).

    Two generators built from the same seed yield the same stream, which is what
    makes the whole dataset reproducible.
    """
    state = int(seed)

    def _next() -> float:
        nonlocal state
        state = (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return state / LCG_MODULUS

    return _next


def round_half_up(value: float, ndigits: int = 0) -> float:
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def generate_employees(random: Callable[[], float], count: int = EMPLOYEE_COUNT) -> Tuple[Employee, ...]:
    """Build the roster. Draws exactly two values per employee: height noise, then weight noise."""
    employees: List[Employee] = []
    for index in range(count):
        gender = GENDERS[index % 2]
        height = round_half_up(BASE_HEIGHT[gender] + (random() - 0.5) * HEIGHT_VARIATION * 2)
        weight = round_half_up(BASE_WEIGHT[gender] + (random() - 0.5) * WEIGHT_VARIATION * 2)
        employees.append(
            Employee(
                id=index + 1,
                name=f"Employee {index + 1}",
                department=DEPARTMENTS[index % len(DEPARTMENTS)],
                age=25 + (index % 30),
                gender=gender,
                height=int(height),
                weight=int(weight),
            )
        )
    return tuple(employees)


def window_dates(days: int = SLEEP_DAYS, reference_date: date = REFERENCE_DATE) -> List[date]:
    start = reference_date - timedelta(days=days)
    return [start + timedelta(days=i) for i in range(days)]


def generate_sleep_data(
    random: Callable[[], float],
    employees: Sequence[Employee],
    days: int = SLEEP_DAYS,
    reference_date: date = REFERENCE_DATE,
) -> Tuple[SleepRecord, ...]:
    """Build one record per (employee, day), employee-major.

    Each record draws four values in order: duration, efficiency, deep, REM.
    Light sleep is the remainder and is left unclamped.
    """
    dates = window_dates(days, reference_date)
    records: List[SleepRecord] = []
    for employee in employees:
        for day in dates:
            duration = clamp(7 + (random() - 0.5) * 2, 4, 10)

            efficiency_base = 85 if day.weekday() >= 5 else 80
            efficiency = clamp(efficiency_base + (random() - 0.5) * 20, 60, 98)

            deep = clamp(20 + (random() - 0.5) * 15, 10, 35)
            rem = clamp(23 + (random() - 0.5) * 15, 15, 30)
            records.append(
                SleepRecord(
                    employee_id=employee.id,
                    date=day.isoformat(),
                    duration=duration,
                    efficiency=efficiency,
                    deep_sleep_pct=deep,
                    rem_sleep_pct=rem,
                    light_sleep_pct=100 - deep - rem,
                )
            )
    return tuple(records)


def build_dataset(
    seed: int = RANDOM_SEED,
    employee_count: int = EMPLOYEE_COUNT,
    days: int = SLEEP_DAYS,
    reference_date: date = REFERENCE_DATE,
) -> SleepDataset:
    # One generator shared by both passes; sleep generation continues where the roster stopped.
    random = seeded_random(seed)
    employees = generate_employees(random, employee_count)
    sleep_records = generate_sleep_data(random, employees, days, reference_date)
    logger.info(
        "Generated %d employees and %d sleep records (seed=%s, window ends %s)",
        len(employees),
        len(sleep_records),
        seed,
        reference_date.isoformat(),
    )
    return SleepDataset(employees=employees, sleep_records=sleep_records)


@lru_cache(maxsize=4)
def _load_dataset_cached(seed: int, employee_count: int, days: int, reference_date: date) -> SleepDataset:
    return build_dataset(seed, employee_count, days, reference_date)


def load_dataset() -> SleepDataset:
    return _load_dataset_cached(
        settings.SLEEP_SEED,
        settings.SLEEP_EMPLOYEE_COUNT,
        settings.SLEEP_DAYS,
        settings.SLEEP_REFERENCE_DATE,
    )


def generate_roster() -> Tuple[Employee, ...]:
    return load_dataset().employees


def generate_observations() -> Tuple[SleepRecord, ...]:
    return load_dataset().sleep_records


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(dataset: SleepDataset) -> Dict[str, object]:
    return {
        "dataset": dataset,
        "employees": dataset.employees_frame(),
        "sleep": dataset.sleep_frame(),
        "dates": dataset.dates,
    }


def load_dashboard_data(dataset: Optional[SleepDataset] = None) -> Dict[str, object]:
    """Shared data context; the frames are cached, so callers copy before mutating."""
    return _load_dashboard_data_cached(dataset or load_dataset())


def prepare_context(filters: dict | DashboardFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    employees: pd.DataFrame = data_ctx.get("employees", pd.DataFrame(columns=EMPLOYEE_COLUMNS)).copy()
    sleep: pd.DataFrame = data_ctx.get("sleep", pd.DataFrame(columns=SLEEP_COLUMNS)).copy()

    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)

    filtered_employees = filter_employees(employees, filt)
    employee_ids = filtered_employees["id"].tolist() if not filtered_employees.empty else []
    filtered_sleep = filter_sleep(sleep, employee_ids, filt)
    logger.debug(
        "Filters kept %d/%d employees and %d/%d sleep records",
        len(filtered_employees),
        len(employees),
        len(filtered_sleep),
        len(sleep),
    )

    return {
        "filters": filt,
        "employees": employees,
        "sleep": sleep,
        "filtered_employees": filtered_employees,
        "filtered_sleep": filtered_sleep,
        "dates": data_ctx.get("dates", []),
    }
