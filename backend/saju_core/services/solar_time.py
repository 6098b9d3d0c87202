"""
진태양시 보정 (TrueSolarTimeAdjuster)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
보정 순서 (고정):
1. 서머타임 제거 → 표준시 (한국 역대 12회 시행 기간, 60분)
2. 경도 보정: 반올림((경도 - 표준자오선) × 4)분
3. 균시차 (선택): 반올림(9.87·sin2B - 7.53·cosB - 1.5·sinB)분
세 보정량은 0이어도 모두 기록.
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from saju_core.models.schemas import AdjustedMoment, BirthMoment

logger = logging.getLogger(__name__)

KOREA_TIMEZONES = ("Asia/Seoul",)

DEFAULT_MERIDIAN = 135.0

# 타임존 → 표준 자오선 (동경 +, 서경 -)
TIMEZONE_MERIDIANS = {
    "Asia/Seoul": 135.0,
    "Asia/Tokyo": 135.0,
    "Asia/Shanghai": 120.0,
    "Asia/Hong_Kong": 120.0,
    "America/New_York": -75.0,
    "America/Los_Angeles": -120.0,
    "America/Argentina/Buenos_Aires": -45.0,
    "Europe/London": 0.0,
    "Europe/Berlin": 15.0,
    "Africa/Johannesburg": 30.0,
    "Atlantic/Reykjavik": 0.0,
    "Australia/Sydney": 150.0,
    "Pacific/Honolulu": -150.0,
    "UTC": 0.0,
}


@dataclass(frozen=True)
class DSTRecord:
    """서머타임 시행 기록 (start 포함, end 미포함)"""
    year: int
    start: date
    end: date
    advance_min: int = 60

    def contains(self, moment: datetime) -> bool:
        return datetime.combine(self.start, datetime.min.time()) <= moment < datetime.combine(
            self.end, datetime.min.time()
        )


KOREA_DST_RECORDS: List[DSTRecord] = [
    DSTRecord(1948, date(1948, 6, 1), date(1948, 9, 13)),
    DSTRecord(1949, date(1949, 4, 3), date(1949, 9, 11)),
    DSTRecord(1950, date(1950, 4, 1), date(1950, 9, 10)),
    DSTRecord(1951, date(1951, 5, 6), date(1951, 9, 9)),
    DSTRecord(1955, date(1955, 5, 5), date(1955, 9, 10)),
    DSTRecord(1956, date(1956, 5, 20), date(1956, 10, 1)),
    DSTRecord(1957, date(1957, 5, 5), date(1957, 9, 23)),
    DSTRecord(1958, date(1958, 5, 4), date(1958, 9, 22)),
    DSTRecord(1959, date(1959, 5, 3), date(1959, 9, 21)),
    DSTRecord(1960, date(1960, 5, 1), date(1960, 9, 19)),
    DSTRecord(1987, date(1987, 5, 10), date(1987, 10, 11)),
    DSTRecord(1988, date(1988, 5, 8), date(1988, 10, 9)),
]


def get_dst_record(moment: datetime) -> Optional[DSTRecord]:
    for record in KOREA_DST_RECORDS:
        if record.contains(moment):
            return record
    return None


def meridian_for(timezone: str) -> float:
    """타임존 표준 자오선 (모르는 타임존은 135도)"""
    meridian = TIMEZONE_MERIDIANS.get(timezone)
    if meridian is None:
        logger.debug(f"[SolarTime] 알 수 없는 타임존 {timezone} → 기본 자오선 {DEFAULT_MERIDIAN}")
        return DEFAULT_MERIDIAN
    return meridian


def _round_half_up(value: float) -> int:
    """0.5는 항상 올림 (round()의 짝수 반올림과 다름)"""
    return math.floor(value + 0.5)


def longitude_correction_minutes(longitude: float, meridian: float) -> int:
    return _round_half_up((longitude - meridian) * 4)


def equation_of_time_minutes(day_of_year: int) -> int:
    """균시차 (분), B = 2π(doy-81)/364"""
    b = 2 * math.pi * (day_of_year - 81) / 364
    return _round_half_up(9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b))


class TrueSolarTimeAdjuster:
    """민간 시각 → 표준시 → 진태양시"""

    @staticmethod
    def adjust(
        moment: BirthMoment,
        apply_dst_history: bool = True,
        include_equation_of_time: bool = False,
        lmt_baseline_override: Optional[float] = None,
        timezone: Optional[str] = None,
        longitude: Optional[float] = None,
    ) -> AdjustedMoment:
        """
        Args:
            moment: 출생 시각 (민간 시각)
            apply_dst_history: 한국 서머타임 이력 보정 여부
            include_equation_of_time: 균시차 보정 여부
            lmt_baseline_override: 표준 자오선 직접 지정
            timezone / longitude: 지정 시 moment 값 대신 사용
        """
        timezone = timezone or moment.timezone
        longitude = moment.longitude if longitude is None else longitude

        civil = datetime(moment.year, moment.month, moment.day, moment.hour, moment.minute)

        # 1. 서머타임
        dst_minutes = 0
        if apply_dst_history and timezone in KOREA_TIMEZONES:
            record = get_dst_record(civil)
            if record:
                dst_minutes = record.advance_min
        standard = civil - timedelta(minutes=dst_minutes)

        # 2. 경도
        if lmt_baseline_override is not None:
            meridian = lmt_baseline_override
        elif moment.standard_meridian_override is not None:
            meridian = moment.standard_meridian_override
        else:
            meridian = meridian_for(timezone)
        lon_minutes = longitude_correction_minutes(longitude, meridian)

        # 3. 균시차 (표준시 날짜 기준)
        eot_minutes = 0
        if include_equation_of_time:
            eot_minutes = equation_of_time_minutes(standard.timetuple().tm_yday)

        adjusted = standard + timedelta(minutes=lon_minutes + eot_minutes)

        logger.debug(
            f"[SolarTime] {civil:%Y-%m-%d %H:%M} → 표준시 {standard:%H:%M} → 진태양시 {adjusted:%Y-%m-%d %H:%M} "
            f"(DST -{dst_minutes}, 경도 {lon_minutes:+d}, 균시차 {eot_minutes:+d})"
        )

        return AdjustedMoment(
            standard_year=standard.year,
            standard_month=standard.month,
            standard_day=standard.day,
            standard_hour=standard.hour,
            standard_minute=standard.minute,
            adjusted_year=adjusted.year,
            adjusted_month=adjusted.month,
            adjusted_day=adjusted.day,
            adjusted_hour=adjusted.hour,
            adjusted_minute=adjusted.minute,
            dst_correction_minutes=dst_minutes,
            longitude_correction_minutes=lon_minutes,
            equation_of_time_minutes=eot_minutes,
            standard_meridian=meridian,
        )


solar_time_adjuster = TrueSolarTimeAdjuster()
