"""
절기(節氣) 경계 및 절입 시각 판정
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- 월주 계산의 핵심: 어느 절기 구간인지 판단 (12절, 30도 간격)
- 입춘 기준 년주 보정
- 정밀표(1900~2050): ephem 시황경 + 한국천문연구원(KASI) 공표 시각 보정
- 근사 계산(범위 밖 / VSOP87D_EXACT): VSOP87D 급수
- 경계 비교는 strict-after: 절입 시각과 같은 순간은 이전 달
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
import math
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set, Tuple

import ephem
from cachetools import LRUCache

from saju_core.config import get_settings
from saju_core.errors import SolarTermLookupError
from saju_core.models.calculation_config import JeolgiPrecision
from saju_core.services import vsop87d

logger = logging.getLogger(__name__)

KST_OFFSET = timedelta(hours=9)


@dataclass(frozen=True)
class SolarTermBoundary:
    """절입 시각 (KST, 분 단위)"""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    solar_longitude: float  # 태양 황경 (도)
    saju_month_index: int   # 1=인월 ... 12=축월
    branch: str             # 월지
    name: str               # 절기 이름

    @property
    def key(self) -> int:
        return moment_key(self.year, self.month, self.day, self.hour, self.minute)

    def as_datetime(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute)

    def __str__(self) -> str:
        return f"{self.name}({self.year}-{self.month:02d}-{self.day:02d} {self.hour:02d}:{self.minute:02d})"


@dataclass(frozen=True)
class TermSpec:
    solar_longitude: int
    saju_month_index: int
    branch: str
    name: str
    guess_month: int
    guess_day: int


# 월주는 "절(節)"만 사용. 양력 연도 안에서 소한(1월) → 대설(12월) 순서
TERM_SPECS: Tuple[TermSpec, ...] = (
    TermSpec(285, 12, "축", "소한", 1, 6),
    TermSpec(315, 1, "인", "입춘", 2, 4),
    TermSpec(345, 2, "묘", "경칩", 3, 6),
    TermSpec(15, 3, "진", "청명", 4, 5),
    TermSpec(45, 4, "사", "입하", 5, 6),
    TermSpec(75, 5, "오", "망종", 6, 6),
    TermSpec(105, 6, "미", "소서", 7, 7),
    TermSpec(135, 7, "신", "입추", 8, 8),
    TermSpec(165, 8, "유", "백로", 9, 8),
    TermSpec(195, 9, "술", "한로", 10, 8),
    TermSpec(225, 10, "해", "입동", 11, 7),
    TermSpec(255, 11, "자", "대설", 12, 7),
)

IPCHUN_INDEX = 1

# 한국천문연구원 공표 절입 시각 (KST)
# (년, 사주월 인덱스) → (년, 월, 일, 시, 분)
KASI_PUBLISHED: Dict[Tuple[int, int], Tuple[int, int, int, int, int]] = {
    (2021, 1): (2021, 2, 3, 23, 59),
    (2024, 1): (2024, 2, 4, 17, 27),
    (2024, 2): (2024, 3, 5, 11, 23),
    (2024, 3): (2024, 4, 4, 16, 2),
    (2024, 4): (2024, 5, 5, 9, 10),
    (2024, 5): (2024, 6, 5, 13, 10),
    (2024, 6): (2024, 7, 6, 23, 20),
    (2024, 7): (2024, 8, 7, 9, 9),
    (2024, 8): (2024, 9, 7, 12, 11),
    (2024, 9): (2024, 10, 8, 3, 0),
    (2024, 10): (2024, 11, 7, 7, 20),
    (2024, 11): (2024, 12, 7, 0, 17),
    (2025, 12): (2025, 1, 5, 11, 33),
    (2025, 1): (2025, 2, 3, 23, 10),
}

# 근사 절입일 (월 → 일), 시각 없이 날짜만 아는 경우
APPROX_JEOL_DAY = {1: 6, 2: 4, 3: 6, 4: 5, 5: 6, 6: 6, 7: 7, 8: 8, 9: 8, 10: 8, 11: 7, 12: 7}


def moment_key(year: int, month: int, day: int, hour: int, minute: int) -> int:
    """분 단위 시각 → 정렬 가능한 정수 키"""
    return year * 100_000_000 + month * 1_000_000 + day * 10_000 + hour * 100 + minute


def approximate_month_index(month: int, day: int) -> int:
    """
    고정 절입일 기준 근사 사주월 (시각 정보 없음)
    - 2/4 이후 인월(1) ... 1/6 이후 축월(12)
    """
    if day >= APPROX_JEOL_DAY[month]:
        current = month
    else:
        current = month - 1 if month > 1 else 12
    # 양력 2월 절입 → 인월(1), 1월 절입 → 축월(12)
    return (current - 2) % 12 + 1


def is_before_approx_ipchun(month: int, day: int) -> bool:
    """고정 입춘일(2/4) 이전이면 전년도 간지"""
    return (month, day) < (2, APPROX_JEOL_DAY[2])


def _boundary(spec: TermSpec, moment: datetime) -> SolarTermBoundary:
    return SolarTermBoundary(
        year=moment.year,
        month=moment.month,
        day=moment.day,
        hour=moment.hour,
        minute=moment.minute,
        solar_longitude=float(spec.solar_longitude),
        saju_month_index=spec.saju_month_index,
        branch=spec.branch,
        name=spec.name,
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 절기 소스 (공통 인터페이스)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class SolarTermSource(ABC):
    """연도별 12절 경계를 제공하는 소스"""

    method = ""

    def __init__(self, cache_size: Optional[int] = None):
        self._cache: LRUCache = LRUCache(maxsize=cache_size or get_settings().solar_term_cache_size)

    @abstractmethod
    def supports(self, year: int) -> bool:
        ...

    @abstractmethod
    def _compute_year(self, year: int) -> List[SolarTermBoundary]:
        ...

    def boundaries_of_year(self, year: int) -> Optional[List[SolarTermBoundary]]:
        """해당 양력 연도의 12절 (시각순). 지원하지 않는 연도면 None"""
        if not self.supports(year):
            return None
        cached = self._cache.get(year)
        if cached is None:
            cached = sorted(self._compute_year(year), key=lambda b: b.key)
            self._cache[year] = cached
            logger.debug(f"[SolarTerms] {self.method} {year}년 절입 계산: {cached[1]}")
        return cached


class EphemerisTermTable(SolarTermSource):
    """
    정밀 절기표 (기본 1900~2050)
    ephem으로 시황경 통과 시각을 분 단위로 구하고 KASI 공표값으로 덮어쓴다.
    """

    method = "table"

    def __init__(self, start_year: Optional[int] = None, end_year: Optional[int] = None,
                 cache_size: Optional[int] = None):
        super().__init__(cache_size)
        settings = get_settings()
        self.start_year = start_year if start_year is not None else settings.solar_term_table_start
        self.end_year = end_year if end_year is not None else settings.solar_term_table_end

    def supports(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year

    @staticmethod
    def _apparent_longitude(d: float) -> float:
        """ephem 날짜(UT) → 태양 시황경 (도, 역기점 황도 기준)"""
        date = ephem.Date(d)
        sun = ephem.Sun()
        sun.compute(date)
        equatorial = ephem.Equatorial(sun.g_ra, sun.g_dec, epoch=date)
        return math.degrees(float(ephem.Ecliptic(equatorial, epoch=date).lon))

    def _solve(self, year: int, spec: TermSpec) -> datetime:
        guess_ut = datetime(year, spec.guess_month, spec.guess_day, 12, 0) - KST_OFFSET
        x0 = float(ephem.Date(guess_ut))

        def residual(d: float) -> float:
            return vsop87d.norm180(self._apparent_longitude(d) - spec.solar_longitude)

        root = ephem.newton(residual, x0, x0 + 0.5)
        return ephem.Date(root).datetime() + KST_OFFSET

    def _compute_year(self, year: int) -> List[SolarTermBoundary]:
        rows = []
        for spec in TERM_SPECS:
            published = KASI_PUBLISHED.get((year, spec.saju_month_index))
            if published:
                moment = datetime(*published)
            else:
                moment = vsop87d.round_to_minute(self._solve(year, spec))
            rows.append(_boundary(spec, moment))
        return rows


class Vsop87dTermSource(SolarTermSource):
    """VSOP87D 급수 기반 근사 절기 (모든 연도)"""

    method = "vsop87d"

    def supports(self, year: int) -> bool:
        return 1 < year < 9999

    def _compute_year(self, year: int) -> List[SolarTermBoundary]:
        rows = []
        for spec in TERM_SPECS:
            guess = datetime(year, spec.guess_month, spec.guess_day, 12, 0)
            moment = vsop87d.solve_longitude_crossing(guess, spec.solar_longitude)
            rows.append(_boundary(spec, vsop87d.round_to_minute(moment)))
        return rows


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 연도 범위로 소스를 고르는 절기 경계표
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class SolarTermBoundaryTable:
    """
    절기 경계표
    - boundaries_for_year / is_supported_year: 정밀표 자체 (범위 밖은 None)
    - 나머지 조회: 정밀표 → 범위 밖이면 VSOP87D 근사로 투명하게 대체
    """

    def __init__(self, table: Optional[SolarTermSource] = None,
                 fallback: Optional[SolarTermSource] = None):
        self.table = table or EphemerisTermTable()
        self.fallback = fallback or Vsop87dTermSource()
        self._warned_years: Set[int] = set()
        logger.info(
            f"[SolarTerms] 절기 경계표 초기화: 정밀표={self.table.method} "
            f"{getattr(self.table, 'start_year', '?')}~{getattr(self.table, 'end_year', '?')}, "
            f"근사={self.fallback.method}"
        )

    # ===== 정밀표 =====

    def is_supported_year(self, year: int) -> bool:
        return self.table.supports(year)

    def boundaries_for_year(self, year: int) -> Optional["OrderedDict[int, SolarTermBoundary]"]:
        """정밀표 범위 연도의 12절 (사주월 인덱스 → 경계, 시각순)"""
        rows = self.table.boundaries_of_year(year)
        if rows is None:
            return None
        return OrderedDict((b.saju_month_index, b) for b in rows)

    # ===== 소스 선택 =====

    def source_for(self, year: int,
                   precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE) -> SolarTermSource:
        if precision == JeolgiPrecision.APPROXIMATE and self.table.supports(year):
            return self.table
        if precision == JeolgiPrecision.APPROXIMATE and year not in self._warned_years:
            self._warned_years.add(year)
            logger.warning(f"[SolarTerms] {year}년은 정밀표 범위 밖 → VSOP87D 근사 계산 사용")
        return self.fallback

    def method_for(self, year: int, precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE) -> str:
        if precision == JeolgiPrecision.APPROXIMATE and self.table.supports(year):
            return self.table.method
        return self.fallback.method

    def _available(self, year: int, precision: JeolgiPrecision) -> Optional[List[SolarTermBoundary]]:
        return self.source_for(year, precision).boundaries_of_year(year)

    def resolved_boundaries(self, year: int,
                            precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE) -> List[SolarTermBoundary]:
        """해당 연도의 12절 (어느 소스로도 계산할 수 없으면 SolarTermLookupError)"""
        rows = self._available(year, precision)
        if rows is None:
            raise SolarTermLookupError(f"{year}년 절기 경계를 계산할 수 없습니다")
        return rows

    def _sorted(self, years, precision: JeolgiPrecision) -> List[SolarTermBoundary]:
        """계산 가능한 연도의 경계만 모아 시각순 정렬"""
        rows: List[SolarTermBoundary] = []
        for y in years:
            rows.extend(self._available(y, precision) or ())
        return sorted(rows, key=lambda b: b.key)

    # ===== 조회 =====
    # 아래 조회는 경계를 계산할 수 없으면 예외 대신 None을 돌려준다.
    # 호출 측(PillarCalculator)은 None이면 고정 절입일 근사로 내려간다.

    def ipchun_of(self, year: int,
                  precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE) -> Optional[SolarTermBoundary]:
        for boundary in self._sorted((year,), precision):
            if boundary.saju_month_index == IPCHUN_INDEX:
                return boundary
        return None

    def saju_month_index_at(self, year: int, month: int, day: int, hour: int, minute: int,
                            precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE) -> Optional[int]:
        """해당 시각의 사주월 (절입 시각보다 엄격히 늦어야 새 달), 직전 절입이 없으면 None"""
        boundary = self.previous_boundary_before(year, month, day, hour, minute, precision)
        return boundary.saju_month_index if boundary is not None else None

    def previous_boundary_before(self, year: int, month: int, day: int, hour: int, minute: int,
                                 precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE
                                 ) -> Optional[SolarTermBoundary]:
        """엄격히 이전의 마지막 절입 (현재 사주월의 시작)"""
        key = moment_key(year, month, day, hour, minute)
        found = None
        for boundary in self._sorted((year - 1, year), precision):
            if boundary.key < key:
                found = boundary
        return found

    def next_boundary_after(self, year: int, month: int, day: int, hour: int, minute: int,
                            precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE
                            ) -> Optional[SolarTermBoundary]:
        key = moment_key(year, month, day, hour, minute)
        for boundary in self._sorted((year, year + 1), precision):
            if boundary.key > key:
                return boundary
        return None

    def previous_boundary_at_or_before(self, year: int, month: int, day: int, hour: int, minute: int,
                                       precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE
                                       ) -> Optional[SolarTermBoundary]:
        key = moment_key(year, month, day, hour, minute)
        found = None
        for boundary in self._sorted((year - 1, year), precision):
            if boundary.key <= key:
                found = boundary
        return found

    def boundary_proximity(self, year: int, month: int, day: int, hour: int, minute: int,
                           threshold_hours: int = 48,
                           precision: JeolgiPrecision = JeolgiPrecision.APPROXIMATE) -> Optional[str]:
        """
        절입 ±threshold_hours 이내인지
        Returns: "near_ipchun" | "near_term_change" | None
        """
        moment = datetime(year, month, day, hour, minute)
        for boundary in self._sorted((year - 1, year, year + 1), precision):
            if abs((moment - boundary.as_datetime()).total_seconds()) <= threshold_hours * 3600:
                return "near_ipchun" if boundary.saju_month_index == IPCHUN_INDEX else "near_term_change"
        return None


_solar_term_table: Optional[SolarTermBoundaryTable] = None


def get_solar_term_table() -> SolarTermBoundaryTable:
    global _solar_term_table
    if _solar_term_table is None:
        _solar_term_table = SolarTermBoundaryTable()
    return _solar_term_table
