"""
절기 경계표 테스트
- 정밀표 (ephem + KASI 공표값)
- VSOP87D 근사 계산 (범위 밖 연도)
- strict-after 경계 비교
"""
import logging
import pytest
from datetime import datetime

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.errors import SolarTermLookupError
from saju_core.models.calculation_config import JeolgiPrecision
from saju_core.services import vsop87d
from saju_core.services.solar_terms import (
    EphemerisTermTable,
    SolarTermBoundaryTable,
    Vsop87dTermSource,
    approximate_month_index,
    get_solar_term_table,
    is_before_approx_ipchun,
)


@pytest.fixture(scope="module")
def table():
    return get_solar_term_table()


class TestBoundaryTable:
    """정밀표 (1900~2050)"""

    def test_supported_range(self, table):
        assert table.is_supported_year(1900)
        assert table.is_supported_year(2050)
        assert not table.is_supported_year(1899)
        assert not table.is_supported_year(2051)

    def test_outside_range_returns_none(self, table):
        assert table.boundaries_for_year(1850) is None

    def test_twelve_boundaries_in_order(self, table):
        rows = table.boundaries_for_year(2024)
        assert len(rows) == 12
        assert list(rows.keys()) == [12, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11]
        keys = [b.key for b in rows.values()]
        assert keys == sorted(keys), "절입 시각은 시간순이어야 함"

    def test_branch_and_longitude(self, table):
        rows = table.boundaries_for_year(2024)
        assert rows[1].branch == "인" and rows[1].solar_longitude == 315.0
        assert rows[12].branch == "축" and rows[12].solar_longitude == 285.0
        assert rows[4].name == "입하"

    def test_published_ipchun(self, table):
        """KASI 공표 입춘 시각"""
        assert table.ipchun_of(2021).as_datetime() == datetime(2021, 2, 3, 23, 59)
        assert table.ipchun_of(2024).as_datetime() == datetime(2024, 2, 4, 17, 27)
        assert table.ipchun_of(2025).as_datetime() == datetime(2025, 2, 3, 23, 10)

    @pytest.mark.parametrize("year", [1930, 1964, 1999, 2033])
    def test_ipchun_date_plausible(self, table, year):
        ipchun = table.ipchun_of(year)
        assert ipchun.month == 2 and 3 <= ipchun.day <= 5, f"{year} 입춘: {ipchun}"

    def test_method(self, table):
        assert table.method_for(2000) == "table"
        assert table.method_for(1850) == "vsop87d"
        assert table.method_for(2000, JeolgiPrecision.VSOP87D_EXACT) == "vsop87d"


class TestMonthLookup:
    """사주월 조회 (strict-after)"""

    def test_exact_boundary_minute_is_previous_month(self, table):
        """입하 2024-05-05 09:10: 같은 분은 이전 달(진월)"""
        assert table.saju_month_index_at(2024, 5, 5, 9, 10) == 3
        assert table.saju_month_index_at(2024, 5, 5, 9, 11) == 4

    def test_ipchun_minute(self, table):
        assert table.saju_month_index_at(2021, 2, 3, 23, 59) == 12
        assert table.saju_month_index_at(2021, 2, 4, 0, 0) == 1

    def test_january_before_sohan(self, table):
        """소한 전 1월 초는 전년도 대설 구간(자월)"""
        assert table.saju_month_index_at(2025, 1, 3, 12, 0) == 11
        assert table.saju_month_index_at(2025, 1, 10, 12, 0) == 12

    def test_next_and_previous(self, table):
        nxt = table.next_boundary_after(2024, 5, 5, 9, 10)
        assert nxt.name == "망종"
        assert nxt.as_datetime() == datetime(2024, 6, 5, 13, 10)
        prev = table.previous_boundary_at_or_before(2024, 5, 5, 9, 10)
        assert prev.name == "입하"
        assert table.previous_boundary_before(2024, 5, 5, 9, 10).name == "청명"

    def test_next_boundary_crosses_year(self, table):
        assert table.next_boundary_after(2024, 12, 20, 0, 0).name == "소한"

    def test_proximity(self, table):
        assert table.boundary_proximity(2021, 2, 3, 12, 0) == "near_ipchun"
        assert table.boundary_proximity(2024, 5, 6, 12, 0) == "near_term_change"
        assert table.boundary_proximity(2024, 5, 20, 12, 0) is None


class TestUncomputableYears:
    """어느 소스로도 경계를 구할 수 없는 연도 (서기 1년, 9999년)"""

    def test_resolved_boundaries_raises(self, table):
        with pytest.raises(SolarTermLookupError):
            table.resolved_boundaries(1)

    def test_ipchun_none(self, table):
        assert table.ipchun_of(1) is None
        assert table.ipchun_of(9999) is None

    def test_month_index_none_before_first_boundary(self, table):
        """서기 2년 1월 1일: 직전 절입(서기 1년 대설)을 구할 수 없음"""
        assert table.saju_month_index_at(2, 1, 1, 12, 0) is None
        assert table.previous_boundary_before(2, 1, 1, 12, 0) is None
        assert table.previous_boundary_at_or_before(2, 1, 1, 12, 0) is None
        assert table.next_boundary_after(2, 1, 1, 12, 0).name == "소한"

    def test_adjacent_year_skipped(self, table):
        """서기 2년 6월은 2년 경계만으로 충분"""
        assert table.saju_month_index_at(2, 6, 20, 12, 0) == 5

    def test_next_none_after_last_boundary(self, table):
        assert table.next_boundary_after(9998, 12, 31, 23, 59) is None
        assert table.boundary_proximity(9998, 12, 31, 12, 0) is None


class TestFallback:
    """범위 밖 연도 → VSOP87D 근사"""

    def test_fallback_logs_warning(self, caplog):
        fresh = SolarTermBoundaryTable()
        with caplog.at_level(logging.WARNING, logger="saju_core.services.solar_terms"):
            rows = fresh.resolved_boundaries(1850)
        assert len(rows) == 12
        assert any("1850" in r.message for r in caplog.records)

    def test_fallback_warning_once_per_year(self, caplog):
        """같은 연도를 여러 번 조회해도 경고는 한 번"""
        fresh = SolarTermBoundaryTable()
        with caplog.at_level(logging.WARNING, logger="saju_core.services.solar_terms"):
            fresh.resolved_boundaries(1850)
            fresh.ipchun_of(1850)
            fresh.saju_month_index_at(1850, 6, 15, 12, 0)
            fresh.boundary_proximity(1850, 6, 15, 12, 0)
            fresh.resolved_boundaries(1851)
        warned = [r.message for r in caplog.records if r.levelno == logging.WARNING]
        assert sum("1850년" in m for m in warned) == 1
        assert sum("1851년" in m for m in warned) == 1

    @pytest.mark.parametrize("year", [1600, 2300])
    def test_far_years(self, table, year):
        rows = table.resolved_boundaries(year)
        assert len(rows) == 12
        assert [b.key for b in rows] == sorted(b.key for b in rows)
        assert table.ipchun_of(year).month == 2

    @pytest.mark.parametrize("year", [1950, 1985, 2010, 2040])
    def test_fallback_close_to_table(self, table, year):
        """정밀표 범위 안에서 근사 계산과 2분 이내"""
        fallback = table.fallback.boundaries_of_year(year)
        precise = table.boundaries_for_year(year)
        for approx in fallback:
            exact = precise[approx.saju_month_index]
            diff = abs((approx.as_datetime() - exact.as_datetime()).total_seconds())
            assert diff <= 120, f"{year} {approx.name}: {approx} vs {exact}"

    def test_fallback_early_century(self, table):
        fallback = table.fallback.boundaries_of_year(1905)
        precise = table.boundaries_for_year(1905)
        for approx in fallback:
            exact = precise[approx.saju_month_index]
            assert abs((approx.as_datetime() - exact.as_datetime()).total_seconds()) <= 3600

    def test_custom_range(self):
        custom = SolarTermBoundaryTable(table=EphemerisTermTable(2000, 2001), fallback=Vsop87dTermSource())
        assert custom.is_supported_year(2001)
        assert not custom.is_supported_year(2002)
        assert custom.method_for(2002) == "vsop87d"


class TestVsop87d:
    """VSOP87D 태양 황경"""

    def test_apparent_longitude(self):
        """1992-10-13 0h TT 시황경 ≈ 199.906도"""
        assert vsop87d.apparent_solar_longitude(2448908.5) == pytest.approx(199.906, abs=0.01)

    def test_delta_t(self):
        assert vsop87d.delta_t_seconds(datetime(2000, 1, 1)) == pytest.approx(63.86, abs=0.5)

    def test_norm180(self):
        assert vsop87d.norm180(190.0) == -170.0
        assert vsop87d.norm180(-190.0) == 170.0

    def test_crossing_hits_target(self):
        moment = vsop87d.solve_longitude_crossing(datetime(2024, 5, 5, 12, 0), 45.0)
        ut = moment - vsop87d.KST_OFFSET
        jd_tt = vsop87d.datetime_to_jd(ut) + vsop87d.delta_t_seconds(ut) / 86400.0
        assert vsop87d.norm180(vsop87d.apparent_solar_longitude(jd_tt) - 45.0) == pytest.approx(0.0, abs=1e-4)
        assert moment.date() == datetime(2024, 5, 5).date()

    def test_round_to_minute(self):
        assert vsop87d.round_to_minute(datetime(2024, 1, 1, 10, 0, 29)) == datetime(2024, 1, 1, 10, 0)
        assert vsop87d.round_to_minute(datetime(2024, 1, 1, 10, 0, 30)) == datetime(2024, 1, 1, 10, 1)


class TestApproximateMonth:
    """고정 절입일 근사"""

    @pytest.mark.parametrize("month,day,expected", [
        (2, 4, 1), (2, 3, 12), (1, 6, 12), (1, 5, 11), (12, 7, 11), (5, 6, 4), (5, 5, 3),
    ])
    def test_approximate_month_index(self, month, day, expected):
        assert approximate_month_index(month, day) == expected

    @pytest.mark.parametrize("month,day,expected", [
        (1, 31, True), (2, 3, True), (2, 4, False), (12, 31, False),
    ])
    def test_before_approx_ipchun(self, month, day, expected):
        assert is_before_approx_ipchun(month, day) is expected
