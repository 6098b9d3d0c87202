"""
사주 4기둥 계산 통합 테스트
- 입춘 경계 / 절입 경계 / 야자시 정책 / 서머타임
- 계산 추적 기록
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.models.calculation_config import DEFAULT_CONFIG, DayCutMode, create_config
from saju_core.models.schemas import BirthMoment, TraceCategory
from saju_core.services.saju_engine import get_pillar_calculator
from saju_core.services.trace import CalculationTracer


def birth(year, month, day, hour, minute=0, **kwargs):
    return BirthMoment(year=year, month=month, day=day, hour=hour, minute=minute, **kwargs)


@pytest.fixture(scope="module")
def calculator():
    return get_pillar_calculator()


class TestKnownCharts:
    """검증된 원국"""

    def test_1978_05_16(self, calculator):
        """1978-05-16 11:00 서울 → 무오 정사 무인 정사"""
        result = calculator.calculate(birth(1978, 5, 16, 11, 0), DEFAULT_CONFIG)
        assert str(result.pillars) == "무오 정사 무인 정사"
        assert (result.adjusted.adjusted_hour, result.adjusted.adjusted_minute) == (10, 28)
        assert result.solar_term_method == "table"
        assert result.pillars.day_master == "무"

    def test_day_pillar_2000(self, calculator):
        result = calculator.calculate(birth(2000, 1, 1, 12, 0), DEFAULT_CONFIG)
        assert result.pillars.day.ganji == "무오"

    def test_dst_chart(self, calculator):
        """1988 서머타임: 14:30 → 12:58 오시"""
        result = calculator.calculate(birth(1988, 7, 15, 14, 30), DEFAULT_CONFIG)
        assert result.adjusted.dst_correction_minutes == 60
        assert result.pillars.hour.ji == "오"


class TestIpchunBoundary:
    """입춘 경계 (입춘 시각과 같은 분은 전년도)"""

    def test_at_ipchun_minute(self, calculator):
        result = calculator.calculate(birth(2021, 2, 3, 23, 59), DEFAULT_CONFIG)
        assert result.pillars.year.ganji == "경자"
        assert result.pillars.month.ji == "축"

    def test_after_ipchun(self, calculator):
        result = calculator.calculate(birth(2021, 2, 4, 0, 0), DEFAULT_CONFIG)
        assert result.pillars.year.ganji == "신축"
        assert result.pillars.month.ji == "인"

    def test_before_ipchun_2025(self, calculator):
        result = calculator.calculate(birth(2025, 2, 3, 12, 0), DEFAULT_CONFIG)
        assert result.pillars.year.ganji == "갑진"
        assert result.pillars.month.ganji == "정축"

    def test_after_ipchun_2025(self, calculator):
        result = calculator.calculate(birth(2025, 2, 5, 12, 0), DEFAULT_CONFIG)
        assert result.pillars.year.ganji == "을사"
        assert result.pillars.month.ganji == "무인"

    @pytest.mark.parametrize("day,branch", [(3, "자"), (10, "축")])
    def test_january(self, calculator, day, branch):
        result = calculator.calculate(birth(2025, 1, day, 12, 0), DEFAULT_CONFIG)
        assert result.pillars.year.ganji == "갑진"
        assert result.pillars.month.ji == branch


class TestDayCutPolicy:
    """야자시 정책 (진태양시 23:08)"""

    def test_yaza(self, calculator):
        result = calculator.calculate(birth(2000, 1, 1, 23, 40), DEFAULT_CONFIG)
        assert (result.adjusted.adjusted_hour, result.adjusted.adjusted_minute) == (23, 8)
        assert result.pillars.day.ganji == "기미"
        assert result.pillars.hour.ganji == "갑자"

    def test_midnight(self, calculator):
        config = create_config(day_cut_mode=DayCutMode.MIDNIGHT_00)
        result = calculator.calculate(birth(2000, 1, 1, 23, 40), config)
        assert result.pillars.day.ganji == "무오"
        assert result.pillars.hour.ganji == "임자"

    def test_yaza_2330(self, calculator):
        """23:30 기준 유파: 23:08은 아직 당일"""
        config = create_config(day_cut_mode=DayCutMode.YAZA_23_30_TO_01_30_NEXTDAY)
        result = calculator.calculate(birth(2000, 1, 1, 23, 40), config)
        assert result.pillars.day.ganji == "무오"


class TestFallbackYears:
    """정밀표 범위 밖"""

    def test_1850(self, calculator):
        tracer = CalculationTracer()
        result = calculator.calculate(birth(1850, 6, 15, 12, 0), DEFAULT_CONFIG, tracer)
        assert result.solar_term_method == "vsop87d"
        month_entry = tracer.by_category(TraceCategory.MONTH_PILLAR)[0]
        assert month_entry.confidence == 0.85
        assert result.pillars.month.ji == "오"


class TestRangeEdges:
    """입력 가능한 연도 양 끝 (서기 2년 ~ 9998년)"""

    @pytest.mark.parametrize("year", [1, 9999])
    def test_out_of_range_rejected(self, year):
        with pytest.raises(ValueError):
            birth(year, 6, 15, 12, 0)

    def test_first_day_of_year_2(self, calculator):
        """직전 절입(서기 1년 대설)이 없으면 고정 절입일 근사로 자월"""
        tracer = CalculationTracer()
        result = calculator.calculate(birth(2, 1, 1, 12, 0), DEFAULT_CONFIG, tracer)
        assert result.pillars.year.ganji == "신유"
        assert result.pillars.month.ji == "자"
        assert result.days_since_jeol is None
        month_entry = tracer.by_category(TraceCategory.MONTH_PILLAR)[0]
        assert "approximate" in month_entry.reasoning
        assert month_entry.confidence == 0.7

    def test_last_day_of_year_9998(self, calculator):
        result = calculator.calculate(birth(9998, 12, 31, 23, 59), DEFAULT_CONFIG)
        assert result.solar_term_method == "vsop87d"
        assert result.pillars.year.ganji == "무술"
        assert result.pillars.month.ji in ("자", "축")
        assert result.days_since_jeol is not None


class TestDaysSinceJeol:
    """절입 후 경과 일수"""

    def test_first_day(self, calculator):
        result = calculator.calculate(birth(2024, 5, 5, 12, 0), DEFAULT_CONFIG)
        assert result.days_since_jeol == 1

    def test_later_day(self, calculator):
        result = calculator.calculate(birth(2024, 5, 20, 12, 0), DEFAULT_CONFIG)
        assert result.days_since_jeol == 16


class TestPillarTrace:
    """기둥 계산 추적"""

    def test_steps_in_order(self, calculator):
        tracer = CalculationTracer()
        calculator.calculate(birth(1978, 5, 16, 11, 0), DEFAULT_CONFIG, tracer)
        steps = [e.step for e in tracer.entries]
        assert steps == ["time_adjustment", "year_pillar", "month_pillar", "day_pillar", "hour_pillar"]

    def test_time_adjustment_recorded(self, calculator):
        tracer = CalculationTracer()
        calculator.calculate(birth(1988, 7, 15, 14, 30), DEFAULT_CONFIG, tracer)
        entry = tracer.by_category(TraceCategory.TIME_ADJUSTMENT)[0]
        assert "14:30 -> 12:58" in entry.decision
        assert "DST 보정 -60분" in entry.reasoning
        assert entry.alternatives, "보정이 있으면 표준시 대안 기록"

    def test_year_alternative_before_ipchun(self, calculator):
        tracer = CalculationTracer()
        calculator.calculate(birth(2025, 2, 3, 12, 0), DEFAULT_CONFIG, tracer)
        entry = tracer.by_category(TraceCategory.YEAR_PILLAR)[0]
        assert entry.alternatives[0].decision.startswith("을사")
        assert entry.config_key == "jeolgi_precision"

    def test_day_alternative_only_late_hour(self, calculator):
        tracer = CalculationTracer()
        calculator.calculate(birth(2000, 1, 1, 23, 40), DEFAULT_CONFIG, tracer)
        day_entry = tracer.by_category(TraceCategory.DAY_PILLAR)[0]
        assert day_entry.alternatives[0].decision.startswith("무오")

        tracer = CalculationTracer()
        calculator.calculate(birth(2000, 1, 1, 12, 0), DEFAULT_CONFIG, tracer)
        assert not tracer.by_category(TraceCategory.DAY_PILLAR)[0].alternatives

    def test_month_near_boundary(self, calculator):
        tracer = CalculationTracer()
        calculator.calculate(birth(2024, 5, 5, 12, 0), DEFAULT_CONFIG, tracer)
        entry = tracer.by_category(TraceCategory.MONTH_PILLAR)[0]
        assert "near_term_change" in entry.reasoning
