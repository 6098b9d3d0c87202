"""
사주 기둥 계산 엔진 (PillarCalculator)
- 진태양시 보정 → 절기 조회 → 60갑자 산술
- 년주/월주: 표준시 기준 (절기표가 KST 민간 시각)
- 일주/시주: 진태양시 기준 (야자시 정책 적용)
- 각 단계 판단은 CalculationTracer에 기록
"""
import logging
from datetime import datetime
from typing import Optional

from saju_core.models.calculation_config import CalculationConfig, DayCutMode
from saju_core.models.schemas import (
    AdjustedMoment,
    AlternativeDecision,
    BirthMoment,
    Pillar,
    PillarCalculationResult,
    PillarSet,
    TraceCategory,
)
from saju_core.services.ganji import GanjiCalculator, ganji_calc, rolls_to_next_day
from saju_core.services.solar_terms import (
    SolarTermBoundaryTable,
    approximate_month_index,
    get_solar_term_table,
    is_before_approx_ipchun,
    moment_key,
)
from saju_core.services.solar_time import TrueSolarTimeAdjuster, meridian_for
from saju_core.services.trace import CalculationTracer

logger = logging.getLogger(__name__)

APPROXIMATE_METHOD = "approximate"


class PillarCalculator:
    """
    사주 원국 4기둥 계산기
    """

    def __init__(self, solar_terms: Optional[SolarTermBoundaryTable] = None,
                 adjuster: Optional[TrueSolarTimeAdjuster] = None,
                 ganji: Optional[GanjiCalculator] = None):
        self.solar_terms = solar_terms or get_solar_term_table()
        self.adjuster = adjuster or TrueSolarTimeAdjuster()
        self.ganji = ganji or ganji_calc

    def calculate(
        self,
        birth: BirthMoment,
        config: CalculationConfig,
        tracer: Optional[CalculationTracer] = None,
    ) -> PillarCalculationResult:
        tracer = tracer if tracer is not None else CalculationTracer()

        # 1) 시간 보정
        adjusted = self._adjust(birth, config)
        self._trace_time_adjustment(tracer, birth, adjusted, config)

        s_y, s_m, s_d = adjusted.standard_year, adjusted.standard_month, adjusted.standard_day
        s_h, s_min = adjusted.standard_hour, adjusted.standard_minute
        precision = config.jeolgi_precision
        method = self.solar_terms.method_for(s_y, precision)

        # 2) 년주 (입춘 시각 포함 이전 = 전년도, 입춘을 못 구하면 2/4 고정)
        ipchun = self.solar_terms.ipchun_of(s_y, precision)
        if ipchun is not None:
            before_ipchun = moment_key(s_y, s_m, s_d, s_h, s_min) <= ipchun.key
        else:
            before_ipchun = is_before_approx_ipchun(s_m, s_d)
        effective_year = self.ganji.effective_year(s_y, before_ipchun)
        year_pillar = self.ganji.calc_year_pillar(effective_year)
        self._trace_year(tracer, year_pillar, s_y, effective_year, ipchun)

        # 3) 월주 (절기 strict-after, 직전 절입이 없으면 고정 절입일 근사)
        month_index = self.solar_terms.saju_month_index_at(s_y, s_m, s_d, s_h, s_min, precision)
        month_method = method
        if month_index is None:
            month_index = approximate_month_index(s_m, s_d)
            month_method = APPROXIMATE_METHOD
            logger.warning(f"[PillarCalculator] {s_y}-{s_m:02d}-{s_d:02d} 직전 절입 없음 → 고정 절입일 근사")
        month_pillar = self.ganji.calc_month_pillar(year_pillar.gan, month_index)
        self._trace_month(tracer, month_pillar, month_index, adjusted, month_method, precision)

        # 4) 일주 (진태양시 + 야자시 정책)
        a_y, a_m, a_d = adjusted.adjusted_year, adjusted.adjusted_month, adjusted.adjusted_day
        a_h, a_min = adjusted.adjusted_hour, adjusted.adjusted_minute
        day_date = self.ganji.day_pillar_date(a_y, a_m, a_d, a_h, a_min, config.day_cut_mode)
        day_pillar = self.ganji.calc_day_pillar(*day_date)
        self._trace_day(tracer, day_pillar, adjusted, config)

        # 5) 시주 (오서둔시법, 전환된 일간 기준)
        hour_pillar = self.ganji.calc_hour_pillar(day_pillar.gan, a_h)
        self._trace_hour(tracer, hour_pillar, day_pillar, a_h)

        # 6) 절입 후 경과 일수 (사령 판단용)
        previous = self.solar_terms.previous_boundary_before(s_y, s_m, s_d, s_h, s_min, precision)
        days_since_jeol = None
        if previous is not None:
            elapsed = datetime(s_y, s_m, s_d, s_h, s_min) - previous.as_datetime()
            days_since_jeol = elapsed.days + 1

        pillars = PillarSet(year=year_pillar, month=month_pillar, day=day_pillar, hour=hour_pillar)
        logger.info(f"[PillarCalculator] {birth.year}-{birth.month:02d}-{birth.day:02d} "
                    f"{birth.hour:02d}:{birth.minute:02d} → {pillars} (절기={method})")

        return PillarCalculationResult(
            birth=birth,
            pillars=pillars,
            adjusted=adjusted,
            days_since_jeol=days_since_jeol,
            solar_term_method=method,
        )

    def _adjust(self, birth: BirthMoment, config: CalculationConfig) -> AdjustedMoment:
        """설정 자오선이 타임존 자오선과 다를 때만 직접 지정으로 넘긴다"""
        override = None
        if birth.standard_meridian_override is None:
            if config.lmt_baseline_longitude != meridian_for(birth.timezone):
                override = config.lmt_baseline_longitude
        return self.adjuster.adjust(
            birth,
            apply_dst_history=config.apply_dst_history,
            include_equation_of_time=config.include_equation_of_time,
            lmt_baseline_override=override,
        )

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 추적 기록
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @staticmethod
    def _trace_time_adjustment(tracer: CalculationTracer, birth: BirthMoment,
                               adjusted: AdjustedMoment, config: CalculationConfig) -> None:
        parts = [
            f"DST 보정 -{adjusted.dst_correction_minutes}분",
            f"경도 보정 {adjusted.longitude_correction_minutes:+d}분 (표준자오선 {adjusted.standard_meridian}°, 경도 {birth.longitude}°)",
        ]
        if config.include_equation_of_time:
            parts.append(f"균시차 {adjusted.equation_of_time_minutes:+d}분")
        total = (adjusted.longitude_correction_minutes + adjusted.equation_of_time_minutes
                 - adjusted.dst_correction_minutes)
        alternatives = []
        if total != 0:
            alternatives.append(AlternativeDecision(
                school_name="표준시 그대로 사용",
                decision=f"{birth.hour:02d}:{birth.minute:02d}",
                reasoning="진태양시 보정 없이 민간 시각으로 시주를 세움",
            ))
        tracer.add(
            step="time_adjustment",
            category=TraceCategory.TIME_ADJUSTMENT,
            decision=(f"시각 보정: {birth.hour:02d}:{birth.minute:02d} -> "
                      f"{adjusted.adjusted_hour:02d}:{adjusted.adjusted_minute:02d}"),
            reasoning=", ".join(parts),
            rule="진태양시(眞太陽時) = 표준시 + 경도차 × 4분 (+ 균시차)",
            alternatives=alternatives,
            config_key="include_equation_of_time",
        )

    def _trace_year(self, tracer: CalculationTracer, year_pillar: Pillar, civil_year: int,
                    effective_year: int, ipchun) -> None:
        if ipchun is not None:
            reasoning = f"{civil_year}년 입춘 {ipchun} 기준 유효년도 {effective_year}년"
        else:
            reasoning = f"{civil_year}년 입춘 시각을 구할 수 없어 고정 입춘일(2/4) 근사, 유효년도 {effective_year}년"
        alternatives = []
        calendar_pillar = self.ganji.calc_year_pillar(civil_year)
        if calendar_pillar != year_pillar:
            alternatives.append(AlternativeDecision(
                school_name="양력 1/1 기준",
                decision=calendar_pillar.label,
                reasoning="양력 새해를 년주 경계로 보는 견해",
            ))
        tracer.add(
            step="year_pillar",
            category=TraceCategory.YEAR_PILLAR,
            decision=f"년주: {year_pillar.label}",
            reasoning=reasoning,
            rule="입춘(立春, 태양황경 315도) 기준 년주 결정",
            alternatives=alternatives,
            config_key="jeolgi_precision",
        )

    def _trace_month(self, tracer: CalculationTracer, month_pillar: Pillar, month_index: int,
                     adjusted: AdjustedMoment, method: str, precision) -> None:
        s = adjusted
        reasoning = f"사주월 {month_index} ({month_pillar.ji}월), 절기 계산={method}"
        proximity = self.solar_terms.boundary_proximity(
            s.standard_year, s.standard_month, s.standard_day, s.standard_hour, s.standard_minute,
            precision=precision,
        )
        if proximity:
            reasoning += f", 절입 48시간 이내({proximity})"
        alternatives = []
        approx = approximate_month_index(s.standard_month, s.standard_day)
        if approx != month_index:
            alternatives.append(AlternativeDecision(
                school_name="고정 절입일 근사",
                decision=f"사주월 {approx}",
                reasoning="절입 시각 없이 평년 절입일만으로 월을 나눔",
            ))
        tracer.add(
            step="month_pillar",
            category=TraceCategory.MONTH_PILLAR,
            decision=f"월주: {month_pillar.label}",
            reasoning=reasoning,
            rule="절기 경계 + 오호둔월법(五虎遁月法)",
            alternatives=alternatives,
            config_key="jeolgi_precision",
            confidence={"table": 1.0, APPROXIMATE_METHOD: 0.7}.get(method, 0.85),
        )

    def _trace_day(self, tracer: CalculationTracer, day_pillar: Pillar,
                   adjusted: AdjustedMoment, config: CalculationConfig) -> None:
        a = adjusted
        alternatives = []
        if a.adjusted_hour >= 23:
            rolled = rolls_to_next_day(a.adjusted_hour, a.adjusted_minute, config.day_cut_mode)
            alt_mode = DayCutMode.MIDNIGHT_00 if rolled else DayCutMode.YAZA_23_TO_01_NEXTDAY
            alt_date = self.ganji.day_pillar_date(a.adjusted_year, a.adjusted_month, a.adjusted_day,
                                                  a.adjusted_hour, a.adjusted_minute, alt_mode)
            alternatives.append(AlternativeDecision(
                school_name="정자시(正子時) 학파" if rolled else "야자시(夜子時) 학파",
                decision=self.ganji.calc_day_pillar(*alt_date).label,
                reasoning="자정에 날짜를 바꿈" if rolled else "23시부터 다음 날 일진을 씀",
            ))
        tracer.add(
            step="day_pillar",
            category=TraceCategory.DAY_PILLAR,
            decision=f"일주: {day_pillar.label}",
            reasoning="JDN 공식: ((JDN + 49) mod 60) -> 간지 인덱스",
            rule=f"일주 전환 정책 {config.day_cut_mode.value}",
            alternatives=alternatives,
            config_key="day_cut_mode",
        )

    @staticmethod
    def _trace_hour(tracer: CalculationTracer, hour_pillar: Pillar, day_pillar: Pillar, hour: int) -> None:
        tracer.add(
            step="hour_pillar",
            category=TraceCategory.HOUR_PILLAR,
            decision=f"시주: {hour_pillar.label}",
            reasoning=f"진태양시 {hour}시 → {hour_pillar.ji}시, 일간 {day_pillar.gan} 기준",
            rule="오서둔시법(五鼠遁時法)",
        )


_pillar_calculator: Optional[PillarCalculator] = None


def get_pillar_calculator() -> PillarCalculator:
    global _pillar_calculator
    if _pillar_calculator is None:
        _pillar_calculator = PillarCalculator()
    return _pillar_calculator
