"""
전체 분석 파이프라인 테스트
- 기둥 → 천간합 → 신강신약 → 격국 → 용신
- 프리셋 선택 / 정답지 요약
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.errors import InvalidInputError
from saju_core import services
from saju_core.models.calculation_config import DEFAULT_CONFIG, CalculationConfig, SchoolPreset
from saju_core.models.schemas import BirthMoment, TraceCategory
from saju_core.services import get_saju_analyzer
from saju_core.services.saju_analyzer import SajuAnalyzer, get_saju_summary
from saju_core.services.trace import CalculationTracer


BIRTH = BirthMoment(year=1978, month=5, day=16, hour=11, minute=0)


@pytest.fixture(scope="module")
def analyzer():
    return get_saju_analyzer()


@pytest.fixture(scope="module")
def result(analyzer):
    return analyzer.analyze(BIRTH, DEFAULT_CONFIG)


class TestPipeline:
    """분석 흐름"""

    def test_pillars(self, result):
        assert str(result.pillars) == "무오 정사 무인 정사"
        assert result.strength.day_master_element == "토"

    def test_strength(self, result):
        assert result.strength.is_strong

    def test_no_stem_combination(self, result):
        """무/정 천간뿐이므로 천간합 없음"""
        assert result.hap_hwa_evaluations == []

    def test_yongshin_consistent(self, result):
        yongshin = result.yongshin
        assert yongshin.recommendations[0].type.value == "EOKBU"
        assert yongshin.final_yongshin in {r.primary_element for r in yongshin.recommendations}

    def test_trace_categories(self, result):
        categories = [e.category for e in result.trace]
        assert categories[:5] == [
            TraceCategory.TIME_ADJUSTMENT,
            TraceCategory.YEAR_PILLAR,
            TraceCategory.MONTH_PILLAR,
            TraceCategory.DAY_PILLAR,
            TraceCategory.HOUR_PILLAR,
        ]
        assert {TraceCategory.STRENGTH, TraceCategory.GYEOKGUK, TraceCategory.YONGSHIN} <= set(categories)
        assert TraceCategory.RELATIONS not in categories

    def test_external_tracer(self, analyzer):
        tracer = CalculationTracer()
        result = analyzer.analyze(BIRTH, DEFAULT_CONFIG, tracer)
        assert tracer.size == len(result.trace)
        assert tracer.to_korean_summary().startswith("=== ")

    def test_config_keys_are_config_fields(self, result):
        """추적 기록의 config_key는 CalculationConfig 필드 이름"""
        keys = {e.config_key for e in result.trace if e.config_key is not None}
        assert keys
        assert keys <= set(CalculationConfig.model_fields)

    def test_services_package_exposes_getters(self):
        assert callable(services.get_saju_analyzer)
        assert not hasattr(services, "CalculationError")
        assert not hasattr(services, "SolarTermLookupError")

    def test_earliest_supported_year(self, analyzer):
        """서기 2년 1월 1일: 절입일 근사로 끝까지 분석"""
        result = analyzer.analyze(BirthMoment(year=2, month=1, day=1, hour=12), DEFAULT_CONFIG)
        assert result.pillars.year.ganji == "신유"
        assert result.pillars.month.ji == "자"
        assert result.yongshin.final_yongshin


class TestConfigSelection:
    """요청 단위 설정"""

    def test_default_when_none(self, analyzer, result):
        assert analyzer.analyze(BIRTH).pillars == result.pillars

    @pytest.mark.parametrize("preset", ["korean_mainstream", SchoolPreset.KOREAN_MAINSTREAM, "MODERN_INTEGRATED"])
    def test_presets(self, analyzer, preset):
        assert str(analyzer.analyze(BIRTH, preset).pillars) == "무오 정사 무인 정사"

    def test_traditional_chinese_meridian(self, analyzer):
        """동경 120도 기준: 11:00 → 11:27 오시"""
        result = analyzer.analyze(BIRTH, SchoolPreset.TRADITIONAL_CHINESE)
        assert result.pillars.hour.ganji == "무오"

    def test_eokbu_recommendation(self, result):
        """신강 토 일간: 억부 금(식상)"""
        eokbu = [r for r in result.yongshin.recommendations if r.type.value == "EOKBU"][0]
        assert (eokbu.primary_element, eokbu.secondary_element) == ("금", "수")

    def test_unknown_preset_fails_before_calculation(self):
        """설정 오류는 기둥 계산 전에 발생"""
        analyzer = SajuAnalyzer(pillar_calculator=object())
        with pytest.raises(InvalidInputError):
            analyzer.analyze(BIRTH, "NO_SUCH_SCHOOL")


class TestSummary:
    """정답지 요약"""

    def test_counts(self, result):
        summary = get_saju_summary(result)
        assert summary["pillars"] == "무오 정사 무인 정사"
        assert summary["day_master"] == "무"
        assert summary["elements_count"] == {"목": 1, "화": 5, "토": 2, "금": 0, "수": 0}
        assert summary["elements_present"] == ["목", "화", "토"]

    def test_ten_gods(self, result):
        summary = get_saju_summary(result)
        assert summary["ten_gods_count"]["정인"] == 3
        assert summary["ten_gods_count"]["편인"] == 2
        assert summary["ten_gods_distribution"] == {"비겁": 1, "식상": 0, "재성": 0, "관성": 1, "인성": 5}
        assert [t["position"] for t in summary["ten_gods_list"]] == ["년간", "년지", "월간", "월지", "일지", "시간", "시지"]

    def test_missing_flags(self, result):
        summary = get_saju_summary(result)
        assert summary["is_missing_shiksang"]
        assert summary["is_missing_jaesung"]
        assert not summary["is_missing_insung"]

    def test_favorability(self, result):
        summary = get_saju_summary(result)
        assert summary["ten_god_favorability"]["정인"] == "UNFAVORABLE"
        assert set(summary["ten_god_favorability"]) == set(summary["ten_gods_present"])

    def test_yongshin_fields(self, result):
        summary = get_saju_summary(result)
        assert summary["yongshin"] == result.yongshin.final_yongshin
        assert summary["gisin"] == result.yongshin.gisin
        assert summary["structure"].endswith(")")
