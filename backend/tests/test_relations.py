"""
천간합 평가 테스트 (합화 / 합거 / 불성립)
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.models.calculation_config import DEFAULT_CONFIG, HapHwaStrictness, create_config
from saju_core.models.schemas import HapState, PillarPosition, PillarSet, TraceCategory
from saju_core.services.ganji import pillar_from_ganji
from saju_core.services.relations import (
    effective_stem_element,
    is_hapgeo,
    stem_combination_evaluator,
)
from saju_core.services.trace import CalculationTracer


def chart(text: str) -> PillarSet:
    year, month, day, hour = (pillar_from_ganji(g) for g in text.split())
    return PillarSet(year=year, month=month, day=day, hour=hour)


class TestStemCombination:
    """천간합 판정"""

    def test_hapwha_with_season(self):
        """무계합 + 사월 → 합화(화)"""
        evaluations = stem_combination_evaluator.evaluate(chart("무오 계사 병인 갑오"), DEFAULT_CONFIG)
        assert len(evaluations) == 1
        e = evaluations[0]
        assert e.state == HapState.HAPWHA
        assert e.result_element == "화"
        assert e.confidence == pytest.approx(0.825)
        assert (e.position1, e.position2) == (PillarPosition.YEAR, PillarPosition.MONTH)
        assert "인접" in e.conditions_met

    def test_hapgeo_without_season(self):
        """을경합 + 인월 → 합거"""
        evaluations = stem_combination_evaluator.evaluate(chart("을축 경인 임자 경자"), DEFAULT_CONFIG)
        adjacent = [e for e in evaluations if e.position2 == PillarPosition.MONTH][0]
        assert adjacent.state == HapState.HAPGEO
        assert adjacent.confidence == 0.50
        assert "결론" in adjacent.reasoning

    def test_non_adjacent(self):
        evaluations = stem_combination_evaluator.evaluate(chart("을축 경인 임자 경자"), DEFAULT_CONFIG)
        far = [e for e in evaluations if e.position2 == PillarPosition.HOUR][0]
        assert far.state == HapState.NOT_ESTABLISHED
        assert "인접하지 않음" in far.conditions_failed

    def test_day_master_protected(self):
        evaluations = stem_combination_evaluator.evaluate(chart("무진 기미 갑술 무진"), DEFAULT_CONFIG)
        assert len(evaluations) == 1
        assert evaluations[0].state == HapState.NOT_ESTABLISHED
        assert evaluations[0].day_master_involved
        assert evaluations[0].confidence == 1.0

    def test_day_master_allowed(self):
        config = create_config(day_master_never_hap_geo=False)
        e = stem_combination_evaluator.evaluate(chart("무진 기미 갑술 무진"), config)[0]
        assert e.state == HapState.HAPWHA
        assert e.day_master_involved
        assert e.confidence == pytest.approx(0.85)

    def test_same_stems_ignored(self):
        assert stem_combination_evaluator.evaluate(chart("갑인 갑인 갑인 갑인"), DEFAULT_CONFIG) == []

    def test_opposed_strict(self):
        """극신(수)이 있으면 엄격 모드는 합거"""
        e = stem_combination_evaluator.evaluate(chart("무오 계사 임인 갑진"), DEFAULT_CONFIG)[0]
        assert e.state == HapState.HAPGEO
        assert e.confidence == 0.60
        assert any("극신 존재" in c for c in e.conditions_failed)


class TestStrictness:
    """엄격도별 판정"""

    def test_moderate(self):
        config = create_config(hap_hwa_strictness=HapHwaStrictness.MODERATE)
        e = stem_combination_evaluator.evaluate(chart("을축 경인 임자 경자"), config)[0]
        assert e.state == HapState.HAPGEO
        opposed = stem_combination_evaluator.evaluate(chart("무오 계사 임인 갑진"), config)[0]
        assert opposed.state == HapState.HAPWHA

    def test_lenient(self):
        config = create_config(hap_hwa_strictness=HapHwaStrictness.LENIENT)
        e = stem_combination_evaluator.evaluate(chart("을축 경인 임자 경자"), config)[0]
        assert e.state == HapState.HAPWHA
        assert e.confidence == pytest.approx(0.60)


class TestEffectiveElement:
    """합 반영 천간 오행"""

    def test_hapwha_transforms(self):
        pillars = chart("무오 계사 병인 갑오")
        evaluations = stem_combination_evaluator.evaluate(pillars, DEFAULT_CONFIG)
        assert effective_stem_element(pillars, PillarPosition.YEAR, evaluations) == "화"
        assert effective_stem_element(pillars, PillarPosition.MONTH, evaluations) == "화"
        assert effective_stem_element(pillars, PillarPosition.HOUR, evaluations) == "목"

    def test_hapgeo_removes(self):
        pillars = chart("을축 경인 임자 경자")
        evaluations = stem_combination_evaluator.evaluate(pillars, DEFAULT_CONFIG)
        assert effective_stem_element(pillars, PillarPosition.MONTH, evaluations) is None
        assert is_hapgeo(PillarPosition.YEAR, evaluations)
        # 떨어진 시간 경은 그대로
        assert effective_stem_element(pillars, PillarPosition.HOUR, evaluations) == "금"
        assert not is_hapgeo(PillarPosition.HOUR, evaluations)


class TestRelationTrace:
    """합 평가 추적"""

    def test_trace_entry(self):
        tracer = CalculationTracer()
        stem_combination_evaluator.evaluate(chart("무오 계사 병인 갑오"), DEFAULT_CONFIG, tracer)
        entries = tracer.by_category(TraceCategory.RELATIONS)
        assert len(entries) == 1
        assert entries[0].step == "hap_year_month"
        assert "HAPWHA" in entries[0].decision
        assert entries[0].confidence == pytest.approx(0.825)
