"""
계산 추적기 테스트
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.models.schemas import AlternativeDecision, TraceCategory, TraceEntry
from saju_core.services.trace import CalculationTracer


def make_tracer():
    tracer = CalculationTracer()
    tracer.add(
        step="year_pillar",
        category=TraceCategory.YEAR_PILLAR,
        decision="년주: 갑진(甲辰)",
        reasoning="입춘 이전",
        rule="입춘 기준",
        alternatives=[AlternativeDecision(school_name="양력 1/1 기준", decision="을사(乙巳)", reasoning="양력 새해")],
    )
    tracer.add(
        step="month_pillar",
        category=TraceCategory.MONTH_PILLAR,
        decision="월주: 정축(丁丑)",
        reasoning="사주월 12",
        confidence=0.85,
    )
    tracer.add(
        step="month_check",
        category=TraceCategory.MONTH_PILLAR,
        decision="확인",
        reasoning="재확인",
    )
    return tracer


class TestTracer:
    """추가 전용 기록"""

    def test_size(self):
        tracer = make_tracer()
        assert tracer.size == 3
        assert len(tracer) == 3

    def test_entries_is_copy(self):
        tracer = make_tracer()
        entries = tracer.entries
        entries.clear()
        assert tracer.size == 3

    def test_entry_immutable(self):
        entry = make_tracer().entries[0]
        with pytest.raises((TypeError, ValueError)):
            entry.decision = "변경"

    def test_confidence_range(self):
        with pytest.raises(ValueError):
            TraceEntry(step="x", category=TraceCategory.STRENGTH, decision="d", reasoning="r", confidence=1.5)

    def test_queries(self):
        tracer = make_tracer()
        assert len(tracer.by_category(TraceCategory.MONTH_PILLAR)) == 2
        assert [e.step for e in tracer.disagreements()] == ["year_pillar"]
        assert [e.step for e in tracer.uncertain()] == ["month_pillar"]
        assert tracer.uncertain(0.8) == []

    def test_merge(self):
        tracer = make_tracer()
        other = CalculationTracer()
        other.add(step="strength", category=TraceCategory.STRENGTH, decision="신강", reasoning="점수")
        tracer.merge(other)
        assert tracer.size == 4
        assert tracer.entries[-1].step == "strength"
        assert other.size == 1


class TestKoreanSummary:
    """한국어 요약"""

    def test_summary_format(self):
        summary = make_tracer().to_korean_summary()
        assert "=== 년주 계산 ===" in summary
        assert "  [year_pillar] 년주: 갑진(甲辰)" in summary
        assert "    근거: 입춘 이전" in summary
        assert "    규칙: 입춘 기준" in summary
        assert "    ※ 유파별 차이:" in summary
        assert "      - 양력 1/1 기준: 을사(乙巳) (양력 새해)" in summary
        assert "    확신도: 85%" in summary

    def test_header_once_per_category_run(self):
        summary = make_tracer().to_korean_summary()
        assert summary.count("=== 월주 계산 ===") == 1

    def test_full_confidence_not_shown(self):
        tracer = CalculationTracer()
        tracer.add(step="s", category=TraceCategory.STRENGTH, decision="d", reasoning="r")
        assert "확신도" not in tracer.to_korean_summary()
        assert "규칙" not in tracer.to_korean_summary()

    def test_empty(self):
        assert CalculationTracer().to_korean_summary() == ""
