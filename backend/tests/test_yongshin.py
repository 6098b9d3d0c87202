"""
용신 결정 테스트
- 억부 / 조후 / 통관 / 격국별 / 병약 추천
- 최종 결정 순서와 우선순위 설정
- 조후표
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.models.calculation_config import (
    DEFAULT_CONFIG,
    JonggyeokYongshinMode,
    YongshinPriority,
    create_config,
)
from saju_core.models.schemas import (
    PillarSet,
    TraceCategory,
    YongshinAgreement,
    YongshinRecommendation,
    YongshinType,
)
from saju_core.services import johu_table
from saju_core.services.elements import ELEMENTS
from saju_core.services.ganji import CHEONGAN, pillar_from_ganji
from saju_core.services.gyeokguk import gyeokguk_determiner
from saju_core.services.relations import stem_combination_evaluator
from saju_core.services.strength import strength_analyzer
from saju_core.services.trace import CalculationTracer
from saju_core.services.yongshin import (
    YongshinStrategies,
    assess_agreement,
    count_chart_elements,
    resolve_heesin,
    yongshin_resolver,
)


def chart(text: str) -> PillarSet:
    year, month, day, hour = (pillar_from_ganji(g) for g in text.split())
    return PillarSet(year=year, month=month, day=day, hour=hour)


def resolve(text: str, config=DEFAULT_CONFIG, tracer=None):
    pillars = chart(text)
    evaluations = stem_combination_evaluator.evaluate(pillars, config)
    strength = strength_analyzer.analyze(pillars, config, hap_evaluations=evaluations)
    gyeokguk = gyeokguk_determiner.determine(pillars, strength, config, evaluations)
    return yongshin_resolver.resolve(pillars, strength.is_strong, config, gyeokguk, evaluations, tracer)


def rec(type_, primary, secondary=None, confidence=0.7):
    return YongshinRecommendation(type=type_, primary_element=primary, secondary_element=secondary,
                                  confidence=confidence, reasoning="")


class TestStrategies:
    """개별 추천"""

    def test_eokbu_strong(self):
        r = YongshinStrategies.eokbu("목", True)
        assert (r.primary_element, r.secondary_element) == ("화", "토")
        assert r.confidence == 0.7

    def test_eokbu_weak(self):
        r = YongshinStrategies.eokbu("목", False)
        assert (r.primary_element, r.secondary_element) == ("수", "목")

    def test_johu(self):
        r = YongshinStrategies.johu("갑", "인")
        assert (r.primary_element, r.secondary_element) == ("수", "화")
        assert r.confidence == 0.8
        assert r.reasoning.startswith("조후(調候): 갑목")

    def test_tonggwan(self):
        """관성(금)과 비겁(목)이 모두 3 이상 → 인성(수) 통관"""
        r = YongshinStrategies.tonggwan(chart("경신 갑인 갑신 경인"), "목")
        assert r.type == YongshinType.TONGGWAN
        assert r.primary_element == "수"
        assert r.confidence == 0.6

    def test_no_tonggwan(self):
        assert YongshinStrategies.tonggwan(chart("임자 기유 갑인 병인"), "목") is None

    def test_byeongyak(self):
        r = YongshinStrategies.byeongyak(chart("갑인 병인 갑인 갑자"), "목", True)
        assert (r.primary_element, r.secondary_element) == ("금", "수")
        assert r.confidence == 0.55

    def test_byeongyak_medicine_is_weak_day_master(self):
        """약이 곧 약한 일간이면 병약 추천 없음"""
        assert YongshinStrategies.byeongyak(chart("무진 기미 갑술 무진"), "목", False) is None

    def test_count_chart_elements_with_hapgeo(self):
        pillars = chart("을축 경인 임자 경자")
        evaluations = stem_combination_evaluator.evaluate(pillars, DEFAULT_CONFIG)
        assert count_chart_elements(pillars, evaluations) == {"금": 1, "토": 1, "목": 1, "수": 2}


class TestSpecialCategories:
    """특수격 전용 추천 우선"""

    def test_jonggang_follow(self):
        result = resolve("갑인 병인 갑인 갑자")
        types = [r.type for r in result.recommendations]
        assert types == [YongshinType.EOKBU, YongshinType.JOHU, YongshinType.JEONWANG, YongshinType.BYEONGYAK]
        assert result.final_yongshin == "목"
        assert result.final_heesin == "화"
        assert result.gisin == "금"
        assert result.gusin == "토"
        assert result.agreement == YongshinAgreement.PARTIAL_AGREE
        assert result.final_confidence == pytest.approx(0.75)

    def test_jonggang_counter(self):
        config = create_config(jonggyeok_yongshin_mode=JonggyeokYongshinMode.COUNTER_DOMINANT)
        result = resolve("갑인 병인 갑인 갑자", config)
        jeonwang = [r for r in result.recommendations if r.type == YongshinType.JEONWANG][0]
        assert (jeonwang.primary_element, jeonwang.secondary_element) == ("금", "화")
        assert result.final_yongshin == "금"

    def test_jongjae(self):
        result = resolve("무진 기미 갑술 무진")
        assert result.final_yongshin == "토"
        assert result.final_heesin == "금"
        assert result.gisin == "목"
        assert result.gusin == "수"
        assert result.agreement == YongshinAgreement.FULL_AGREE
        assert all(r.type != YongshinType.BYEONGYAK for r in result.recommendations)

    def test_hapwha(self):
        result = resolve("무오 계사 병인 갑오")
        hapwha = [r for r in result.recommendations if r.type == YongshinType.HAPWHA_YONGSHIN][0]
        assert (hapwha.primary_element, hapwha.secondary_element) == ("목", "화")
        assert result.final_yongshin == "목"

    def test_ilhaeng(self):
        result = resolve("갑인 정묘 갑진 병인")
        ilhaeng = [r for r in result.recommendations if r.type == YongshinType.ILHAENG_YONGSHIN][0]
        assert (ilhaeng.primary_element, ilhaeng.secondary_element) == ("화", "목")
        assert result.final_yongshin == "화"
        # 억부(신강 → 화) 일치 가산
        assert result.final_confidence == pytest.approx(0.85)


class TestPriority:
    """억부/조후 불일치 시 우선순위 (정관격, 신약, 유월)"""

    def test_johu_first(self):
        result = resolve("임자 기유 갑인 병인")
        assert result.agreement == YongshinAgreement.DISAGREE
        assert result.final_yongshin == "화"
        assert result.final_confidence == pytest.approx(0.60)
        assert result.final_heesin == "금"
        assert (result.gisin, result.gusin) == ("수", "금")

    def test_eokbu_first(self):
        config = create_config(yongshin_priority=YongshinPriority.EOKBU_FIRST)
        assert resolve("임자 기유 갑인 병인", config).final_yongshin == "수"

    def test_equal_weight(self):
        """동등 가중: 확신도 높은 조후(0.8)"""
        config = create_config(yongshin_priority=YongshinPriority.EQUAL_WEIGHT)
        assert resolve("임자 기유 갑인 병인", config).final_yongshin == "화"

    def test_gyeokguk_recommendation_present(self):
        result = resolve("임자 기유 갑인 병인")
        gyeokguk = [r for r in result.recommendations if r.type == YongshinType.GYEOKGUK][0]
        assert (gyeokguk.primary_element, gyeokguk.secondary_element) == ("토", "수")
        assert gyeokguk.confidence == 0.65

    def test_tonggwan_when_disagree(self):
        pillars = chart("경신 갑인 갑신 경인")
        result = yongshin_resolver.resolve(pillars, True, DEFAULT_CONFIG)
        assert result.final_yongshin == "수"
        assert result.final_confidence == pytest.approx(0.6)


class TestHelpers:
    """일치도 / 희신"""

    def test_agreement(self):
        assert assess_agreement(rec(YongshinType.EOKBU, "화", "토"), rec(YongshinType.JOHU, "화")) == YongshinAgreement.FULL_AGREE
        assert assess_agreement(rec(YongshinType.EOKBU, "화", "토"), rec(YongshinType.JOHU, "토")) == YongshinAgreement.PARTIAL_AGREE
        assert assess_agreement(rec(YongshinType.EOKBU, "화", "토"), rec(YongshinType.JOHU, "수", "금")) == YongshinAgreement.DISAGREE

    def test_heesin_falls_back_to_generator(self):
        eokbu = rec(YongshinType.EOKBU, "화")
        johu = rec(YongshinType.JOHU, "화")
        assert resolve_heesin("화", eokbu, johu) == "목"

    def test_heesin_other_primary(self):
        eokbu = rec(YongshinType.EOKBU, "수")
        johu = rec(YongshinType.JOHU, "화")
        assert resolve_heesin("화", eokbu, johu) == "수"


class TestJohuTable:
    """조후표 (일간 10 × 월지 12)"""

    def test_complete(self):
        assert len(johu_table.JOHU_TABLE) == 120
        for stem in CHEONGAN:
            for branch in johu_table.MONTH_BRANCHES:
                entry = johu_table.lookup(stem, branch)
                assert entry.primary in ELEMENTS
                assert entry.secondary is None or entry.secondary in ELEMENTS
                assert entry.secondary != entry.primary

    def test_single_element_cells(self):
        singles = {k for k, v in johu_table.JOHU_TABLE.items() if v.secondary is None}
        assert singles == {("을", "자"), ("을", "축"), ("병", "묘"), ("정", "인"), ("정", "묘"), ("경", "오"), ("계", "묘")}

    @pytest.mark.parametrize("stem,branch,expected", [
        ("갑", "인", ("수", "화")),
        ("갑", "자", ("화", "금")),
        ("병", "오", ("수", "금")),
        ("임", "축", ("화", "목")),
        ("계", "유", ("금", "화")),
    ])
    def test_spot_values(self, stem, branch, expected):
        entry = johu_table.lookup(stem, branch)
        assert (entry.primary, entry.secondary) == expected

    def test_every_row_varies(self):
        for stem in CHEONGAN:
            primaries = {johu_table.lookup(stem, b).primary for b in johu_table.MONTH_BRANCHES}
            assert len(primaries) >= 2, f"{stem} 조후가 계절과 무관"

    def test_unknown(self):
        with pytest.raises(KeyError):
            johu_table.lookup("갑", "X")

    def test_reasoning(self):
        text = johu_table.reasoning("갑", "인")
        assert text.startswith("갑목(甲木, 양목/큰 나무)이(가) 인월(초봄)에 태어남:")
        assert "보조로 화(火)" in text


class TestYongshinTrace:
    def test_trace(self):
        tracer = CalculationTracer()
        resolve("임자 기유 갑인 병인", tracer=tracer)
        entry = tracer.by_category(TraceCategory.YONGSHIN)[0]
        assert entry.decision.startswith("용신 화(火)")
        assert entry.confidence == pytest.approx(0.60)
        # 최종과 다른 추천은 대안으로 기록
        assert {alt.decision for alt in entry.alternatives} >= {"수(水)"}
