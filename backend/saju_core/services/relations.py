"""
천간합(天干合) 평가
- RelationEvaluator: 합충 평가기 인터페이스 (격국/강약 분석이 소비)
- StemCombinationEvaluator: 기본 구현, 합화/합거/불성립 판정
  - 엄격도 3단계: STRICT_FIVE_CONDITIONS / MODERATE / LENIENT
"""
import logging
from typing import List, Optional, Protocol

from saju_core.models.calculation_config import CalculationConfig, HapHwaStrictness
from saju_core.models.schemas import HapHwaEvaluation, HapState, PillarPosition, PillarSet, TraceCategory
from saju_core.services.elements import conquered_by
from saju_core.services.ganji import GAN_TO_ELEMENT, JI_TO_ELEMENT
from saju_core.services.trace import CalculationTracer

logger = logging.getLogger(__name__)

# 천간합 → (결과 오행, 이름)
STEM_COMBINATIONS = {
    frozenset(("갑", "기")): ("토", "갑기합"),
    frozenset(("을", "경")): ("금", "을경합"),
    frozenset(("병", "신")): ("수", "병신합"),
    frozenset(("정", "임")): ("목", "정임합"),
    frozenset(("무", "계")): ("화", "무계합"),
}

# 합화 오행을 돕는 월지 (계절)
SEASON_SUPPORT = {
    "토": ("진", "술", "축", "미"),
    "목": ("인", "묘"),
    "화": ("사", "오"),
    "금": ("신", "유"),
    "수": ("해", "자"),
}

POSITIONS = (PillarPosition.YEAR, PillarPosition.MONTH, PillarPosition.DAY, PillarPosition.HOUR)

POSITION_KOREAN = {
    PillarPosition.YEAR: "년간",
    PillarPosition.MONTH: "월간",
    PillarPosition.DAY: "일간",
    PillarPosition.HOUR: "시간",
}


class RelationEvaluator(Protocol):
    """합충 평가기: evaluate(pillars, config) → 합 평가 목록"""

    def evaluate(self, pillars: PillarSet, config: CalculationConfig,
                 tracer: Optional[CalculationTracer] = None) -> List[HapHwaEvaluation]:
        ...


def _presence_bonus(pillars: PillarSet, result_element: str, excluded: tuple) -> float:
    """합에 참여하지 않은 천간/지지 중 결과 오행의 세력 (최대 0.15)"""
    stems = [g for i, g in enumerate(pillars.stems()) if i not in excluded]
    stem_count = sum(1 for g in stems if GAN_TO_ELEMENT[g] == result_element)
    branch_count = sum(1 for j in pillars.branches() if JI_TO_ELEMENT[j] == result_element)
    return min(0.05 * stem_count + 0.025 * branch_count, 0.15)


class StemCombinationEvaluator:
    """천간합 평가기"""

    def evaluate(self, pillars: PillarSet, config: CalculationConfig,
                 tracer: Optional[CalculationTracer] = None) -> List[HapHwaEvaluation]:
        stems = pillars.stems()
        results: List[HapHwaEvaluation] = []
        for i in range(4):
            for j in range(i + 1, 4):
                if stems[i] == stems[j]:
                    continue
                combo = STEM_COMBINATIONS.get(frozenset((stems[i], stems[j])))
                if combo is None:
                    continue
                evaluation = self._evaluate_pair(pillars, i, j, combo, config)
                results.append(evaluation)
                if tracer is not None:
                    tracer.add(
                        step=f"hap_{POSITIONS[i].value.lower()}_{POSITIONS[j].value.lower()}",
                        category=TraceCategory.RELATIONS,
                        decision=f"{combo[1]}({evaluation.stem1}{evaluation.stem2}): {evaluation.state.value}",
                        reasoning=evaluation.reasoning,
                        rule="천간합 성립 조건: 인접, 월령 지원, 극신 부재",
                        config_key="hap_hwa_strictness",
                        confidence=evaluation.confidence,
                    )
        logger.debug(f"[Relations] 천간합 {len(results)}건: {[e.state.value for e in results]}")
        return results

    def _evaluate_pair(self, pillars: PillarSet, i: int, j: int, combo, config: CalculationConfig) -> HapHwaEvaluation:
        stems = pillars.stems()
        result_element, hap_name = combo
        pos1, pos2 = POSITIONS[i], POSITIONS[j]
        base = dict(
            stem1=stems[i],
            stem2=stems[j],
            position1=pos1,
            position2=pos2,
            result_element=result_element,
        )
        met: List[str] = []
        failed: List[str] = []
        pair_label = f"{POSITION_KOREAN[pos1]} {stems[i]}과(와) {POSITION_KOREAN[pos2]} {stems[j]}의 {hap_name}"

        # 일간 보호
        day_involved = PillarPosition.DAY in (pos1, pos2)
        if day_involved and config.day_master_never_hap_geo:
            failed.append("일간은 합거/합화되지 않음")
            return HapHwaEvaluation(
                **base, state=HapState.NOT_ESTABLISHED, confidence=1.0,
                conditions_met=met, conditions_failed=failed,
                reasoning=f"{pair_label}: 결론: 일간은 합으로 묶이지 않는다는 설정에 따라 불성립.",
                day_master_involved=True,
            )

        # 1) 인접
        if j - i != 1:
            failed.append("인접하지 않음")
            return HapHwaEvaluation(
                **base, state=HapState.NOT_ESTABLISHED, confidence=1.0,
                conditions_met=met, conditions_failed=failed,
                reasoning=f"{pair_label}: 결론: 두 천간이 떨어져 있어 합이 성립하지 않습니다.",
                day_master_involved=day_involved,
            )
        met.append("인접")

        # 2) 월령 지원
        season_support = pillars.month.ji in SEASON_SUPPORT[result_element]
        (met if season_support else failed).append(f"월지 {pillars.month.ji}의 {result_element} 지원")

        # 3) 극신(剋神) 부재: 나머지 두 천간 중 결과 오행을 극하는 글자
        controller = conquered_by(result_element)
        others = [stems[k] for k in range(4) if k not in (i, j)]
        opposed = any(GAN_TO_ELEMENT[g] == controller for g in others)
        (failed if opposed else met).append(f"{controller} 극신 {'존재' if opposed else '부재'}")

        bonus = _presence_bonus(pillars, result_element, (i, j))
        strictness = config.hap_hwa_strictness

        if strictness == HapHwaStrictness.STRICT_FIVE_CONDITIONS:
            if season_support and not opposed:
                state, confidence = HapState.HAPWHA, min(0.70 + bonus, 0.95)
            elif season_support:
                state, confidence = HapState.HAPGEO, 0.60
            else:
                state, confidence = HapState.HAPGEO, 0.50
        elif strictness == HapHwaStrictness.MODERATE:
            if season_support:
                state, confidence = HapState.HAPWHA, min(0.65 + bonus, 0.90)
            else:
                state, confidence = HapState.HAPGEO, 0.50
        else:
            state, confidence = HapState.HAPWHA, min(0.55 + bonus, 0.85)

        if state == HapState.HAPWHA:
            conclusion = f"결론: 합화(合化)가 성립하여 두 천간이 {result_element}(으)로 변합니다."
        else:
            conclusion = "결론: 합거(合去)로 두 천간이 묶여 본래 기능을 잃습니다."

        return HapHwaEvaluation(
            **base, state=state, confidence=round(confidence, 4),
            conditions_met=met, conditions_failed=failed,
            reasoning=f"{pair_label}: 충족={met}, 미충족={failed}. {conclusion}",
            day_master_involved=day_involved,
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 합 결과를 반영한 천간 오행
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def stem_state(position: PillarPosition, evaluations: List[HapHwaEvaluation]) -> Optional[HapHwaEvaluation]:
    """해당 자리 천간이 참여한 성립된 합 (합화 우선)"""
    found = None
    for e in evaluations:
        if e.state == HapState.NOT_ESTABLISHED or position not in (e.position1, e.position2):
            continue
        if e.state == HapState.HAPWHA:
            return e
        found = found or e
    return found


def effective_stem_element(pillars: PillarSet, position: PillarPosition,
                           evaluations: List[HapHwaEvaluation]) -> Optional[str]:
    """
    합 반영 천간 오행
    - 합거: None (기능 상실)
    - 합화: 결과 오행
    - 그 외: 본래 오행
    """
    state = stem_state(position, evaluations)
    if state is None:
        return GAN_TO_ELEMENT[pillars.stem_at(position)]
    if state.state == HapState.HAPGEO:
        return None
    return state.result_element


def is_hapgeo(position: PillarPosition, evaluations: List[HapHwaEvaluation]) -> bool:
    state = stem_state(position, evaluations)
    return state is not None and state.state == HapState.HAPGEO


stem_combination_evaluator = StemCombinationEvaluator()
