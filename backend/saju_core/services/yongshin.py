"""
용신 결정 (YongshinResolver)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
후보 추천:
- 억부(抑扶): 신강 → 식상/재성, 신약 → 인성/비겁
- 조후(調候): 궁통보감 표
- 통관(通關): 두 세력의 상극이 강할 때 중재 오행
- 격국별: 내격 격국용신 / 종격 전왕 / 화격 합화용신 / 일행득기
- 병약(病藥): 4개 이상 과다한 오행을 제어

최종 결정 순서:
1. 화격/일행득기/종격 전용 추천 (억부/조후 일치 가산, 최대 0.95)
2. 억부/조후가 다르면 통관
3. 격국용신이 한쪽과 일치하면 그쪽 (0.70)
4. 억부/조후 일치도 + 우선순위 설정
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from saju_core.models.calculation_config import CalculationConfig, JonggyeokYongshinMode, YongshinPriority
from saju_core.models.schemas import (
    AlternativeDecision,
    GyeokgukCategory,
    GyeokgukResult,
    GyeokgukType,
    HapHwaEvaluation,
    HapState,
    PillarPosition,
    PillarSet,
    TraceCategory,
    YongshinAgreement,
    YongshinRecommendation,
    YongshinResult,
    YongshinType,
)
from saju_core.services import johu_table
from saju_core.services.elements import conquered_by, conquers, element_label, element_of_group, generated_by, generates
from saju_core.services.ganji import GAN_TO_ELEMENT
from saju_core.services.gyeokguk import GYEOKGUK_INFO, ILHAENG_TYPES
from saju_core.services.hidden_stems import principal_stem
from saju_core.services.strength import NON_DAY_POSITIONS
from saju_core.services.trace import CalculationTracer

logger = logging.getLogger(__name__)

AGREEMENT_CONFIDENCE = {
    YongshinAgreement.FULL_AGREE: 0.95,
    YongshinAgreement.PARTIAL_AGREE: 0.80,
    YongshinAgreement.DISAGREE: 0.60,
}

AGREEMENT_KOREAN = {
    YongshinAgreement.FULL_AGREE: "억부/조후 완전 일치",
    YongshinAgreement.PARTIAL_AGREE: "억부/조후 부분 일치",
    YongshinAgreement.DISAGREE: "억부/조후 불일치",
}

EOKBU_CONFIDENCE = 0.7
JOHU_CONFIDENCE = 0.8
GYEOKGUK_CONFIDENCE = 0.65
JEONWANG_CONFIDENCE = 0.75
HAPWHA_CONFIDENCE = 0.75
ILHAENG_CONFIDENCE = 0.7
BYEONGYAK_CONFIDENCE = 0.55
GYEOKGUK_AGREEMENT_CONFIDENCE = 0.70
SPECIAL_CONFIDENCE_CAP = 0.95

BYEONGYAK_MIN_COUNT = 4


def _identity(element: str) -> str:
    return element


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 규칙표
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

# 내격 격국용신: (주 십성 그룹, 보조 십성 그룹, 설명)
GYEOKGUK_YONGSHIN_TABLE: Dict[GyeokgukType, Tuple[str, Optional[str], str]] = {
    GyeokgukType.JEONGGWAN: ("재성", "인성", "순용: 재성이 관을 생하고(재생관), 인성이 관인상생으로 보호"),
    GyeokgukType.JEONGJAE: ("관성", "식상", "순용: 관성이 재를 보호(재생관), 식상이 재를 생(식상생재)"),
    GyeokgukType.PYEONJAE: ("관성", "식상", "순용: 관성이 재를 보호, 식상이 재를 생"),
    GyeokgukType.JEONGIN: ("관성", None, "순용: 관성이 인을 생하여 관인상생으로 보호"),
    GyeokgukType.SIKSIN: ("재성", "비겁", "순용: 재성이 식신의 힘을 이어받고(식신생재), 비겁이 식신을 보조"),
    GyeokgukType.GEONROK: ("관성", "재성", "순용: 관성으로 비겁 과다를 제어, 재성으로 설기"),
    GyeokgukType.PYEONGWAN: ("식상", "인성", "역용: 식신이 칠살을 제어(식신제살), 인성이 화살(化殺)"),
    GyeokgukType.SANGGWAN: ("인성", "재성", "역용: 인성이 상관을 제어(상관패인), 재성으로 상관생재도 가능"),
    GyeokgukType.PYEONIN: ("재성", None, "역용: 편재가 편인을 제어하여 도식(倒食) 방지"),
    GyeokgukType.YANGIN: ("관성", None, "역용: 관살이 양인을 제어(양인합살)"),
}

# 종격 전왕 용신: 유형 → 모드 → (주 변환, 보조 변환, 설명 틀)
Transform = Callable[[str], str]
JEONWANG_RULES: Dict[GyeokgukType, Dict[JonggyeokYongshinMode, Tuple[Transform, Transform, str]]] = {
    GyeokgukType.JONGGANG: {
        JonggyeokYongshinMode.COUNTER_DOMINANT: (conquered_by, generates, "종강격(역종): 비겁이 극강하나 관성({primary})으로 억제"),
        JonggyeokYongshinMode.FOLLOW_DOMINANT: (_identity, generated_by, "종강격: 비겁({primary})이 극강하므로 순종하여 부조"),
    },
    GyeokgukType.JONGA: {
        JonggyeokYongshinMode.COUNTER_DOMINANT: (generated_by, _identity, "종아격(역종): 식상이 지배적이나 인성({primary})으로 억제"),
        JonggyeokYongshinMode.FOLLOW_DOMINANT: (generates, conquers, "종아격: 식상({primary})이 지배적이므로 순종"),
    },
    GyeokgukType.JONGJAE: {
        JonggyeokYongshinMode.COUNTER_DOMINANT: (_identity, generated_by, "종재격(역종): 재성이 지배적이나 비겁({primary})으로 대항"),
        JonggyeokYongshinMode.FOLLOW_DOMINANT: (conquers, generates, "종재격: 재성({primary})이 지배적이므로 순종"),
    },
    GyeokgukType.JONGSAL: {
        JonggyeokYongshinMode.COUNTER_DOMINANT: (generates, generated_by, "종살격(역종): 관성이 지배적이나 식상({primary})으로 설기"),
        JonggyeokYongshinMode.FOLLOW_DOMINANT: (conquered_by, generates, "종살격: 관성({primary})이 지배적이므로 순종"),
    },
    GyeokgukType.JONGSE: {
        JonggyeokYongshinMode.COUNTER_DOMINANT: (generated_by, _identity, "종세격(역종): 식상/재/관이 강하나 인성({primary})으로 일간 부조"),
        JonggyeokYongshinMode.FOLLOW_DOMINANT: (generates, conquers, "종세격: 식상/재/관이 고루 강하므로 식상({primary})으로 순종"),
    },
}

ILHAENG_TYPE_TO_ELEMENT: Dict[GyeokgukType, str] = {t: e for e, t in ILHAENG_TYPES.items()}


@dataclass(frozen=True)
class TonggwanPattern:
    """두 십성 그룹이 모두 threshold 이상이면 mediator가 통관"""
    left: str
    right: str
    mediator: str
    threshold: int
    confidence: float
    show_mediator_role: bool = False


TONGGWAN_PATTERNS: Tuple[TonggwanPattern, ...] = (
    TonggwanPattern("관성", "비겁", "인성", 3, 0.6),
    TonggwanPattern("인성", "식상", "비겁", 3, 0.5),
    TonggwanPattern("비겁", "재성", "식상", 4, 0.45, True),
    TonggwanPattern("식상", "관성", "재성", 4, 0.45, True),
    TonggwanPattern("재성", "인성", "관성", 4, 0.45, True),
)

# 격국 분류 → 그 분류만의 전용 추천
CATEGORY_OVERRIDES: Tuple[Tuple[YongshinType, GyeokgukCategory], ...] = (
    (YongshinType.HAPWHA_YONGSHIN, GyeokgukCategory.HWAGYEOK),
    (YongshinType.ILHAENG_YONGSHIN, GyeokgukCategory.ILHAENG),
    (YongshinType.JEONWANG, GyeokgukCategory.JONGGYEOK),
)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 공통
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def count_chart_elements(pillars: PillarSet, evaluations: Optional[List[HapHwaEvaluation]] = None) -> Dict[str, int]:
    """
    원국 오행 개수
    - 년/월/시 천간: 합화면 결과 오행, 합거면 제외
    - 4지지: 정기 오행
    """
    active: Dict[PillarPosition, HapHwaEvaluation] = {}
    for evaluation in evaluations or []:
        if evaluation.state != HapState.NOT_ESTABLISHED:
            active[evaluation.position1] = evaluation
            active[evaluation.position2] = evaluation

    counts: Dict[str, int] = {}
    for position in NON_DAY_POSITIONS:
        hap = active.get(position)
        if hap is not None and hap.state == HapState.HAPWHA:
            element = hap.result_element
        elif hap is not None:
            continue
        else:
            element = GAN_TO_ELEMENT[pillars.stem_at(position)]
        counts[element] = counts.get(element, 0) + 1
    for ji in pillars.branches():
        element = GAN_TO_ELEMENT[principal_stem(ji)]
        counts[element] = counts.get(element, 0) + 1
    return counts


def assess_agreement(eokbu: YongshinRecommendation, johu: YongshinRecommendation) -> YongshinAgreement:
    if eokbu.primary_element == johu.primary_element:
        return YongshinAgreement.FULL_AGREE
    if eokbu.secondary_element == johu.primary_element or johu.secondary_element == eokbu.primary_element:
        return YongshinAgreement.PARTIAL_AGREE
    return YongshinAgreement.DISAGREE


def resolve_final(eokbu: YongshinRecommendation, johu: YongshinRecommendation,
                  priority: YongshinPriority = YongshinPriority.JOHU_FIRST) -> str:
    if eokbu.primary_element == johu.primary_element:
        return eokbu.primary_element
    if eokbu.secondary_element == johu.primary_element:
        return johu.primary_element
    if johu.secondary_element == eokbu.primary_element:
        return eokbu.primary_element

    if priority == YongshinPriority.EOKBU_FIRST:
        return eokbu.primary_element
    if priority == YongshinPriority.EQUAL_WEIGHT:
        return johu.primary_element if johu.confidence >= eokbu.confidence else eokbu.primary_element
    return johu.primary_element


def resolve_heesin(final_yongshin: str, eokbu: YongshinRecommendation, johu: YongshinRecommendation) -> str:
    """희신: 보조 오행(조후 → 억부) 중 용신과 다른 것, 없으면 다른 쪽 주 오행, 그래도 같으면 용신을 생하는 오행"""
    for candidate in (johu.secondary_element, eokbu.secondary_element):
        if candidate is not None and candidate != final_yongshin:
            return candidate
    other = eokbu.primary_element if final_yongshin == johu.primary_element else johu.primary_element
    if other != final_yongshin:
        return other
    return generated_by(final_yongshin)


def derive_gisin(yongshin: str) -> str:
    return conquered_by(yongshin)


def derive_gusin(gisin: str) -> str:
    return generated_by(gisin)


def _agreement_bonus(element: str, eokbu: YongshinRecommendation, johu: YongshinRecommendation) -> float:
    if element in (eokbu.primary_element, johu.primary_element):
        return 0.15
    if element in (eokbu.secondary_element, johu.secondary_element):
        return 0.05
    return 0.0


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 추천 전략
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class YongshinStrategies:
    """용신 후보 추천 (각 방법은 독립적으로 호출 가능)"""

    @staticmethod
    def eokbu(dm_element: str, is_strong: bool) -> YongshinRecommendation:
        if is_strong:
            primary, secondary = generates(dm_element), conquers(dm_element)
            reasoning = (f"신강(身强): 일간 {element_label(dm_element)} 과강하여 식상({element_label(primary)})으로 설기, "
                         f"재성({element_label(secondary)})으로 소모 필요")
        else:
            primary, secondary = generated_by(dm_element), dm_element
            reasoning = (f"신약(身弱): 일간 {element_label(dm_element)} 약하여 인성({element_label(primary)})으로 생조, "
                         f"비겁({element_label(secondary)})으로 부조 필요")
        return YongshinRecommendation(
            type=YongshinType.EOKBU,
            primary_element=primary,
            secondary_element=secondary,
            confidence=EOKBU_CONFIDENCE,
            reasoning=reasoning,
        )

    @staticmethod
    def johu(day_master: str, month_branch: str) -> YongshinRecommendation:
        entry = johu_table.lookup(day_master, month_branch)
        return YongshinRecommendation(
            type=YongshinType.JOHU,
            primary_element=entry.primary,
            secondary_element=entry.secondary,
            confidence=JOHU_CONFIDENCE,
            reasoning=f"조후(調候): {johu_table.reasoning(day_master, month_branch)}",
        )

    @staticmethod
    def tonggwan(pillars: PillarSet, dm_element: str,
                 evaluations: Optional[List[HapHwaEvaluation]] = None) -> Optional[YongshinRecommendation]:
        counts = count_chart_elements(pillars, evaluations)

        def element(group: str) -> str:
            return element_of_group(dm_element, group)

        for pattern in TONGGWAN_PATTERNS:
            left, right, mediator = element(pattern.left), element(pattern.right), element(pattern.mediator)
            if counts.get(left, 0) < pattern.threshold or counts.get(right, 0) < pattern.threshold:
                continue
            mediator_text = element_label(mediator)
            if pattern.show_mediator_role:
                mediator_text += f"({pattern.mediator})"
            return YongshinRecommendation(
                type=YongshinType.TONGGWAN,
                primary_element=mediator,
                confidence=pattern.confidence,
                reasoning=(f"통관(通關): {element_label(left)}({pattern.left})과 {element_label(right)}({pattern.right})의 "
                           f"상극이 강하여 {mediator_text}이(가) 통관 역할로 필요"),
            )
        return None

    @staticmethod
    def gyeokguk(dm_element: str, gyeokguk: GyeokgukResult) -> Optional[YongshinRecommendation]:
        rule = GYEOKGUK_YONGSHIN_TABLE.get(gyeokguk.type)
        if rule is None:
            return None
        primary_group, secondary_group, text = rule
        return YongshinRecommendation(
            type=YongshinType.GYEOKGUK,
            primary_element=element_of_group(dm_element, primary_group),
            secondary_element=element_of_group(dm_element, secondary_group) if secondary_group else None,
            confidence=GYEOKGUK_CONFIDENCE,
            reasoning=f"격국용신(格局用神): {GYEOKGUK_INFO[gyeokguk.type][0]} - {text}",
        )

    @staticmethod
    def jeonwang(dm_element: str, gyeokguk: GyeokgukResult,
                 mode: JonggyeokYongshinMode) -> Optional[YongshinRecommendation]:
        rule = JEONWANG_RULES.get(gyeokguk.type, {}).get(mode)
        if rule is None:
            return None
        primary_of, secondary_of, template = rule
        primary = primary_of(dm_element)
        return YongshinRecommendation(
            type=YongshinType.JEONWANG,
            primary_element=primary,
            secondary_element=secondary_of(dm_element),
            confidence=JEONWANG_CONFIDENCE,
            reasoning=f"전왕(專旺): {template.replace('{primary}', element_label(primary))}",
        )

    @staticmethod
    def hapwha(gyeokguk: GyeokgukResult,
               evaluations: List[HapHwaEvaluation]) -> Optional[YongshinRecommendation]:
        hapwha = next((e for e in evaluations if e.state == HapState.HAPWHA), None)
        if hapwha is None:
            return None
        transformed = hapwha.result_element
        primary = generated_by(transformed)
        name, hanja = GYEOKGUK_INFO[gyeokguk.type]
        return YongshinRecommendation(
            type=YongshinType.HAPWHA_YONGSHIN,
            primary_element=primary,
            secondary_element=transformed,
            confidence=HAPWHA_CONFIDENCE,
            reasoning=(f"합화용신(合化用神): {name}({hanja}) - {hapwha.stem1}{hapwha.stem2}합화 결과 "
                       f"{element_label(transformed)}. 합화를 유지·강화하는 {element_label(primary)}이(가) 용신, "
                       f"{element_label(transformed)}이(가) 희신."),
        )

    @staticmethod
    def ilhaeng(gyeokguk: GyeokgukResult) -> Optional[YongshinRecommendation]:
        dominant = ILHAENG_TYPE_TO_ELEMENT.get(gyeokguk.type)
        if dominant is None:
            return None
        primary = generates(dominant)
        name, hanja = GYEOKGUK_INFO[gyeokguk.type]
        return YongshinRecommendation(
            type=YongshinType.ILHAENG_YONGSHIN,
            primary_element=primary,
            secondary_element=dominant,
            confidence=ILHAENG_CONFIDENCE,
            reasoning=(f"일행득기용신(一行得氣): {name}({hanja}) - {element_label(dominant)}이(가) 원국을 지배. "
                       f"설기(洩氣)로 순화하는 {element_label(primary)}이(가) 용신, "
                       f"{element_label(dominant)}이(가) 희신."),
        )

    @staticmethod
    def byeongyak(pillars: PillarSet, dm_element: str, is_strong: bool,
                  evaluations: Optional[List[HapHwaEvaluation]] = None) -> Optional[YongshinRecommendation]:
        counts = count_chart_elements(pillars, evaluations)
        disease, disease_count = None, 0
        for element, count in counts.items():
            if count >= BYEONGYAK_MIN_COUNT and count > disease_count:
                disease, disease_count = element, count
        if disease is None:
            return None

        medicine = conquered_by(disease)
        if medicine == dm_element and not is_strong:
            return None
        return YongshinRecommendation(
            type=YongshinType.BYEONGYAK,
            primary_element=medicine,
            secondary_element=generates(medicine),
            confidence=BYEONGYAK_CONFIDENCE,
            reasoning=(f"병약(病藥): {element_label(disease)}이(가) {disease_count}개로 과다(병), "
                       f"{element_label(medicine)}이(가) 이를 제어(약). 유병방귀(有病方貴), 무약불귀(無藥不貴)."),
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 결정
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class YongshinResolver:
    """용신 결정기"""

    strategies = YongshinStrategies

    def resolve(
        self,
        pillars: PillarSet,
        is_strong: bool,
        config: CalculationConfig,
        gyeokguk: Optional[GyeokgukResult] = None,
        hap_evaluations: Optional[List[HapHwaEvaluation]] = None,
        tracer: Optional[CalculationTracer] = None,
    ) -> YongshinResult:
        hap_evaluations = hap_evaluations or []
        dm_element = GAN_TO_ELEMENT[pillars.day_master]

        eokbu = self.strategies.eokbu(dm_element, is_strong)
        johu = self.strategies.johu(pillars.day_master, pillars.month.ji)
        recommendations = [eokbu, johu]
        for candidate in (
            self.strategies.tonggwan(pillars, dm_element, hap_evaluations),
            self._category_recommendation(dm_element, config, gyeokguk, hap_evaluations),
            self.strategies.byeongyak(pillars, dm_element, is_strong, hap_evaluations),
        ):
            if candidate is not None:
                recommendations.append(candidate)

        final, confidence, rule = self.resolve_all(eokbu, johu, recommendations, config, gyeokguk)
        heesin = resolve_heesin(final, eokbu, johu)
        gisin = derive_gisin(final)
        gusin = derive_gusin(gisin)
        agreement = assess_agreement(eokbu, johu)

        result = YongshinResult(
            recommendations=recommendations,
            final_yongshin=final,
            final_heesin=heesin,
            gisin=gisin,
            gusin=gusin,
            agreement=agreement,
            final_confidence=round(confidence, 4),
        )

        logger.info(f"[Yongshin] 용신={final} 희신={heesin} 기신={gisin} 구신={gusin} "
                    f"({agreement.value}, {confidence:.2f}, {rule})")

        if tracer is not None:
            self._trace(tracer, result, eokbu, johu, rule)
        return result

    def _category_recommendation(self, dm_element: str, config: CalculationConfig,
                                 gyeokguk: Optional[GyeokgukResult],
                                 evaluations: List[HapHwaEvaluation]) -> Optional[YongshinRecommendation]:
        if gyeokguk is None:
            return None
        if gyeokguk.category == GyeokgukCategory.NAEGYEOK:
            return self.strategies.gyeokguk(dm_element, gyeokguk)
        if gyeokguk.category == GyeokgukCategory.JONGGYEOK:
            return self.strategies.jeonwang(dm_element, gyeokguk, config.jonggyeok_yongshin_mode)
        if gyeokguk.category == GyeokgukCategory.HWAGYEOK:
            return self.strategies.hapwha(gyeokguk, evaluations)
        return self.strategies.ilhaeng(gyeokguk)

    @staticmethod
    def resolve_all(
        eokbu: YongshinRecommendation,
        johu: YongshinRecommendation,
        recommendations: List[YongshinRecommendation],
        config: CalculationConfig,
        gyeokguk: Optional[GyeokgukResult] = None,
    ) -> Tuple[str, float, str]:
        """(최종 용신, 확신도, 적용 규칙)"""
        by_type: Dict[YongshinType, YongshinRecommendation] = {}
        for recommendation in recommendations:
            by_type.setdefault(recommendation.type, recommendation)

        # 1) 특수 격국 전용 추천
        if gyeokguk is not None:
            for recommendation_type, category in CATEGORY_OVERRIDES:
                special = by_type.get(recommendation_type)
                if category != gyeokguk.category or special is None:
                    continue
                bonus = _agreement_bonus(special.primary_element, eokbu, johu)
                return (special.primary_element, min(special.confidence + bonus, SPECIAL_CONFIDENCE_CAP),
                        f"{recommendation_type.value} 우선")

        disagree = eokbu.primary_element != johu.primary_element

        # 2) 통관
        tonggwan = by_type.get(YongshinType.TONGGWAN)
        if tonggwan is not None and disagree:
            return tonggwan.primary_element, tonggwan.confidence, "통관 우선"

        # 3) 격국용신이 한쪽 편을 듦
        gyeokguk_rec = by_type.get(YongshinType.GYEOKGUK)
        if gyeokguk_rec is not None and disagree:
            if gyeokguk_rec.primary_element == eokbu.primary_element:
                return eokbu.primary_element, GYEOKGUK_AGREEMENT_CONFIDENCE, "격국용신이 억부와 일치"
            if gyeokguk_rec.primary_element == johu.primary_element:
                return johu.primary_element, GYEOKGUK_AGREEMENT_CONFIDENCE, "격국용신이 조후와 일치"

        # 4) 억부/조후
        agreement = assess_agreement(eokbu, johu)
        final = resolve_final(eokbu, johu, config.yongshin_priority)
        return final, AGREEMENT_CONFIDENCE[agreement], f"{AGREEMENT_KOREAN[agreement]}, {config.yongshin_priority.value}"

    @staticmethod
    def _trace(tracer: CalculationTracer, result: YongshinResult, eokbu: YongshinRecommendation,
               johu: YongshinRecommendation, rule: str) -> None:
        alternatives = [
            AlternativeDecision(
                school_name=f"{rec.type.value} 단독",
                decision=element_label(rec.primary_element),
                reasoning=rec.reasoning,
            )
            for rec in result.recommendations
            if rec.primary_element != result.final_yongshin
        ]
        tracer.add(
            step="yongshin",
            category=TraceCategory.YONGSHIN,
            decision=(f"용신 {element_label(result.final_yongshin)}, "
                      f"희신 {element_label(result.final_heesin) if result.final_heesin else '없음'}, "
                      f"기신 {element_label(result.gisin)}, 구신 {element_label(result.gusin)}"),
            reasoning=(f"억부 {element_label(eokbu.primary_element)} / 조후 {element_label(johu.primary_element)} → "
                       f"{AGREEMENT_KOREAN[result.agreement]}. 적용: {rule}"),
            rule="특수격 전용 → 통관 → 격국용신 → 억부/조후 우선순위",
            alternatives=alternatives,
            config_key="yongshin_priority",
            confidence=result.final_confidence,
        )


yongshin_resolver = YongshinResolver()
