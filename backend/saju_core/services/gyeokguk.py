"""
격국 판단 (GyeokgukDeterminer)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
판단 순서 (먼저 성립한 것이 확정):
1. 화격(化格): 합화 성립 → 합화X격
2. 종격(從格): 총 부조점수가 극단 + 오행 분포 조건
3. 일행득기격(一行得氣格): 일간 방합 3지지 이상 + 극하는 천간 없음
4. 내격(內格): 월지 지장간 투출 (정기 > 중기 > 여기)
이후 성격/파격 평가 (gyeokguk_rules)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from typing import Dict, List, Optional, Tuple

from saju_core.models.calculation_config import CalculationConfig
from saju_core.models.schemas import (
    GyeokgukCategory,
    GyeokgukResult,
    GyeokgukType,
    HapHwaEvaluation,
    HapState,
    PillarSet,
    StrengthResult,
    TraceCategory,
)
from saju_core.services.elements import TEN_GROUPS, conquers, get_ten_god, group_of_element
from saju_core.services.ganji import GAN_TO_ELEMENT
from saju_core.services.gyeokguk_rules import FormationAssessor, build_profile, formation_assessor
from saju_core.services.hidden_stems import JEONGGI, JUNGGI, YEOGI, entry_by_role, hidden_stems_for_config, principal_stem
from saju_core.services.relations import effective_stem_element, is_hapgeo
from saju_core.services.strength import NON_DAY_POSITIONS
from saju_core.services.trace import CalculationTracer

logger = logging.getLogger(__name__)

# 격국 이름 (한글, 한자)
GYEOKGUK_INFO: Dict[GyeokgukType, Tuple[str, str]] = {
    GyeokgukType.GEONROK: ("건록격", "建祿格"),
    GyeokgukType.YANGIN: ("양인격", "羊刃格"),
    GyeokgukType.SIKSIN: ("식신격", "食神格"),
    GyeokgukType.SANGGWAN: ("상관격", "傷官格"),
    GyeokgukType.PYEONJAE: ("편재격", "偏財格"),
    GyeokgukType.JEONGJAE: ("정재격", "正財格"),
    GyeokgukType.PYEONGWAN: ("편관격", "偏官格"),
    GyeokgukType.JEONGGWAN: ("정관격", "正官格"),
    GyeokgukType.PYEONIN: ("편인격", "偏印格"),
    GyeokgukType.JEONGIN: ("정인격", "正印格"),
    GyeokgukType.JONGGANG: ("종강격", "從强格"),
    GyeokgukType.JONGA: ("종아격", "從兒格"),
    GyeokgukType.JONGJAE: ("종재격", "從財格"),
    GyeokgukType.JONGSAL: ("종살격", "從殺格"),
    GyeokgukType.JONGSE: ("종세격", "從勢格"),
    GyeokgukType.HAPWHA_EARTH: ("합화토격", "合化土格"),
    GyeokgukType.HAPWHA_METAL: ("합화금격", "合化金格"),
    GyeokgukType.HAPWHA_WATER: ("합화수격", "合化水格"),
    GyeokgukType.HAPWHA_WOOD: ("합화목격", "合化木格"),
    GyeokgukType.HAPWHA_FIRE: ("합화화격", "合化火格"),
    GyeokgukType.GOKJIK: ("곡직격", "曲直格"),
    GyeokgukType.YEOMSANG: ("염상격", "炎上格"),
    GyeokgukType.GASAEK: ("가색격", "稼穡格"),
    GyeokgukType.JONGHYEOK: ("종혁격", "從革格"),
    GyeokgukType.YUNHA: ("윤하격", "潤下格"),
}

SIPSEONG_TO_GYEOKGUK: Dict[str, GyeokgukType] = {
    "비견": GyeokgukType.GEONROK,
    "겁재": GyeokgukType.YANGIN,
    "식신": GyeokgukType.SIKSIN,
    "상관": GyeokgukType.SANGGWAN,
    "편재": GyeokgukType.PYEONJAE,
    "정재": GyeokgukType.JEONGJAE,
    "편관": GyeokgukType.PYEONGWAN,
    "정관": GyeokgukType.JEONGGWAN,
    "편인": GyeokgukType.PYEONIN,
    "정인": GyeokgukType.JEONGIN,
}

HAPWHA_TYPES: Dict[str, GyeokgukType] = {
    "토": GyeokgukType.HAPWHA_EARTH,
    "금": GyeokgukType.HAPWHA_METAL,
    "수": GyeokgukType.HAPWHA_WATER,
    "목": GyeokgukType.HAPWHA_WOOD,
    "화": GyeokgukType.HAPWHA_FIRE,
}

# 방합(方合) 지지
BANGHAP_GROUPS: Dict[str, Tuple[str, ...]] = {
    "목": ("인", "묘", "진"),
    "화": ("사", "오", "미"),
    "금": ("신", "유", "술"),
    "수": ("해", "자", "축"),
    "토": ("진", "술", "축", "미"),
}

ILHAENG_TYPES: Dict[str, GyeokgukType] = {
    "목": GyeokgukType.GOKJIK,
    "화": GyeokgukType.YEOMSANG,
    "토": GyeokgukType.GASAEK,
    "금": GyeokgukType.JONGHYEOK,
    "수": GyeokgukType.YUNHA,
}

TOUCHUL_PRIORITY = (JEONGGI, JUNGGI, YEOGI)

JONGGANG_SCORE_SPAN = 18.6
JONG_WEAK_SCORE_SPAN = 15.0


def gyeokguk_name(gyeokguk_type: GyeokgukType) -> str:
    return GYEOKGUK_INFO[gyeokguk_type][0]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class GyeokgukDeterminer:
    """격국 판단기"""

    def __init__(self, assessor: Optional[FormationAssessor] = None):
        self.assessor = assessor or formation_assessor

    def determine(
        self,
        pillars: PillarSet,
        strength: StrengthResult,
        config: CalculationConfig,
        hap_evaluations: Optional[List[HapHwaEvaluation]] = None,
        tracer: Optional[CalculationTracer] = None,
    ) -> GyeokgukResult:
        hap_evaluations = hap_evaluations or []

        result = (
            self._hwagyeok(hap_evaluations)
            or self._jonggyeok(pillars, strength, config, hap_evaluations)
            or self._ilhaeng(pillars, hap_evaluations)
            or self._naegyeok(pillars, config, hap_evaluations)
        )

        formation = self.assessor.assess(result.type, build_profile(pillars, strength))
        result = result.model_copy(update={"formation": formation})

        logger.info(f"[Gyeokguk] {pillars} → {gyeokguk_name(result.type)} "
                    f"({result.category.value}, {result.confidence:.2f}, {formation.quality.value})")

        if tracer is not None:
            name, hanja = GYEOKGUK_INFO[result.type]
            tracer.add(
                step="gyeokguk",
                category=TraceCategory.GYEOKGUK,
                decision=f"격국: {name}({hanja})",
                reasoning=result.reasoning,
                rule="화격 → 종격 → 일행득기 → 내격(투출) 순서",
                config_key="jonggyeok_weak_threshold",
                confidence=result.confidence,
            )
            tracer.add(
                step="gyeokguk_formation",
                category=TraceCategory.GYEOKGUK,
                decision=f"성격/파격: {formation.quality.value}",
                reasoning=formation.reasoning,
                rule="격국별 파격 요인/구응 요인 규칙표",
            )
        return result

    # ===== 1. 화격 =====
    @staticmethod
    def _hwagyeok(evaluations: List[HapHwaEvaluation]) -> Optional[GyeokgukResult]:
        for evaluation in evaluations:
            if evaluation.state != HapState.HAPWHA:
                continue
            gyeokguk_type = HAPWHA_TYPES[evaluation.result_element]
            return GyeokgukResult(
                type=gyeokguk_type,
                category=GyeokgukCategory.HWAGYEOK,
                confidence=evaluation.confidence,
                reasoning=(f"{evaluation.stem1}{evaluation.stem2} 합화 성립 → "
                           f"{gyeokguk_name(gyeokguk_type)}. {evaluation.reasoning}"),
            )
        return None

    # ===== 오행 분포 =====
    @staticmethod
    def element_profile(pillars: PillarSet, evaluations: List[HapHwaEvaluation]) -> Dict[str, int]:
        """년/월/시 천간(합 반영) + 4지지 정기 → 십성 그룹별 개수"""
        dm_element = GAN_TO_ELEMENT[pillars.day_master]
        counts = {group: 0 for group in TEN_GROUPS}
        for position in NON_DAY_POSITIONS:
            element = effective_stem_element(pillars, position, evaluations)
            if element is not None:
                counts[group_of_element(dm_element, element)] += 1
        for ji in pillars.branches():
            counts[group_of_element(dm_element, GAN_TO_ELEMENT[principal_stem(ji)])] += 1
        return counts

    # ===== 2. 종격 =====
    def _jonggyeok(self, pillars: PillarSet, strength: StrengthResult, config: CalculationConfig,
                   evaluations: List[HapHwaEvaluation]) -> Optional[GyeokgukResult]:
        score = strength.score.total_support
        profile = self.element_profile(pillars, evaluations)
        bigyeop, inseong = profile["비겁"], profile["인성"]
        siksang, jae, gwan = profile["식상"], profile["재성"], profile["관성"]
        distribution = f"비겁{bigyeop} 인성{inseong} 식상{siksang} 재성{jae} 관성{gwan}"

        if score >= config.jonggyeok_strong_threshold:
            if bigyeop >= 4 and jae + gwan == 0:
                d = score - config.jonggyeok_strong_threshold
                return GyeokgukResult(
                    type=GyeokgukType.JONGGANG,
                    category=GyeokgukCategory.JONGGYEOK,
                    confidence=round(_clamp(0.85 + d / JONGGANG_SCORE_SPAN * 0.10, 0.85, 0.95), 4),
                    reasoning=f"일간 세력이 극왕하고 재관이 없어 종강격 (총부조점수: {score:.1f}, {distribution})",
                )
            return None

        if score > config.jonggyeok_weak_threshold or bigyeop or inseong:
            return None

        if gwan >= 3 and siksang == 0 and jae == 0:
            gyeokguk_type, dominant = GyeokgukType.JONGSAL, "관성"
        elif siksang >= 3 and siksang > gwan and siksang > jae:
            gyeokguk_type, dominant = GyeokgukType.JONGA, "식상"
        elif jae >= 3 and jae > gwan and jae > siksang:
            gyeokguk_type, dominant = GyeokgukType.JONGJAE, "재성"
        elif siksang + jae + gwan >= 5:
            gyeokguk_type, dominant = GyeokgukType.JONGSE, "식상/재성/관성"
        else:
            return None

        d = config.jonggyeok_weak_threshold - score
        return GyeokgukResult(
            type=gyeokguk_type,
            category=GyeokgukCategory.JONGGYEOK,
            confidence=round(_clamp(0.75 + d / JONG_WEAK_SCORE_SPAN * 0.15, 0.75, 0.90), 4),
            reasoning=(f"일간이 무력하고 비겁/인성이 없으며 {dominant}이(가) 세력을 이룸 → "
                       f"{gyeokguk_name(gyeokguk_type)} (총부조점수: {score:.1f}, {distribution})"),
        )

    # ===== 3. 일행득기 =====
    @staticmethod
    def _ilhaeng(pillars: PillarSet, evaluations: List[HapHwaEvaluation]) -> Optional[GyeokgukResult]:
        dm_element = GAN_TO_ELEMENT[pillars.day_master]
        group = BANGHAP_GROUPS[dm_element]
        matched = [ji for ji in pillars.branches() if ji in group]
        if len(matched) < 3:
            return None

        for position in NON_DAY_POSITIONS:
            element = effective_stem_element(pillars, position, evaluations)
            if element is not None and conquers(element) == dm_element:
                logger.debug(f"[Gyeokguk] 일행득기 불성립: {pillars.stem_at(position)}({element})이 일간을 극함")
                return None

        gyeokguk_type = ILHAENG_TYPES[dm_element]
        return GyeokgukResult(
            type=gyeokguk_type,
            category=GyeokgukCategory.ILHAENG,
            confidence=0.90 if len(matched) >= 4 else 0.75,
            reasoning=(f"일간 {pillars.day_master}({dm_element}) 방합 지지 {''.join(matched)} "
                       f"{len(matched)}개, 극하는 천간 없음 → {gyeokguk_name(gyeokguk_type)}"),
        )

    # ===== 4. 내격 =====
    @staticmethod
    def _naegyeok(pillars: PillarSet, config: CalculationConfig,
                  evaluations: List[HapHwaEvaluation]) -> GyeokgukResult:
        dm = pillars.day_master
        month_ji = pillars.month.ji
        entries = hidden_stems_for_config(month_ji, config)
        revealed = [
            pillars.stem_at(position)
            for position in NON_DAY_POSITIONS
            if not is_hapgeo(position, evaluations)
        ]

        for role in TOUCHUL_PRIORITY:
            entry = entry_by_role(entries, role)
            if entry is None or entry.gan not in revealed:
                continue
            sipseong = get_ten_god(dm, entry.gan)
            gyeokguk_type = SIPSEONG_TO_GYEOKGUK[sipseong]
            return GyeokgukResult(
                type=gyeokguk_type,
                category=GyeokgukCategory.NAEGYEOK,
                base_sipseong=sipseong,
                confidence=1.0 if role == JEONGGI else 0.90,
                reasoning=(f"월지 {month_ji}의 {role} {entry.gan}이(가) 천간에 투출 → "
                           f"{sipseong} → {gyeokguk_name(gyeokguk_type)}"),
            )

        principal = entries[-1].gan
        sipseong = get_ten_god(dm, principal)
        gyeokguk_type = SIPSEONG_TO_GYEOKGUK[sipseong]
        return GyeokgukResult(
            type=gyeokguk_type,
            category=GyeokgukCategory.NAEGYEOK,
            base_sipseong=sipseong,
            confidence=0.80,
            reasoning=(f"월지 {month_ji} 지장간 투출 없음 → 정기 {principal} 기준 "
                       f"{sipseong} → {gyeokguk_name(gyeokguk_type)}"),
        )


gyeokguk_determiner = GyeokgukDeterminer()
