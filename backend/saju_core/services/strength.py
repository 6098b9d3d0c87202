"""
신강신약 분석 (StrengthAnalyzer)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
일간을 돕는 힘(비겁/인성) 점수:
- 득령(得令): 월령 당령 천간이 비겁/인성이면 배점 (비례 배점 옵션)
- 득지(得地): 4지지 지장간 중 비겁/인성, 일수/30 × 지지당 배점
- 득세(得勢): 년/월/시 천간의 비겁/인성 (합거 제외, 합화는 변한 오행)
등급은 기준점 대비 비례 구간 (절대 점수 아님)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from typing import List, Optional

from saju_core.models.calculation_config import CalculationConfig, HiddenStemScope, SaryeongMode
from saju_core.models.schemas import (
    HapHwaEvaluation,
    PillarPosition,
    PillarSet,
    StrengthLevel,
    StrengthResult,
    StrengthScore,
    TraceCategory,
)
from saju_core.services.elements import group_of_element, is_supporting_gan
from saju_core.services.ganji import GAN_TO_ELEMENT
from saju_core.services.hidden_stems import HiddenStem, SaryeongDeterminer, hidden_stems_for_config
from saju_core.services.relations import effective_stem_element
from saju_core.services.trace import CalculationTracer

logger = logging.getLogger(__name__)

LEVEL_KOREAN = {
    StrengthLevel.VERY_STRONG: "극신강",
    StrengthLevel.STRONG: "신강",
    StrengthLevel.SLIGHTLY_STRONG: "중화신강",
    StrengthLevel.SLIGHTLY_WEAK: "중화신약",
    StrengthLevel.WEAK: "신약",
    StrengthLevel.VERY_WEAK: "극신약",
}

STRONG_SIDE_LEVELS = (StrengthLevel.VERY_STRONG, StrengthLevel.STRONG, StrengthLevel.SLIGHTLY_STRONG)

NON_DAY_POSITIONS = (PillarPosition.YEAR, PillarPosition.MONTH, PillarPosition.HOUR)


def is_strong_side(level: StrengthLevel) -> bool:
    return level in STRONG_SIDE_LEVELS


def max_theoretical_score(config: CalculationConfig) -> float:
    return config.deukryeong_weight + 4 * config.deukji_per_branch + 3 * config.deukse_bigyeop


def classify_level(total_support: float, config: CalculationConfig) -> StrengthLevel:
    """기준점 대비 비례 구간으로 6단계 분류"""
    th = config.strength_threshold
    max_theo = max_theoretical_score(config)
    if total_support >= th + 0.4 * (max_theo - th):
        return StrengthLevel.VERY_STRONG
    if total_support >= th:
        return StrengthLevel.STRONG
    if total_support >= 0.8 * th:
        return StrengthLevel.SLIGHTLY_STRONG
    if total_support >= 0.6 * th:
        return StrengthLevel.SLIGHTLY_WEAK
    if total_support >= 0.3 * th:
        return StrengthLevel.WEAK
    return StrengthLevel.VERY_WEAK


class StrengthAnalyzer:
    """신강신약 분석기"""

    def analyze(
        self,
        pillars: PillarSet,
        config: CalculationConfig,
        hap_evaluations: Optional[List[HapHwaEvaluation]] = None,
        days_since_jeol: Optional[int] = None,
        tracer: Optional[CalculationTracer] = None,
    ) -> StrengthResult:
        hap_evaluations = hap_evaluations or []
        dm = pillars.day_master
        dm_element = GAN_TO_ELEMENT[dm]
        details: List[str] = []

        deukryeong = self._deukryeong(pillars, config, days_since_jeol, details)
        deukji = self._deukji(pillars, config, days_since_jeol, details)
        deukse = self._deukse(pillars, config, hap_evaluations, details)

        total_support = round(deukryeong + deukji + deukse, 4)
        total_oppose = round(max(max_theoretical_score(config) - total_support, 0.0), 4)
        level = classify_level(total_support, config)
        strong = is_strong_side(level)
        details.append(
            f"총 부조 {total_support:.1f}점 / 기준점 {config.strength_threshold:.1f}점 → {LEVEL_KOREAN[level]}"
        )

        result = StrengthResult(
            day_master=dm,
            day_master_element=dm_element,
            level=level,
            score=StrengthScore(
                deukryeong=round(deukryeong, 4),
                deukji=round(deukji, 4),
                deukse=round(deukse, 4),
                total_support=total_support,
                total_oppose=total_oppose,
            ),
            is_strong=strong,
            details=details,
        )

        logger.debug(f"[Strength] 일간={dm}({dm_element}) 득령={deukryeong:.1f} 득지={deukji:.1f} "
                     f"득세={deukse:.1f} → {level.value}")

        if tracer is not None:
            tracer.add(
                step="strength",
                category=TraceCategory.STRENGTH,
                decision=f"{LEVEL_KOREAN[level]} ({'신강' if strong else '신약'} 측)",
                reasoning=" / ".join(details),
                rule="득령·득지·득세 합산, 기준점 비례 구간 분류",
                config_key="strength_threshold",
            )
        return result

    # ===== 득령 =====
    @staticmethod
    def _month_reference(entries: List[HiddenStem], config: CalculationConfig,
                         days_since_jeol: Optional[int]) -> HiddenStem:
        if config.saryeong_mode == SaryeongMode.BY_DAY_IN_MONTH and days_since_jeol is not None:
            return SaryeongDeterminer.determine(entries, days_since_jeol)
        return entries[-1]

    def _deukryeong(self, pillars: PillarSet, config: CalculationConfig,
                    days_since_jeol: Optional[int], details: List[str]) -> float:
        dm = pillars.day_master
        month_ji = pillars.month.ji
        entries = hidden_stems_for_config(month_ji, config)

        if config.proportional_deukryeong:
            total_days = sum(e.days for e in entries)
            support_days = sum(e.days for e in entries if is_supporting_gan(dm, e.gan))
            score = config.deukryeong_weight * support_days / total_days if total_days else 0.0
            details.append(f"득령(비례): 월지 {month_ji} 부조 {support_days}/{total_days}일 → {score:.1f}점")
            return score

        reference = self._month_reference(entries, config, days_since_jeol)
        if is_supporting_gan(dm, reference.gan):
            details.append(f"득령: 월지 {month_ji} 당령 {reference.gan}({reference.role})이 일간을 도움 → "
                           f"{config.deukryeong_weight:.1f}점")
            return config.deukryeong_weight
        details.append(f"득령 실패: 월지 {month_ji} 당령 {reference.gan}({reference.role})")
        return 0.0

    # ===== 득지 =====
    def _scoped_entries(self, ji: str, is_month: bool, config: CalculationConfig,
                        days_since_jeol: Optional[int]) -> List[HiddenStem]:
        entries = hidden_stems_for_config(ji, config)
        scope = config.hidden_stem_scope_for_strength
        if scope == HiddenStemScope.ALL_THREE:
            return entries
        if scope == HiddenStemScope.SARYEONG_BASED and is_month and days_since_jeol is not None:
            return [SaryeongDeterminer.determine(entries, days_since_jeol)]
        return [entries[-1]]

    def _deukji(self, pillars: PillarSet, config: CalculationConfig,
                days_since_jeol: Optional[int], details: List[str]) -> float:
        dm = pillars.day_master
        total = 0.0
        for position, ji in zip(("년지", "월지", "일지", "시지"), pillars.branches()):
            entries = self._scoped_entries(ji, position == "월지", config, days_since_jeol)
            score = sum(
                e.days / 30 * config.deukji_per_branch
                for e in entries
                if is_supporting_gan(dm, e.gan)
            )
            if score:
                details.append(f"득지: {position} {ji} → {score:.2f}점")
            total += score
        return total

    # ===== 득세 =====
    @staticmethod
    def _deukse(pillars: PillarSet, config: CalculationConfig,
                evaluations: List[HapHwaEvaluation], details: List[str]) -> float:
        dm_element = GAN_TO_ELEMENT[pillars.day_master]
        total = 0.0
        for position in NON_DAY_POSITIONS:
            element = effective_stem_element(pillars, position, evaluations)
            gan = pillars.stem_at(position)
            if element is None:
                details.append(f"득세 제외: {gan} 합거")
                continue
            group = group_of_element(dm_element, element)
            if group == "비겁":
                total += config.deukse_bigyeop
                details.append(f"득세: {gan}({element}) 비겁 → {config.deukse_bigyeop:.1f}점")
            elif group == "인성":
                total += config.deukse_inseong
                details.append(f"득세: {gan}({element}) 인성 → {config.deukse_inseong:.1f}점")
        return total


strength_analyzer = StrengthAnalyzer()
