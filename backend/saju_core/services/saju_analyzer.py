"""
사주 분석 파이프라인 (SajuAnalyzer)
- 기둥 계산 → 천간합 → 신강신약 → 격국(+성격/파격) → 용신
- 요청 하나당 CalculationTracer 한 개를 전 단계에 넘김
- get_saju_summary: 분석 결과를 평탄한 정답지 dict로 변환
"""
import logging
from typing import Any, Dict, Optional, Union

from saju_core.models.calculation_config import CalculationConfig, SchoolPreset, resolve_config
from saju_core.models.schemas import BirthMoment, SajuAnalysisResult
from saju_core.services.elements import ELEMENTS, TEN_GODS, count_by_group, get_ten_god, sipseong_favorability
from saju_core.services.ganji import GAN_TO_ELEMENT, JI_TO_ELEMENT
from saju_core.services.gyeokguk import GYEOKGUK_INFO, GyeokgukDeterminer, gyeokguk_determiner
from saju_core.services.hidden_stems import principal_stem
from saju_core.services.relations import RelationEvaluator, stem_combination_evaluator
from saju_core.services.saju_engine import PillarCalculator, get_pillar_calculator
from saju_core.services.strength import LEVEL_KOREAN, StrengthAnalyzer, strength_analyzer
from saju_core.services.trace import CalculationTracer
from saju_core.services.yongshin import YongshinResolver, yongshin_resolver

logger = logging.getLogger(__name__)

ConfigLike = Union[CalculationConfig, SchoolPreset, str, None]


class SajuAnalyzer:
    """원국 분석 전체 흐름"""

    def __init__(
        self,
        pillar_calculator: Optional[PillarCalculator] = None,
        relation_evaluator: Optional[RelationEvaluator] = None,
        strength: Optional[StrengthAnalyzer] = None,
        gyeokguk: Optional[GyeokgukDeterminer] = None,
        yongshin: Optional[YongshinResolver] = None,
    ):
        self.pillar_calculator = pillar_calculator or get_pillar_calculator()
        self.relation_evaluator = relation_evaluator or stem_combination_evaluator
        self.strength = strength or strength_analyzer
        self.gyeokguk = gyeokguk or gyeokguk_determiner
        self.yongshin = yongshin or yongshin_resolver

    def analyze(
        self,
        birth: BirthMoment,
        config: ConfigLike = None,
        tracer: Optional[CalculationTracer] = None,
    ) -> SajuAnalysisResult:
        # 설정 오류는 계산 전에 터진다
        config = resolve_config(config)
        tracer = tracer if tracer is not None else CalculationTracer()

        pillar_result = self.pillar_calculator.calculate(birth, config, tracer)
        pillars = pillar_result.pillars

        hap_evaluations = self.relation_evaluator.evaluate(pillars, config, tracer)

        strength = self.strength.analyze(
            pillars,
            config,
            hap_evaluations=hap_evaluations,
            days_since_jeol=pillar_result.days_since_jeol,
            tracer=tracer,
        )

        gyeokguk = self.gyeokguk.determine(pillars, strength, config, hap_evaluations, tracer)

        yongshin = self.yongshin.resolve(
            pillars,
            strength.is_strong,
            config,
            gyeokguk=gyeokguk,
            hap_evaluations=hap_evaluations,
            tracer=tracer,
        )

        logger.info(f"[SajuAnalyzer] {pillars} | {LEVEL_KOREAN[strength.level]} | "
                    f"{GYEOKGUK_INFO[gyeokguk.type][0]} | 용신={yongshin.final_yongshin} | trace={tracer.size}")

        return SajuAnalysisResult(
            pillar_result=pillar_result,
            hap_hwa_evaluations=hap_evaluations,
            strength=strength,
            gyeokguk=gyeokguk,
            yongshin=yongshin,
            trace=tracer.entries,
        )


def get_saju_summary(result: SajuAnalysisResult) -> Dict[str, Any]:
    """
    분석 결과 정답지 (평탄한 dict)

    Returns:
        원국 오행/십성 분포, 격국, 용신, 결여 십성 플래그
    """
    pillars = result.pillars
    day_master = pillars.day_master

    # 1) 오행 카운트 (천간 4 + 지지 4)
    elements_count = {e: 0 for e in ELEMENTS}
    for gan in pillars.stems():
        elements_count[GAN_TO_ELEMENT[gan]] += 1
    for ji in pillars.branches():
        elements_count[JI_TO_ELEMENT[ji]] += 1

    # 2) 십성 (일간 제외, 지지는 정기 기준)
    ten_gods_count = {tg: 0 for tg in TEN_GODS}
    ten_gods_list = []
    positions = [
        ("년간", pillars.year.gan), ("년지", principal_stem(pillars.year.ji)),
        ("월간", pillars.month.gan), ("월지", principal_stem(pillars.month.ji)),
        ("일지", principal_stem(pillars.day.ji)),
        ("시간", pillars.hour.gan), ("시지", principal_stem(pillars.hour.ji)),
    ]
    for position, gan in positions:
        tg = get_ten_god(day_master, gan)
        ten_gods_count[tg] += 1
        ten_gods_list.append({"position": position, "ten_god": tg})

    ten_gods_distribution = count_by_group(day_master, [gan for _, gan in positions])

    name, hanja = GYEOKGUK_INFO[result.gyeokguk.type]
    summary = {
        "pillars": str(pillars),
        "day_master": day_master,
        "day_master_element": GAN_TO_ELEMENT[day_master],
        "elements_count": elements_count,
        "ten_gods_count": ten_gods_count,
        "ten_gods_distribution": ten_gods_distribution,
        "ten_gods_list": ten_gods_list,
        "strength_level": result.strength.level.value,
        "is_strong": result.strength.is_strong,
        "structure": f"{name}({hanja})",
        "structure_quality": result.gyeokguk.formation.quality.value if result.gyeokguk.formation else None,
        "yongshin": result.yongshin.final_yongshin,
        "heesin": result.yongshin.final_heesin,
        "gisin": result.yongshin.gisin,
        "gusin": result.yongshin.gusin,
        "is_missing_shiksang": ten_gods_distribution["식상"] == 0,
        "is_missing_jaesung": ten_gods_distribution["재성"] == 0,
        "is_missing_gwansung": ten_gods_distribution["관성"] == 0,
        "is_missing_insung": ten_gods_distribution["인성"] == 0,
        "is_missing_bigeop": ten_gods_distribution["비겁"] == 0,
        "ten_gods_present": [tg for tg, cnt in ten_gods_count.items() if cnt > 0],
        "ten_god_favorability": {
            tg: sipseong_favorability(tg, result.strength.level).value
            for tg, cnt in ten_gods_count.items() if cnt > 0
        },
        "elements_present": [e for e, cnt in elements_count.items() if cnt > 0],
    }

    logger.debug(f"[SajuAnalyzer] 정답지: day_master={day_master} | 재성={ten_gods_distribution['재성']} "
                 f"| 식상={ten_gods_distribution['식상']}")
    return summary


_saju_analyzer: Optional[SajuAnalyzer] = None


def get_saju_analyzer() -> SajuAnalyzer:
    global _saju_analyzer
    if _saju_analyzer is None:
        _saju_analyzer = SajuAnalyzer()
    return _saju_analyzer
