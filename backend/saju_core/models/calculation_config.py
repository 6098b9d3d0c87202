"""
계산 설정 (CalculationConfig) + 유파 프리셋
- 요청 하나 동안 읽기 전용 (frozen)
- 프리셋 = DEFAULT_CONFIG 위에 덮어쓰는 diff dict (상속 없음)
"""
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from saju_core.errors import InvalidInputError


# ============ 옵션 Enum ============

class DayCutMode(str, Enum):
    """일주 전환 시점"""
    MIDNIGHT_00 = "MIDNIGHT_00"                                  # 자정 기준
    YAZA_23_TO_01_NEXTDAY = "YAZA_23_TO_01_NEXTDAY"              # 23시부터 다음날
    YAZA_23_30_TO_01_30_NEXTDAY = "YAZA_23_30_TO_01_30_NEXTDAY"  # 23:30부터 다음날
    JOJA_SPLIT = "JOJA_SPLIT"                                    # 야자/조자 분리 (날짜 안 넘김)


class HiddenStemVariant(str, Enum):
    STANDARD = "STANDARD"
    NO_RESIDUAL_EARTH = "NO_RESIDUAL_EARTH"  # 인신사해 여기 무토 제거


class HiddenStemDayAllocation(str, Enum):
    YEONHAE_JAPYEONG = "YEONHAE_JAPYEONG"    # 연해자평
    SAMMYEONG_TONGHOE = "SAMMYEONG_TONGHOE"  # 삼명통회


class SaryeongMode(str, Enum):
    ALWAYS_JEONGGI = "ALWAYS_JEONGGI"
    BY_DAY_IN_MONTH = "BY_DAY_IN_MONTH"


class EarthLifeStageRule(str, Enum):
    FOLLOW_FIRE = "FOLLOW_FIRE"
    FOLLOW_WATER = "FOLLOW_WATER"
    INDEPENDENT = "INDEPENDENT"


class HiddenStemScope(str, Enum):
    ALL_THREE = "ALL_THREE"
    JEONGGI_ONLY = "JEONGGI_ONLY"
    SARYEONG_BASED = "SARYEONG_BASED"


class YongshinPriority(str, Enum):
    JOHU_FIRST = "JOHU_FIRST"
    EOKBU_FIRST = "EOKBU_FIRST"
    EQUAL_WEIGHT = "EQUAL_WEIGHT"


class JonggyeokYongshinMode(str, Enum):
    FOLLOW_DOMINANT = "FOLLOW_DOMINANT"    # 순종
    COUNTER_DOMINANT = "COUNTER_DOMINANT"  # 역종


class HapHwaStrictness(str, Enum):
    STRICT_FIVE_CONDITIONS = "STRICT_FIVE_CONDITIONS"
    MODERATE = "MODERATE"
    LENIENT = "LENIENT"


class GwiiinTableVariant(str, Enum):
    KOREAN_MAINSTREAM = "KOREAN_MAINSTREAM"
    CHINESE_TRADITIONAL = "CHINESE_TRADITIONAL"


class ShinsalReferenceBranch(str, Enum):
    DAY_ONLY = "DAY_ONLY"
    YEAR_ONLY = "YEAR_ONLY"
    DAY_AND_YEAR = "DAY_AND_YEAR"


class JeolgiPrecision(str, Enum):
    APPROXIMATE = "APPROXIMATE"      # 1900~2050 정밀표, 범위 밖은 VSOP87D
    VSOP87D_EXACT = "VSOP87D_EXACT"  # 모든 연도를 VSOP87D 급수로 계산


class SchoolPreset(str, Enum):
    KOREAN_MAINSTREAM = "KOREAN_MAINSTREAM"
    TRADITIONAL_CHINESE = "TRADITIONAL_CHINESE"
    MODERN_INTEGRATED = "MODERN_INTEGRATED"


# ============ 설정 모델 ============

class CalculationConfig(BaseModel):
    """사주 계산 옵션 (유파별 분기점 전부)"""

    # 시간/역법
    day_cut_mode: DayCutMode = Field(DayCutMode.YAZA_23_TO_01_NEXTDAY, description="일주 전환 시점")
    apply_dst_history: bool = Field(True, description="한국 서머타임 이력 보정")
    include_equation_of_time: bool = Field(False, description="균시차 보정")
    lmt_baseline_longitude: float = Field(135.0, description="표준 자오선 (경도 보정 기준)")
    jeolgi_precision: JeolgiPrecision = Field(JeolgiPrecision.APPROXIMATE, description="절기 계산 정밀도")

    # 지장간
    hidden_stem_variant: HiddenStemVariant = Field(HiddenStemVariant.STANDARD, description="지장간 구성")
    hidden_stem_day_allocation: HiddenStemDayAllocation = Field(
        HiddenStemDayAllocation.YEONHAE_JAPYEONG, description="지장간 일수 배분"
    )
    saryeong_mode: SaryeongMode = Field(SaryeongMode.ALWAYS_JEONGGI, description="사령 판단 방식")
    earth_life_stage_rule: EarthLifeStageRule = Field(EarthLifeStageRule.FOLLOW_FIRE, description="토 십이운성 규칙")
    yin_reversal_enabled: bool = Field(True, description="음간 역행")

    # 신강신약
    deukryeong_weight: float = Field(40.0, ge=0, description="득령 배점")
    proportional_deukryeong: bool = Field(False, description="득령 비례 배점")
    strength_threshold: float = Field(50.0, gt=0, description="신강 기준점")
    hidden_stem_scope_for_strength: HiddenStemScope = Field(HiddenStemScope.ALL_THREE, description="득지 지장간 범위")
    deukji_per_branch: float = Field(5.0, ge=0, description="득지 지지당 배점")
    deukse_bigyeop: float = Field(7.0, ge=0, description="득세 비겁 배점")
    deukse_inseong: float = Field(5.0, ge=0, description="득세 인성 배점")

    # 용신/격국
    yongshin_priority: YongshinPriority = Field(YongshinPriority.JOHU_FIRST, description="억부/조후 우선순위")
    jonggyeok_yongshin_mode: JonggyeokYongshinMode = Field(
        JonggyeokYongshinMode.FOLLOW_DOMINANT, description="종격 용신 방식"
    )
    jonggyeok_weak_threshold: float = Field(15.0, description="종격(약) 점수 기준")
    jonggyeok_strong_threshold: float = Field(62.4, description="종강격 점수 기준")

    # 합충
    hap_hwa_strictness: HapHwaStrictness = Field(HapHwaStrictness.STRICT_FIVE_CONDITIONS, description="합화 엄격도")
    allow_banhap: bool = Field(True, description="반합 인정")
    day_master_never_hap_geo: bool = Field(True, description="일간 합거/합화 불가")

    # 신살
    gwiiin_table: GwiiinTableVariant = Field(GwiiinTableVariant.KOREAN_MAINSTREAM, description="귀인표")
    shinsal_reference_branch: ShinsalReferenceBranch = Field(
        ShinsalReferenceBranch.DAY_AND_YEAR, description="신살 기준 지지"
    )

    class Config:
        frozen = True


DEFAULT_CONFIG = CalculationConfig()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 유파 프리셋 (DEFAULT 위에 덮어쓰는 diff)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_YAZA_23_30 = {"day_cut_mode": DayCutMode.YAZA_23_30_TO_01_30_NEXTDAY}

PRESET_OVERRIDES: Dict[SchoolPreset, Dict[str, Any]] = {
    SchoolPreset.KOREAN_MAINSTREAM: {
        **_YAZA_23_30,
    },
    SchoolPreset.TRADITIONAL_CHINESE: {
        **_YAZA_23_30,
        "apply_dst_history": False,
        "lmt_baseline_longitude": 120.0,
        "saryeong_mode": SaryeongMode.BY_DAY_IN_MONTH,
        "deukryeong_weight": 50.0,
        "proportional_deukryeong": True,
        "hidden_stem_scope_for_strength": HiddenStemScope.JEONGGI_ONLY,
        "yongshin_priority": YongshinPriority.EOKBU_FIRST,
        "hap_hwa_strictness": HapHwaStrictness.STRICT_FIVE_CONDITIONS,
        "allow_banhap": False,
        "day_master_never_hap_geo": False,
        "gwiiin_table": GwiiinTableVariant.CHINESE_TRADITIONAL,
        "shinsal_reference_branch": ShinsalReferenceBranch.DAY_ONLY,
    },
    SchoolPreset.MODERN_INTEGRATED: {
        "day_cut_mode": DayCutMode.JOJA_SPLIT,
        "include_equation_of_time": True,
        "jeolgi_precision": JeolgiPrecision.VSOP87D_EXACT,
        "saryeong_mode": SaryeongMode.BY_DAY_IN_MONTH,
        "proportional_deukryeong": True,
        "yongshin_priority": YongshinPriority.EQUAL_WEIGHT,
        "jonggyeok_weak_threshold": 20.0,
        "jonggyeok_strong_threshold": 58.0,
        "hap_hwa_strictness": HapHwaStrictness.MODERATE,
    },
}


def create_config(**overrides) -> CalculationConfig:
    """DEFAULT_CONFIG + overrides (검증 포함)"""
    if not overrides:
        return DEFAULT_CONFIG
    unknown = set(overrides) - set(CalculationConfig.model_fields)
    if unknown:
        raise InvalidInputError(f"알 수 없는 설정 키: {sorted(unknown)}")
    return CalculationConfig(**{**DEFAULT_CONFIG.model_dump(), **overrides})


def config_from_preset(preset: Union[SchoolPreset, str]) -> CalculationConfig:
    """유파 프리셋 → CalculationConfig"""
    try:
        preset = SchoolPreset(preset)
    except ValueError:
        raise InvalidInputError(f"알 수 없는 프리셋: {preset}") from None
    return create_config(**PRESET_OVERRIDES[preset])


def resolve_config(config: Optional[Union[CalculationConfig, SchoolPreset, str]] = None) -> CalculationConfig:
    """
    요청 설정 정규화
    - None → Settings.default_preset
    - "DEFAULT" → DEFAULT_CONFIG
    - 프리셋 이름 / SchoolPreset → 프리셋 적용
    """
    if isinstance(config, CalculationConfig):
        return config
    if config is None:
        from saju_core.config import get_settings
        config = get_settings().default_preset
    if isinstance(config, str) and config.upper() == "DEFAULT":
        return DEFAULT_CONFIG
    if isinstance(config, str):
        config = config.upper()
    return config_from_preset(config)
