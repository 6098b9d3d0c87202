"""
Pydantic 스키마 정의
사주 계산 입력/결과 모델 - 전 단계 공통 값 객체
"""
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class PillarPosition(str, Enum):
    YEAR = "YEAR"
    MONTH = "MONTH"
    DAY = "DAY"
    HOUR = "HOUR"


class StrengthLevel(str, Enum):
    VERY_STRONG = "VERY_STRONG"          # 극신강
    STRONG = "STRONG"                    # 신강
    SLIGHTLY_STRONG = "SLIGHTLY_STRONG"  # 중화신강
    SLIGHTLY_WEAK = "SLIGHTLY_WEAK"      # 중화신약
    WEAK = "WEAK"                        # 신약
    VERY_WEAK = "VERY_WEAK"              # 극신약


class GyeokgukCategory(str, Enum):
    NAEGYEOK = "NAEGYEOK"    # 내격 (정격)
    JONGGYEOK = "JONGGYEOK"  # 종격
    HWAGYEOK = "HWAGYEOK"    # 화격
    ILHAENG = "ILHAENG"      # 일행득기격


class GyeokgukType(str, Enum):
    # 내격
    GEONROK = "GEONROK"
    YANGIN = "YANGIN"
    SIKSIN = "SIKSIN"
    SANGGWAN = "SANGGWAN"
    PYEONJAE = "PYEONJAE"
    JEONGJAE = "JEONGJAE"
    PYEONGWAN = "PYEONGWAN"
    JEONGGWAN = "JEONGGWAN"
    PYEONIN = "PYEONIN"
    JEONGIN = "JEONGIN"
    # 종격
    JONGGANG = "JONGGANG"
    JONGA = "JONGA"
    JONGJAE = "JONGJAE"
    JONGSAL = "JONGSAL"
    JONGSE = "JONGSE"
    # 화격
    HAPWHA_EARTH = "HAPWHA_EARTH"
    HAPWHA_METAL = "HAPWHA_METAL"
    HAPWHA_WATER = "HAPWHA_WATER"
    HAPWHA_WOOD = "HAPWHA_WOOD"
    HAPWHA_FIRE = "HAPWHA_FIRE"
    # 일행득기
    GOKJIK = "GOKJIK"
    YEOMSANG = "YEOMSANG"
    GASAEK = "GASAEK"
    JONGHYEOK = "JONGHYEOK"
    YUNHA = "YUNHA"


class GyeokgukQuality(str, Enum):
    WELL_FORMED = "WELL_FORMED"    # 성격
    BROKEN = "BROKEN"              # 파격
    RESCUED = "RESCUED"            # 파격 구원
    NOT_ASSESSED = "NOT_ASSESSED"  # 규칙 없음


class YongshinType(str, Enum):
    EOKBU = "EOKBU"
    JOHU = "JOHU"
    TONGGWAN = "TONGGWAN"
    BYEONGYAK = "BYEONGYAK"
    JEONWANG = "JEONWANG"
    GYEOKGUK = "GYEOKGUK"
    HAPWHA_YONGSHIN = "HAPWHA_YONGSHIN"
    ILHAENG_YONGSHIN = "ILHAENG_YONGSHIN"


class YongshinAgreement(str, Enum):
    FULL_AGREE = "FULL_AGREE"
    PARTIAL_AGREE = "PARTIAL_AGREE"
    DISAGREE = "DISAGREE"


class HapState(str, Enum):
    NOT_ESTABLISHED = "NOT_ESTABLISHED"  # 불성립
    HAPGEO = "HAPGEO"                    # 합거
    HAPWHA = "HAPWHA"                    # 합화


class Favorability(str, Enum):
    FAVORABLE = "FAVORABLE"
    UNFAVORABLE = "UNFAVORABLE"
    NEUTRAL = "NEUTRAL"


class TraceCategory(str, Enum):
    TIME_ADJUSTMENT = "TIME_ADJUSTMENT"
    YEAR_PILLAR = "YEAR_PILLAR"
    MONTH_PILLAR = "MONTH_PILLAR"
    DAY_PILLAR = "DAY_PILLAR"
    HOUR_PILLAR = "HOUR_PILLAR"
    HIDDEN_STEMS = "HIDDEN_STEMS"
    TEN_GODS = "TEN_GODS"
    TWELVE_STAGES = "TWELVE_STAGES"
    RELATIONS = "RELATIONS"
    STRENGTH = "STRENGTH"
    YONGSHIN = "YONGSHIN"
    GYEOKGUK = "GYEOKGUK"
    GONGMANG = "GONGMANG"
    SHINSAL = "SHINSAL"
    LUCK_CYCLE = "LUCK_CYCLE"


# ============ 입력 ============

class BirthMoment(BaseModel):
    """출생 시각 (민간 시각 그대로, 보정 전)"""
    year: int = Field(..., ge=2, le=9998, description="출생 년도 (양력, 앞뒤 하루 보정 여유)")
    month: int = Field(..., ge=1, le=12, description="출생 월")
    day: int = Field(..., ge=1, le=31, description="출생 일")
    hour: int = Field(..., ge=0, le=23, description="출생 시 (0-23)")
    minute: int = Field(0, ge=0, le=59, description="출생 분 (0-59)")
    timezone: str = Field("Asia/Seoul", description="타임존")
    longitude: float = Field(126.978, ge=-180, le=180, description="출생지 경도")
    latitude: float = Field(37.5665, ge=-90, le=90, description="출생지 위도")
    standard_meridian_override: Optional[float] = Field(
        None, ge=-180, le=180, description="표준 자오선 직접 지정 (None이면 타임존 기준)"
    )

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "year": 1988,
                "month": 7,
                "day": 15,
                "hour": 14,
                "minute": 30,
                "timezone": "Asia/Seoul",
                "longitude": 126.978,
                "latitude": 37.5665,
            }
        }

    @model_validator(mode="after")
    def _check_calendar_date(self):
        date(self.year, self.month, self.day)  # 존재하지 않는 날짜면 ValueError
        return self


class AdjustedMoment(BaseModel):
    """진태양시 보정 결과 (각 보정량을 분 단위로 보존)"""
    standard_year: int
    standard_month: int
    standard_day: int
    standard_hour: int
    standard_minute: int

    adjusted_year: int
    adjusted_month: int
    adjusted_day: int
    adjusted_hour: int
    adjusted_minute: int

    dst_correction_minutes: int = Field(..., description="서머타임 보정 (빼준 분)")
    longitude_correction_minutes: int = Field(..., description="경도 보정 (더한 분)")
    equation_of_time_minutes: int = Field(..., description="균시차 보정 (더한 분)")
    standard_meridian: float = Field(..., description="적용된 표준 자오선")

    class Config:
        frozen = True


# ============ 기둥 ============

class Pillar(BaseModel):
    """사주 기둥 (년/월/일/시주)"""
    gan: str = Field(..., description="천간 (갑을병정무기경신임계)")
    ji: str = Field(..., description="지지 (자축인묘진사오미신유술해)")
    ganji: str = Field(..., description="간지 조합 (예: 갑자)")

    # 오행 정보
    gan_element: str = Field(..., description="천간 오행 (목화토금수)")
    ji_element: str = Field(..., description="지지 오행")

    # 인덱스 (내부 계산용)
    gan_index: int = Field(..., ge=0, le=9, description="천간 인덱스 (0-9)")
    ji_index: int = Field(..., ge=0, le=11, description="지지 인덱스 (0-11)")

    class Config:
        frozen = True

    @classmethod
    def from_index(cls, index: int) -> "Pillar":
        """60갑자 인덱스(0=갑자 ... 59=계해) → Pillar"""
        from saju_core.services.ganji import make_pillar
        return make_pillar(index % 10, index % 12)

    @property
    def sexagenary_index(self) -> int:
        return (6 * self.gan_index - 5 * self.ji_index) % 60

    @property
    def hanja(self) -> str:
        from saju_core.services.ganji import get_ganji_hanja
        return get_ganji_hanja(self.gan_index, self.ji_index)

    @property
    def label(self) -> str:
        """'갑자(甲子)' 형태"""
        return f"{self.ganji}({self.hanja})"


class PillarSet(BaseModel):
    """사주 원국 (4개 기둥)"""
    year: Pillar = Field(..., description="년주")
    month: Pillar = Field(..., description="월주")
    day: Pillar = Field(..., description="일주 (일간=나)")
    hour: Pillar = Field(..., description="시주")

    class Config:
        frozen = True

    @property
    def day_master(self) -> str:
        return self.day.gan

    def stems(self) -> List[str]:
        return [self.year.gan, self.month.gan, self.day.gan, self.hour.gan]

    def branches(self) -> List[str]:
        return [self.year.ji, self.month.ji, self.day.ji, self.hour.ji]

    def stem_at(self, position: PillarPosition) -> str:
        return getattr(self, position.value.lower()).gan

    def __str__(self) -> str:
        return f"{self.year.ganji} {self.month.ganji} {self.day.ganji} {self.hour.ganji}"


# ============ 분석 결과 ============

class HapHwaEvaluation(BaseModel):
    """천간합 평가 (합화/합거/불성립)"""
    stem1: str
    stem2: str
    position1: PillarPosition
    position2: PillarPosition
    result_element: str = Field(..., description="합화 시 결과 오행")
    state: HapState
    confidence: float = Field(..., ge=0.0, le=1.0)
    conditions_met: List[str] = Field(default_factory=list)
    conditions_failed: List[str] = Field(default_factory=list)
    reasoning: str = ""
    day_master_involved: bool = False

    class Config:
        frozen = True


class StrengthScore(BaseModel):
    deukryeong: float = Field(..., description="득령 점수")
    deukji: float = Field(..., description="득지 점수")
    deukse: float = Field(..., description="득세 점수")
    total_support: float = Field(..., description="총 부조 점수")
    total_oppose: float = Field(..., description="총 억제 점수")


class StrengthResult(BaseModel):
    """신강신약 분석 결과"""
    day_master: str
    day_master_element: str
    level: StrengthLevel
    score: StrengthScore
    is_strong: bool
    details: List[str] = Field(default_factory=list, description="판단 근거")


class GyeokgukFormation(BaseModel):
    """성격/파격 평가"""
    quality: GyeokgukQuality
    breaking_factors: List[str] = Field(default_factory=list)
    rescue_factors: List[str] = Field(default_factory=list)
    reasoning: str = ""


class GyeokgukResult(BaseModel):
    """격국 판단 결과"""
    type: GyeokgukType
    category: GyeokgukCategory
    base_sipseong: Optional[str] = Field(None, description="내격 기준 십성")
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str
    formation: Optional[GyeokgukFormation] = None


class YongshinRecommendation(BaseModel):
    type: YongshinType
    primary_element: str
    secondary_element: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str


class YongshinResult(BaseModel):
    """용신 결정 결과"""
    recommendations: List[YongshinRecommendation]
    final_yongshin: str
    final_heesin: Optional[str]
    gisin: str
    gusin: str
    agreement: YongshinAgreement
    final_confidence: float = Field(..., ge=0.0, le=1.0)


class AlternativeDecision(BaseModel):
    """다른 유파의 판단"""
    school_name: str
    decision: str
    reasoning: str

    class Config:
        frozen = True


class TraceEntry(BaseModel):
    """계산 추적 항목 (한 번 추가되면 변경 불가)"""
    step: str
    category: TraceCategory
    decision: str
    reasoning: str
    rule: str = ""
    alternatives: List[AlternativeDecision] = Field(default_factory=list)
    config_key: Optional[str] = None
    confidence: float = Field(1.0, ge=0.0, le=1.0)

    class Config:
        frozen = True


class PillarCalculationResult(BaseModel):
    """기둥 계산 결과 + 보정 내역"""
    birth: BirthMoment
    pillars: PillarSet
    adjusted: AdjustedMoment
    days_since_jeol: Optional[int] = Field(None, description="직전 절입 이후 경과 일수 (1부터)")
    solar_term_method: str = Field(..., description="절기 계산 방식 (table / vsop87d)")


class SajuAnalysisResult(BaseModel):
    """전체 분석 결과"""
    pillar_result: PillarCalculationResult
    hap_hwa_evaluations: List[HapHwaEvaluation] = Field(default_factory=list)
    strength: StrengthResult
    gyeokguk: GyeokgukResult
    yongshin: YongshinResult
    trace: List[TraceEntry] = Field(default_factory=list)

    @property
    def pillars(self) -> PillarSet:
        return self.pillar_result.pillars
