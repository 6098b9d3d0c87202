"""
지장간(支藏干) 모듈
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- 지지별 지장간 (여기 → 중기 → 정기 순서, 일수 포함)
- 일수 배분 2종: 연해자평 / 삼명통회
- 변형: 인신사해 여기 무토 제거 (NO_RESIDUAL_EARTH)
- 사령(司令): 절입 후 경과 일수로 당령 천간 결정
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from saju_core.errors import InvalidInputError
from saju_core.models.calculation_config import (
    CalculationConfig,
    HiddenStemDayAllocation,
    HiddenStemVariant,
)

YEOGI = "여기"
JUNGGI = "중기"
JEONGGI = "정기"


@dataclass(frozen=True)
class HiddenStem:
    gan: str
    role: str  # 여기 / 중기 / 정기
    days: int


def _row(*entries: Tuple[str, str, int]) -> List[HiddenStem]:
    return [HiddenStem(gan, role, days) for gan, role, days in entries]


# 연해자평(淵海子平) 배분
YEONHAE_JAPYEONG: Dict[str, List[HiddenStem]] = {
    "자": _row(("임", YEOGI, 10), ("계", JEONGGI, 20)),
    "축": _row(("계", YEOGI, 9), ("신", JUNGGI, 3), ("기", JEONGGI, 18)),
    "인": _row(("무", YEOGI, 7), ("병", JUNGGI, 7), ("갑", JEONGGI, 16)),
    "묘": _row(("갑", YEOGI, 10), ("을", JEONGGI, 20)),
    "진": _row(("을", YEOGI, 9), ("계", JUNGGI, 3), ("무", JEONGGI, 18)),
    "사": _row(("무", YEOGI, 7), ("경", JUNGGI, 7), ("병", JEONGGI, 16)),
    "오": _row(("병", YEOGI, 10), ("기", JUNGGI, 9), ("정", JEONGGI, 11)),
    "미": _row(("정", YEOGI, 9), ("을", JUNGGI, 3), ("기", JEONGGI, 18)),
    "신": _row(("무", YEOGI, 7), ("임", JUNGGI, 7), ("경", JEONGGI, 16)),
    "유": _row(("경", YEOGI, 10), ("신", JEONGGI, 20)),
    "술": _row(("신", YEOGI, 9), ("정", JUNGGI, 3), ("무", JEONGGI, 18)),
    "해": _row(("무", YEOGI, 7), ("갑", JUNGGI, 7), ("임", JEONGGI, 16)),
}

# 삼명통회(三命通會) 배분
SAMMYEONG_TONGHOE: Dict[str, List[HiddenStem]] = {
    "자": _row(("임", YEOGI, 7), ("계", JEONGGI, 23)),
    "축": _row(("계", YEOGI, 7), ("경", JUNGGI, 5), ("기", JEONGGI, 18)),
    "인": _row(("무", YEOGI, 5), ("병", JUNGGI, 5), ("갑", JEONGGI, 20)),
    "묘": _row(("갑", YEOGI, 7), ("을", JEONGGI, 23)),
    "진": _row(("을", YEOGI, 7), ("임", JUNGGI, 5), ("무", JEONGGI, 18)),
    "사": _row(("무", YEOGI, 7), ("경", JUNGGI, 5), ("병", JEONGGI, 18)),
    "오": _row(("병", YEOGI, 7), ("정", JEONGGI, 23)),
    "미": _row(("정", YEOGI, 7), ("갑", JUNGGI, 5), ("기", JEONGGI, 18)),
    "신": _row(("기", YEOGI, 5), ("임", JUNGGI, 5), ("경", JEONGGI, 20)),
    "유": _row(("경", YEOGI, 7), ("신", JEONGGI, 23)),
    "술": _row(("신", YEOGI, 7), ("병", JUNGGI, 5), ("무", JEONGGI, 18)),
    "해": _row(("무", YEOGI, 5), ("갑", JUNGGI, 5), ("임", JEONGGI, 20)),
}

_TABLES = {
    HiddenStemDayAllocation.YEONHAE_JAPYEONG: YEONHAE_JAPYEONG,
    HiddenStemDayAllocation.SAMMYEONG_TONGHOE: SAMMYEONG_TONGHOE,
}

# 생지(生支): 여기 무토가 붙는 자리
SAENGJI = ("인", "사", "신", "해")


def hidden_stems_of(
    ji: str,
    variant: HiddenStemVariant = HiddenStemVariant.STANDARD,
    allocation: HiddenStemDayAllocation = HiddenStemDayAllocation.YEONHAE_JAPYEONG,
) -> List[HiddenStem]:
    """지지 → 지장간 목록 (여기 → 중기 → 정기)"""
    if ji not in YEONHAE_JAPYEONG:
        raise InvalidInputError(f"알 수 없는 지지: {ji}")
    entries = list(_TABLES[allocation][ji])
    if variant == HiddenStemVariant.NO_RESIDUAL_EARTH and ji in SAENGJI:
        entries = [e for e in entries if not (e.role == YEOGI and e.gan == "무")]
    return entries


def hidden_stems_for_config(ji: str, config: CalculationConfig) -> List[HiddenStem]:
    return hidden_stems_of(ji, config.hidden_stem_variant, config.hidden_stem_day_allocation)


def principal_stem(ji: str) -> str:
    """정기(본기) 천간"""
    return YEONHAE_JAPYEONG[ji][-1].gan


def entry_by_role(entries: List[HiddenStem], role: str):
    for entry in entries:
        if entry.role == role:
            return entry
    return None


class SaryeongDeterminer:
    """사령(司令) 판단: 절입 후 경과 일수 → 당령 지장간"""

    @staticmethod
    def determine(entries: List[HiddenStem], day_in_month: int) -> HiddenStem:
        """
        Args:
            entries: 월지 지장간 (여기 → 중기 → 정기)
            day_in_month: 절입일 = 1일차

        배분 일수를 누적해 해당 구간의 천간을 돌려준다.
        누적 일수를 넘기면 마지막(정기)에 머문다.
        """
        if day_in_month < 1:
            raise InvalidInputError(f"절입 후 일수는 1 이상이어야 합니다: {day_in_month}")
        elapsed = 0
        for entry in entries:
            elapsed += entry.days
            if day_in_month <= elapsed:
                return entry
        return entries[-1]

    @staticmethod
    def determine_for_branch(ji: str, day_in_month: int, config: CalculationConfig) -> HiddenStem:
        return SaryeongDeterminer.determine(hidden_stems_for_config(ji, config), day_in_month)


saryeong = SaryeongDeterminer()
