"""
오행 / 십성 모듈
- 오행 상생상극 사이클
- 일간 기준 십성(十星) 계산
- 십성 그룹(비겁/식상/재성/관성/인성) + 신강신약별 길흉
"""
from typing import Dict

from saju_core.models.schemas import Favorability, StrengthLevel
from saju_core.services.ganji import GAN_TO_ELEMENT

ELEMENTS = ["목", "화", "토", "금", "수"]
ELEMENT_HANJA = {"목": "木", "화": "火", "토": "土", "금": "金", "수": "水"}

TEN_GODS = ["비견", "겁재", "식신", "상관", "편재", "정재", "편관", "정관", "편인", "정인"]
TEN_GROUPS = ["비겁", "식상", "재성", "관성", "인성"]

# 십성 → 그룹 매핑
TEN_GOD_TO_GROUP = {
    "비견": "비겁", "겁재": "비겁",
    "식신": "식상", "상관": "식상",
    "편재": "재성", "정재": "재성",
    "편관": "관성", "정관": "관성",
    "편인": "인성", "정인": "인성",
}

# 천간 음양
CHEONGAN_YIN_YANG = {
    "갑": "양", "을": "음",
    "병": "양", "정": "음",
    "무": "양", "기": "음",
    "경": "양", "신": "음",
    "임": "양", "계": "음"
}

# 오행 상생상극
ELEMENT_CYCLE = {
    "목": {"generates": "화", "conquers": "토", "conquered_by": "금", "generated_by": "수"},
    "화": {"generates": "토", "conquers": "금", "conquered_by": "수", "generated_by": "목"},
    "토": {"generates": "금", "conquers": "수", "conquered_by": "목", "generated_by": "화"},
    "금": {"generates": "수", "conquers": "목", "conquered_by": "화", "generated_by": "토"},
    "수": {"generates": "목", "conquers": "화", "conquered_by": "토", "generated_by": "금"},
}

# 그룹 → (같은 음양, 다른 음양) 십성
_GROUP_TEN_GODS = {
    "비겁": ("비견", "겁재"),
    "식상": ("식신", "상관"),
    "재성": ("편재", "정재"),
    "관성": ("편관", "정관"),
    "인성": ("편인", "정인"),
}

SUPPORTING_GROUPS = ("비겁", "인성")


def generates(element: str) -> str:
    return ELEMENT_CYCLE[element]["generates"]


def conquers(element: str) -> str:
    return ELEMENT_CYCLE[element]["conquers"]


def conquered_by(element: str) -> str:
    return ELEMENT_CYCLE[element]["conquered_by"]


def generated_by(element: str) -> str:
    return ELEMENT_CYCLE[element]["generated_by"]


def element_label(element: str) -> str:
    """'목(木)' 형태"""
    return f"{element}({ELEMENT_HANJA[element]})"


def group_of_element(day_master_element: str, target_element: str) -> str:
    """일간 오행 기준 대상 오행의 십성 그룹"""
    cycle = ELEMENT_CYCLE[day_master_element]
    if target_element == day_master_element:
        return "비겁"
    if target_element == cycle["generates"]:
        return "식상"
    if target_element == cycle["conquers"]:
        return "재성"
    if target_element == cycle["conquered_by"]:
        return "관성"
    return "인성"


def element_of_group(day_master_element: str, group: str) -> str:
    """일간 오행 기준 십성 그룹의 오행"""
    cycle = ELEMENT_CYCLE[day_master_element]
    return {
        "비겁": day_master_element,
        "식상": cycle["generates"],
        "재성": cycle["conquers"],
        "관성": cycle["conquered_by"],
        "인성": cycle["generated_by"],
    }[group]


def get_ten_god(day_master: str, target_gan: str) -> str:
    """일간 기준 천간의 십성 계산"""
    dm_element = GAN_TO_ELEMENT[day_master]
    group = group_of_element(dm_element, GAN_TO_ELEMENT[target_gan])
    same_yy = CHEONGAN_YIN_YANG[day_master] == CHEONGAN_YIN_YANG[target_gan]
    first, second = _GROUP_TEN_GODS[group]
    return first if same_yy else second


def get_ten_god_group(day_master: str, target_gan: str) -> str:
    return TEN_GOD_TO_GROUP[get_ten_god(day_master, target_gan)]


def is_supporting_gan(day_master: str, target_gan: str) -> bool:
    """비겁/인성이면 일간을 돕는 글자"""
    return get_ten_god_group(day_master, target_gan) in SUPPORTING_GROUPS



# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 신강신약별 십성 길흉
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_STRONG_FAVORABILITY: Dict[str, Favorability] = {
    "비겁": Favorability.UNFAVORABLE,
    "식상": Favorability.FAVORABLE,
    "재성": Favorability.FAVORABLE,
    "관성": Favorability.FAVORABLE,
    "인성": Favorability.UNFAVORABLE,
}

_INVERSE = {
    Favorability.FAVORABLE: Favorability.UNFAVORABLE,
    Favorability.UNFAVORABLE: Favorability.FAVORABLE,
    Favorability.NEUTRAL: Favorability.NEUTRAL,
}


def sipseong_favorability(sipseong: str, level: StrengthLevel) -> Favorability:
    """
    십성 길흉 판단
    - 신강(극신강/신강): 설기/소모하는 식상/재성/관성이 길
    - 신약(극신약/신약): 생조/부조하는 인성/비겁이 길
    - 중화(중화신강/중화신약): 중립
    """
    group = TEN_GOD_TO_GROUP.get(sipseong)
    if group is None:
        raise ValueError(f"알 수 없는 십성: {sipseong}")
    if level in (StrengthLevel.VERY_STRONG, StrengthLevel.STRONG):
        return _STRONG_FAVORABILITY[group]
    if level in (StrengthLevel.VERY_WEAK, StrengthLevel.WEAK):
        return _INVERSE[_STRONG_FAVORABILITY[group]]
    return Favorability.NEUTRAL


def count_by_group(day_master: str, gans) -> Dict[str, int]:
    """천간 목록 → 십성 그룹 분포"""
    distribution = {g: 0 for g in TEN_GROUPS}
    for gan in gans:
        distribution[get_ten_god_group(day_master, gan)] += 1
    return distribution
