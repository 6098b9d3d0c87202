"""
조후(調候) 용신표 - 궁통보감(窮通寶鑑) 기준
일간 10 × 월지 12 = 120칸, 칸마다 (주 용신 오행, 보조 오행)
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from saju_core.services.elements import element_label
from saju_core.services.ganji import GAN_TO_ELEMENT

# 월지 순서 (인월 = 사주 1월)
MONTH_BRANCHES = ("인", "묘", "진", "사", "오", "미", "신", "유", "술", "해", "자", "축")

SEASON_BY_BRANCH = {
    "인": "SPRING", "묘": "SPRING", "진": "SPRING",
    "사": "SUMMER", "오": "SUMMER", "미": "SUMMER",
    "신": "AUTUMN", "유": "AUTUMN", "술": "AUTUMN",
    "해": "WINTER", "자": "WINTER", "축": "WINTER",
}

SEASON_DESCRIPTION = {
    "인": "인월(초봄)", "묘": "묘월(중봄)", "진": "진월(늦봄)",
    "사": "사월(초여름)", "오": "오월(한여름)", "미": "미월(늦여름)",
    "신": "신월(초가을)", "유": "유월(중가을)", "술": "술월(늦가을)",
    "해": "해월(초겨울)", "자": "자월(한겨울)", "축": "축월(늦겨울)",
}

STEM_DESCRIPTION = {
    "갑": "갑목(甲木, 양목/큰 나무)",
    "을": "을목(乙木, 음목/화초)",
    "병": "병화(丙火, 양화/태양)",
    "정": "정화(丁火, 음화/촛불)",
    "무": "무토(戊土, 양토/산)",
    "기": "기토(己土, 음토/밭)",
    "경": "경금(庚金, 양금/쇠)",
    "신": "신금(辛金, 음금/보석)",
    "임": "임수(壬水, 양수/강)",
    "계": "계수(癸水, 음수/이슬)",
}

PRIMARY_REASONING_TEMPLATES = {
    "목": {
        "SPRING": "{primary}로 뿌리에 자양분을 공급하여 성장을 도움",
        "SUMMER": "{primary}로 뜨거운 기운을 식혀 목이 마르지 않도록 보호",
        "AUTUMN": "금왕(金旺)의 계절에 {primary}로 금의 극을 완화",
        "WINTER": "추운 계절에 {primary}로 보온하여 목의 생기를 유지",
    },
    "화": {
        "SPRING": "{primary}로 화를 생(生)하여 봄의 기운을 이어받음",
        "SUMMER": "화왕(火旺)의 계절에 {primary}로 과열을 방지",
        "AUTUMN": "가을에 약해지는 화를 {primary}로 생(生)하여 유지",
        "WINTER": "추운 계절에 {primary}로 화의 연료를 공급하여 꺼지지 않도록 함",
    },
    "토": {
        "SPRING": "봄에 목의 극(剋)을 받는 토를 {primary}로 보호",
        "SUMMER": "더운 계절에 {primary}로 건조한 토를 적셔 생기를 부여",
        "AUTUMN": "가을에 금으로 기운이 빠지는 토를 {primary}로 보강",
        "WINTER": "추운 계절에 {primary}로 얼어붙은 토를 녹여 활력을 회복",
    },
    "금": {
        "SPRING": "봄에 약해지는 금을 {primary}로 단련하여 쓸모있게 함",
        "SUMMER": "더운 계절에 {primary}로 달구어진 금을 식힘",
        "AUTUMN": "금왕(金旺)의 계절에 {primary}로 제련하여 날카롭게 함",
        "WINTER": "추운 계절에 {primary}로 얼어붙은 금에 생기를 부여",
    },
    "수": {
        "SPRING": "봄에 흩어지는 수를 {primary}로 따뜻하게 하여 활력 부여",
        "SUMMER": "더운 계절에 {primary}로 증발하는 수의 수원을 보충",
        "AUTUMN": "가을에 금생수(金生水)와 함께 {primary}로 균형 유지",
        "WINTER": "수왕(水旺)의 계절에 {primary}로 보온하여 얼지 않도록 함",
    },
}


@dataclass(frozen=True)
class JohuEntry:
    primary: str
    secondary: Optional[str] = None


def _row(*cells: str) -> Tuple[JohuEntry, ...]:
    """'수화' → JohuEntry('수', '화'), '목' → JohuEntry('목', None)"""
    if len(cells) != len(MONTH_BRANCHES):
        raise ValueError(f"조후표 한 줄은 {len(MONTH_BRANCHES)}칸이어야 합니다: {len(cells)}")
    return tuple(JohuEntry(cell[0], cell[1] if len(cell) > 1 else None) for cell in cells)


#            인      묘      진      사      오      미      신      유      술      해      자      축
_ROWS: Dict[str, Tuple[JohuEntry, ...]] = {
    "갑": _row("수화", "수금", "금수", "수금", "수금", "수금", "화수", "화금", "금화", "화금", "화금", "화금"),
    "을": _row("화수", "화수", "수화", "수화", "수화", "수화", "토화", "수화", "수금", "화토", "화", "화"),
    "병": _row("수금", "수", "수목", "수금", "수금", "수금", "수토", "수토", "목수", "목토", "목화", "수목"),
    "정": _row("목", "목", "목금", "목금", "수목", "목수", "목금", "목금", "목금", "목금", "목금", "목금"),
    "무": _row("화목", "화목", "목화", "수목", "수목", "수화", "화수", "화수", "목화", "목화", "화목", "화목"),
    "기": _row("화금", "목수", "화수", "수화", "수화", "수화", "화수", "화수", "목화", "화목", "화목", "화목"),
    "경": _row("화토", "화목", "화목", "수토", "수", "화목", "화목", "화목", "목수", "화수", "화목", "화목"),
    "신": _row("토수", "수목", "수목", "수목", "수토", "수금", "수목", "수목", "수목", "수화", "화수", "화수"),
    "임": _row("금화", "토금", "목금", "수금", "수금", "금수", "토화", "목금", "목화", "토화", "토화", "화목"),
    "계": _row("금화", "금", "화금", "금수", "금수", "금수", "화금", "금화", "금수", "금토", "화금", "화금"),
}

JOHU_TABLE: Dict[Tuple[str, str], JohuEntry] = {
    (stem, branch): entry
    for stem, row in _ROWS.items()
    for branch, entry in zip(MONTH_BRANCHES, row)
}


def lookup(day_master: str, month_branch: str) -> JohuEntry:
    entry = JOHU_TABLE.get((day_master, month_branch))
    if entry is None:
        raise KeyError(f"조후표에 없는 조합: 일간={day_master}, 월지={month_branch}")
    return entry


def reasoning(day_master: str, month_branch: str) -> str:
    """'갑목(...)이(가) 인월(초봄)에 태어남: ...' 형태의 설명"""
    entry = lookup(day_master, month_branch)
    template = PRIMARY_REASONING_TEMPLATES[GAN_TO_ELEMENT[day_master]][SEASON_BY_BRANCH[month_branch]]
    text = (f"{STEM_DESCRIPTION[day_master]}이(가) {SEASON_DESCRIPTION[month_branch]}에 태어남: "
            f"{template.replace('{primary}', element_label(entry.primary))}")
    if entry.secondary is not None:
        text += f" 보조로 {element_label(entry.secondary)}을(를) 취하여 조화를 이룸."
    return text
