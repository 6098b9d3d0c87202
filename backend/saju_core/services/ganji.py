"""
60갑자 계산 모듈
- 천간(10개) × 지지(12개) = 60갑자
- 년주: 입춘 기준 유효년도, 1984년 = 갑자(0)
- 월주: 오호둔월법(五虎遁月法)
- 일주: JDN → (JDN + 49) mod 60
- 시주: 오서둔시법(五鼠遁時法)
- 일주 전환(야자시/조자시) 정책
"""
from typing import Tuple

from saju_core.errors import InvalidInputError
from saju_core.models.calculation_config import DayCutMode
from saju_core.models.schemas import Pillar

# 천간 (10개)
CHEONGAN = ["갑", "을", "병", "정", "무", "기", "경", "신", "임", "계"]

# 지지 (12개)
JIJI = ["자", "축", "인", "묘", "진", "사", "오", "미", "신", "유", "술", "해"]

JIJI_HANJA = ["子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥"]
CHEONGAN_HANJA = ["甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸"]

# 천간-오행 매핑
GAN_TO_ELEMENT = {
    "갑": "목", "을": "목",
    "병": "화", "정": "화",
    "무": "토", "기": "토",
    "경": "금", "신": "금",
    "임": "수", "계": "수"
}

# 지지-오행 매핑
JI_TO_ELEMENT = {
    "자": "수", "축": "토", "인": "목", "묘": "목",
    "진": "토", "사": "화", "오": "화", "미": "토",
    "신": "금", "유": "금", "술": "토", "해": "수"
}

# 기준 에포크: 1984년 = 갑자년
YEAR_EPOCH = 1984

# 월 인덱스(1=인월 ... 12=축월) → 지지 인덱스
MONTH_INDEX_TO_JI_IDX = {i: (i + 1) % 12 for i in range(1, 13)}

# 오호둔월법: 년간 → 인월(1월) 천간
FIVE_TIGER_START = {
    "갑": "병", "기": "병",
    "을": "무", "경": "무",
    "병": "경", "신": "경",
    "정": "임", "임": "임",
    "무": "갑", "계": "갑",
}

# 오서둔시법: 일간 → 자시 천간
FIVE_RAT_START = {
    "갑": "갑", "기": "갑",
    "을": "병", "경": "병",
    "병": "무", "신": "무",
    "정": "경", "임": "경",
    "무": "임", "계": "임",
}


def make_pillar(gan_idx: int, ji_idx: int) -> Pillar:
    """천간/지지 인덱스 → Pillar"""
    if (gan_idx - ji_idx) % 2 != 0:
        raise InvalidInputError(f"존재하지 않는 간지 조합: {CHEONGAN[gan_idx]}{JIJI[ji_idx]}")
    gan, ji = CHEONGAN[gan_idx], JIJI[ji_idx]
    return Pillar(
        gan=gan,
        ji=ji,
        ganji=get_ganji_str(gan, ji),
        gan_element=GAN_TO_ELEMENT[gan],
        ji_element=JI_TO_ELEMENT[ji],
        gan_index=gan_idx,
        ji_index=ji_idx,
    )


def pillar_from_ganji(ganji: str) -> Pillar:
    """'갑자' → Pillar"""
    if len(ganji) != 2 or ganji[0] not in CHEONGAN or ganji[1] not in JIJI:
        raise InvalidInputError(f"간지 형식 오류: {ganji}")
    return make_pillar(CHEONGAN.index(ganji[0]), JIJI.index(ganji[1]))


def julian_day_number(year: int, month: int, day: int) -> int:
    """역산 그레고리력 날짜 → JDN (정오 기준 정수)"""
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def date_from_jdn(jdn: int) -> Tuple[int, int, int]:
    """JDN → (년, 월, 일)"""
    a = jdn + 32044
    b = (4 * a + 3) // 146097
    c = a - 146097 * b // 4
    d = (4 * c + 3) // 1461
    e = c - 1461 * d // 4
    m = (5 * e + 2) // 153
    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + m // 10
    return year, month, day


def rolls_to_next_day(hour: int, minute: int, mode: DayCutMode) -> bool:
    """일주 전환 정책상 다음 날 일진을 쓰는지"""
    if mode == DayCutMode.YAZA_23_TO_01_NEXTDAY:
        return hour == 23
    if mode == DayCutMode.YAZA_23_30_TO_01_30_NEXTDAY:
        return hour == 23 and minute >= 30
    # MIDNIGHT_00, JOJA_SPLIT: 날짜를 넘기지 않음
    return False


class GanjiCalculator:
    """60갑자 계산기 (순수 함수 모음)"""

    # ===== 년주 =====
    @staticmethod
    def effective_year(year: int, before_or_at_ipchun: bool) -> int:
        """입춘 이전(입춘 시각 포함)이면 전년도"""
        return year - 1 if before_or_at_ipchun else year

    @staticmethod
    def calc_year_pillar(effective_year: int) -> Pillar:
        """
        년주 계산 (입춘 보정된 연도 기준)

        Args:
            effective_year: 입춘 보정된 연도
        """
        return Pillar.from_index((effective_year - YEAR_EPOCH) % 60)

    # ===== 월주 =====
    @staticmethod
    def calc_month_pillar(year_gan: str, month_index: int) -> Pillar:
        """
        월주 계산 (오호둔월법)

        Args:
            year_gan: 년간 (갑을병...)
            month_index: 사주 월 인덱스 (1=인월 ... 12=축월)

        오호둔월법:
        - 갑/기년: 병인월 시작
        - 을/경년: 무인월 시작
        - 병/신년: 경인월 시작
        - 정/임년: 임인월 시작
        - 무/계년: 갑인월 시작
        """
        if not 1 <= month_index <= 12:
            raise InvalidInputError(f"월 인덱스 범위 오류: {month_index}")
        start_gan_idx = CHEONGAN.index(FIVE_TIGER_START[year_gan])
        gan_idx = (start_gan_idx + month_index - 1) % 10
        return make_pillar(gan_idx, MONTH_INDEX_TO_JI_IDX[month_index])

    # ===== 일주 =====
    @staticmethod
    def calc_day_pillar(year: int, month: int, day: int) -> Pillar:
        """
        일주 계산: (JDN + 49) mod 60

        예: 2000-01-01 (JDN 2451545) → 54 = 무오일
        """
        return Pillar.from_index((julian_day_number(year, month, day) + 49) % 60)

    @staticmethod
    def day_pillar_date(year: int, month: int, day: int, hour: int, minute: int,
                        mode: DayCutMode) -> Tuple[int, int, int]:
        """일주 계산에 쓸 날짜 (야자시 정책 적용)"""
        if rolls_to_next_day(hour, minute, mode):
            return date_from_jdn(julian_day_number(year, month, day) + 1)
        return year, month, day

    # ===== 시주 =====
    @staticmethod
    def get_hour_ji_index(hour: int) -> int:
        """
        시간 → 지지 인덱스 (2시간 단위)
        - 子시: 23:00~00:59
        - 丑시: 01:00~02:59
        - ...
        - 亥시: 21:00~22:59
        """
        if not 0 <= hour <= 23:
            raise InvalidInputError(f"시(hour) 범위 오류: {hour} (0-23)")
        return ((hour + 1) // 2) % 12

    @staticmethod
    def calc_hour_pillar(day_gan: str, hour: int) -> Pillar:
        """
        시주 계산 (오서둔시법)

        일간 → 자시 천간:
        - 갑/기일: 갑자시
        - 을/경일: 병자시
        - 병/신일: 무자시
        - 정/임일: 경자시
        - 무/계일: 임자시
        """
        ji_idx = GanjiCalculator.get_hour_ji_index(hour)
        start_gan_idx = CHEONGAN.index(FIVE_RAT_START[day_gan])
        return make_pillar((start_gan_idx + ji_idx) % 10, ji_idx)

    @staticmethod
    def get_hour_range(ji_idx: int) -> Tuple[str, str]:
        """지지 인덱스 → 시간 범위 문자열"""
        start = (ji_idx * 2 - 1) % 24
        end = (start + 1) % 24
        return f"{start:02d}:00", f"{end:02d}:59"


# 유틸리티 함수
def get_ganji_str(gan: str, ji: str) -> str:
    """간지 문자열 생성"""
    return f"{gan}{ji}"


def get_ganji_hanja(gan_idx: int, ji_idx: int) -> str:
    """간지 한자 문자열"""
    return f"{CHEONGAN_HANJA[gan_idx]}{JIJI_HANJA[ji_idx]}"


# 싱글톤
ganji_calc = GanjiCalculator()
