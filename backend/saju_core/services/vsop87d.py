"""
VSOP87D 기반 태양 시황경 계산 (절기 근사 계산용)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- 지구 일심 황경/동경 급수 (Meeus, Astronomical Algorithms 부록 III 축약판)
- FK5 보정, 장동(IAU 1980 4항), 광행차 -20.4898"/R
- 뉴턴 반복으로 목표 황경 통과 시각(TT) 계산
- 델타T 다항식으로 TT → UT 변환
정밀표 범위(1900~2050) 밖의 연도에서만 쓰는 근사 경로.
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import math
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

J2000 = 2451545.0
_J2000_DATETIME = datetime(2000, 1, 1, 12, 0, 0)

NEWTON_STEP_DEG_PER_DAY = 0.98564736
MAX_NEWTON_ITERATION = 24
MAX_TT_UT_ITERATION = 8

KST_OFFSET = timedelta(hours=9)

Term = Tuple[float, float, float]

# ============ 지구 일심 황경 L0~L5 ============

L0: List[Term] = [
    (175347046.0, 0.0, 0.0),
    (3341656.0, 4.6692568, 6283.07585),
    (34894.0, 4.6261, 12566.1517),
    (3497.0, 2.7441, 5753.3849),
    (3418.0, 2.8289, 3.5231),
    (3136.0, 3.6277, 77713.7715),
    (2676.0, 4.4181, 7860.4194),
    (2343.0, 6.1352, 3930.2097),
    (1324.0, 0.7425, 11506.7698),
    (1273.0, 2.0371, 529.691),
    (1199.0, 1.1096, 1577.3435),
    (990.0, 5.233, 5884.927),
    (902.0, 2.045, 26.298),
    (857.0, 3.508, 398.149),
    (780.0, 1.179, 5223.694),
    (753.0, 2.533, 5507.553),
    (505.0, 4.583, 18849.228),
    (492.0, 4.205, 775.523),
    (357.0, 2.92, 0.067),
    (317.0, 5.849, 11790.629),
    (284.0, 1.899, 796.298),
    (271.0, 0.315, 10977.079),
    (243.0, 0.345, 5486.778),
    (206.0, 4.806, 2544.314),
    (205.0, 1.869, 5573.143),
    (202.0, 2.458, 6069.777),
    (156.0, 0.833, 213.299),
    (132.0, 3.411, 2942.463),
    (126.0, 1.083, 20.775),
    (115.0, 0.645, 0.98),
    (103.0, 0.636, 4694.003),
    (102.0, 0.976, 15720.839),
    (102.0, 4.267, 7.114),
    (99.0, 6.21, 2146.17),
    (98.0, 0.68, 155.42),
    (86.0, 5.98, 161000.69),
    (85.0, 1.3, 6275.96),
    (85.0, 3.67, 71430.7),
    (80.0, 1.81, 17260.15),
    (79.0, 3.04, 12036.46),
    (75.0, 1.76, 5088.63),
    (74.0, 3.5, 3154.69),
    (74.0, 4.68, 801.82),
    (70.0, 0.83, 9437.76),
    (62.0, 3.98, 8827.39),
    (61.0, 1.82, 7084.9),
    (57.0, 2.78, 6286.6),
    (56.0, 4.39, 14143.5),
    (56.0, 3.47, 6279.55),
    (52.0, 0.19, 12139.55),
    (52.0, 1.33, 1748.02),
    (51.0, 0.28, 5856.48),
    (49.0, 0.49, 1194.45),
    (41.0, 5.37, 8429.24),
    (41.0, 2.4, 19651.05),
    (39.0, 6.17, 10447.39),
    (37.0, 6.04, 10213.29),
    (37.0, 2.57, 1059.38),
    (36.0, 1.71, 2352.87),
    (36.0, 1.78, 6812.77),
    (33.0, 0.59, 17789.85),
    (30.0, 0.44, 83996.85),
    (30.0, 2.74, 1349.87),
    (25.0, 3.16, 4690.48),
]

L1: List[Term] = [
    (628331966747.0, 0.0, 0.0),
    (206059.0, 2.678235, 6283.07585),
    (4303.0, 2.6351, 12566.1517),
    (425.0, 1.59, 3.523),
    (119.0, 5.796, 26.298),
    (109.0, 2.966, 1577.344),
    (93.0, 2.59, 18849.23),
    (72.0, 1.14, 529.69),
    (68.0, 1.87, 398.15),
    (67.0, 4.41, 5507.55),
    (59.0, 2.89, 5223.69),
    (56.0, 2.17, 155.42),
    (45.0, 0.4, 796.3),
    (36.0, 0.47, 775.52),
    (29.0, 2.65, 7.11),
    (21.0, 5.34, 0.98),
    (19.0, 1.85, 5486.78),
    (19.0, 4.97, 213.3),
    (17.0, 2.99, 6275.96),
    (16.0, 0.03, 2544.31),
    (16.0, 1.43, 2146.17),
    (15.0, 1.21, 10977.08),
    (12.0, 2.83, 1748.02),
    (12.0, 3.26, 5088.63),
    (12.0, 5.27, 1194.45),
    (12.0, 2.08, 4694.0),
    (11.0, 0.77, 553.57),
    (10.0, 1.3, 6286.6),
    (10.0, 4.24, 1349.87),
    (9.0, 2.7, 242.73),
    (9.0, 5.64, 951.72),
    (8.0, 5.3, 2352.87),
    (6.0, 2.65, 9437.76),
    (6.0, 4.67, 4690.48),
]

L2: List[Term] = [
    (52919.0, 0.0, 0.0),
    (8720.0, 1.0721, 6283.0758),
    (309.0, 0.867, 12566.152),
    (27.0, 0.05, 3.52),
    (16.0, 5.19, 26.3),
    (16.0, 3.68, 155.42),
    (10.0, 0.76, 18849.23),
    (9.0, 2.06, 77713.77),
    (7.0, 0.83, 775.52),
    (5.0, 4.66, 1577.34),
    (4.0, 1.03, 7.11),
    (4.0, 3.44, 5573.14),
    (3.0, 5.14, 796.3),
    (3.0, 6.05, 5507.55),
    (3.0, 1.19, 242.73),
    (3.0, 6.12, 529.69),
    (3.0, 0.31, 398.15),
    (3.0, 2.28, 553.57),
    (2.0, 4.38, 5223.69),
    (2.0, 3.75, 0.98),
]

L3: List[Term] = [
    (289.0, 5.844, 6283.076),
    (35.0, 0.0, 0.0),
    (17.0, 5.49, 12566.15),
    (3.0, 5.2, 155.42),
    (1.0, 4.72, 3.52),
    (1.0, 5.3, 18849.23),
    (1.0, 5.97, 242.73),
]

L4: List[Term] = [
    (114.0, 3.142, 0.0),
    (8.0, 4.13, 6283.08),
    (1.0, 3.84, 12566.15),
]

L5: List[Term] = [(1.0, 3.14, 0.0)]

# ============ 지구 동경 R0~R4 ============

R0: List[Term] = [
    (100013989.0, 0.0, 0.0),
    (1670700.0, 3.0984635, 6283.07585),
    (13956.0, 3.05525, 12566.1517),
    (3084.0, 5.1985, 77713.7715),
    (1628.0, 1.1739, 5753.3849),
    (1576.0, 2.8469, 7860.4194),
    (925.0, 5.453, 11506.77),
    (542.0, 4.564, 3930.21),
    (472.0, 3.661, 5884.927),
    (346.0, 0.964, 5507.553),
    (329.0, 5.9, 5223.694),
    (307.0, 0.299, 5573.143),
    (243.0, 4.273, 11790.629),
    (212.0, 5.847, 1577.344),
    (186.0, 5.022, 10977.079),
    (175.0, 3.012, 18849.228),
    (110.0, 5.055, 5486.778),
    (98.0, 0.89, 6069.78),
    (86.0, 5.69, 15720.84),
    (86.0, 1.27, 161000.69),
    (65.0, 0.27, 17260.15),
    (63.0, 0.92, 529.69),
    (57.0, 2.01, 83996.85),
    (56.0, 5.24, 71430.7),
    (49.0, 3.25, 2544.31),
    (47.0, 2.58, 775.52),
    (45.0, 5.54, 9437.76),
    (43.0, 6.01, 6275.96),
    (39.0, 5.36, 4694.0),
    (38.0, 2.39, 8827.39),
    (37.0, 0.83, 19651.05),
    (37.0, 4.9, 12139.55),
    (36.0, 1.67, 12036.46),
    (35.0, 1.84, 2942.46),
    (33.0, 0.24, 7084.9),
    (32.0, 0.18, 5088.63),
    (32.0, 1.78, 398.15),
    (28.0, 1.21, 6286.6),
    (28.0, 1.9, 6279.55),
    (26.0, 4.59, 10447.39),
]

R1: List[Term] = [
    (103019.0, 1.10749, 6283.07585),
    (1721.0, 1.0644, 12566.1517),
    (702.0, 3.142, 0.0),
    (32.0, 1.02, 18849.23),
    (31.0, 2.84, 5507.55),
    (25.0, 1.32, 5223.69),
    (18.0, 1.42, 1577.34),
    (10.0, 5.91, 10977.08),
    (9.0, 1.42, 6275.96),
    (9.0, 0.27, 5486.78),
]

R2: List[Term] = [
    (4359.0, 5.7846, 6283.0758),
    (124.0, 5.579, 12566.152),
    (12.0, 3.14, 0.0),
    (9.0, 3.63, 77713.77),
    (6.0, 1.87, 5573.14),
    (3.0, 5.47, 18849.23),
]

R3: List[Term] = [
    (145.0, 4.273, 6283.076),
    (7.0, 3.92, 12566.15),
]

R4: List[Term] = [(4.0, 2.56, 6283.08)]

L_TERMS = (L0, L1, L2, L3, L4, L5)
R_TERMS = (R0, R1, R2, R3, R4)


def _eval_series(series: Sequence[Sequence[Term]], tau: float) -> float:
    """Σ_n tau^n · Σ A·cos(B + C·tau), 1e-8 단위 보정"""
    total = 0.0
    power = 1.0
    for terms in series:
        total += power * sum(a * math.cos(b + c * tau) for a, b, c in terms)
        power *= tau
    return total / 1e8


def norm180(deg: float) -> float:
    """[-180, 180) 구간으로 정규화"""
    return (deg + 180.0) % 360.0 - 180.0


def nutation_in_longitude(T: float) -> float:
    """황경 장동 Δψ (arcsec, IAU 1980 주요 4항)"""
    ls2 = math.radians(2 * (280.4665 + 36000.7698 * T))
    lm2 = math.radians(2 * (218.3165 + 481267.8813 * T))
    om = math.radians(125.04452 - 1934.136261 * T)
    return (-17.20 * math.sin(om)
            - 1.32 * math.sin(ls2)
            - 0.23 * math.sin(lm2)
            + 0.21 * math.sin(2 * om))


def apparent_solar_longitude(jd_tt: float) -> float:
    """역학시(TT) 율리우스일 → 태양 시황경 (도, 0~360)"""
    tau = (jd_tt - J2000) / 365250.0
    T = (jd_tt - J2000) / 36525.0

    earth_lon = _eval_series(L_TERMS, tau)
    radius = _eval_series(R_TERMS, tau)

    # 지구 일심 → 태양 지심 기하 황경
    sun_lon = math.degrees(earth_lon) + 180.0
    # FK5 보정
    sun_lon += -0.09033 / 3600.0
    # 장동 + 광행차
    sun_lon += nutation_in_longitude(T) / 3600.0
    sun_lon += -20.4898 / 3600.0 / radius
    return sun_lon % 360.0


def _decimal_year(moment: datetime) -> float:
    start = datetime(moment.year, 1, 1)
    days_in_year = (datetime(moment.year + 1, 1, 1) - start).days if moment.year < 9999 else 365
    doy = (moment - start).total_seconds() / 86400.0 + 1.0
    return moment.year + (doy - 0.5) / days_in_year


def delta_t_seconds(moment: datetime) -> float:
    """ΔT = TT - UT (초), 연도 구간별 다항식"""
    y = _decimal_year(moment)
    if y < 1900:
        u = (y - 1820) / 100
        return -20 + 32 * u * u
    if y < 1986:
        t = y - 1900
        return (-2.79 + 1.494119 * t - 0.0598939 * t ** 2
                + 0.0061966 * t ** 3 - 0.000197 * t ** 4)
    if y < 2005:
        t = y - 2000
        return (63.86 + 0.3345 * t - 0.060374 * t ** 2 + 0.0017275 * t ** 3
                + 0.000651814 * t ** 4 + 0.00002373599 * t ** 5)
    if y <= 2050:
        t = y - 2000
        return 62.92 + 0.32217 * t + 0.005589 * t ** 2
    u = (y - 1820) / 100
    return -20 + 32 * u * u


def datetime_to_jd(moment: datetime) -> float:
    """naive datetime (UT로 간주) → 율리우스일"""
    return J2000 + (moment - _J2000_DATETIME).total_seconds() / 86400.0


def jd_to_datetime(jd: float) -> datetime:
    return _J2000_DATETIME + timedelta(days=jd - J2000)


def solve_longitude_crossing(guess_kst: datetime, target_longitude: float) -> datetime:
    """
    태양 시황경이 target_longitude를 지나는 시각 (KST, 초 단위 포함)

    Args:
        guess_kst: 초기 추정 시각 (KST)
        target_longitude: 목표 황경 (도)
    """
    guess_ut = guess_kst - KST_OFFSET
    jd_tt = datetime_to_jd(guess_ut) + delta_t_seconds(guess_ut) / 86400.0

    for _ in range(MAX_NEWTON_ITERATION):
        delta = norm180(target_longitude - apparent_solar_longitude(jd_tt))
        jd_tt += delta / NEWTON_STEP_DEG_PER_DAY
        if abs(delta) < 1e-9:
            break

    # TT → UT: ΔT가 UT 시각에 의존하므로 고정점 반복
    jd_ut = jd_tt
    for _ in range(MAX_TT_UT_ITERATION):
        jd_ut = jd_tt - delta_t_seconds(jd_to_datetime(jd_ut)) / 86400.0

    return jd_to_datetime(jd_ut) + KST_OFFSET


def round_to_minute(moment: datetime) -> datetime:
    """가장 가까운 분으로 반올림 (30초 이상 올림)"""
    return (moment + timedelta(seconds=30)).replace(second=0, microsecond=0)
