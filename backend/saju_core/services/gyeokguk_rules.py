"""
격국 성격(成格)/파격(破格) 규칙표
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- FormationProfile: 년/월/시 천간 십성 분포 + 지지 정기 십성 + 신강 여부
- 규칙 = (조건 함수, 고전 용어 라벨) 쌍의 데이터 표
  - breaking: 파격 요인
  - rescue: 구응(救應) 요인
  - support: 성격 조건
- 내격 10종 + 외격 15종 (종격 5, 화격 5, 일행득기 5)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from saju_core.models.schemas import (
    GyeokgukFormation,
    GyeokgukQuality,
    GyeokgukType,
    PillarSet,
    StrengthResult,
)
from saju_core.services.elements import (
    TEN_GOD_TO_GROUP,
    conquered_by,
    element_label,
    generated_by,
    generates,
    get_ten_god,
    group_of_element,
)
from saju_core.services.ganji import GAN_TO_ELEMENT
from saju_core.services.hidden_stems import principal_stem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormationProfile:
    day_master_element: str

    has_bigyeop: bool
    has_siksang: bool
    has_jae: bool
    has_gwan: bool
    has_inseong: bool

    has_sang_gwan: bool
    has_sik_sin: bool
    has_pyeon_in: bool
    has_pyeon_gwan: bool
    has_jeong_gwan: bool
    has_pyeon_jae: bool
    has_jeong_jae: bool
    has_gyeob_jae: bool

    bigyeop_count: int
    siksang_count: int
    jae_count: int
    gwan_count: int
    inseong_count: int

    is_strong: bool
    hidden_sipseongs: FrozenSet[str] = field(default_factory=frozenset)

    # ===== 파생 조건 =====
    @property
    def sik_sin_strong(self) -> bool:
        return self.siksang_count >= 2

    @property
    def hidden_sang_gwan(self) -> bool:
        return not self.has_sang_gwan and "상관" in self.hidden_sipseongs

    @property
    def hidden_pyeon_in(self) -> bool:
        return not self.has_pyeon_in and "편인" in self.hidden_sipseongs

    @property
    def hidden_gyeob_jae(self) -> bool:
        return not self.has_gyeob_jae and "겁재" in self.hidden_sipseongs

    def has_element_in_stems(self, element: str) -> bool:
        group = group_of_element(self.day_master_element, element)
        return {
            "비겁": self.has_bigyeop,
            "식상": self.has_siksang,
            "재성": self.has_jae,
            "관성": self.has_gwan,
            "인성": self.has_inseong,
        }[group]

    def has_element_in_hidden(self, element: str) -> bool:
        group = group_of_element(self.day_master_element, element)
        return any(TEN_GOD_TO_GROUP[s] == group for s in self.hidden_sipseongs)


def build_profile(pillars: PillarSet, strength: StrengthResult) -> FormationProfile:
    """년/월/시 천간 십성 + 4지지 정기 십성 (일간과 같은 정기 제외)"""
    dm = pillars.day_master
    sipseongs = [get_ten_god(dm, g) for g in (pillars.year.gan, pillars.month.gan, pillars.hour.gan)]

    hidden = set()
    for ji in pillars.branches():
        stem = principal_stem(ji)
        if stem != dm:
            hidden.add(get_ten_god(dm, stem))

    def count(*names: str) -> int:
        return sum(1 for s in sipseongs if s in names)

    return FormationProfile(
        day_master_element=GAN_TO_ELEMENT[dm],
        has_bigyeop=count("비견", "겁재") > 0,
        has_siksang=count("식신", "상관") > 0,
        has_jae=count("편재", "정재") > 0,
        has_gwan=count("편관", "정관") > 0,
        has_inseong=count("편인", "정인") > 0,
        has_sang_gwan="상관" in sipseongs,
        has_sik_sin="식신" in sipseongs,
        has_pyeon_in="편인" in sipseongs,
        has_pyeon_gwan="편관" in sipseongs,
        has_jeong_gwan="정관" in sipseongs,
        has_pyeon_jae="편재" in sipseongs,
        has_jeong_jae="정재" in sipseongs,
        has_gyeob_jae="겁재" in sipseongs,
        bigyeop_count=count("비견", "겁재"),
        siksang_count=count("식신", "상관"),
        jae_count=count("편재", "정재"),
        gwan_count=count("편관", "정관"),
        inseong_count=count("편인", "정인"),
        is_strong=strength.is_strong,
        hidden_sipseongs=frozenset(hidden),
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 규칙 명세
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Predicate = Callable[[FormationProfile], bool]
Rule = Tuple[Predicate, str]


@dataclass(frozen=True)
class FormationRuleSpec:
    pattern_name: str
    formation_condition: str
    breaking: Tuple[Rule, ...]
    rescue: Tuple[Rule, ...] = ()
    support: Predicate = lambda p: True


def _always(p: FormationProfile) -> bool:
    return True


_SANGGWAN_GYEONGWAN = "상관견관(傷官見官): 상관이 투출하여 정관을 극함"
_IN_GYEONG_BONG_JAE = "인경봉재(印輕逢財): 인성이 약한데 재성이 극함"
_GEOB_JAE_HO_IN = "비겁이 재성을 극하여 인성 보호(劫財護印)"
_JE_HYO_HO_SIK = "편재가 편인을 제압하여 식신 보호(制梟護食)"
_BIGYEOP_BREAKS_JONG = "비겁 투출(比劫透出): 일간을 부조하여 '종(從)'의 전제가 무너짐"
_INSEONG_BREAKS_JONG = "인성 투출(印星透出): 인성이 일간을 부조하여 '종(從)'의 전제가 무너짐"
_GWAN_JE_GEOB_HO_JAE = "관성이 비겁을 제어하여 재성 보호(官制劫護財)"


def _jae_spec(name: str) -> FormationRuleSpec:
    return FormationRuleSpec(
        pattern_name=name,
        formation_condition="재생관(財生官) 또는 식신생재(食神生財)+신강",
        breaking=(
            (lambda p: p.bigyeop_count >= 2, "군겁쟁재(群劫爭財): 비겁이 과다하여 재성을 빼앗김"),
            (lambda p: p.hidden_gyeob_jae, "지장간 잠재(潛在) 겁재: 지지 정기에 겁재가 있어 운에서 투출 시 쟁재 위험"),
            (lambda p: p.has_pyeon_gwan, "재투칠살(財透七殺): 재성이 칠살을 생함"),
        ),
        rescue=(
            (lambda p: p.bigyeop_count >= 2 and p.has_gwan, _GWAN_JE_GEOB_HO_JAE),
            (lambda p: p.bigyeop_count >= 2 and p.has_sik_sin, "식신이 비겁의 기운을 설기하여 재를 생(食化劫生財)"),
            (lambda p: p.has_pyeon_gwan and p.has_sik_sin, "식신이 칠살을 제어하여 재를 보호(食制殺護財)"),
        ),
        support=lambda p: (p.has_siksang and p.is_strong) or p.has_gwan,
    )


def _in_spec(name: str) -> FormationRuleSpec:
    return FormationRuleSpec(
        pattern_name=name,
        formation_condition="관인상생(官印相生), 인경봉살(印輕逢殺), 또는 식상 설기(食傷泄氣)",
        breaking=(
            (lambda p: not p.is_strong and p.has_jae, _IN_GYEONG_BONG_JAE),
            (lambda p: p.is_strong and p.inseong_count >= 2 and p.has_pyeon_gwan and not p.has_siksang,
             "신강인중투살(身強印重透殺): 일간이 강하고 인성이 과하며 칠살이 인을 기름"),
        ),
        rescue=(
            (lambda p: not p.is_strong and p.has_jae and p.has_bigyeop, _GEOB_JAE_HO_IN),
        ),
        support=lambda p: (p.has_gwan and p.has_inseong) or (p.has_pyeon_gwan and not p.is_strong)
        or (p.is_strong and p.has_siksang),
    )


NAEGYEOK_RULES: Dict[GyeokgukType, FormationRuleSpec] = {
    GyeokgukType.JEONGGWAN: FormationRuleSpec(
        pattern_name="정관격",
        formation_condition="재생관(財生官) 또는 관인상생(官印相生)",
        breaking=(
            (lambda p: p.has_sang_gwan, _SANGGWAN_GYEONGWAN),
            (lambda p: p.has_jeong_gwan and p.has_pyeon_gwan, "관살혼잡(官殺混雜): 정관과 편관이 동시 투출"),
            (lambda p: p.hidden_sang_gwan, "지장간 잠재(潛在) 상관: 지지 정기에 상관이 있어 운에서 투출 시 상관견관 위험"),
        ),
        rescue=(
            (lambda p: p.has_sang_gwan and p.has_inseong, "인성이 상관을 제압하여 정관 보호(印制傷官)"),
        ),
        support=lambda p: (p.has_jae and not p.has_sang_gwan) or (p.has_inseong and not p.has_jae),
    ),
    GyeokgukType.JEONGJAE: _jae_spec("정재격"),
    GyeokgukType.PYEONJAE: _jae_spec("편재격"),
    GyeokgukType.SIKSIN: FormationRuleSpec(
        pattern_name="식신격",
        formation_condition="식신생재(食神生財) 또는 식신제살(食神制殺)",
        breaking=(
            (lambda p: p.has_pyeon_in, "효신탈식(梟神奪食): 편인이 투출하여 식신을 극함"),
            (lambda p: p.hidden_pyeon_in, "지장간 잠재(潛在) 편인: 지지 정기에 편인이 있어 운에서 투출 시 효신탈식 위험"),
            (lambda p: p.has_jae and p.has_pyeon_gwan and not p.sik_sin_strong,
             "식신생재 노살(生財露殺): 재성이 칠살을 기르나 식신이 이를 제어하기 부족"),
        ),
        rescue=(
            (lambda p: p.has_pyeon_in and p.has_pyeon_jae, _JE_HYO_HO_SIK),
        ),
        support=_always,
    ),
    GyeokgukType.SANGGWAN: FormationRuleSpec(
        pattern_name="상관격",
        formation_condition="상관생재(傷官生財), 상관패인(傷官佩印), 또는 상관제살(傷官制殺)",
        breaking=(
            (lambda p: p.has_jeong_gwan, "상관견관(傷官見官): 상관격에서 정관이 투출"),
            (lambda p: p.has_jae and p.has_pyeon_gwan, "상관생재 대살(生財帶殺): 재성이 칠살을 기름"),
            (lambda p: p.has_inseong and p.is_strong and not p.has_pyeon_gwan and not p.has_jae,
             "상관패인 중 상경신왕(傷輕身旺): 상관이 약하고 일간이 왕하여 인성이 불필요"),
        ),
        rescue=(
            (lambda p: p.has_jeong_gwan and p.has_inseong, "인성이 상관을 억제하여 정관 보호(印制傷護官)"),
        ),
        support=lambda p: p.has_jae or (p.has_inseong and not p.is_strong)
        or (p.has_pyeon_gwan and not p.has_jae),
    ),
    GyeokgukType.PYEONGWAN: FormationRuleSpec(
        pattern_name="편관격(칠살격)",
        formation_condition="식신제살(食神制殺), 살인상생(殺印相生), 또는 양인가살(羊刃駕殺)",
        breaking=(
            (lambda p: not p.has_sik_sin and not p.has_inseong and not p.has_gyeob_jae,
             "칠살무제(七殺無制): 식신, 인성, 양인 모두 없어 칠살을 제어할 수단이 없음"),
            (lambda p: p.has_jae and not p.has_sik_sin and not p.has_inseong,
             "재생살무제(財生殺無制): 재성이 칠살을 기르나 제어 수단이 없음"),
            (lambda p: p.has_sik_sin and p.has_inseong and not p.has_jae,
             "인탈식(印奪食): 식신으로 칠살을 제어하나 인성이 식신을 극함"),
            (lambda p: not p.is_strong and not p.has_inseong and not p.has_gyeob_jae,
             "신약무조(身弱無助): 일간이 약하여 칠살을 감당할 수 없음"),
        ),
        rescue=(
            (lambda p: p.has_sik_sin and p.has_inseong and p.has_jae, "재성이 인성을 극하여 식신 보호(財去印存食)"),
        ),
        support=lambda p: p.has_sik_sin or p.has_inseong or p.has_gyeob_jae,
    ),
    GyeokgukType.JEONGIN: _in_spec("정인격"),
    GyeokgukType.PYEONIN: FormationRuleSpec(
        pattern_name="편인격",
        formation_condition="살인상생(殺印相生) 또는 재성 제어(財制偏印)",
        breaking=(
            (lambda p: p.has_sik_sin, "효신탈식(梟神奪食): 편인이 식신을 극함"),
            (lambda p: not p.is_strong and p.has_jae, _IN_GYEONG_BONG_JAE),
            (lambda p: p.inseong_count >= 3 and not p.has_jae, "인과다무제(印過多無制): 편인이 과도하나 재성의 제어가 없음"),
        ),
        rescue=(
            (lambda p: p.has_sik_sin and p.has_pyeon_jae, _JE_HYO_HO_SIK),
            (lambda p: not p.is_strong and p.has_jae and p.has_bigyeop, _GEOB_JAE_HO_IN),
        ),
        support=lambda p: (p.has_pyeon_gwan and p.has_inseong) or (p.has_jae and p.is_strong),
    ),
    GyeokgukType.GEONROK: FormationRuleSpec(
        pattern_name="건록격",
        formation_condition="투관봉재인(透官逢財印), 투재봉식상(透財逢食傷), 또는 투살봉제복(透殺逢制伏)",
        breaking=(
            (lambda p: not p.has_jae and not p.has_gwan and not p.has_pyeon_gwan and not p.has_siksang,
             "무재관식상(無財官食傷): 재성, 관성, 식상이 모두 없어 비겁만 남음"),
            (lambda p: p.has_jeong_gwan and p.has_sang_gwan and not p.has_inseong,
             "투관봉상(透官逢傷): 정관이 투출했으나 상관이 극하고 인성의 보호가 없음"),
            (lambda p: p.has_pyeon_gwan and p.has_inseong and not p.has_sik_sin and not p.has_jae,
             "투살투인무식(透殺透印無食): 칠살과 인성이 있으나 식신이 없어 살을 제어 못 함"),
        ),
        rescue=(
            (lambda p: p.has_jeong_gwan and p.has_sang_gwan and p.has_inseong, "인성이 상관을 제압하여 정관 보호(印制傷護官)"),
        ),
        support=lambda p: (p.has_jeong_gwan and (p.has_jae or p.has_inseong))
        or (p.has_jae and p.has_siksang) or (p.has_pyeon_gwan and p.has_sik_sin),
    ),
    GyeokgukType.YANGIN: FormationRuleSpec(
        pattern_name="양인격",
        formation_condition="관살이 양인을 제어(官殺制刃)",
        breaking=(
            (lambda p: not p.has_gwan and not p.has_pyeon_gwan, "양인무관살(羊刃無官殺): 관살이 없어 양인(겁재)을 제어할 수 없음"),
            (lambda p: p.has_sang_gwan and p.has_jeong_gwan and not p.has_inseong,
             "상관견관(傷官見官): 상관이 양인격의 관을 극하고 인성 보호가 없음"),
            (lambda p: p.has_siksang and (p.has_gwan or p.has_pyeon_gwan) and not p.has_inseong,
             "식상제관(食傷制官): 식상이 관살을 극하여 양인 통제력 상실"),
        ),
        rescue=(
            (lambda p: p.has_sang_gwan and p.has_inseong, "인성이 상관을 제압하여 관 보호(印護官制傷)"),
            (lambda p: p.has_siksang and p.has_inseong, "인성이 식상을 억제하여 관살 보호(重印護官)"),
        ),
        support=lambda p: (p.has_gwan or p.has_pyeon_gwan) and not p.has_sang_gwan,
    ),
}


# ===== 외격 =====

def _hwagyeok_spec(hwashin: str, pattern_name: str) -> FormationRuleSpec:
    """합화격: 화신(化神)이 극을 받지 않아야 성격"""
    controller = conquered_by(hwashin)
    generator = generated_by(hwashin)
    drain = generates(hwashin)
    hw, ct, gn, dr = (element_label(e) for e in (hwashin, controller, generator, drain))
    return FormationRuleSpec(
        pattern_name=pattern_name,
        formation_condition=f"화신({hw})이 왕하고 극이 없음(化神旺無剋)",
        breaking=(
            (lambda p: p.has_element_in_stems(controller), f"화신극파(化神剋破): {ct}이(가) 투출하여 화신 {hw}을(를) 극함"),
            (lambda p: p.has_element_in_stems(drain) and not p.has_element_in_stems(hwashin),
             f"화신설기(化神洩氣): {dr}이(가) 화신의 기운을 설기하고 화신 자체의 보강이 부족"),
        ),
        rescue=(
            (lambda p: p.has_element_in_stems(controller) and p.has_element_in_stems(generator),
             f"{gn}이(가) 통관하여 화신 보호"),
        ),
        support=_always,
    )


def _ilhaeng_spec(dominant: str, pattern_name: str) -> FormationRuleSpec:
    """일행득기격: 한 오행의 기가 순수해야 성격"""
    controller = conquered_by(dominant)
    generator = generated_by(dominant)
    dm, ct, gn = (element_label(e) for e in (dominant, controller, generator))
    return FormationRuleSpec(
        pattern_name=pattern_name,
        formation_condition=f"{dm} 일행의 기가 순수(一行得氣純粹)",
        breaking=(
            (lambda p: p.has_element_in_stems(controller), f"극기개입(剋氣介入): {ct}이(가) 투출하여 {dm}의 순수한 흐름을 깨뜨림"),
            (lambda p: not p.has_element_in_stems(controller) and p.has_element_in_hidden(controller),
             f"지장간 잠재(潛在) {ct}: 운에서 투출 시 일행의 기가 깨질 위험"),
        ),
        rescue=(
            (lambda p: p.has_element_in_stems(controller) and p.has_element_in_stems(generator),
             f"{gn}이(가) 통관하여 {dm} 보호"),
        ),
        support=_always,
    )


OEGYEOK_RULES: Dict[GyeokgukType, FormationRuleSpec] = {
    GyeokgukType.JONGGANG: FormationRuleSpec(
        pattern_name="종강격",
        formation_condition="비겁+인성 장악, 재관 부재(比印從強)",
        breaking=(
            (lambda p: p.has_jae, "재성 투출(財星透出): 비겁의 순수한 흐름을 재성이 분산시킴"),
            (lambda p: p.has_gwan, "관성 투출(官星透出): 강한 비겁을 관성이 극하여 종의 흐름을 깨뜨림"),
            (lambda p: p.has_siksang and p.siksang_count >= 2,
             "식상 과다(食傷過多): 비겁의 기운이 식상으로 설기되어 종강의 순수성 감소"),
        ),
        rescue=(
            (lambda p: p.has_jae and p.bigyeop_count >= 2, "비겁 과다로 재성을 제어(比劫制財)"),
            (lambda p: p.has_gwan and p.has_inseong, "인성이 관살을 화해시켜 비겁 보호(印化官護比)"),
        ),
        support=lambda p: p.has_bigyeop or p.has_inseong,
    ),
    GyeokgukType.JONGA: FormationRuleSpec(
        pattern_name="종아격",
        formation_condition="식상 지배, 인성 부재(食傷從兒)",
        breaking=(
            (lambda p: p.has_inseong, "인성 투출(印星透出): 인성이 식상을 극하여 종아의 흐름을 깨뜨림(梟奪食)"),
            (lambda p: p.has_bigyeop, _BIGYEOP_BREAKS_JONG),
        ),
        rescue=(
            (lambda p: p.has_inseong and p.has_jae, "재성이 인성을 제어하여 식상 보호(財制印護食)"),
        ),
        support=lambda p: p.has_siksang,
    ),
    GyeokgukType.JONGJAE: FormationRuleSpec(
        pattern_name="종재격",
        formation_condition="재성 지배, 비겁 부재(財星從財)",
        breaking=(
            (lambda p: p.has_bigyeop, "비겁 투출(比劫透出): 비겁이 재성을 빼앗아 종재의 흐름을 깨뜨림(劫爭財)"),
            (lambda p: p.has_inseong, _INSEONG_BREAKS_JONG),
        ),
        rescue=(
            (lambda p: p.has_bigyeop and p.has_gwan, _GWAN_JE_GEOB_HO_JAE),
        ),
        support=lambda p: p.has_jae,
    ),
    GyeokgukType.JONGSAL: FormationRuleSpec(
        pattern_name="종살격",
        formation_condition="관살 지배, 식상 부재(官殺從殺)",
        breaking=(
            (lambda p: p.has_siksang, "식상 투출(食傷透出): 식상이 관살을 제어하여 종살의 흐름을 깨뜨림(食制殺)"),
            (lambda p: p.has_bigyeop, _BIGYEOP_BREAKS_JONG),
        ),
        rescue=(
            (lambda p: p.has_siksang and p.has_inseong, "인성이 식상을 극하여 관살 보호(印制食護殺)"),
        ),
        support=lambda p: p.has_gwan,
    ),
    GyeokgukType.JONGSE: FormationRuleSpec(
        pattern_name="종세격",
        formation_condition="식상/재/관 고른 분포, 비겁/인성 부재(從勢)",
        breaking=(
            (lambda p: p.has_bigyeop, "비겁 투출(比劫透出): 대세를 거스르는 비겁이 종세의 흐름을 깨뜨림"),
            (lambda p: p.has_inseong, _INSEONG_BREAKS_JONG),
        ),
        support=_always,
    ),
    GyeokgukType.HAPWHA_EARTH: _hwagyeok_spec("토", "합화토격"),
    GyeokgukType.HAPWHA_METAL: _hwagyeok_spec("금", "합화금격"),
    GyeokgukType.HAPWHA_WATER: _hwagyeok_spec("수", "합화수격"),
    GyeokgukType.HAPWHA_WOOD: _hwagyeok_spec("목", "합화목격"),
    GyeokgukType.HAPWHA_FIRE: _hwagyeok_spec("화", "합화화격"),
    GyeokgukType.GOKJIK: _ilhaeng_spec("목", "곡직격"),
    GyeokgukType.YEOMSANG: _ilhaeng_spec("화", "염상격"),
    GyeokgukType.GASAEK: _ilhaeng_spec("토", "가색격"),
    GyeokgukType.JONGHYEOK: _ilhaeng_spec("금", "종혁격"),
    GyeokgukType.YUNHA: _ilhaeng_spec("수", "윤하격"),
}

FORMATION_RULES: Dict[GyeokgukType, FormationRuleSpec] = {**NAEGYEOK_RULES, **OEGYEOK_RULES}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 평가
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _collect(profile: FormationProfile, rules: Tuple[Rule, ...]) -> List[str]:
    return [label for predicate, label in rules if predicate(profile)]


def build_formation(breaking: List[str], rescue: List[str], formation_good: bool,
                    pattern_name: str, formation_condition: str) -> GyeokgukFormation:
    if not breaking and formation_good:
        quality = GyeokgukQuality.WELL_FORMED
    elif breaking and rescue:
        quality = GyeokgukQuality.RESCUED
    elif breaking:
        quality = GyeokgukQuality.BROKEN
    else:
        # 파격 요인 없음
        quality = GyeokgukQuality.WELL_FORMED

    if quality == GyeokgukQuality.WELL_FORMED:
        reasoning = f"{pattern_name} 성격(成格): {formation_condition} 조건이 충족되어 격국이 잘 형성됨."
    elif quality == GyeokgukQuality.BROKEN:
        reasoning = f"{pattern_name} 파격(破格): {breaking[0].split(':')[0]}. 격국의 핵심 기능이 손상됨."
    else:
        reasoning = (f"{pattern_name} 파격 구원(救應): {breaking[0].split(':')[0]}이 발생했으나, "
                     f"{rescue[0].split('(')[0]}으로 구원됨.")

    return GyeokgukFormation(
        quality=quality,
        breaking_factors=breaking,
        rescue_factors=rescue,
        reasoning=reasoning,
    )


class FormationAssessor:
    """격국 유형별 성격/파격 평가"""

    def __init__(self, rules: Optional[Dict[GyeokgukType, FormationRuleSpec]] = None):
        self.rules = FORMATION_RULES if rules is None else rules

    def assess(self, gyeokguk_type: GyeokgukType, profile: FormationProfile) -> GyeokgukFormation:
        spec = self.rules.get(gyeokguk_type)
        if spec is None:
            logger.warning(f"[Formation] {gyeokguk_type.value} 성격/파격 규칙 없음 → NOT_ASSESSED")
            return GyeokgukFormation(
                quality=GyeokgukQuality.NOT_ASSESSED,
                reasoning="해당 격국 유형의 성격/파격 규칙이 정의되지 않음.",
            )
        breaking = _collect(profile, spec.breaking)
        rescue = _collect(profile, spec.rescue)
        formation_good = spec.support(profile) and not breaking
        return build_formation(breaking, rescue, formation_good, spec.pattern_name, spec.formation_condition)


formation_assessor = FormationAssessor()
