# services package - lazy imports (절기표는 첫 사용 시 생성)

# Lazy import: 실제 사용할 때 import
solar_term_table = None
pillar_calculator = None
_saju_analyzer = None


def get_solar_term_table():
    global solar_term_table
    if solar_term_table is None:
        from saju_core.services.solar_terms import get_solar_term_table as _get
        solar_term_table = _get()
    return solar_term_table


def get_pillar_calculator():
    global pillar_calculator
    if pillar_calculator is None:
        from saju_core.services.saju_engine import get_pillar_calculator as _get
        pillar_calculator = _get()
    return pillar_calculator


def get_saju_analyzer():
    global _saju_analyzer
    if _saju_analyzer is None:
        from saju_core.services.saju_analyzer import get_saju_analyzer as _get
        _saju_analyzer = _get()
    return _saju_analyzer
