"""
설정 테스트 - 프로세스 설정 / 계산 설정 / 유파 프리셋
"""
import logging

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.config import Settings, configure_logging
from saju_core.errors import CalculationError, InvalidInputError
from saju_core.models.calculation_config import (
    DEFAULT_CONFIG,
    CalculationConfig,
    DayCutMode,
    HapHwaStrictness,
    JeolgiPrecision,
    SchoolPreset,
    YongshinPriority,
    config_from_preset,
    create_config,
    resolve_config,
)


class TestDefaultConfig:
    """기본 설정값"""

    def test_defaults(self):
        assert DEFAULT_CONFIG.day_cut_mode == DayCutMode.YAZA_23_TO_01_NEXTDAY
        assert DEFAULT_CONFIG.apply_dst_history is True
        assert DEFAULT_CONFIG.include_equation_of_time is False
        assert DEFAULT_CONFIG.lmt_baseline_longitude == 135.0
        assert DEFAULT_CONFIG.jeolgi_precision == JeolgiPrecision.APPROXIMATE
        assert DEFAULT_CONFIG.strength_threshold == 50.0
        assert DEFAULT_CONFIG.yongshin_priority == YongshinPriority.JOHU_FIRST
        assert DEFAULT_CONFIG.hap_hwa_strictness == HapHwaStrictness.STRICT_FIVE_CONDITIONS

    def test_frozen(self):
        """계산 중 설정 변경 불가"""
        with pytest.raises((TypeError, ValueError)):
            DEFAULT_CONFIG.strength_threshold = 10.0

    def test_create_config_overrides(self):
        config = create_config(strength_threshold=40.0, include_equation_of_time=True)
        assert config.strength_threshold == 40.0
        assert config.include_equation_of_time is True
        # 나머지는 기본값 유지
        assert config.day_cut_mode == DEFAULT_CONFIG.day_cut_mode

    def test_create_config_without_overrides_is_default(self):
        assert create_config() is DEFAULT_CONFIG

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidInputError):
            create_config(no_such_option=True)

    def test_invalid_value_rejected(self):
        """pydantic 검증 실패도 ValueError 계열"""
        with pytest.raises(ValueError):
            create_config(strength_threshold=0)


class TestPresets:
    """유파 프리셋 = 기본값 위에 덮어쓰는 diff"""

    def test_korean_mainstream(self):
        config = config_from_preset(SchoolPreset.KOREAN_MAINSTREAM)
        assert config.day_cut_mode == DayCutMode.YAZA_23_30_TO_01_30_NEXTDAY
        assert config.apply_dst_history is True

    def test_traditional_chinese(self):
        config = config_from_preset("TRADITIONAL_CHINESE")
        assert config.apply_dst_history is False
        assert config.lmt_baseline_longitude == 120.0
        assert config.yongshin_priority == YongshinPriority.EOKBU_FIRST
        assert config.day_master_never_hap_geo is False

    def test_modern_integrated(self):
        config = config_from_preset(SchoolPreset.MODERN_INTEGRATED)
        assert config.jeolgi_precision == JeolgiPrecision.VSOP87D_EXACT
        assert config.include_equation_of_time is True
        assert config.hap_hwa_strictness == HapHwaStrictness.MODERATE

    @pytest.mark.parametrize("preset", list(SchoolPreset))
    def test_untouched_fields_keep_default(self, preset):
        config = config_from_preset(preset)
        assert config.deukji_per_branch == DEFAULT_CONFIG.deukji_per_branch
        assert config.gwiiin_table is not None

    def test_unknown_preset(self):
        with pytest.raises(InvalidInputError):
            config_from_preset("NO_SUCH_SCHOOL")


class TestResolveConfig:
    """요청 설정 정규화"""

    def test_passthrough(self):
        config = create_config(strength_threshold=45.0)
        assert resolve_config(config) is config

    def test_default_name(self):
        assert resolve_config("DEFAULT") is DEFAULT_CONFIG
        assert resolve_config("default") is DEFAULT_CONFIG

    def test_none_uses_settings(self):
        assert isinstance(resolve_config(None), CalculationConfig)

    def test_case_insensitive_preset(self):
        assert resolve_config("modern_integrated").jeolgi_precision == JeolgiPrecision.VSOP87D_EXACT

    def test_unknown_name_is_calculation_error(self):
        with pytest.raises(CalculationError):
            resolve_config("??")


class TestSettings:
    """환경변수 설정"""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SAJU_DEFAULT_PRESET", "TRADITIONAL_CHINESE")
        monkeypatch.setenv("SAJU_SOLAR_TERM_TABLE_END", "2040")
        settings = Settings()
        assert settings.default_preset == "TRADITIONAL_CHINESE"
        assert settings.solar_term_table_end == 2040

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SAJU_DEFAULT_PRESET", raising=False)
        settings = Settings()
        assert settings.solar_term_table_start == 1900
        assert settings.solar_term_cache_size > 0

    def test_configure_logging(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
        configure_logging("debug")
        assert calls["level"] == "DEBUG"
