"""
saju_core - 사주 원국 계산/분석 엔진
"""
__version__ = "1.0.0"
