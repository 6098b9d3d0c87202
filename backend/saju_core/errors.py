"""
사주 계산 예외 정의
- CalculationError: 모든 계산 오류의 기본형
- InvalidInputError: 입력 검증 실패 (부분 결과 없이 즉시 중단)
- SolarTermLookupError: 절기 경계를 어떤 소스로도 만들 수 없음
"""


class CalculationError(Exception):
    """계산 오류"""
    pass


class InvalidInputError(CalculationError, ValueError):
    """입력값 오류 (시/분 범위, 존재하지 않는 날짜, 알 수 없는 프리셋 등)"""
    pass


class SolarTermLookupError(CalculationError):
    """절기 경계 조회 실패"""
    pass
