"""
계산 추적기 (CalculationTracer)
- 요청 하나당 한 개 생성, 모든 단계에 명시적으로 전달
- 추가만 가능 (수정/삭제 API 없음)
- 유파별 대안 판단을 함께 기록해 "왜 이 결과인가"를 설명
"""
import logging
from typing import List, Optional

from saju_core.models.schemas import AlternativeDecision, TraceCategory, TraceEntry

logger = logging.getLogger(__name__)

CATEGORY_KOREAN_NAMES = {
    TraceCategory.TIME_ADJUSTMENT: "시간 보정",
    TraceCategory.YEAR_PILLAR: "년주 계산",
    TraceCategory.MONTH_PILLAR: "월주 계산",
    TraceCategory.DAY_PILLAR: "일주 계산",
    TraceCategory.HOUR_PILLAR: "시주 계산",
    TraceCategory.HIDDEN_STEMS: "지장간 분석",
    TraceCategory.TEN_GODS: "십성 분석",
    TraceCategory.TWELVE_STAGES: "십이운성",
    TraceCategory.RELATIONS: "합충형파해",
    TraceCategory.STRENGTH: "신강신약 분석",
    TraceCategory.YONGSHIN: "용신 결정",
    TraceCategory.GYEOKGUK: "격국 판단",
    TraceCategory.GONGMANG: "공망 분석",
    TraceCategory.SHINSAL: "신살 탐지",
    TraceCategory.LUCK_CYCLE: "운세 계산",
}


class CalculationTracer:
    """계산 과정 기록기"""

    def __init__(self):
        self._entries: List[TraceEntry] = []

    @property
    def entries(self) -> List[TraceEntry]:
        """기록 사본 (원본 목록은 외부에 노출하지 않음)"""
        return list(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(
        self,
        step: str,
        category: TraceCategory,
        decision: str,
        reasoning: str,
        rule: str = "",
        alternatives: Optional[List[AlternativeDecision]] = None,
        config_key: Optional[str] = None,
        confidence: float = 1.0,
    ) -> TraceEntry:
        entry = TraceEntry(
            step=step,
            category=category,
            decision=decision,
            reasoning=reasoning,
            rule=rule,
            alternatives=alternatives or [],
            config_key=config_key,
            confidence=confidence,
        )
        return self.add_entry(entry)

    def add_entry(self, entry: TraceEntry) -> TraceEntry:
        self._entries.append(entry)
        logger.debug(f"[Trace] {entry.step}: {entry.decision} (확신도 {entry.confidence:.2f})")
        return entry

    def by_category(self, category: TraceCategory) -> List[TraceEntry]:
        return [e for e in self._entries if e.category == category]

    def disagreements(self) -> List[TraceEntry]:
        """유파 간 이견이 기록된 항목"""
        return [e for e in self._entries if e.alternatives]

    def uncertain(self, threshold: float = 0.9) -> List[TraceEntry]:
        return [e for e in self._entries if e.confidence < threshold]

    def merge(self, other: "CalculationTracer") -> None:
        """다른 추적기의 기록을 뒤에 이어 붙임"""
        self._entries.extend(other.entries)

    def to_korean_summary(self) -> str:
        lines: List[str] = []
        current: Optional[TraceCategory] = None
        for entry in self._entries:
            if entry.category != current:
                current = entry.category
                lines.append("")
                lines.append(f"=== {CATEGORY_KOREAN_NAMES[current]} ===")
            lines.append(f"  [{entry.step}] {entry.decision}")
            lines.append(f"    근거: {entry.reasoning}")
            if entry.rule:
                lines.append(f"    규칙: {entry.rule}")
            if entry.alternatives:
                lines.append("    ※ 유파별 차이:")
                for alt in entry.alternatives:
                    lines.append(f"      - {alt.school_name}: {alt.decision} ({alt.reasoning})")
            if entry.confidence < 1.0:
                lines.append(f"    확신도: {round(entry.confidence * 100)}%")
        return "\n".join(lines)
