from __future__ import annotations

from typing import List, Tuple

from pydantic import BaseModel, Field

OFFSET_UNIT = "code points"


class ViolationDTO(BaseModel):
    namespace: str
    path: str
    reference: str
    span: Tuple[int, int] = Field(
        description=f"[start, end) of the reference in {OFFSET_UNIT} of the decoded text"
    )
    context: Tuple[int, int] = Field(
        description=f"[start, end) of the context window in {OFFSET_UNIT} of the decoded text"
    )
    line: int
    column: int


class ReportCountsDTO(BaseModel):
    units_checked: int
    rules_matched: int
    units_skipped: int
    warnings: int
    violations: int


class ReportDTO(BaseModel):
    violations: List[ViolationDTO] = []
    warnings: List[str] = []
    counts: ReportCountsDTO
    exit_status: int
    offset_unit: str = OFFSET_UNIT


class CompiledRuleDTO(BaseModel):
    namespace: str
    forbidden: List[str] = []
