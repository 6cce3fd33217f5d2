from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

# ---- Diagnostics ----

class DiagnosticModel(BaseModel):
    rule_id: str
    category: Literal["style", "runtime"]
    severity: Literal["error", "warning", "info", "hint"]
    file: str
    line: int
    column: int
    end_line: int
    end_column: int
    message: str
    suggestion: Optional[str] = None


class DiagnosticsResponse(BaseModel):
    state: str
    count: int
    diagnostics: List[DiagnosticModel] = []


class StatsModel(BaseModel):
    total: int = 0
    errors: int = 0
    warnings: int = 0
    info: int = 0
    hints: int = 0
    style_issues: int = 0
    runtime_issues: int = 0
    files_with_issues: int = 0


# ---- Queries ----

class DiagnosticsQuery(BaseModel):
    """Filter criteria; unset fields do not filter."""
    category: Optional[Literal["style", "runtime"]] = None
    severity: Optional[Literal["error", "warning", "info", "hint"]] = None
    file: Optional[str] = None


class RpcRequest(BaseModel):
    method: str
    params: Dict[str, Any] = {}


class RpcResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """Re-run analysis, on the configured project unless a path is given."""
    path: Optional[str] = None
