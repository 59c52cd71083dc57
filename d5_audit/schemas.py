"""
Audit API Schemas

Pydantic models for the /audit request and response. Field names on the
wire are camelCase.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Category = Literal["accessibility", "usability", "design", "performance", "seo"]
SeverityLevel = Literal["critical", "high", "medium", "low"]


class AuditRequest(BaseModel):
    """Request body for POST /audit"""

    url: Optional[str] = Field(default=None, description="Page to audit; https:// is assumed when no scheme is given")


class AuditFinding(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: Category
    severity: SeverityLevel
    issue: str
    description: str
    location: str = ""
    suggestion: str = ""
    code_snippet: Optional[str] = Field(default=None, alias="codeSnippet")


class AuditSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_issues: int = Field(alias="totalIssues")
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    accessibility: int = 0
    usability: int = 0
    design: int = 0
    performance: int = 0
    seo: int = 0
    overall_score: float = Field(alias="overallScore")


class RealMetrics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fcp: float
    lcp: float
    tti: float
    tbt: float
    cls: float
    speed_index: float = Field(alias="speedIndex")


class CategoryScoresResponse(BaseModel):
    performance: float
    accessibility: float
    design: float
    seo: float


class SystemFingerprint(BaseModel):
    """Conditions the measurement was taken under"""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    environment: str
    model: str
    model_version: str = Field(alias="modelVersion")
    runtime: str
    python_version: str = Field(alias="pythonVersion")
    viewport: str
    temperature: float
    timestamp: str


class AuditResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    timestamp: str
    findings: List[AuditFinding]
    summary: AuditSummary
    screenshot: Optional[str] = None
    real_metrics: Optional[RealMetrics] = Field(default=None, alias="realMetrics")
    system_fingerprint: Optional[SystemFingerprint] = Field(default=None, alias="systemFingerprint")
    scores: Optional[CategoryScoresResponse] = None


class ErrorResponse(BaseModel):
    """Body of every non-200 response"""

    error: str
    details: Optional[str] = None
    troubleshooting: Optional[List[str]] = None


class HealthCheckResponse(BaseModel):
    status: str
    version: str
    environment: str
    use_stubs: bool
