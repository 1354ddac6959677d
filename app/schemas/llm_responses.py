from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FALLBACK_COMPLIANCE_SCORE = 50
FALLBACK_SUMMARY_LENGTH = 500


class ImpactLevel(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class CarbonRating(str, Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"


def _level_or_medium(value) -> ImpactLevel:
    """Cualquier nivel desconocido o ausente se interpreta como 'medium'."""
    try:
        return ImpactLevel(str(value).lower())
    except ValueError:
        return ImpactLevel.medium


class Opportunity(BaseModel):
    title: str = ""
    description: str = ""
    impact: ImpactLevel = ImpactLevel.medium
    reference: Optional[str] = None

    @field_validator("impact", mode="before")
    @classmethod
    def normalize_impact(cls, v):
        return _level_or_medium(v)


class Risk(BaseModel):
    title: str = ""
    description: str = ""
    severity: ImpactLevel = ImpactLevel.medium
    mitigation: Optional[str] = None

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v):
        return _level_or_medium(v)


class Recommendation(BaseModel):
    title: str = ""
    action: str = ""
    regulation: Optional[str] = None
    # Si el modelo no la indica, se asigna la posición en la secuencia (1-based)
    priority: Optional[int] = None


class ScopeAssessment(BaseModel):
    assessment: str = ""
    suggestions: List[str] = Field(default_factory=list)


class CarbonImpact(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scope1: ScopeAssessment = Field(default_factory=ScopeAssessment)
    scope2: ScopeAssessment = Field(default_factory=ScopeAssessment)
    scope3: ScopeAssessment = Field(default_factory=ScopeAssessment)
    overall_rating: CarbonRating = Field(default=CarbonRating.fair, alias="overallRating")

    @field_validator("scope1", "scope2", "scope3", mode="before")
    @classmethod
    def empty_scope(cls, v):
        return v or {}

    @field_validator("overall_rating", mode="before")
    @classmethod
    def normalize_rating(cls, v):
        try:
            return CarbonRating(str(v).lower())
        except ValueError:
            return CarbonRating.fair


class AnalysisPayload(BaseModel):
    """
    Un esquema para estructurar la salida del LLM para el análisis de licitaciones.
    Acepta las claves camelCase del contrato JSON pedido en el prompt.
    """
    model_config = ConfigDict(populate_by_name=True)

    opportunities: List[Opportunity] = Field(default_factory=list)
    risks: List[Risk] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    carbon_impact: CarbonImpact = Field(default_factory=CarbonImpact, alias="carbonImpact")
    compliance_score: int = Field(default=0, alias="complianceScore")
    summary: str = ""

    @field_validator("opportunities", "risks", "recommendations", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return v or []

    @field_validator("carbon_impact", mode="before")
    @classmethod
    def none_as_empty_carbon(cls, v):
        return v or {}

    @field_validator("compliance_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        if v is None or v == "":
            return 0
        try:
            score = int(round(float(v)))
        except (TypeError, OverflowError) as e:
            # Listas, objetos o Infinity: pydantic solo convierte ValueError en ValidationError
            raise ValueError(f"invalid complianceScore: {v!r}") from e
        return max(0, min(100, score))

    @field_validator("summary", mode="before")
    @classmethod
    def none_as_empty_summary(cls, v):
        return v or ""

    @model_validator(mode="after")
    def default_priorities(self):
        for position, recommendation in enumerate(self.recommendations, start=1):
            if recommendation.priority is None or recommendation.priority < 1:
                recommendation.priority = position
        return self

    @classmethod
    def fallback(cls, raw_content: str) -> "AnalysisPayload":
        """Análisis neutro cuando la salida del modelo no se puede interpretar."""
        return cls(
            opportunities=[],
            risks=[],
            recommendations=[],
            carbon_impact=CarbonImpact(),
            compliance_score=FALLBACK_COMPLIANCE_SCORE,
            summary=(raw_content or "")[:FALLBACK_SUMMARY_LENGTH],
        )

    def to_columns(self) -> dict:
        """Valores listos para las columnas JSON de document_analyses."""
        return {
            "opportunities": [o.model_dump(mode="json") for o in self.opportunities],
            "risks": [r.model_dump(mode="json") for r in self.risks],
            "recommendations": [r.model_dump(mode="json") for r in self.recommendations],
            "carbon_impact": self.carbon_impact.model_dump(mode="json", by_alias=True),
            "compliance_score": self.compliance_score,
            "ai_summary": self.summary,
        }
