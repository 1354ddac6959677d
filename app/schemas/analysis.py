# app/schemas/analysis.py
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

# canvas.toDataURL() produce siempre PNG
SIGNATURE_IMAGE_PREFIX = "data:image/png;base64,"


class AnalysisResponse(BaseModel):
    """Un análisis tal como se persiste, con el nombre del documento padre."""
    id: str
    document_id: str
    user_id: str
    opportunities: List[Dict[str, Any]] = []
    risks: List[Dict[str, Any]] = []
    recommendations: List[Dict[str, Any]] = []
    carbon_impact: Dict[str, Any] = {}
    compliance_score: int
    ai_summary: str = ""
    signed_at: Optional[datetime] = None
    signature_data: Optional[str] = None
    created_at: datetime
    file_name: Optional[str] = None

    model_config = {
        "from_attributes": True
    }

    @classmethod
    def from_model(cls, analysis) -> "AnalysisResponse":
        response = cls.model_validate(analysis)
        if analysis.document is not None:
            response.file_name = analysis.document.file_name
        return response


class SignatureRequest(BaseModel):
    """Los tres campos son obligatorios; sin cualquiera de ellos no se firma."""
    signature_image: str = Field(..., description="Dibujo de la firma como data URL PNG.")
    name: str = Field(..., description="Nombre completo del declarante.")
    consent: bool = Field(..., description="Aceptación explícita de la declaración.")

    @field_validator("signature_image")
    @classmethod
    def image_must_be_png_data_url(cls, v: str) -> str:
        if not v.startswith(SIGNATURE_IMAGE_PREFIX) or len(v) == len(SIGNATURE_IMAGE_PREFIX):
            raise ValueError("signature_image must be a non-empty PNG data URL")
        return v

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be empty or whitespace")
        return v.strip()

    @field_validator("consent")
    @classmethod
    def consent_must_be_given(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("consent must be acknowledged")
        return v


class SignatureData(BaseModel):
    """Atestación opaca guardada en signature_data como cadena JSON."""
    signature: str
    name: str
    timestamp: datetime

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: Optional[str]) -> Optional["SignatureData"]:
        if not raw:
            return None
        return cls.model_validate(json.loads(raw))


class ShredRequest(BaseModel):
    document_id: str = Field(..., alias="documentId")
    confirmation: str = ""

    model_config = {
        "populate_by_name": True
    }


class ShredResponse(BaseModel):
    stage: str
    progress: int
    blob_deleted: bool
