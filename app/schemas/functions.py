# app/schemas/functions.py
# Contratos de las funciones remotas (claves camelCase, como las consume el cliente)
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.analysis import AnalysisResponse


class ExtractTextRequest(BaseModel):
    file_path: Optional[str] = Field(None, alias="filePath")
    document_id: Optional[str] = Field(None, alias="documentId")

    model_config = {"populate_by_name": True}


class ExtractTextResponse(BaseModel):
    success: bool = True
    extracted_text: str = Field(..., alias="extractedText")
    text_length: int = Field(..., alias="textLength")

    model_config = {"populate_by_name": True}


class AnalyzeDocumentRequest(BaseModel):
    document_id: Optional[str] = Field(None, alias="documentId")
    extracted_text: Optional[str] = Field(None, alias="extractedText")

    model_config = {"populate_by_name": True}


class AnalyzeDocumentResponse(BaseModel):
    success: bool = True
    analysis: AnalysisResponse
