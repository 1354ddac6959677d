from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

class DocumentStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    analyzed = "analyzed"
    error = "error"

class DocumentBase(BaseModel):
    file_name: str
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None

class DocumentResponse(DocumentBase):
    id: str
    status: DocumentStatus
    created_at: datetime

    model_config = {
        "from_attributes": True
    }

class DocumentDetailResponse(DocumentResponse):
    extracted_text: Optional[str] = None

# Schema para la respuesta del endpoint de subida
class UploadResponse(BaseModel):
    document_id: str
    file_path: str
    stage: str
    progress: int
    text_length: int = 0
    analysis_id: Optional[str] = None
