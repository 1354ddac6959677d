# app/db/base.py
from app.db.base_class import Base
from app.models.document import Document
from app.models.analysis import DocumentAnalysis
from app.models.knowledge_base import KBCategory, KBItem
