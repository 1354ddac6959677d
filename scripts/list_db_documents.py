import sys
import os
from sqlalchemy.orm import Session

# Añadir el directorio raíz del proyecto al path para poder importar los módulos de la app
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Importar todos los modelos para que SQLAlchemy los reconozca
from app.db.base import Document
from app.db.crud import count_analyses_for_document
from app.db.session import SessionLocal

def list_documents_from_db():
    """
    Lista todos los documentos con su estado y si tienen análisis.
    Sirve para localizar subidas que quedaron a medias (sin análisis) tras un fallo del pipeline.
    """
    db: Session = SessionLocal()
    try:
        print("--- Listando todos los documentos en la Base de Datos ---")

        documents = db.query(Document).order_by(Document.created_at.desc()).all()

        if not documents:
            print("No se encontraron documentos en la base de datos.")
            return

        for doc in documents:
            analyses = count_analyses_for_document(db, doc.id)
            flag = "" if (doc.status == "analyzed") == (analyses == 1) else "  <-- inconsistente"
            print(f"ID: {doc.id} | Usuario: {doc.user_id} | Archivo: {doc.file_name} | Estado: {doc.status} | Análisis: {analyses}{flag}")

        print("\n--- Fin de la lista ---")

    finally:
        db.close()

if __name__ == "__main__":
    list_documents_from_db()
