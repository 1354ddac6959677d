# app/modules/export/exporter.py
"""Exportación de un análisis ya cargado a JSON, texto plano o HTML imprimible.

Ninguna de estas funciones hace llamadas remotas: solo proyectan el registro.
El texto plano omite a propósito el impacto de carbono y la firma.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.templating import Jinja2Templates
from jinja2 import TemplateNotFound

from app.core.exceptions import ExportUnavailableError
from app.schemas.analysis import SignatureData

logger = logging.getLogger(__name__)

REPORT_TITLE = "BidSmith AI - Tender Analysis Report"
TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"
PRINT_TEMPLATE = "export/print.html"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


class ExportFormat(str, Enum):
    pdf = "pdf"
    json = "json"
    txt = "txt"


@dataclass
class ExportResult:
    content: str
    media_type: str
    filename: str


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def build_export_content(analysis, file_name: Optional[str], generated: Optional[datetime] = None) -> Dict[str, Any]:
    """Proyección común a los tres formatos."""
    generated = generated or datetime.now(timezone.utc)
    signature = SignatureData.from_json(analysis.signature_data)
    return {
        "title": REPORT_TITLE,
        "generated": generated.isoformat(),
        "document": file_name or "Unknown Document",
        "complianceScore": analysis.compliance_score,
        "summary": analysis.ai_summary,
        "opportunities": _as_list(analysis.opportunities),
        "risks": _as_list(analysis.risks),
        "recommendations": _as_list(analysis.recommendations),
        "carbonImpact": analysis.carbon_impact or {},
        "signedAt": analysis.signed_at.isoformat() if analysis.signed_at else None,
        "signature": signature.model_dump(mode="json") if signature else None,
    }


def export_json(content: Dict[str, Any]) -> str:
    return json.dumps(content, indent=2, ensure_ascii=False)


def export_text(content: Dict[str, Any]) -> str:
    lines = [
        content["title"],
        "=" * 50,
        "",
        f"Document: {content['document']}",
        f"Generated: {content['generated']}",
        f"Compliance Score: {content['complianceScore']}/100",
        "",
        "Summary:",
        f"{content['summary']}",
        "",
    ]

    lines.append(f"OPPORTUNITIES ({len(content['opportunities'])})")
    lines.append("-" * 30)
    for i, o in enumerate(content["opportunities"], start=1):
        lines.append(f"{i}. {o.get('title')} [{o.get('impact')}]")
        lines.append(f"   {o.get('description')}")
        lines.append("")

    lines.append(f"RISKS ({len(content['risks'])})")
    lines.append("-" * 30)
    for i, r in enumerate(content["risks"], start=1):
        lines.append(f"{i}. {r.get('title')} [{r.get('severity')}]")
        lines.append(f"   {r.get('description')}")
        if r.get("mitigation"):
            lines.append(f"   Mitigation: {r['mitigation']}")
        lines.append("")

    lines.append(f"RECOMMENDATIONS ({len(content['recommendations'])})")
    lines.append("-" * 30)
    for i, r in enumerate(content["recommendations"], start=1):
        lines.append(f"{i}. {r.get('title')}")
        lines.append(f"   {r.get('action')}")
        lines.append("")

    return "\n".join(lines) + "\n"


def export_print(content: Dict[str, Any], surface: Optional[Jinja2Templates] = None) -> str:
    """HTML con estilos de impresión que abre el diálogo de imprimir / guardar como PDF."""
    surface = surface or templates
    try:
        template = surface.get_template(PRINT_TEMPLATE)
    except TemplateNotFound as e:
        logger.error(f"No hay superficie de impresión disponible: {e}")
        raise ExportUnavailableError("Print surface unavailable", e) from e
    return template.render(content=content, scopes=["scope1", "scope2", "scope3"])


def export_analysis(
    analysis,
    file_name: Optional[str],
    fmt: ExportFormat,
    generated: Optional[datetime] = None,
    surface: Optional[Jinja2Templates] = None,
) -> ExportResult:
    generated = generated or datetime.now(timezone.utc)
    content = build_export_content(analysis, file_name, generated)
    stamp = int(generated.timestamp() * 1000)

    if fmt == ExportFormat.json:
        return ExportResult(export_json(content), "application/json", f"bidsmith-analysis-{stamp}.json")
    if fmt == ExportFormat.txt:
        return ExportResult(export_text(content), "text/plain", f"bidsmith-analysis-{stamp}.txt")
    return ExportResult(export_print(content, surface), "text/html", f"bidsmith-analysis-{stamp}.html")
