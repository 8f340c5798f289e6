import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import (
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from disc_insights.scoring.behavior import (
    get_main_traits,
    get_trait_description,
    get_trait_metadata,
    get_traits_summary,
    traits_from_results,
)
from disc_insights.scoring.definitions import (
    DISC_CATEGORIES,
    DISC_PROFILE_NAMES,
    FREQUENCY_QUESTIONS,
    FREQUENCY_SCALE_LABELS,
)
from disc_insights.scoring.disc import (
    get_profile_description,
    get_profile_details,
    get_profile_recommendations,
)

DISC_COLORS = {"D": "#DC2626", "I": "#F59E0B", "S": "#16A34A", "C": "#2563EB"}
DETAIL_SECTIONS = [
    ("stressResponse", "Reação sob Pressão"),
    ("communicationStyle", "Estilo de Comunicação"),
    ("teamContributions", "Contribuições para a Equipe"),
    ("fearsAndInsecurities", "Medos e Inseguranças"),
    ("careers", "Carreiras Sugeridas"),
    ("learningStyle", "Estilo de Aprendizagem"),
]
STYLE_ROWS = [
    ("meetingStyle", "Reuniões"),
    ("projectStyle", "Projetos"),
    ("conflictStyle", "Conflitos"),
    ("decisionStyle", "Decisões"),
]


def disc_report_filename(user_name: Optional[str], created_at: datetime) -> str:
    name = re.sub(r"\s+", "_", (user_name or "Usuario").strip())
    return f"DISC_Report_{name}_{created_at.date().isoformat()}.pdf"


def behavior_report_filename(user_name: Optional[str], created_at: datetime) -> str:
    name = re.sub(r"[^a-z0-9]", "_", (user_name or "usuario").lower())
    return f"tracos-comportamentais_{name}_{created_at.date().isoformat()}.pdf"


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M:%S")


def _header_bar(text: str, color_hex: str = "#4F46E5") -> Table:
    t = Table([[text]], colWidths=[540], rowHeights=[20])
    t.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor(color_hex)),
                ("TEXTCOLOR", (0, 0), (-1, -1), colors.white),
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 11),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return t


def _table_style(extra: Optional[List[Any]] = None) -> TableStyle:
    base = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4F46E5")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#CBD5E1")),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.HexColor("#F8FAFC"), colors.white]),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    return TableStyle(base + (extra or []))


def _styles() -> Dict[str, ParagraphStyle]:
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("title", parent=styles["Title"], fontSize=20, leading=24, textColor=colors.HexColor("#1E1B4B")),
        "h2": ParagraphStyle("h2", parent=styles["Heading2"], fontSize=14, leading=18, textColor=colors.HexColor("#0F172A")),
        "body": ParagraphStyle("body", parent=styles["BodyText"], fontSize=10, leading=14, textColor=colors.HexColor("#1E293B")),
        "cell": ParagraphStyle("cell", parent=styles["BodyText"], fontSize=9, leading=12),
    }


def _bullets(story: List[Any], items: Any, body: ParagraphStyle) -> None:
    values = [item for item in (items or []) if isinstance(item, str) and item.strip()]
    if not values:
        story.append(Paragraph("-", body))
        return
    for item in values:
        story.append(Paragraph(f"- {escape(item)}", body))


def _page_decorator(stamp_label: str, created_at: datetime):
    def on_page(canvas, doc_obj):
        w, h = letter
        canvas.saveState()
        canvas.setFillColor(colors.grey)
        canvas.setFont("Helvetica", 8)
        canvas.drawString(36, h - 22, f"{stamp_label}: {_format_timestamp(created_at)}")
        canvas.setFillColor(colors.HexColor("#0F172A"))
        canvas.rect(16, 16, w - 32, 16, stroke=0, fill=1)
        canvas.setFillColor(colors.white)
        canvas.drawRightString(w - 24, 22, f"Página {doc_obj.page}")
        canvas.restoreState()

    return on_page


def build_disc_pdf_report(buffer, profile_name: Optional[str], results: Mapping[str, Any], created_at: datetime) -> None:
    """Writes the DISC report (summary, score table, profile details) to `buffer`."""
    user_name = profile_name or "Usuário"
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=36,
        rightMargin=36,
        topMargin=40,
        bottomMargin=44,
        title=f"Relatório DISC - {user_name}",
        author=user_name,
    )
    st = _styles()
    body = st["body"]
    scores = results.get("scores") or {}
    intensity = results.get("intensity") or {}
    primary = results.get("primaryProfile", "D")
    secondary = results.get("secondaryProfile", "I")

    story: List[Any] = []
    story.append(Paragraph("Relatório de Perfil DISC", st["title"]))
    story.append(Paragraph(f"<b>Nome:</b> {escape(user_name)}", body))
    story.append(Spacer(1, 12))

    story.append(_header_bar("Resumo Executivo"))
    story.append(Spacer(1, 8))
    story.append(Paragraph(
        f"<b>Perfil primário:</b> {DISC_PROFILE_NAMES.get(primary, primary)} ({primary}) &nbsp;&nbsp; "
        f"<b>Perfil secundário:</b> {DISC_PROFILE_NAMES.get(secondary, secondary)} ({secondary})",
        body,
    ))
    story.append(Spacer(1, 4))
    story.append(Paragraph(escape(get_profile_description(primary)), body))
    story.append(Spacer(1, 12))

    story.append(_header_bar("Seu Perfil em Números"))
    story.append(Spacer(1, 8))
    rows = [["Fator", "Pontuação", "Intensidade"]]
    row_styles = []
    for i, category in enumerate(DISC_CATEGORIES, start=1):
        score = float(scores.get(category, 0) or 0)
        rows.append([f"{DISC_PROFILE_NAMES.get(category, category)} ({category})", f"{score:.1f}%", intensity.get(category, "-")])
        row_styles.append(("TEXTCOLOR", (0, i), (0, i), colors.HexColor(DISC_COLORS[category])))
    score_table = Table(rows, colWidths=[220, 160, 160], repeatRows=1)
    score_table.setStyle(_table_style(row_styles))
    story.append(score_table)
    story.append(Spacer(1, 12))

    story.append(Paragraph("Recomendações", st["h2"]))
    _bullets(story, get_profile_recommendations(primary, secondary), body)

    details = get_profile_details(primary)
    if details:
        story.append(PageBreak())
        story.append(_header_bar(f"Seus Superpoderes: {DISC_PROFILE_NAMES.get(primary, primary)}"))
        story.append(Spacer(1, 8))
        for key, label in DETAIL_SECTIONS:
            story.append(Paragraph(label, st["h2"]))
            _bullets(story, details.get(key), body)
            story.append(Spacer(1, 4))
        style_rows = [["Situação", "Como você atua"]]
        for key, label in STYLE_ROWS:
            style_rows.append([label, Paragraph(escape(str(details.get(key, "-"))), st["cell"])])
        style_table = Table(style_rows, colWidths=[140, 400], repeatRows=1)
        style_table.setStyle(_table_style())
        story.append(Spacer(1, 6))
        story.append(style_table)

    on_page = _page_decorator("Análise DISC realizada em", created_at)
    doc.build(story, onFirstPage=on_page, onLaterPages=on_page)


def build_behavior_pdf_report(
    buffer,
    profile_name: Optional[str],
    results: Mapping[str, Any],
    analysis: Optional[Mapping[str, Any]],
    created_at: datetime,
) -> None:
    """
    Writes the behavior trait report to `buffer`.

    The AI analysis section is included only when `analysis` has a summary;
    trait descriptions from the analysis override the static ones.
    """
    user_name = profile_name or "Usuário"
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=36,
        rightMargin=36,
        topMargin=40,
        bottomMargin=44,
        title="Relatório de Traços Comportamentais",
        subject="Análise de Traços Comportamentais",
        author=user_name,
    )
    st = _styles()
    body = st["body"]
    traits = traits_from_results(results)
    frequencies = results.get("frequencies") or {}
    ai_descriptions = (analysis or {}).get("traitDescriptions") or {}

    story: List[Any] = []
    story.append(Paragraph("Relatório de Traços Comportamentais", st["title"]))
    story.append(Paragraph(f"<b>Nome:</b> {escape(user_name)}", body))
    story.append(Spacer(1, 12))

    story.append(_header_bar("Visão Geral"))
    story.append(Spacer(1, 8))
    if traits:
        story.append(Paragraph(escape(get_traits_summary(traits)), body))
        story.append(Spacer(1, 6))
        story.append(Paragraph("Traços Principais", st["h2"]))
        for trait in get_main_traits(traits):
            story.append(Paragraph(f"- {escape(trait['description'])} ({trait['value']})", body))
    else:
        story.append(Paragraph("Nenhum traço registrado.", body))
    story.append(Spacer(1, 12))

    if analysis and analysis.get("summary"):
        story.append(_header_bar("Análise Comportamental", "#0F766E"))
        story.append(Spacer(1, 8))
        story.append(Paragraph(escape(str(analysis["summary"])), body))
        story.append(Paragraph("Pontos Fortes", st["h2"]))
        _bullets(story, analysis.get("strengths"), body)
        story.append(Paragraph("Áreas de Desenvolvimento", st["h2"]))
        _bullets(story, analysis.get("developmentAreas"), body)
        story.append(Paragraph("Estilo de Trabalho", st["h2"]))
        story.append(Paragraph(escape(str(analysis.get("workStyleInsights") or "-")), body))
        story.append(Paragraph("Dinâmica de Equipe", st["h2"]))
        story.append(Paragraph(escape(str(analysis.get("teamDynamicsInsights") or "-")), body))
        story.append(PageBreak())

    story.append(_header_bar("Seus Traços"))
    story.append(Spacer(1, 8))
    rows = [["Traço (1)", "Traço (5)", "Valor", "Descrição"]]
    for trait_id in sorted(traits):
        value = traits[trait_id]
        meta = get_trait_metadata(trait_id)
        description = ai_descriptions.get(str(trait_id)) or get_trait_description(trait_id, value)
        rows.append([
            meta["leftTrait"],
            meta["rightTrait"],
            str(value),
            Paragraph(escape(description), st["cell"]),
        ])
    trait_table = Table(rows, colWidths=[100, 100, 40, 300], repeatRows=1)
    trait_table.setStyle(_table_style([("FONTSIZE", (0, 1), (-1, -1), 8)]))
    story.append(trait_table)

    if frequencies:
        story.append(Spacer(1, 12))
        story.append(_header_bar("Frequência de Comportamentos"))
        story.append(Spacer(1, 8))
        freq_rows = [["Comportamento", "Frequência"]]
        for question in FREQUENCY_QUESTIONS:
            value = frequencies.get(question["trait"])
            if value is None:
                continue
            freq_rows.append([question["trait"].capitalize(), FREQUENCY_SCALE_LABELS.get(int(value), str(value))])
        freq_table = Table(freq_rows, colWidths=[270, 270], repeatRows=1)
        freq_table.setStyle(_table_style())
        story.append(freq_table)

    on_page = _page_decorator("Análise realizada em", created_at)
    doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
