import io
from datetime import datetime
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Table, TableStyle, Spacer

from utils import MAX_MARK, sort_newest_first


def build_report_card(student, subjects):
    """
    Render one student's report card as PDF bytes.

    `student` is a serialized record already carrying total/average/grade.
    """
    buffer = io.BytesIO()
    pdf = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=40,
        leftMargin=40,
        topMargin=60,
        bottomMargin=50,
        title=f"Report card - {student['registerNumber']}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "title",
        fontName="Helvetica-Bold",
        fontSize=20,
        alignment=1,
        spaceAfter=10,
    )
    normal_style = ParagraphStyle(
        "normal",
        fontName="Helvetica",
        fontSize=12,
        leading=16,
        textColor=colors.HexColor("#333333"),
    )
    heading_style = ParagraphStyle(
        "heading",
        parent=normal_style,
        fontName="Helvetica-Bold",
        fontSize=14,
        spaceAfter=6,
    )

    elements = []

    # ---- Header ----
    elements.append(Paragraph("Student Report Card", title_style))
    elements.append(Spacer(1, 12))

    # ---- Student Info ----
    info_html = f"""
    <b>Student Name:</b> {escape(student['studentName'])}<br/>
    <b>Register Number:</b> {escape(student['registerNumber'])}<br/>
    <b>Date Generated:</b> {datetime.now().strftime('%d %B %Y')}
    """
    elements.append(Paragraph(info_html, normal_style))
    elements.append(Spacer(1, 18))

    # ---- Marks Table ----
    data = [["Subject", f"Marks Obtained (out of {MAX_MARK})"]]
    for subject in subjects:
        mark = student.get(subject)
        data.append([subject.upper(), "-" if mark is None else mark])

    table = Table(data, colWidths=[2.5 * inch, 3 * inch], hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.Color(72 / 255, 93 / 255, 166 / 255)),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                ("FONTSIZE", (0, 0), (-1, -1), 11),
                ("ALIGN", (1, 0), (1, -1), "CENTER"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ]
        )
    )
    elements.append(table)
    elements.append(Spacer(1, 20))

    # ---- Summary ----
    elements.append(Paragraph("Result Summary", heading_style))
    if student["total"] is None:
        summary_html = "Marks are incomplete for this student, so no result is available."
    else:
        summary_html = f"""
        Total Marks: {student['total']} / {MAX_MARK * len(subjects)}<br/>
        Average: {student['average']:.2f}%<br/>
        Grade: <b>{student['grade']}</b>
        """
    elements.append(Paragraph(summary_html, normal_style))
    elements.append(Spacer(1, 25))

    footer_html = """
    <para align='center'>
    <font size=9 color='#999999'>
    This is a system-generated report.
    </font>
    </para>
    """
    elements.append(Paragraph(footer_html, styles["Normal"]))

    pdf.build(elements)
    return buffer.getvalue()


def build_marklist_csv(students, subjects):
    """Mark list for every student, newest first, as CSV text."""
    columns = ["registerNumber", "studentName", *subjects, "total", "average", "grade", "createdAt"]
    rows = [
        {**s, "average": None if s["average"] is None else round(s["average"], 2)}
        for s in sort_newest_first(students)
    ]
    df = pd.DataFrame(rows, columns=columns)
    return df.to_csv(index=False)
