"""
PDF Styling for the ReportLab fallback engine.
"""

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet


def get_fallback_styles():
    """
    Get paragraph styles keyed by the HTML tag they render.

    Returns:
        Dictionary of ParagraphStyle objects
    """
    styles = getSampleStyleSheet()

    body = ParagraphStyle(
        'FallbackBody',
        parent=styles['BodyText'],
        fontSize=10,
        textColor=colors.HexColor('#000000'),
        spaceAfter=6,
        alignment=TA_LEFT,
        fontName='Helvetica',
    )

    def heading(tag, parent, size, color):
        return ParagraphStyle(
            f'Fallback{tag.upper()}',
            parent=styles[parent],
            fontSize=size,
            leading=size * 1.25,
            textColor=colors.HexColor(color),
            spaceAfter=8,
            spaceBefore=8,
            alignment=TA_LEFT,
            fontName='Helvetica-Bold',
        )

    return {
        'h1': heading('h1', 'Heading1', 18, '#1a1a1a'),
        'h2': heading('h2', 'Heading2', 14, '#333333'),
        'h3': heading('h3', 'Heading3', 12, '#555555'),
        'h4': heading('h4', 'Heading4', 11, '#555555'),
        'h5': heading('h5', 'Heading5', 10, '#555555'),
        'h6': heading('h6', 'Heading6', 10, '#666666'),
        'li': ParagraphStyle(
            'FallbackListItem',
            parent=body,
            leftIndent=12,
            bulletIndent=0,
        ),
        'pre': ParagraphStyle(
            'FallbackPre',
            parent=styles['Code'],
            fontSize=9,
        ),
        'th': ParagraphStyle(
            'FallbackTableHeader',
            parent=body,
            fontName='Helvetica-Bold',
        ),
        'p': body,
    }
