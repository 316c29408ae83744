"""
HTML reduction for ReportLab paragraphs.

ReportLab paragraphs understand a small inline markup language. Composed
template HTML is reduced to that subset before it reaches the fallback
engine: block structure is handled by the engine, everything inline except
basic emphasis is stripped here.
"""

import html as html_lib
import re

import bleach


# Inline tags ReportLab's paragraph parser accepts (after renaming below)
ALLOWED_TAGS = [
    'b', 'strong', 'i', 'em', 'u', 's', 'strike', 'sub', 'sup', 'br',
]

_RENAMES = [
    (re.compile(r'<(/?)strong>'), r'<\1b>'),
    (re.compile(r'<(/?)em>'), r'<\1i>'),
    (re.compile(r'<(/?)s>'), r'<\1strike>'),
    (re.compile(r'<br\s*/?>'), '<br/>'),
]

_WHITESPACE_RE = re.compile(r'\s+')


def paragraph_markup(fragment: str) -> str:
    """
    Reduce an HTML fragment to ReportLab paragraph markup.

    Args:
        fragment: Inline HTML (the inside of one block element)

    Returns:
        Markup safe to pass to reportlab.platypus.Paragraph
    """
    clean = bleach.clean(
        fragment or '',
        tags=ALLOWED_TAGS,
        attributes={},
        strip=True,
        strip_comments=True,
    )
    for pattern, replacement in _RENAMES:
        clean = pattern.sub(replacement, clean)
    return _WHITESPACE_RE.sub(' ', clean).strip()


def plain_text(fragment: str) -> str:
    """
    Reduce an HTML fragment to escaped plain text.

    Used when paragraph markup is rejected by ReportLab.
    """
    text = bleach.clean(fragment or '', tags=[], attributes={}, strip=True, strip_comments=True)
    text = html_lib.unescape(text)
    return html_lib.escape(_WHITESPACE_RE.sub(' ', text).strip(), quote=False)
