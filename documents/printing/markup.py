"""
Placeholder grammar for template pages.

Pages use a small FreeMarker-style grammar:

    ${name}                      value substitution
    ${name.prop}                 record property access (any depth)
    <#list source as item>...</#list>
    <#if name>...<#else>...</#if>     (also ``name?has_content``)
    <#-- comment -->

This module is a bounded lexical scanner, not an expression-language parser.
Anything outside the grammar above is rejected with TemplateRenderError
rather than guessed at. Supported markup is translated into Django template
source and rendered by the Django template engine.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .exceptions import TemplateRenderError


_IDENT = r'[A-Za-z]\w*'
_NAME_PATH = rf'{_IDENT}(?:\.{_IDENT})*'

_NAME_PATH_RE = re.compile(rf'^\s*({_NAME_PATH})\s*$')
_CONDITION_RE = re.compile(rf'^\s*({_NAME_PATH})\s*(\?has_content)?\s*$')

_TOKEN_RE = re.compile(
    r'(?P<comment><#--.*?-->)'
    r'|(?P<placeholder>\$\{(?P<expr>[^}]*)\})'
    r'|(?P<list_open><#list\s+(?P<list_source>[^>]*?)\s+as\s+(?P<list_item>[^>\s]+)\s*>)'
    r'|(?P<list_close></#list\s*>)'
    r'|(?P<if_open><#if\s+(?P<condition>[^>]+?)\s*>)'
    r'|(?P<else><#else\s*/?>)'
    r'|(?P<if_close></#if\s*>)'
    r'|(?P<directive></?#[^>]*>)'
    r'|(?P<django>\{\{|\}\}|\{%|%\}|\{#|#\})',
    re.DOTALL,
)

# Literal Django delimiters in page text are emitted via {% templatetag %}
_TEMPLATETAGS = {
    '{{': '{% templatetag openvariable %}',
    '}}': '{% templatetag closevariable %}',
    '{%': '{% templatetag openblock %}',
    '%}': '{% templatetag closeblock %}',
    '{#': '{% templatetag opencomment %}',
    '#}': '{% templatetag closecomment %}',
}

_PLACEHOLDER_PATH_RE = re.compile(rf'\$\{{\s*({_NAME_PATH})\s*\}}')
_LIST_RE = re.compile(rf'<#list\s+({_NAME_PATH})\s+as\s+({_IDENT})\s*>')
_IF_RE = re.compile(rf'<#if\s+({_NAME_PATH})\s*(?:\?has_content)?\s*>')

_COMMENT_RE = re.compile(r'<#--.*?-->|<!--.*?-->', re.DOTALL)
_RAW_TEXT_RE = re.compile(r'<(style|script)\b[^>]*>.*?</\1\s*>', re.DOTALL | re.IGNORECASE)
_TAG_RE = re.compile(r'</?[^>]+>')
_NBSP_RE = re.compile(r'&nbsp;|&#160;|&#xa0;', re.IGNORECASE)


@dataclass
class VariableUsage:
    """
    How one top-level name is used in a piece of markup.

    properties maps each accessed record property to its default value
    ('' for plain access, [] when the property is itself iterated).
    """

    name: str
    properties: Dict[str, object] = field(default_factory=dict)
    list_source: bool = False
    scalar: bool = False

    @property
    def is_record(self) -> bool:
        return bool(self.properties)


def _usage(usages, name):
    if name not in usages:
        usages[name] = VariableUsage(name=name)
    return usages[name]


def _record_path(usages, path, as_list=False):
    base, _, rest = path.partition('.')
    usage = _usage(usages, base)
    if not rest:
        if as_list:
            usage.list_source = True
        else:
            usage.scalar = True
        return
    prop = rest.split('.')[0]
    if as_list and '.' not in rest:
        usage.properties[prop] = []
    else:
        usage.properties.setdefault(prop, '')


def scan_usage(markup: str) -> Dict[str, VariableUsage]:
    """
    Scan markup for variable references.

    Args:
        markup: Page markup

    Returns:
        Mapping of top-level name to its VariableUsage, in order of first use
    """
    usages: Dict[str, VariableUsage] = {}
    if not markup:
        return usages

    markup = _COMMENT_RE.sub('', markup)
    events = []
    for match in _PLACEHOLDER_PATH_RE.finditer(markup):
        events.append((match.start(), match.group(1), False))
    for match in _LIST_RE.finditer(markup):
        events.append((match.start(), match.group(1), True))
    for match in _IF_RE.finditer(markup):
        events.append((match.start(), match.group(1), False))

    for _, path, as_list in sorted(events, key=lambda event: event[0]):
        _record_path(usages, path, as_list=as_list)
    return usages


def find_loops(markup: str) -> List[Tuple[str, str]]:
    """Return (source, item) pairs of every <#list> in markup."""
    if not markup:
        return []
    return [(m.group(1), m.group(2)) for m in _LIST_RE.finditer(_COMMENT_RE.sub('', markup))]


def extract_parameters(markup: str) -> List[str]:
    """
    Extract the distinct top-level parameter names referenced by markup.

    Examples:
        >>> extract_parameters("<p>${user.name}</p><#list items as item>${item}</#list>")
        ['user', 'items', 'item']
    """
    return list(scan_usage(markup).keys())


def has_text_content(markup: str) -> bool:
    """
    Check if markup carries visible text.

    Tags, directives, comments, style/script bodies, non-breaking spaces and
    whitespace do not count.
    """
    if not markup:
        return False
    text = _COMMENT_RE.sub('', markup)
    text = _RAW_TEXT_RE.sub('', text)
    text = _TAG_RE.sub('', text)
    text = _NBSP_RE.sub('', text)
    return bool(text.strip())


def _check_literal(text, page_name):
    if '${' in text:
        raise TemplateRenderError("Unterminated placeholder '${'", page_name)


def translate(markup: str, page_name: str = None) -> str:
    """
    Translate page markup into Django template source.

    Args:
        markup: Page markup using the placeholder grammar
        page_name: Page name for error messages

    Returns:
        Django template source

    Raises:
        TemplateRenderError: On unsupported expressions or directives,
            unterminated placeholders or unbalanced blocks
    """
    if not markup:
        return ''

    parts = []
    blocks = []
    position = 0

    for match in _TOKEN_RE.finditer(markup):
        literal = markup[position:match.start()]
        _check_literal(literal, page_name)
        parts.append(literal)
        position = match.end()
        kind = match.lastgroup

        if kind == 'comment':
            continue

        if kind == 'placeholder':
            expr = _NAME_PATH_RE.match(match.group('expr'))
            if not expr:
                raise TemplateRenderError(
                    f"Unsupported expression '{match.group(0)}'", page_name
                )
            parts.append('{{ ' + expr.group(1) + ' }}')

        elif kind == 'list_open':
            source = _NAME_PATH_RE.match(match.group('list_source'))
            item = re.fullmatch(_IDENT, match.group('list_item'))
            if not source or not item:
                raise TemplateRenderError(
                    f"Unsupported list directive '{match.group(0)}'", page_name
                )
            blocks.append('list')
            parts.append('{% for ' + item.group(0) + ' in ' + source.group(1) + ' %}')

        elif kind == 'list_close':
            if not blocks or blocks[-1] != 'list':
                raise TemplateRenderError("Unexpected '</#list>'", page_name)
            blocks.pop()
            parts.append('{% endfor %}')

        elif kind == 'if_open':
            condition = _CONDITION_RE.match(match.group('condition'))
            if not condition:
                raise TemplateRenderError(
                    f"Unsupported condition '{match.group(0)}'", page_name
                )
            blocks.append('if')
            parts.append('{% if ' + condition.group(1) + ' %}')

        elif kind == 'else':
            if not blocks or blocks[-1] != 'if':
                raise TemplateRenderError("Unexpected '<#else>'", page_name)
            parts.append('{% else %}')

        elif kind == 'if_close':
            if not blocks or blocks[-1] != 'if':
                raise TemplateRenderError("Unexpected '</#if>'", page_name)
            blocks.pop()
            parts.append('{% endif %}')

        elif kind == 'directive':
            raise TemplateRenderError(
                f"Unsupported directive '{match.group(0)}'", page_name
            )

        else:
            parts.append(_TEMPLATETAGS[match.group(0)])

    tail = markup[position:]
    _check_literal(tail, page_name)
    parts.append(tail)

    if blocks:
        raise TemplateRenderError(f"Unclosed '<#{blocks[-1]}>' directive", page_name)

    return ''.join(parts)
