"""
Parameter defaulting for template pages.

Callers rarely supply every parameter a template references. Before a page is
rendered, the supplied parameters are completed with safe defaults shaped
after how each name is used in the markup, so that absent data renders as
empty output instead of failing.
"""

import copy
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Dict, Optional

from .markup import VariableUsage, find_loops, scan_usage


logger = logging.getLogger(__name__)


ORIGINAL_SUFFIX = '_original'


def _is_sequence(value) -> bool:
    if isinstance(value, (str, bytes, Mapping)):
        return False
    return isinstance(value, Iterable)


def materialize_iterators(params: Optional[Mapping]) -> Dict[str, Any]:
    """
    Copy parameters, turning one-shot iterators (generators and the like) into lists.

    All pages of a document are rendered against one parameter set, so each
    iterator is read exactly once, before the first page.
    """
    return {
        name: list(value) if isinstance(value, Iterator) else value
        for name, value in (params or {}).items()
    }


def is_compatible(usage: VariableUsage, value: Any) -> bool:
    """
    Check if a supplied value fits how the name is used.

    Record access needs a mapping, a loop source needs an iterable that is
    not a string, bytes or mapping (lists, sets, ranges, generators and
    QuerySets all qualify), and a plain reference accepts anything except None.
    """
    if value is None:
        return False
    if usage.is_record:
        return isinstance(value, Mapping)
    if usage.list_source:
        return _is_sequence(value)
    return True


def default_for(usage: VariableUsage) -> Any:
    """
    Build the default value for a name.

    Returns:
        A dict of accessed properties for records, [] for loop sources,
        otherwise ''
    """
    if usage.is_record:
        return copy.deepcopy(usage.properties)
    if usage.list_source:
        return []
    return ''


def resolve(markup: str, supplied: Optional[Mapping] = None) -> Dict[str, Any]:
    """
    Complete supplied parameters with defaults for everything markup uses.

    A name used both as a record (``${exp.role}``) and as a loop item
    (``<#list items as exp>``) is shadowed inside the loop. When the caller
    supplied a record for it, that record is also kept under
    ``<name>_original``.

    Args:
        markup: Page markup
        supplied: Caller parameters (never modified)

    Returns:
        Effective parameters for rendering
    """
    supplied = supplied or {}
    effective = dict(supplied)
    usages = scan_usage(markup)

    logger.debug(f"Supplied parameters: {sorted(supplied.keys())}")
    logger.debug(f"Referenced variables: {list(usages.keys())}")

    for name, usage in usages.items():
        current = effective.get(name)
        if is_compatible(usage, current):
            continue
        effective[name] = default_for(usage)
        logger.debug(
            f"Providing default for '{name}' (supplied: {type(current).__name__}): "
            f"{effective[name]!r}"
        )

    for _source, item in find_loops(markup):
        usage = usages.get(item)
        original = supplied.get(item)
        if usage is not None and usage.is_record and isinstance(original, Mapping):
            alias = item + ORIGINAL_SUFFIX
            effective[alias] = original
            logger.debug(
                f"Variable '{item}' is used both as record and loop variable. "
                f"Original stored as '{alias}'"
            )

    return effective
