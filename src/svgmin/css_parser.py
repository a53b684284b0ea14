# src/svgmin/css_parser.py
"""
Parse the text of <style> elements and ``style`` attributes.

tinycss2 splits the text into rules and declarations; cssselect2 parses each
selector of a rule prelude, and the resulting tree is flattened into the
compound/simple selector records of ``rule_sets``.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

import cssselect2
import tinycss2
from cssselect2 import parser as selector_parser
from tinycss2.serializer import serialize_identifier, serialize_string_value

from .rule_sets import (
    PSEUDO_KINDS,
    CompoundSelector,
    Declaration,
    RuleSet,
    SimpleSelector,
    StylesheetRule,
    selector_has_pseudo,
)

logger = logging.getLogger(__name__)

_KEYFRAMES = re.compile(r'(-[a-z]+-)?keyframes')

# Functional pseudo-classes whose arguments are selector lists.
_SELECTOR_LIST_PSEUDOS = {
    'NegationSelector': 'not',
    'MatchesAnySelector': 'is',
    'SpecificityAdjustmentSelector': 'where',
    'RelationalSelector': 'has',
}


class CSSParseError(ValueError):
    """The stylesheet uses something we can't reason about."""


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

def _declarations_from(content) -> List[Declaration]:
    declarations = []
    for item in tinycss2.parse_declaration_list(content, skip_comments=True, skip_whitespace=True):
        if item.type == 'declaration':
            # Custom property names are case-sensitive.
            name = item.name if item.name.startswith('--') else item.lower_name
            value = tinycss2.serialize(item.value).strip()
            declarations.append(Declaration(name, value, bool(item.important)))
        elif item.type == 'error':
            logger.debug(f"Dropping malformed declaration: {item.message}")
        else:
            logger.debug(f"Dropping {item.type} inside a declaration block")
    return declarations


def parse_declaration_list(css_text) -> List[Declaration]:
    """Return the declarations of a ``style`` attribute in source order."""
    if not css_text:
        return []
    return _declarations_from(css_text)


def parse_style_declarations(css_text):
    """Parse a ``style`` attribute into a ``{property: value}`` dict.

    A later declaration of the same property wins unless the earlier one was
    ``!important`` and the later one is not.
    """
    values = {}
    important = set()
    for declaration in parse_declaration_list(css_text):
        if declaration.name in important and not declaration.important:
            continue
        values[declaration.name] = declaration.value
        if declaration.important:
            important.add(declaration.name)
    return values


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

def _nested_selector_lists(node):
    nested = []
    for item in getattr(node, 'selector_list', None) or ():
        tree = getattr(item, 'selector', item)
        tree = getattr(tree, 'parsed_tree', tree)
        nested.append(_flatten_tree(tree))
    return tuple(nested)


def _simple_selector(node) -> Optional[SimpleSelector]:
    kind = type(node).__name__
    if kind == 'LocalNameSelector':
        return SimpleSelector('type', node.local_name)
    if kind == 'NamespaceSelector':
        return None
    if kind == 'IDSelector':
        return SimpleSelector('attribute', 'id', '=', node.ident)
    if kind == 'ClassSelector':
        return SimpleSelector('attribute', 'class', '~=', node.class_name)
    if kind == 'AttributeSelector':
        return SimpleSelector('attribute', node.name, node.operator, node.value)
    if kind == 'PseudoClassSelector':
        return SimpleSelector('pseudo-class', node.name.lower())
    if kind == 'FunctionalPseudoClassSelector':
        arguments = tinycss2.serialize(getattr(node, 'arguments', None) or [])
        return SimpleSelector('pseudo-class', node.name.lower(), value=arguments)
    if kind in _SELECTOR_LIST_PSEUDOS:
        return SimpleSelector(
            'pseudo-class', _SELECTOR_LIST_PSEUDOS[kind], nested=_nested_selector_lists(node))
    # Anything else can only narrow matching at runtime; classify it as a
    # pseudo-class so that rules using it are treated as dynamic.
    logger.debug(f"Unrecognized selector node {kind}")
    return SimpleSelector('pseudo-class', kind)


def _compound(combinator, node) -> CompoundSelector:
    simple_selectors = []
    for simple_node in getattr(node, 'simple_selectors', ()):
        simple = _simple_selector(simple_node)
        if simple is not None:
            simple_selectors.append(simple)
    return CompoundSelector(combinator, tuple(simple_selectors))


def _flatten_tree(tree):
    """Turn cssselect2's left-nested combined selector into a list of compounds."""
    reversed_compounds = []
    node = tree
    while type(node).__name__ == 'CombinedSelector':
        reversed_compounds.append(_compound(node.combinator, node.right))
        node = node.left
    reversed_compounds.append(_compound(None, node))
    return tuple(reversed(reversed_compounds))


def _build_selector(parsed):
    compounds = list(_flatten_tree(parsed.parsed_tree))
    if parsed.pseudo_element is not None:
        last = compounds[-1]
        pseudo = SimpleSelector('pseudo-element', parsed.pseudo_element.lower())
        compounds[-1] = CompoundSelector(last.combinator, last.simple_selectors + (pseudo,))
    return tuple(compounds)


def _serialize_simple(simple):
    if simple.kind == 'type':
        return serialize_identifier(simple.name)
    if simple.name == 'class' and simple.matcher == '~=':
        return '.' + serialize_identifier(simple.value)
    if simple.name == 'id' and simple.matcher == '=':
        return '#' + serialize_identifier(simple.value)
    if simple.matcher is None:
        return f"[{serialize_identifier(simple.name)}]"
    return f'[{serialize_identifier(simple.name)}{simple.matcher}"{serialize_string_value(simple.value)}"]'


def matchable_selector_string(selector):
    """Serialize ``selector`` without its pseudo-classes and pseudo-elements.

    Pseudo state can't be evaluated against the document tree, so the result
    matches every element the full selector could match at some point.
    """
    parts = []
    for compound in selector:
        text = ''.join(
            _serialize_simple(simple)
            for simple in compound.simple_selectors
            if simple.kind not in PSEUDO_KINDS
        ) or '*'
        if compound.combinator is None:
            parts.append(text)
        elif compound.combinator == ' ':
            parts.append(' ' + text)
        else:
            parts.append(f" {compound.combinator} {text}")
    return ''.join(parts)


def _split_selector_list(prelude):
    parts = [[]]
    for token in prelude:
        if token.type == 'literal' and token.value == ',':
            parts.append([])
        else:
            parts[-1].append(token)
    return [tinycss2.serialize(part).strip() for part in parts]


def _parse_rule(node, at_rule) -> List[StylesheetRule]:
    declarations = tuple(_declarations_from(node.content))
    rules = []
    for text in _split_selector_list(node.prelude):
        if not text:
            raise CSSParseError(f"Empty selector in {tinycss2.serialize(node.prelude)!r}")
        try:
            parsed = list(selector_parser.parse(text))
        except cssselect2.SelectorError as exc:
            raise CSSParseError(f"Invalid selector {text!r}: {exc}") from exc
        if len(parsed) != 1:
            raise CSSParseError(f"Invalid selector {text!r}")
        selector = _build_selector(parsed[0])
        rules.append(StylesheetRule(
            selector=selector,
            selector_string=text,
            matchable_string=matchable_selector_string(selector),
            specificity=(0,) + tuple(parsed[0].specificity),
            declarations=declarations,
            dynamic=at_rule is not None or selector_has_pseudo(selector),
            at_rule=at_rule,
        ))
    return rules


# ---------------------------------------------------------------------------
# Stylesheets
# ---------------------------------------------------------------------------

def media_context(media):
    """Return the at-rule context for a <style> media attribute, or None if it always applies."""
    if media is None:
        return None
    media = media.strip()
    if media == '' or media.lower() == 'all':
        return None
    return f"media {media}"


def _parse_media_block(node):
    if node.content is None:
        raise CSSParseError("@media without a block")
    # Unlike the media attribute, an explicit @media always counts as an at-rule.
    at_rule = f"media {tinycss2.serialize(node.prelude).strip()}"
    rules = []
    for child in tinycss2.parse_rule_list(node.content, skip_comments=True, skip_whitespace=True):
        if child.type == 'qualified-rule':
            rules.extend(_parse_rule(child, at_rule))
        elif child.type == 'at-rule':
            if _KEYFRAMES.fullmatch(child.lower_at_keyword):
                continue
            raise CSSParseError(f"Unsupported @{child.at_keyword} inside @media")
        elif child.type == 'error':
            raise CSSParseError(child.message)
    return at_rule, rules


def parse_stylesheet(css_text, media=None) -> List[RuleSet]:
    """Parse the content of a <style> element into rule sets.

    ``media`` is the value of the element's ``media`` attribute. Rule sets are
    returned in source order; each @media block gets its own set.

    Raises CSSParseError for at-rules other than @media and @keyframes, for
    selectors we can't parse, and for @media under a non-trivial ``media``
    attribute.
    """
    context = media_context(media)
    rule_sets = []
    pending = []

    def flush():
        if pending:
            rule_sets.append(RuleSet(pending, context))
            pending.clear()

    for node in tinycss2.parse_stylesheet(css_text, skip_comments=True, skip_whitespace=True):
        if node.type == 'qualified-rule':
            pending.extend(_parse_rule(node, context))
        elif node.type == 'at-rule':
            keyword = node.lower_at_keyword
            if _KEYFRAMES.fullmatch(keyword):
                continue
            if keyword != 'media':
                raise CSSParseError(f"Unsupported at-rule @{node.at_keyword}")
            if context is not None:
                raise CSSParseError(f"@media inside <style media={media!r}>")
            flush()
            at_rule, rules = _parse_media_block(node)
            if rules:
                rule_sets.append(RuleSet(rules, at_rule))
        elif node.type == 'error':
            raise CSSParseError(node.message)
    flush()
    return rule_sets
