# src/svgmin/rule_sets.py
"""Stylesheet rule records and the rule sets that group them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

FEATURE_AT_RULES = 'atrules'
FEATURE_ATTRIBUTE_SELECTORS = 'attribute-selectors'
FEATURE_COMBINATORS = 'combinators'
FEATURE_PSEUDOS = 'pseudos'
FEATURE_SIMPLE_SELECTORS = 'simple-selectors'

PSEUDO_KINDS = ('pseudo-class', 'pseudo-element')

# Pseudo-classes that never change how the document renders at rest.
INERT_PSEUDO_CLASSES = frozenset(['hover'])


@dataclass(frozen=True)
class Declaration:
    name: str
    value: str
    important: bool = False


@dataclass(frozen=True)
class SimpleSelector:
    """One simple selector of a compound.

    ``kind`` is one of ``type``, ``attribute``, ``pseudo-class`` or
    ``pseudo-element``. Class and id selectors are stored as attribute
    selectors on ``class`` (``~=``) and ``id`` (``=``). ``nested`` holds the
    selector lists of functional pseudo-classes such as ``:not()``.
    """

    kind: str
    name: str
    matcher: Optional[str] = None
    value: Optional[str] = None
    nested: Tuple[Tuple['CompoundSelector', ...], ...] = ()


@dataclass(frozen=True)
class CompoundSelector:
    combinator: Optional[str]  # None for the first compound
    simple_selectors: Tuple[SimpleSelector, ...]


@dataclass(frozen=True)
class StylesheetRule:
    selector: Tuple[CompoundSelector, ...]
    selector_string: str
    matchable_string: str
    specificity: Tuple[int, int, int, int]
    declarations: Tuple[Declaration, ...]
    dynamic: bool
    at_rule: Optional[str] = None

    def has_attribute_selector(self, att_name=None):
        return selector_has_attribute(self.selector, att_name)


def iter_simple_selectors(selector):
    """Yield every simple selector, including those nested in pseudo-classes."""
    for compound in selector:
        for simple in compound.simple_selectors:
            yield simple
            for nested in simple.nested:
                yield from iter_simple_selectors(nested)


def selector_has_attribute(selector, att_name=None):
    for simple in iter_simple_selectors(selector):
        if simple.kind == 'attribute' and (att_name is None or simple.name == att_name):
            return True
    return False


def selector_has_pseudo(selector):
    return any(simple.kind in PSEUDO_KINDS for simple in iter_simple_selectors(selector))


def selector_features(selector):
    features = set()
    features.add(FEATURE_SIMPLE_SELECTORS if len(selector) == 1 else FEATURE_COMBINATORS)
    for simple in iter_simple_selectors(selector):
        if simple.kind == 'attribute':
            features.add(FEATURE_ATTRIBUTE_SELECTORS)
        elif simple.kind == 'pseudo-element':
            features.add(FEATURE_PSEUDOS)
        elif simple.kind == 'pseudo-class' and simple.name not in INERT_PSEUDO_CLASSES:
            features.add(FEATURE_PSEUDOS)
    return features


class RuleSet:
    """Rules sharing one at-rule context, in source order."""

    def __init__(self, rules, at_rule=None):
        self.rules = tuple(rules)
        self.at_rule = at_rule
        self._features = self._collect_features()

    def _collect_features(self):
        features = set()
        if self.at_rule is not None:
            features.add(FEATURE_AT_RULES)
        for rule in self.rules:
            features |= selector_features(rule.selector)
        return frozenset(features)

    def get_features(self):
        return set(self._features)

    def has_at_rule(self):
        return self.at_rule is not None

    def has_attribute_selector(self, att_name=None):
        return any(rule.has_attribute_selector(att_name) for rule in self.rules)

    def __repr__(self):
        return f"RuleSet(at_rule={self.at_rule!r}, rules={len(self.rules)})"
