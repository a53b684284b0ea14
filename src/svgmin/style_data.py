# src/svgmin/style_data.py
"""
Cascade resolution for SVG documents.

``get_doc_data(root)`` collects every <style> element of an ElementTree
document and returns a ``DocData``. Its ``styles`` attribute is a ``StyleData``
that computes per-element styles, or None when a stylesheet could not be
understood; callers must then leave style-dependent attributes alone.

Computed styles are plain dicts. A property mapped to None has a value that
can't be known statically (media queries, pseudo-classes, ``var()``).
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional

import cssselect2

from .attributes import EVENT_ATTR_PREFIX, PRESENTATION_ATTRS, is_inherited
from .css_parser import CSSParseError, parse_declaration_list, parse_stylesheet

logger = logging.getLogger(__name__)

_VAR_REFERENCE = re.compile(r'\bvar\(', re.IGNORECASE)

_CSS_TYPES = (None, '', 'text/css')


def remove_namespaces(s):
    """
    Remove XML namespaces: {some-namespace}tag -> tag
    """
    return re.sub('{.*}', '', s)


def _has_var_reference(value):
    return _VAR_REFERENCE.search(value) is not None


class StyleData:
    """Stylesheet rules of one document, sorted for cascading.

    ``root`` is the document root the rules are matched against. It may be
    omitted when each queried element is itself a document root.
    """

    def __init__(self, rule_sets, root=None):
        self._rule_sets = list(rule_sets)
        self._root = root
        self._sorted_rules = self._collect_rules(self._rule_sets)
        self._compiled = {}
        self._wrappers = None
        # (chain start, element) -> computed style of element inheriting from
        # the chain that starts there, filled lazily by compute_style()
        self._computed_styles: Dict[tuple, dict] = {}

    @staticmethod
    def _collect_rules(rule_sets):
        rules = [rule for rule_set in rule_sets for rule in rule_set.rules]
        # sorted() is stable: equal specificity keeps document order.
        return sorted(rules, key=lambda rule: rule.specificity)

    @property
    def rule_sets(self):
        return list(self._rule_sets)

    @property
    def sorted_rules(self):
        return list(self._sorted_rules)

    # -----------------------------------------------------------------------
    # Matching
    # -----------------------------------------------------------------------

    def _wrapper(self, element):
        if self._wrappers is None:
            self._wrappers = {}
            if self._root is not None:
                root = cssselect2.ElementWrapper.from_xml_root(self._root)
                for wrapper in root.iter_subtree():
                    self._wrappers[wrapper.etree_element] = wrapper
        wrapper = self._wrappers.get(element)
        if wrapper is None:
            wrapper = cssselect2.ElementWrapper.from_xml_root(element)
            self._wrappers[element] = wrapper
        return wrapper

    def _matches(self, element, rule):
        compiled = self._compiled.get(rule.matchable_string)
        if compiled is None:
            compiled = cssselect2.compile_selector_list(rule.matchable_string)
            self._compiled[rule.matchable_string] = compiled
        wrapper = self._wrapper(element)
        return any(selector.test(wrapper) for selector in compiled)

    # -----------------------------------------------------------------------
    # Cascade
    # -----------------------------------------------------------------------

    def compute_own_style(self, element) -> Dict[str, Optional[str]]:
        """Return the style of ``element`` without inheritance."""
        computed = {}
        important = set()
        dynamic = set()

        for name, value in element.attrib.items():
            if name in PRESENTATION_ATTRS:
                computed[name] = value

        for rule in self._sorted_rules:
            if not self._matches(element, rule):
                continue
            if rule.dynamic or any(_has_var_reference(d.value) for d in rule.declarations):
                for declaration in rule.declarations:
                    computed[declaration.name] = None
                    dynamic.add(declaration.name)
                continue
            for declaration in rule.declarations:
                name = declaration.name
                if name in dynamic:
                    continue
                if name in important and not declaration.important:
                    continue
                computed[name] = declaration.value
                if declaration.important:
                    important.add(name)

        for declaration in parse_declaration_list(element.get('style')):
            name = declaration.name
            if name in dynamic:
                continue
            if _has_var_reference(declaration.value):
                computed[name] = None
                dynamic.add(name)
                continue
            if name in important and not declaration.important:
                continue
            computed[name] = declaration.value
            if declaration.important:
                important.add(name)

        return computed

    def _inherit(self, computed, inherited):
        for name, value in inherited.items():
            if name not in computed and is_inherited(name):
                computed[name] = value
        return computed

    def compute_style(self, element, parents: Iterable = ()) -> Dict[str, Optional[str]]:
        """Return the style of ``element`` including inherited properties.

        ``parents`` is the chain of ancestors from the document root down to
        the direct parent of ``element``.
        """
        computed = self.compute_own_style(element)
        parents = list(parents)
        if not parents:
            return computed

        inherited = {}
        for ancestor in parents:
            style = self._computed_styles.get((parents[0], ancestor))
            if style is None:
                style = self._inherit(self.compute_own_style(ancestor), inherited)
                self._computed_styles[(parents[0], ancestor)] = style
            inherited = style
        return self._inherit(computed, inherited)

    # -----------------------------------------------------------------------
    # Stylesheet features
    # -----------------------------------------------------------------------

    def get_features(self):
        features = set()
        for rule_set in self._rule_sets:
            features |= rule_set.get_features()
        return features

    def has_at_rules(self):
        return any(rule_set.has_at_rule() for rule_set in self._rule_sets)

    def has_attribute_selector(self, att_name=None):
        return any(rule_set.has_attribute_selector(att_name) for rule_set in self._rule_sets)


class DocData:
    def __init__(self, styles: Optional[StyleData], has_scripts: bool, parents: dict):
        self.styles = styles
        self.has_scripts = has_scripts
        self._parents = parents

    def get_styles(self):
        return self.styles

    def ancestors(self, element) -> List:
        """Return the ancestors of ``element``, document root first."""
        chain = []
        parent = self._parents.get(element)
        while parent is not None:
            chain.append(parent)
            parent = self._parents.get(parent)
        chain.reverse()
        return chain


def _is_script_attr(name, value):
    if name.startswith(EVENT_ATTR_PREFIX):
        return True
    return remove_namespaces(name) == 'href' and value.strip().lower().startswith('javascript:')


def get_doc_data(root) -> DocData:
    """Collect stylesheets, scripts and parent links of an ElementTree document."""
    parents = {}
    for parent in root.iter():
        for child in parent:
            parents[child] = parent

    rule_sets = []
    styles_usable = True
    has_scripts = False

    for node in root.iter():
        if not isinstance(node.tag, str):
            continue  # comments and processing instructions
        tag = remove_namespaces(node.tag)
        if tag == 'script':
            has_scripts = True
        if any(_is_script_attr(name, value) for name, value in node.attrib.items()):
            has_scripts = True

        if tag != 'style' or not styles_usable:
            continue
        if node.get('type') not in _CSS_TYPES:
            logger.debug(f"Unsupported <style type={node.get('type')!r}>; styles disabled")
            styles_usable = False
            continue
        try:
            rule_sets.extend(parse_stylesheet(''.join(node.itertext()), node.get('media')))
        except CSSParseError as e:
            logger.debug(f"Unusable stylesheet: {e}")
            styles_usable = False

    styles = StyleData(rule_sets, root) if styles_usable else None
    return DocData(styles, has_scripts, parents)
