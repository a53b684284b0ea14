# src/svgmin/svg_optimizer.py
import logging
import traceback
import xml.etree.ElementTree as etree

import numpy as np
from svgpathtools.parser import parse_transform

from .attributes import TRANSFORM_ATTRS
from .minify_transforms import minify_transforms, resolve_params
from .style_data import get_doc_data, remove_namespaces
from .transforms import transform2js

logger = logging.getLogger(__name__)

SVG_NAMESPACE = 'http://www.w3.org/2000/svg'
XLINK_NAMESPACE = 'http://www.w3.org/1999/xlink'

etree.register_namespace('', SVG_NAMESPACE)
etree.register_namespace('xlink', XLINK_NAMESPACE)


def transforms_are_equivalent(old, new, float_precision):
    """
    Compare two transform lists by their 3x3 matrices, as parsed by svgpathtools.
    """
    try:
        old_matrix = parse_transform(old)
        new_matrix = parse_transform(new)
    except (ValueError, IndexError) as e:
        logger.debug(f"svgpathtools can't compare {old!r} and {new!r}: {e}")
        return False
    return np.allclose(old_matrix, new_matrix, atol=10 ** -float_precision)


def _can_rewrite(node, attr, styles):
    if styles.has_attribute_selector(attr):
        logger.debug(f"{attr} is targeted by an attribute selector; left unchanged")
        return False
    if attr == 'transform' and styles.compute_own_style(node).get('transform', '') is None:
        logger.debug(f"transform of <{remove_namespaces(node.tag)}> is styled dynamically; left unchanged")
        return False
    return True


def minify_transforms_in_tree(root, doc_data=None, params=None):
    """
    Rewrite every transform, gradientTransform and patternTransform attribute
    under ``root`` in its shortest equivalent form.
    Returns the number of attributes that changed.
    """
    doc_data = doc_data or get_doc_data(root)
    styles = doc_data.get_styles()
    if styles is None:
        logger.debug("Stylesheet is unusable; transforms left unchanged")
        return 0

    cfg = resolve_params(params)
    changed = 0
    for node in root.iter():
        if not isinstance(node.tag, str):
            continue
        for attr in TRANSFORM_ATTRS:
            value = node.get(attr)
            if value is None or not transform2js(value):
                continue
            if not _can_rewrite(node, attr, styles):
                continue
            try:
                minified = minify_transforms(value, cfg)
            except ValueError as e:
                logger.debug(f"Can't minify {attr}={value!r}: {e}")
                continue
            if minified == value:
                continue
            if not transforms_are_equivalent(value, minified, cfg['float_precision']):
                logger.debug(f"{attr}={value!r} -> {minified!r} is not equivalent; left unchanged")
                continue
            if minified:
                node.set(attr, minified)
            else:
                del node.attrib[attr]
            changed += 1
    return changed


def _tostring(root):
    return etree.tostring(root, encoding='utf-8').decode('utf-8')


def optimize_svg_from_str(svg_str, quiet=False, **params):
    """
    Main entry point: pass in an SVG string, return the optimized SVG string.
    Returns None if the SVG can't be parsed.
    """
    if not svg_str or not svg_str.strip():
        if not quiet:
            print("SVG content is empty")
        return None
    try:
        root = etree.fromstring(svg_str)
    except etree.ParseError as e:
        if not quiet:
            print(f"Error during SVG parsing: {type(e).__name__}: {str(e)}")
        return None

    try:
        changed = minify_transforms_in_tree(root, params=params)
    except Exception as e:
        if not quiet:
            print(f"Error during SVG optimization: {type(e).__name__}: {str(e)}")
            traceback.print_exc()
        return None

    logger.debug(f"Minified {changed} transform attributes")
    return _tostring(root)


def optimize_svg_from_file(filename, quiet=False, **params):
    """
    Main entry point: pass in an SVG file, return the optimized SVG string.
    """
    with open(filename, encoding='utf-8') as f:
        return optimize_svg_from_str(f.read(), quiet=quiet, **params)
