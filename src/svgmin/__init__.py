from .css_parser import CSSParseError, parse_stylesheet, parse_style_declarations
from .minify_transforms import minify_transforms
from .style_data import StyleData, get_doc_data
from .svg_optimizer import minify_transforms_in_tree, optimize_svg_from_file, optimize_svg_from_str

__all__ = [
    "CSSParseError",
    "StyleData",
    "get_doc_data",
    "minify_transforms",
    "minify_transforms_in_tree",
    "optimize_svg_from_file",
    "optimize_svg_from_str",
    "parse_style_declarations",
    "parse_stylesheet",
]
