"""
RIFT expression pipeline stages.

Classifier, tokenizer, parser, AST coordinator, and renderer for the
four-operator arithmetic language.

Usage:
    from rift.core.expression_lang import parse, render, tokenize
    from rift.core.governance import Governance, Stage

    rules = Governance.default().get_pattern_rules(Stage.TOKENIZER)
    ast = parse(tokenize(rules, "x + 2 * y"))
    print(render(ast))
"""

from rift.core.expression_lang.classifier import PatternClassifier, classify
from rift.core.expression_lang.coordinator import AstCoordinator, coordinate, node_count
from rift.core.expression_lang.parser import Parser, parse
from rift.core.expression_lang.passes import PassRegistry, default_registry, fold_constants
from rift.core.expression_lang.renderer import Renderer, render, render_document, render_json
from rift.core.expression_lang.tokenizer import Tokenizer, tokenize

__all__ = [
    "AstCoordinator",
    "Parser",
    "PassRegistry",
    "PatternClassifier",
    "Renderer",
    "Tokenizer",
    "classify",
    "coordinate",
    "default_registry",
    "fold_constants",
    "node_count",
    "parse",
    "render",
    "render_document",
    "render_json",
    "tokenize",
]
