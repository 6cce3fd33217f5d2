"""
dartlint analysis engine package.

Style and runtime-safety analysis for Dart sources, built on tree-sitter.
"""

from .types import (
    Diagnostic, RuleMeta, RuleDescriptor, Rule, RuleContext, SourceBuffer,
    PatternRule, StructuralRule, Severity, Category, RuleKind
)

from .errors import (
    DartLintError, ConfigError, DuplicateRuleError, PatternError,
    ParserUnavailableError, AnalysisCancelled
)

from .parser import SyntaxTree, parse

from .reparser import Edit, IncrementalReparser, apply_edit

from .registry import RuleRegistry, build_registry

from .results import AnalysisResult, DiagnosticStats

from .runner import AnalysisEngine, EngineState, analyze_file, evaluate_rule

from .config import (
    EngineConfig, RuleSetConfig, load_config, get_default_config, save_config, find_config_file
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "Diagnostic", "RuleMeta", "RuleDescriptor", "Rule", "RuleContext", "SourceBuffer",
    "PatternRule", "StructuralRule", "Severity", "Category", "RuleKind",

    # Errors
    "DartLintError", "ConfigError", "DuplicateRuleError", "PatternError",
    "ParserUnavailableError", "AnalysisCancelled",

    # Parsing
    "SyntaxTree", "parse", "Edit", "IncrementalReparser", "apply_edit",

    # Engine
    "RuleRegistry", "build_registry", "AnalysisResult", "DiagnosticStats",
    "AnalysisEngine", "EngineState", "analyze_file", "evaluate_rule",

    # Config
    "EngineConfig", "RuleSetConfig", "load_config", "get_default_config", "save_config", "find_config_file"
]
