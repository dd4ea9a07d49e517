"""DISCERN rubric evaluation with a language model."""

from __future__ import annotations

from .evaluator import RubricEvaluator, is_transient
from .parser import extract_json_object, normalize_type, parse_evaluation
from .prompts import SYSTEM_PROMPT, build_user_prompt
from .strategies import (
    BackgroundResponseStrategy,
    ChatCompletionStrategy,
    EvaluationStrategy,
    build_strategies,
    create_client,
)

__all__ = [
    "BackgroundResponseStrategy",
    "ChatCompletionStrategy",
    "EvaluationStrategy",
    "RubricEvaluator",
    "SYSTEM_PROMPT",
    "build_strategies",
    "build_user_prompt",
    "create_client",
    "extract_json_object",
    "is_transient",
    "normalize_type",
    "parse_evaluation",
]
