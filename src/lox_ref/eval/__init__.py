"""Evaluator helper modules for the Lox runtime."""

__all__ = [
    "blocks",
    "expr",
    "fn",
    "helpers",
    "loops",
]
