"""
llm-copy - bundle source files into one annotated blob for LLM ingestion.

This package walks the given paths, keeps files whose names match an
allow-list (respecting git ignore rules when inside a work tree), and hands
the concatenated result to the macOS clipboard as text or as a file.
"""

__version__ = "0.2.0"
__author__ = "llm-copy contributors"
