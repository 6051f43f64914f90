"""Prompting package.

This package contains deterministic prompt-construction helpers used by the
LLM-backed response generator. It does not perform retrieval, plugin dispatch,
or model invocation.
"""
