"""LLM integration layer.

This package is intentionally small:
- No prompt/output logging (mood text is personal).
- Configured through `Settings`, never by reading the environment directly.
- Treated as a pure/stateless function by callers.
"""
