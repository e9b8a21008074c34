"""
Chat orchestration: intent dispatch, partial-failure aggregation and
text rendering.

Renderers are pure functions; all I/O happens in the provider adapters that
the dispatcher invokes.
"""
