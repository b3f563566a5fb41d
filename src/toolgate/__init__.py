"""Tool Invocation Gateway.

Named tools behind a single JSON endpoint, with an append-only ledger of
every invocation.
"""

__version__ = "0.1.0"
