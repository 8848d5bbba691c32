"""Core Layer — definitions, argument parsing, authenticator resolution, collation.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - Definitions are frozen once built; request-time state lives in http_types
"""
