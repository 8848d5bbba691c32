"""apiframe — declare an API surface as metadata, execute requests against it, reflect it as a schema.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
