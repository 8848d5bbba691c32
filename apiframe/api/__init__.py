"""API Layer — FastAPI adapter and error handlers.

Invariants:
    - Routes are generated from an ApiDefinition's route table (no hand-written paths)
    - All responses, including errors, are structured JSON
"""
