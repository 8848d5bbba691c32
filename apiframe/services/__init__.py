"""Service Layer — the request pipeline and schema rendering built on core definitions."""
