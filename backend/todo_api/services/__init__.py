"""Services Layer — the imperative shell of the mutation pipeline.

Invariants:
    - mutation_pipeline: explicit validation and id checks (no store access)
    - check_integrity: read-only cross-entity checks returning typed violations
    - mutation_executor: the only module that writes to the store

Design Decisions:
    - One module per pipeline stage for locality
"""
