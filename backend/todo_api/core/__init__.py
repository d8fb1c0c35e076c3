"""Core Layer — domain types, the error taxonomy, and error normalisation.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: types and error mapping are
      testable without a database or an HTTP client
"""
