"""Todo API Package — Users and Tasks behind a validated mutation pipeline.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
