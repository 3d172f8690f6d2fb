"""Core Layer — domain types, item entity, responses, errors and validation.

Invariants:
    - Pure: no I/O, no imports from infrastructure/ or services/
"""
