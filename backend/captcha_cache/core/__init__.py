"""Core Layer — error taxonomy, command catalog, and pure reply decoders.

Invariants:
    - Core never imports from infrastructure/ (dependency arrows point inward only)
    - Core functions are pure: no IO, no network, no logging side effects

Design Decisions:
    - Decoders live in core so they are testable without a store (ADR: impureim sandwich)
"""
