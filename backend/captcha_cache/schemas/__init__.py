"""Schemas — Pydantic request/response models at the store boundary.

Invariants:
    - Models validate shape only; no IO

Design Decisions:
    - Pydantic v2 for JSON round-trips (ADR: one serializer for payloads and replies)
"""
