"""Infrastructure Layer — redis-py clients and cross-cutting concerns.

Invariants:
    - Infrastructure imports core/ types, never the reverse
    - All external calls wrapped with error mapping (no retries)

Design Decisions:
    - Two layers over the raw client: Store (transport) and CaptchaStore (module semantics)
      (ADR: ExMA single responsibility)
"""
