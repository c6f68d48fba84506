"""Services Layer — async operations over the ORM and external gateways.

Invariants:
    - Services raise PromptAtriumError subclasses; routes never build error responses
    - Mutating operations commit once at the end; helper services only flush
    - External clients (Stripe, Gemini, Anthropic, Sheets) injected, never constructed here

Design Decisions:
    - One class per aggregate taking (db, ...) so routes and tests compose them freely
    - Stripe webhook dispatch uses an explicit dict mapping (no auto-discovery)
"""
