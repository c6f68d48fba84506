"""HTTP layer — routers, request dependencies and error handlers.

Invariants:
    - Routers are included one by one in main.py
    - Caller identity resolved by api.dependencies, never inside a route body
"""
