"""Core — pure rules for commissions, credits, hierarchy paths, prompt parsing and image metadata.

Invariants:
    - Nothing here touches the database, the network or the event loop
    - Clocks and randomness arrive as parameters (or from id helpers kept at the edge)

Design Decisions:
    - Services load rows, ask core what to do, then write; core is tested without fixtures
"""
