"""Persistence base — the declarative Base every PromptAtrium table hangs off.

Engines and sessions live in infrastructure/database.py; this package only holds
metadata shared by models, alembic and the test fixtures.
"""
