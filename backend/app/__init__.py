"""PromptAtrium backend — prompt library, communities, credits and marketplace API.

Nothing runs on import; the ASGI app lives in app.main and scripts under app.scripts.
"""
