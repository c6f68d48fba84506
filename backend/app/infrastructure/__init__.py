"""Infrastructure — database sessions, logging and third-party clients.

Invariants:
    - Every provider client (Stripe, Gemini, Anthropic, Google Sheets) maps its SDK
      failures onto an ExternalServiceError subclass
    - Pillow decoding lives here so core.image_metadata stays byte-free
"""
