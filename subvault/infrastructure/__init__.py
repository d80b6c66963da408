"""Infrastructure Layer: database, cipher, tokens, chat client, rate limits, logging.

Invariants:
    - Infrastructure never imports route modules
    - External failures are mapped to SubVaultError subclasses (core/errors.py)
"""
