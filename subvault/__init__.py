"""SubVault Application Package: encrypted credential and subscription vault.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
