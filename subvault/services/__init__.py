"""Services: vault-scoped operations shared by routes (credential sealing, AI flows)."""
