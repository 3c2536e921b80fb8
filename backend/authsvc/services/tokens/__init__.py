"""Token lifecycle engine: issuance, validation, refresh, revocation and cleanup."""
