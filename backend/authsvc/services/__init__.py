"""Service layer: token lifecycle engine and the authentication use cases built on it."""
