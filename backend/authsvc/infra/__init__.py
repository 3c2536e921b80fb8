"""Concrete adapters for the service-layer ports (PyJWT signing, SQLAlchemy persistence)."""
