"""Application factory for the token service."""

from __future__ import annotations

from collections.abc import Callable
from importlib import import_module
from typing import Any

from flask import Flask

from authsvc.core.config import BaseConfig, get_config, validate_config
from authsvc.core.logger import configure_logging

# ``module:function`` init hooks, applied in order. Error handlers go last so
# they also cover exceptions raised by blueprints registered before them.
INIT_HOOKS: tuple[str, ...] = (
    "authsvc.core.proxy:init_app",
    "authsvc.core.extensions:init_app",
    "authsvc.core.logger:init_app",
    "authsvc.core.cors:init_app",
    "authsvc.services.tokens.service:init_app",
    "authsvc.api:init_app",
    "authsvc.core.errors:init_app",
    "authsvc.cli:init_app",
)


def _resolve(hook: str) -> Callable[[Flask], None]:
    module_name, _, attr = hook.partition(":")
    return getattr(import_module(module_name), attr)


def _shell_context() -> dict[str, Any]:
    """Objects preloaded in ``flask shell`` for operating on tokens by hand."""
    from authsvc.core.extensions import db
    from authsvc.models import TokenMetadata, User
    from authsvc.services.tokens.service import get_token_service

    return {
        "db": db,
        "User": User,
        "TokenMetadata": TokenMetadata,
        "tokens": get_token_service(),
    }


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build and configure the Flask application.

    :param config: Config object or import path; defaults to the class picked
        by ``APP_ENV``.
    :param instance_relative_config: Also read ``instance/<filename>`` when present.
    :param instance_config_filename: Instance config file name.
    :raises RuntimeError: If the token settings are unusable.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(config if config is not None else get_config())
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    # Fail before binding anything to a misconfigured signer
    validate_config(app.config)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    for hook in INIT_HOOKS:
        _resolve(hook)(app)

    app.shell_context_processor(_shell_context)
    return app
