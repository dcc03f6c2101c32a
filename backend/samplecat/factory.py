"""Application factory wiring Flask extensions, adapters and blueprints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Flask

from samplecat.core.config import BaseConfig, get_config
from samplecat.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | Mapping[str, Any] | object | None = None,
    *,
    components: dict[str, Any] | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Parameters
    ----------
    config:
        Config class, dotted import path or mapping. ``None`` selects the
        class named by ``APP_ENV``.
    components:
        Replacement adapters keyed like ``app.extensions``
        (``"image_store"``, ``"rate_limiter"``...).
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)

    if isinstance(config, Mapping):
        app.config.from_object(get_config())
        app.config.from_mapping(config)
    else:
        app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from samplecat.core import edge

    edge.init_proxy(app)

    from samplecat.core import extensions

    extensions.init_app(app)

    from samplecat.core import components as core_components

    core_components.init_app(app, overrides=components)

    # Request id first: admission logs (and 429s) carry it.
    init_logging(app)

    edge.init_cors(app)

    from samplecat.core import errors

    errors.init_app(app)

    from samplecat.core import admission

    admission.init_app(app)

    from samplecat.api import init_app as init_api

    init_api(app)

    from samplecat import cli as app_cli

    app_cli.init_app(app)

    return app
