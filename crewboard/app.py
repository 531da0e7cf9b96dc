"""Application factory for the Crewboard scheduling grid."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import click
from flask import Flask, jsonify, redirect, url_for
from flask.cli import with_appcontext
from flask.typing import ResponseReturnValue

from .blueprints.contractors.routes import bp as contractors_bp
from .blueprints.groups.routes import bp as groups_bp
from .blueprints.schedule.routes import bp as schedule_bp
from .blueprints.technicians.routes import bp as technicians_bp
from .config import DEFAULT_CONFIG, SETTINGS_ENV, load_config
from .dao import db as db_module
from .domain.payloads import PayloadError
from .services import schedule_service

logger = logging.getLogger(__name__)


def create_app(config: dict[str, Any] | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(DEFAULT_CONFIG)

    settings_path = os.environ.get(SETTINGS_ENV)
    if settings_path:
        app.config.update(load_config(settings_path))

    if config:
        app.config.update(config)

    database_path = app.config.get(
        "DATABASE",
        Path(app.instance_path) / "crewboard.sqlite",
    )
    if isinstance(database_path, Path):
        database_path = str(database_path)
    app.config["DATABASE"] = database_path

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    logging.getLogger("crewboard").setLevel(app.config["LOG_LEVEL"])

    db_module.init_app(app)
    if app.config["AUTO_INIT_DB"]:
        db_module.ensure_schema(app)

    app.register_blueprint(schedule_bp)
    app.register_blueprint(groups_bp)
    app.register_blueprint(contractors_bp)
    app.register_blueprint(technicians_bp)
    app.cli.add_command(seed_holidays_command)

    @app.errorhandler(PayloadError)
    def payload_error(exc: PayloadError) -> ResponseReturnValue:
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(db_module.DatabaseError)
    def database_error(exc: db_module.DatabaseError) -> ResponseReturnValue:
        logger.error("Database error: %s", exc)
        return jsonify({"error": "Database error"}), 500

    @app.get("/")
    def index() -> ResponseReturnValue:
        return redirect(url_for("schedule.grid"))

    @app.get("/healthz")
    def healthcheck() -> tuple[str, int]:
        return "OK", 200

    return app


@click.command("seed-holidays")
@click.argument("year", type=int)
@with_appcontext
def seed_holidays_command(year: int) -> None:
    """Load the Australian public holidays of YEAR."""
    count = schedule_service.seed_holidays(year)
    click.echo(f"Seeded {count} holidays for {year}.")
