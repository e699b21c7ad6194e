import os
import sqlite3
from decimal import Decimal

import click
from flask import Flask
from sqlalchemy import event

from .extensions import db, login_manager, migrate, mail


def _load_config(app, config_name=None):
    from config import CONFIGS

    env = (config_name or os.getenv("FLASK_ENV", "development")).lower()
    app.config.from_object(CONFIGS.get(env, CONFIGS["development"]))

    required = app.config.get("REQUIRED_SETTINGS") or ()
    missing = [key for key in required if not os.getenv(key)]
    if missing:
        raise RuntimeError("Missing required production settings: " + ", ".join(missing))


def _configure_sqlite(app):
    """Foreign keys on and real BEGIN/SAVEPOINT handling for pysqlite."""
    if not app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite"):
        return

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")


def _register_cli(app):
    @app.cli.command("add-daily-earnings")
    def add_daily_earnings():
        """Credit today's earning to every investor."""
        from .services.accrual import run_daily_accrual

        report = run_daily_accrual()
        click.echo(f"{report.message} paid={report.users_paid} skipped={report.users_skipped}")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.password_option()
    def create_admin(email, password):
        """Create an admin login, or promote an existing one."""
        from .models import User
        from .services import identity

        user = User.query.filter_by(email=email.strip().lower()).first()
        if user:
            user.is_admin = True
            db.session.commit()
            click.echo(f"{user.email} is now an admin.")
            return

        user = identity.signup(email, password, is_admin=True)
        click.echo(f"Admin {user.email} created (id={user.id}).")


def create_app(config_name=None):
    app = Flask(__name__, instance_relative_config=True)

    # ensure instance folder exists (Flask-managed)
    os.makedirs(app.instance_path, exist_ok=True)

    _load_config(app, config_name)

    # If using sqlite and path is relative, force it into instance_path (Windows-safe)
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if uri.startswith("sqlite:///") and not uri.startswith("sqlite:////"):
        db_file = os.path.join(app.instance_path, "app.db")
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + db_file.replace("\\", "/")

    # Init extensions
    db.init_app(app)
    sqlite3.register_adapter(Decimal, lambda d: str(d))
    _configure_sqlite(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)

    from .logger import configure_logging
    from .errors import register_error_handlers
    from .services.storage import build_storage

    configure_logging(app)
    register_error_handlers(app)
    app.extensions["envoearn.storage"] = build_storage(app)

    # Blueprints
    from .auth import auth_bp
    from .main import main_bp
    from .invest import invest_bp
    from .dashboard import dashboard_bp
    from .referrals import referral_bp
    from .admin import admin_bp
    from .cron import cron_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(invest_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(referral_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(cron_bp)

    _register_cli(app)

    return app
