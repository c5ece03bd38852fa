"""Flask web application for vehicle and tyre records."""

import logging
import os
from pathlib import Path

from flask import Flask, current_app, flash, g, redirect, render_template, request, url_for
from flask_bcrypt import Bcrypt

from autobuddy.auth import DEFAULT_TOKEN_TTL, AuthContext, IdentityProvider
from autobuddy.errors import AuthError, StoreError
from autobuddy.guard import DASHBOARD_PATH, LOGIN_PATH, GuardDecision, decide
from autobuddy.store import DocumentStore
from autobuddy.tyre import TYRE_TYPES
from autobuddy.vehicle import VEHICLE_TYPES
from autobuddy.view_state import ViewState
from autobuddy.views import VehicleDetailView, VehicleListView, detail_path

ACCOUNTS_FILE = "accounts.yaml"


def get_store() -> DocumentStore:
    return current_app.extensions["autobuddy"]["store"]


def get_identity() -> IdentityProvider:
    return current_app.extensions["autobuddy"]["identity"]


def format_value(value):
    """Show a dash for empty fields."""
    return value if value else "—"


def create_app(test_config=None):
    """Build the app. ``test_config`` overrides the environment-derived config."""
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod"),
        DATA_DIR=os.environ.get("AUTOBUDDY_DATA_DIR", str(Path.cwd() / "data")),
        AUTH_COOKIE_NAME=os.environ.get("AUTH_COOKIE_NAME", "auth"),
        AUTH_TOKEN_TTL=int(os.environ.get("AUTH_TOKEN_TTL", DEFAULT_TOKEN_TTL)),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    data_dir = Path(app.config["DATA_DIR"])
    identity = IdentityProvider(
        data_dir / ACCOUNTS_FILE,
        app.config["SECRET_KEY"],
        token_ttl=app.config["AUTH_TOKEN_TTL"],
        bcrypt=Bcrypt(app),
    )
    app.extensions["autobuddy"] = {"store": DocumentStore(data_dir), "identity": identity}
    cookie_name = app.config["AUTH_COOKIE_NAME"]

    app.jinja_env.filters["detail_path"] = detail_path
    app.jinja_env.filters["format_value"] = format_value

    # -------------------------------------------------------------------------
    # Request lifecycle: guard, then per-request auth context
    # -------------------------------------------------------------------------

    @app.before_request
    def guard_request():
        """Redirect between auth pages and the dashboard before any fetch."""
        has_credential = cookie_name in request.cookies
        decision = decide(request.path, has_credential)
        if decision is GuardDecision.REDIRECT_LOGIN:
            return redirect(LOGIN_PATH)
        if decision is GuardDecision.REDIRECT_DASHBOARD:
            return redirect(DASHBOARD_PATH)
        return None

    @app.before_request
    def start_auth_context():
        g.auth = AuthContext(get_identity()).start(request.cookies.get(cookie_name))

    @app.teardown_request
    def close_auth_context(exc):
        auth = g.pop("auth", None)
        if auth is not None:
            auth.close()

    def sign_in_again():
        """The cookie did not resolve to a user: drop it and go to login."""
        flash("Your session has expired. Please sign in again.", "error")
        response = redirect(LOGIN_PATH)
        response.delete_cookie(cookie_name)
        return response

    def signed_in(user, credential):
        response = redirect(DASHBOARD_PATH)
        response.set_cookie(
            cookie_name,
            credential,
            max_age=app.config["AUTH_TOKEN_TTL"],
            httponly=True,
            samesite="Lax",
        )
        app.logger.info("User %s signed in", user.uid)
        return response

    # -------------------------------------------------------------------------
    # Auth pages
    # -------------------------------------------------------------------------

    @app.route("/")
    def index():
        return redirect(DASHBOARD_PATH)

    @app.route("/login", methods=["GET", "POST"])
    def login():
        """Sign-in form."""
        if request.method == "GET":
            return render_template("login.html")
        email = request.form.get("email", "")
        try:
            user, credential = get_identity().sign_in(email, request.form.get("password", ""))
        except AuthError as e:
            flash(str(e), "error")
            return render_template("login.html", email=email), 401
        except StoreError:
            app.logger.exception("Sign-in failed")
            flash("Sign-in is unavailable. Please try again.", "error")
            return render_template("login.html", email=email), 503
        return signed_in(user, credential)

    @app.route("/register", methods=["GET", "POST"])
    def register():
        """Account creation form."""
        if request.method == "GET":
            return render_template("register.html")
        email = request.form.get("email", "")
        password = request.form.get("password", "")
        if password != request.form.get("confirm_password", password):
            flash("Passwords do not match", "error")
            return render_template("register.html", email=email), 400
        try:
            user, credential = get_identity().register(email, password)
        except AuthError as e:
            flash(str(e), "error")
            return render_template("register.html", email=email), 400
        except StoreError:
            app.logger.exception("Registration failed")
            flash("Registration is unavailable. Please try again.", "error")
            return render_template("register.html", email=email), 503
        return signed_in(user, credential)

    @app.route("/logout", methods=["POST"])
    def logout():
        get_identity().sign_out(request.cookies.get(cookie_name))
        response = redirect(LOGIN_PATH)
        response.delete_cookie(cookie_name)
        return response

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    @app.route("/dashboard")
    def dashboard():
        return redirect(url_for("vehicles"))

    @app.route("/dashboard/vehicles", methods=["GET", "POST"])
    def vehicles():
        """Vehicle table; POST submits the add-vehicle dialog."""
        user = g.auth.user
        if user is None:
            return sign_in_again()

        view = VehicleListView(get_store(), user, notify=flash)
        view.load()

        if request.method == "POST":
            if view.create(request.form):
                return redirect(url_for("vehicles"))
        elif request.args.get("add"):
            view.open_dialog()

        return render_template(
            "vehicles.html",
            view=view,
            vehicles=view.vehicles,
            form=view.form,
            vehicle_types=VEHICLE_TYPES,
            tyre_types=TYRE_TYPES,
            ViewState=ViewState,
        )

    @app.route("/dashboard/vehicles/<plate>")
    def vehicle_detail(plate: str):
        """Read-only vehicle page."""
        user = g.auth.user
        if user is None:
            return sign_in_again()

        view = VehicleDetailView(get_store(), user, notify=flash)
        state = view.load(plate)

        if state is ViewState.READY:
            return render_template("vehicle.html", vehicle=view.vehicle)
        if state is ViewState.NOT_FOUND:
            return render_template("vehicle_missing.html", title="Vehicle Not Found"), 404
        return render_template("vehicle_missing.html", title="Vehicle Unavailable"), 500

    return app


if __name__ == "__main__":
    # Run with debug mode for development
    create_app().run(debug=True, host="0.0.0.0", port=5001)
