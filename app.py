import io
import logging
from dataclasses import asdict

from flask import Flask, jsonify, request, send_file, session

from racikpc.auth import AuthSession
from racikpc.config import Config, setup_logging
from racikpc.database import catalog_from_config
from racikpc.errors import AuthError, CatalogError, ExportError, InvalidPayloadError
from racikpc.exporter import export_filename, render_pdf
from racikpc.formatting import format_price
from racikpc.models import PartCategory
from racikpc.partlist import BuildSession

logger = logging.getLogger(__name__)

BUILD_KEY = "build"
TOKEN_KEY = "access_token"


def part_to_dict(part):
    data = asdict(part)
    data["category"] = part.category.value
    data["price_str"] = format_price(part.price)
    data["primary_link"] = part.primary_link
    data["spec_lines"] = part.spec_lines()
    return data


def build_to_dict(build):
    """Serializes a BuildSession for the manual builder dashboard."""
    return {
        "slots": {
            category.value: part_to_dict(part) if part else None
            for category, part in build.parts.items()
        },
        "total_price": build.get_total_price(),
        "total_price_str": format_price(build.get_total_price()),
        "issues": build.get_compatibility_issues(),
        "can_export": build.can_export(),
    }


def create_app(config=None, catalog=None, auth_factory=None):
    """
    Assembles the Flask app without starting it.

    :param config: A Config; read from the environment if omitted.
    :param catalog: The Catalog to serve parts from; built from config if omitted.
    :param auth_factory: Callable returning a fresh AuthSession-like object
                         per request; built from config if omitted.
    :return: The configured Flask app.
    """
    config = config or Config.from_env()
    catalog = catalog or catalog_from_config(config)
    if auth_factory is None:
        def auth_factory():
            return AuthSession(
                config.supabase_url, config.supabase_anon_key, timeout=config.request_timeout
            )

    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.secret_key

    # --- Helpers ---

    def load_build():
        """
        "Re-hydrates" the part ids stored in the session into a BuildSession.
        """
        return BuildSession.from_ids(session.get(BUILD_KEY, {}), catalog.list_parts())

    def save_build(build):
        session[BUILD_KEY] = build.selected_ids()

    def current_auth():
        auth = auth_factory()
        auth.restore(session.get(TOKEN_KEY))
        return auth

    def require_admin():
        auth = current_auth()
        if not auth.is_authenticated:
            return None, (jsonify(error="Login required"), 401)
        if not auth.is_admin:
            return None, (jsonify(error="Admin only"), 403)
        if hasattr(catalog, "set_access_token"):
            catalog.set_access_token(auth.access_token)
        return auth, None

    def require_writable():
        if not hasattr(catalog, "create_part"):
            return jsonify(error="Catalog is read-only"), 501
        return None

    def json_body():
        data = request.get_json(force=True, silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return None, (jsonify(error="Request body must be a JSON object"), 400)
        return data, None

    def parse_category(value):
        try:
            return PartCategory.parse(value), None
        except ValueError as e:
            return None, (jsonify(error=str(e)), 400)

    # --- Error handlers ---

    @app.errorhandler(InvalidPayloadError)
    def handle_invalid_payload(error):
        return jsonify(error=str(error)), 400

    @app.errorhandler(CatalogError)
    def handle_catalog_error(error):
        logger.error(f"Catalog write failed: {error}")
        return jsonify(error=str(error), code=error.code), 502

    @app.errorhandler(ExportError)
    def handle_export_error(error):
        return jsonify(error=str(error)), 400

    @app.errorhandler(AuthError)
    def handle_auth_error(error):
        return jsonify(error=str(error)), 401

    # --- Catalog ---

    @app.route("/api/components")
    def list_components():
        category = request.args.get("type")
        if category:
            category, error = parse_category(category)
            if error:
                return error
        parts = catalog.search_parts(category, request.args.get("q", ""))
        return jsonify([part_to_dict(p) for p in parts])

    @app.route("/api/components/<int:part_id>")
    def get_component(part_id):
        part = catalog.get_part(part_id)
        if not part:
            return jsonify(error="Component not found"), 404
        return jsonify(part_to_dict(part))

    @app.route("/api/monitors")
    def list_monitors():
        return jsonify([asdict(m) for m in catalog.list_monitors()])

    @app.route("/api/components", methods=["POST"])
    def create_component():
        denied = require_writable()
        if denied:
            return denied
        _, denied = require_admin()
        if denied:
            return denied
        data, error = json_body()
        if error:
            return error
        part = catalog.create_part(data)
        return jsonify(part_to_dict(part)), 201

    @app.route("/api/components/<int:part_id>", methods=["PUT"])
    def update_component(part_id):
        denied = require_writable()
        if denied:
            return denied
        _, denied = require_admin()
        if denied:
            return denied
        data, error = json_body()
        if error:
            return error
        part = catalog.update_part(part_id, data)
        return jsonify(part_to_dict(part))

    @app.route("/api/components/<int:part_id>", methods=["DELETE"])
    def delete_component(part_id):
        denied = require_writable()
        if denied:
            return denied
        _, denied = require_admin()
        if denied:
            return denied
        catalog.delete_part(part_id)
        return jsonify(success=True)

    # --- Manual builder ---

    @app.route("/api/build")
    def show_build():
        return jsonify(build_to_dict(load_build()))

    @app.route("/api/build/select", methods=["POST"])
    def select_part():
        """
        Puts a catalog part into its slot and returns the updated build.

        Body: {"category": "CPU", "part_id": 12}
        """
        data, error = json_body()
        if error:
            return error
        category, error = parse_category(data.get("category"))
        if error:
            return error

        try:
            part_id = int(data.get("part_id"))
        except (TypeError, ValueError):
            return jsonify(error="part_id must be an integer"), 400

        part = catalog.get_part(part_id)
        if not part:
            return jsonify(error="Component not found"), 404
        if part.category != category:
            return jsonify(error=f"{part.name} is not a {category.value}"), 400

        build = load_build()
        build.select_part(category, part)
        save_build(build)
        logger.info(f"Added {part.name} to build.")
        return jsonify(build_to_dict(build))

    @app.route("/api/build/clear", methods=["POST"])
    def clear_slot():
        data, error = json_body()
        if error:
            return error
        category, error = parse_category(data.get("category"))
        if error:
            return error
        build = load_build()
        build.clear_slot(category)
        save_build(build)
        return jsonify(build_to_dict(build))

    @app.route("/api/build/reset", methods=["POST"])
    def reset_build():
        session.pop(BUILD_KEY, None)
        return jsonify(build_to_dict(BuildSession()))

    @app.route("/api/build/pdf")
    def download_pdf():
        document = render_pdf(load_build())
        return send_file(
            io.BytesIO(document),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=export_filename(),
        )

    # --- Auth ---

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        data, error = json_body()
        if error:
            return error
        auth = auth_factory()
        user = auth.login(str(data.get("email") or "").strip(), str(data.get("password") or ""))
        session[TOKEN_KEY] = auth.access_token
        return jsonify(user=asdict(user))

    @app.route("/api/auth/logout", methods=["POST"])
    def logout():
        auth = current_auth()
        auth.logout()
        session.pop(TOKEN_KEY, None)
        return jsonify(success=True)

    @app.route("/api/auth/me")
    def me():
        user = current_auth().current_user()
        return jsonify(
            user=asdict(user) if user else None,
            is_authenticated=user is not None,
            is_admin=bool(user and user.is_admin),
        )

    return app


# --- Application Entry Point ---
if __name__ == "__main__":
    config = Config.from_env()
    setup_logging(config.log_level)
    app = create_app(config)
    app.run(host="0.0.0.0", port=10000)
