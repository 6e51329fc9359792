from flask import Flask, jsonify
import os

from discovery.routes.discovery_routes import create_discovery_bp
from discovery.utils.settings import DiscoverySettings


def create_app(content_store, location_store_factory, reverse_geocoder,
               forward_geocoder=None, settings=None):
    app = Flask(__name__)
    app.secret_key = os.environ.get('FLASK_SECRET_KEY', 'a_fallback_secret_key_for_dev_only')
    settings = settings or DiscoverySettings.from_env()

    # ✅ Register Blueprints
    discovery_bp = create_discovery_bp(
        content_store,
        location_store_factory,
        reverse_geocoder,
        forward_geocoder=forward_geocoder,
        settings=settings,
    )
    app.register_blueprint(discovery_bp)

    @app.route('/')
    def home():
        return jsonify({"message": "Server is working!"})

    return app
