from flask import Blueprint, request, jsonify, current_app
import uuid

from discovery.errors import InvalidLocationInput
from discovery.services.device_gateways import RequestLocationGateway
from discovery.services.filter_controller import DiscoveryFilterController
from discovery.services.location_history import clear_history
from discovery.services.location_input import POPULAR_LOCATIONS, RADIUS_OPTIONS, search_locations
from discovery.services.location_resolver import LocationResolver
from discovery.services.session_registry import SessionRegistry
from discovery.models import FilterState
from discovery.utils.settings import DiscoverySettings


def _parse_radius(value):
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def create_discovery_bp(content_store, location_store_factory, reverse_geocoder,
                        forward_geocoder=None, settings=None, sessions=None):
    """
    Create and return the discovery blueprint.

    One DiscoveryFilterController is kept per (user_id, session_id) so that
    location resolution runs once per Discover session and radius/toggle
    changes persist until the client asks for the feed again. Sessions live
    in a bounded SessionRegistry; idle or least recently used ones are
    evicted.
    """
    settings = settings or DiscoverySettings()
    discovery_bp = Blueprint("discovery_bp", __name__, url_prefix="/discover")
    if sessions is None:
        sessions = SessionRegistry(max_sessions=settings.max_sessions,
                                   idle_seconds=settings.session_idle_seconds)
    discovery_bp.sessions = sessions

    def _new_controller(user_id, gateway):
        location_store = location_store_factory(user_id)
        resolver = LocationResolver(
            permissions=gateway,
            gps=gateway,
            geocoder=reverse_geocoder,
            location_store=location_store,
            history_limit=settings.history_limit,
        )
        return DiscoveryFilterController(
            resolver=resolver,
            content_store=content_store,
            location_store=location_store,
            forward_geocoder=forward_geocoder,
            filter_state=FilterState(radius_miles=settings.default_radius_miles),
            history_limit=settings.history_limit,
        )

    @discovery_bp.route("/<user_id>/feed", methods=["GET"])
    async def get_feed(user_id):
        """
        API Route: /discover/<user_id>/feed
        Query Params:
          - session_id (optional): Discover session; a new one is issued if missing
          - permission: 'granted' or 'denied' (device foreground location permission)
          - lat, lon (optional): current device fix
        """
        session_id = request.args.get("session_id") or str(uuid.uuid4())
        session, created = sessions.get_or_create(
            (user_id, session_id),
            lambda: _new_controller(user_id, RequestLocationGateway.from_args(request.args)),
        )
        if created:
            current_app.logger.info(f"New discover session {session_id} for user {user_id}.")

        try:
            with session.lock:
                snapshot = await session.controller.load()
        except Exception as e:
            current_app.logger.error(f"Error loading discover feed for {user_id}: {e}", exc_info=True)
            return jsonify({"error": "Failed to load discover feed."}), 500

        payload = snapshot.to_dict()
        payload.update({"message": "Discover feed retrieved successfully", "session_id": session_id})
        return jsonify(payload), 200

    @discovery_bp.route("/<user_id>/filter", methods=["POST"])
    def update_filter(user_id):
        """Radius / toggle changes. Does not reload; call /feed again."""
        data = request.get_json(silent=True) or {}
        session_id = data.get("session_id")
        session = sessions.get((user_id, session_id))
        if session is None:
            return jsonify({"error": "Discover session not found"}), 404

        with session.lock:
            controller = session.controller
            if "radius_miles" in data:
                try:
                    controller.set_radius(_parse_radius(data["radius_miles"]))
                except ValueError as e:
                    return jsonify({"error": str(e)}), 400

            if data.get("toggle_radius_filter"):
                controller.toggle_radius_filter()
            filter_state = controller.filter_state.to_dict()

        return jsonify({
            "message": "Filter updated. Reload the feed to apply.",
            "session_id": session_id,
            "filter": filter_state,
        }), 200

    @discovery_bp.route("/<user_id>/location", methods=["POST"])
    async def set_location(user_id):
        data = request.get_json(silent=True) or {}
        session_id = data.get("session_id") or str(uuid.uuid4())
        session, _ = sessions.get_or_create(
            (user_id, session_id),
            lambda: _new_controller(user_id, RequestLocationGateway(permission_granted=False)),
        )

        try:
            with session.lock:
                if data.get("global"):
                    selection = await session.controller.use_global()
                else:
                    selection = await session.controller.choose_location(data.get("location"))
        except InvalidLocationInput as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:
            current_app.logger.error(f"Error setting location for {user_id}: {e}", exc_info=True)
            return jsonify({"error": "Failed to set location."}), 500

        current_app.logger.info(f"Session {session_id}: location set to {selection.to_dict()}")
        return jsonify({
            "message": "Location updated. Reload the feed to apply.",
            "session_id": session_id,
            "selection": selection.to_dict(),
        }), 200

    @discovery_bp.route("/<user_id>/location/history", methods=["GET"])
    async def get_location_history(user_id):
        try:
            history = await location_store_factory(user_id).load_history()
        except Exception as e:
            current_app.logger.error(f"Error retrieving location history for {user_id}: {e}", exc_info=True)
            return jsonify({"error": "Failed to retrieve location history."}), 500
        return jsonify({"user_id": user_id, "history": [h.to_dict() for h in history]}), 200

    @discovery_bp.route("/<user_id>/location/history", methods=["DELETE"])
    async def delete_location_history(user_id):
        try:
            await clear_history(location_store_factory(user_id))
        except Exception as e:
            current_app.logger.error(f"Error clearing location history for {user_id}: {e}", exc_info=True)
            return jsonify({"error": "Failed to clear location history."}), 500
        return jsonify({"message": "Location history cleared", "user_id": user_id}), 200

    @discovery_bp.route("/locations/search", methods=["GET"])
    def search():
        query = request.args.get("q", "")
        results = search_locations(query)
        return jsonify({"query": query, "results": [r.to_dict() for r in results]}), 200

    @discovery_bp.route("/options", methods=["GET"])
    def options():
        return jsonify({
            "radius_options": list(RADIUS_OPTIONS),
            "default_radius_miles": settings.default_radius_miles,
            "popular_locations": [p.to_dict() for p in POPULAR_LOCATIONS],
        }), 200

    @discovery_bp.route("/<user_id>/session/<session_id>", methods=["DELETE"])
    def end_session(user_id, session_id):
        session = sessions.pop((user_id, session_id))
        if session is None:
            return jsonify({"error": "Discover session not found"}), 404
        session.controller.dispose()
        return jsonify({"message": "Discover session closed", "session_id": session_id}), 200

    return discovery_bp
