"""
service.py — Movement Detector Microservice (Flask)
====================================================

Lightweight HTTP service that keeps one movement detector alive and lets
another process stream samples to it (e.g. a sensor bridge posting
accelerometer readings, a recognizer polling the current state).

Endpoints:
    GET  /health     — Service health check with a detector summary
    GET  /status     — Detector configuration and runtime state
    POST /predict    — Feed one sample: { "sample": [x, y, z] }
    POST /reset      — Reset runtime state
    POST /configure  — Change num_dimensions / thresholds / gamma / timeout
    POST /save       — Save detector: { "path": optional }
    POST /load       — Load detector: { "path": optional }

Every POST body must be a JSON object (or empty); anything else is a 400.

Run:
    python -m movement_detector.service
    # Starts on port 5051 by default (MOVEMENT_SERVICE_PORT env var)
"""

import logging

from flask import Flask, request, jsonify

from . import config
from .model import MovementDetector
from .utils import is_dimension, is_number, setup_logging

logger = logging.getLogger("movement.service")

_SETTERS = {
    "upper_threshold": "set_upper_threshold",
    "lower_threshold": "set_lower_threshold",
    "gamma": "set_gamma",
    "search_timeout": "set_search_timeout",
}


def create_app(detector: MovementDetector = None) -> Flask:
    """
    Build the Flask app around a single detector.

    Args:
        detector: Detector to serve. A default one is created when omitted.
    """
    app = Flask(__name__)
    app.config["DETECTOR"] = detector or MovementDetector()

    def _detector() -> MovementDetector:
        return app.config["DETECTOR"]

    def _json_body() -> dict | None:
        """Parsed JSON object, {} for an empty body, None for non-objects."""
        data = request.get_json(force=True, silent=True)
        if data is None:
            return {}
        return data if isinstance(data, dict) else None

    def _not_an_object():
        return jsonify({"error": "JSON body must be an object"}), 400

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "OK",
            "service": "Movement Detector",
            "detector": _detector().get_info(),
        })

    @app.route("/status", methods=["GET"])
    def status():
        return jsonify(_detector().to_dict())

    @app.route("/predict", methods=["POST"])
    def predict():
        """
        Feed one sample to the detector.

        Expects JSON body: { "sample": [v0, v1, ...] }

        Returns:
            Movement index, state and the event flags for this sample.
        """
        data = _json_body()
        if data is None:
            return _not_an_object()
        if "sample" not in data:
            return jsonify({"error": "No sample provided"}), 400

        det = _detector()
        if not det.predict(data["sample"]):
            return jsonify({
                "error": "Sample rejected",
                "num_dimensions": det.num_dimensions,
                "trained": det.is_trained,
            }), 400

        return jsonify({
            "movement_index": det.movement_index,
            "state": det.state.name,
            "state_id": int(det.state),
            "movement_detected": det.movement_detected,
            "no_movement_detected": det.no_movement_detected,
        })

    @app.route("/reset", methods=["POST"])
    def reset():
        _detector().reset()
        return jsonify({"status": "reset", "state": _detector().state.name})

    @app.route("/configure", methods=["POST"])
    def configure():
        """
        Update detector configuration.

        All fields are checked before any is applied, so a rejected
        request leaves the detector as it was. Changing num_dimensions
        resets the detector; threshold, gamma and timeout changes take
        effect on the next sample without a reset.
        """
        data = _json_body()
        if data is None:
            return _not_an_object()

        if "num_dimensions" in data and not is_dimension(data["num_dimensions"]):
            return jsonify({"error": "Invalid num_dimensions"}), 400
        for key in _SETTERS:
            if key in data and not is_number(data[key]):
                return jsonify({"error": f"Invalid {key}"}), 400

        det = _detector()
        if "num_dimensions" in data:
            det.configure(data["num_dimensions"])
        for key, setter in _SETTERS.items():
            if key in data:
                getattr(det, setter)(data[key])

        logger.info(f"Detector reconfigured: {data}")
        return jsonify(det.to_dict())

    @app.route("/save", methods=["POST"])
    def save():
        data = _json_body()
        if data is None:
            return _not_an_object()
        path = data.get("path")
        if not _detector().save_model(path):
            return jsonify({"status": "failed", "message": "Save failed"}), 500
        return jsonify({"status": "saved", "path": path or config.MODEL_PATH})

    @app.route("/load", methods=["POST"])
    def load():
        data = _json_body()
        if data is None:
            return _not_an_object()
        if not _detector().load_model(data.get("path")):
            return jsonify({"status": "failed", "message": "Load failed"}), 500
        return jsonify({"status": "loaded", "detector": _detector().to_dict()})

    return app


if __name__ == "__main__":
    setup_logging()
    app = create_app()
    logger.info(f"Starting movement detector service on port {config.SERVICE_PORT}")
    app.run(host="0.0.0.0", port=config.SERVICE_PORT, debug=False)
