"""Flask HTTP server for the car inventory demo.

This module implements a small JSON service whose routes are also served as
HTML tables through the ``.html`` suffix.
"""

import logging
from flask import Flask, Response, jsonify, redirect, request, url_for

from transform_table.config import Config
from transform_table.extension import TransformTable

# Configure logging
logger = logging.getLogger(__name__)

SESSION_COOKIE = "inventory-login"

CARS = [
    {"car": "Audi", "price": 40000, "color": "blue", "colors": ["blue", "black"]},
    {
        "car": "BMW",
        "price": 35000,
        "color": "black",
        "colors": ["magenta", "muave", "cyan"],
    },
    {"car": "Porsche", "price": 60000, "color": "green", "colors": ["lime"]},
]


def price_listing(entry: dict) -> dict:
    """Project a car record onto the public price list."""
    return {"Transport": entry["car"], "Price": f"${entry['price']:.2f}"}


def create_app(config: Config) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Configuration instance

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    # Keep payload key order so table columns follow the records
    app.json.sort_keys = False
    transform = TransformTable(app, **config.render_defaults())

    @app.route("/", methods=["GET"])
    def health_check():
        """Health check endpoint.

        GET / - Health check

        Returns:
            200: OK
        """
        return Response("OK\n", status=200, mimetype="text/plain")

    @app.route("/cars", methods=["GET"])
    @transform.route_settings(datatable=True, title="Inventory")
    def list_cars():
        """List cars, optionally filtered by color.

        GET /cars?color=<color> - JSON list
        GET /cars.html?color=<color> - HTML table

        Returns:
            200: List of cars
        """
        color = request.args.get("color")
        cars = [car for car in CARS if color is None or car["color"] == color]
        logger.info(f"Listing {len(cars)} cars (color={color})")
        return jsonify(cars)

    @app.route("/cars/prices", methods=["GET"])
    @transform.route_settings(map_data=price_listing, exclude_sub_arrays=True)
    def list_prices():
        """Price list, projected for the table view."""
        return jsonify(CARS)

    @app.route("/cars/<name>", methods=["GET"])
    def get_car(name: str):
        """Retrieve a single car.

        Returns:
            200: Car record
            404: Not found
        """
        for car in CARS:
            if car["car"].lower() == name.lower():
                return jsonify(car)
        logger.info(f"Car not found: {name}")
        return jsonify({"error": f"Car {name} does not exist"}), 404

    @app.route("/ping", methods=["GET"])
    def ping():
        """Liveness probe with an empty body."""
        return Response(status=204)

    @app.route("/account", methods=["GET"])
    def account():
        """Account details, login required.

        Returns:
            200: Account record
            302: Redirect to the login page
        """
        if request.cookies.get(SESSION_COOKIE) is None:
            return redirect(f"{url_for('login')}?next={request.path}")
        return jsonify({"user": request.cookies[SESSION_COOKIE], "cars": len(CARS)})

    @app.route("/login", methods=["GET"])
    def login():
        """Login page placeholder."""
        return Response("Login required\n", status=200, mimetype="text/plain")

    return app


def run_server(config: Config) -> None:
    """Run the Flask HTTP server.

    Args:
        config: Configuration instance
    """
    app = create_app(config)

    logger.info(f"Starting HTTP server on all interfaces, port {config.listen_port}")
    app.run(host="0.0.0.0", port=config.listen_port, debug=False)  # nosec B104
