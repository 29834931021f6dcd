import logging
import uuid

from flask import Flask, jsonify
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import load_settings
from .exceptions import ClientInputError
from .logger import setup_logger
from .models import Base
from .service import AlertService

logger = logging.getLogger(__name__)


def create_app(settings=None, service=None):
    """
    Build the Flask app.

    ``service`` may be injected (tests, alternative stores); otherwise one is
    wired against ``settings.database_url``.
    """
    settings = settings or load_settings()
    setup_logger("lowstockalert", settings.log_level, settings.log_file)

    app = Flask(__name__)
    engine = create_engine(settings.database_url, pool_pre_ping=True)
    app.extensions["lowstockalert.engine"] = engine

    if service is None:
        service = AlertService.from_settings(sessionmaker(bind=engine), settings)
    app.extensions["lowstockalert.service"] = service

    @app.route("/api/companies/<company_id>/alerts/low-stock", methods=["GET"])
    def get_low_stock_alerts(company_id):
        """
        Low stock alerts for a company across all of its warehouses.

        Returns:
            200 {"alerts": [...], "total_alerts": n}
            400 {"error": ...} for a malformed company id
            500 {"error": ..., "request_id": ...} for store failures
        """
        try:
            batch = service.get_low_stock_alerts(company_id)
        except ClientInputError as e:
            return jsonify({"error": e.message}), 400
        except Exception as e:
            request_id = str(uuid.uuid4())
            # Don't expose internal errors to client
            logger.error(f"Error generating low stock alerts [{request_id}]: {e}", exc_info=True)
            return jsonify({
                "error": "An error occurred while generating alerts",
                "request_id": request_id,
            }), 500

        return jsonify(batch.to_dict()), 200

    @app.cli.command("init-db")
    def init_db():
        """Create the inventory tables if they do not exist."""
        Base.metadata.create_all(engine)
        logger.info(f"Created tables on {engine.url.render_as_string(hide_password=True)}")

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
