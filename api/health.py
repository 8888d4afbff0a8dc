import logging

from flask import Blueprint
from sqlalchemy import text

from api import auth_components
from utils.exceptions import StorageError

logger = logging.getLogger(__name__)

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Liveness plus a database round trip
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
        schema:
          type: object
          properties:
            status: { type: string, example: ok }
            database: { type: string, example: ok }
      503:
        description: Database unavailable
    """
    try:
        auth_components().storage.run(lambda session: session.execute(text("SELECT 1")))
    except StorageError:
        logger.warning("Health check: database unavailable")
        return {"status": "degraded", "database": "unavailable"}, 503
    return {"status": "ok", "database": "ok"}, 200
