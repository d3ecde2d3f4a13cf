import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from ..database import Database
from ..init_db import get_database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/debug", tags=["Debug"])

@router.get("/db-test")
async def db_test(database: Database = Depends(get_database)):
    """
    Test if database connection is working.
    """
    try:
        logger.info("Testing database connection")
        return {"ok": await database.ping()}
    except SQLAlchemyError as e:
        logger.error(f"Database connection test failed: {e}")
        return {"ok": False, "error": str(e)}
