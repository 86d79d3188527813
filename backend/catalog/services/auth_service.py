import logging

from catalog.core.config import settings
from catalog.core.exceptions import UnauthorizedError
from catalog.core.security import constant_time_equals, create_access_token

logger = logging.getLogger(__name__)


def login(username: str, password: str) -> str:
    """Check admin credentials and issue an access token."""
    username_ok = constant_time_equals(username, settings.admin_username)
    password_ok = constant_time_equals(password, settings.admin_password)
    if not (username_ok and password_ok):
        logger.warning("Failed admin login attempt for username=%r", username)
        raise UnauthorizedError("Invalid username or password")

    logger.info("Admin login: %s", username)
    return create_access_token(username)
