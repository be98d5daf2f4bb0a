"""Tablekeeper - Event Logger.

Structured security events for authentication and authorization.
Credentials never appear in these records: only ids and outcomes.
"""

from loguru import logger


def log_user_registered(user_id: str, username: str) -> None:
    logger.info(
        "User registered",
        event="auth.registered",
        subject_id=user_id,
        username=username,
    )


def log_login_succeeded(user_id: str) -> None:
    logger.info("Login succeeded", event="auth.login.succeeded", subject_id=user_id)


def log_login_failed(reason: str) -> None:
    """Log a failed login attempt.

    Args:
        reason: ``unknown_email`` or ``wrong_password``; never returned to the client.
    """
    logger.warning("Login failed", event="auth.login.failed", reason=reason)


def log_refresh_rotated(user_id: str) -> None:
    logger.debug("Refresh token rotated", event="auth.refresh.rotated", subject_id=user_id)


def log_refresh_reuse_detected(user_id: str, revoked: int) -> None:
    """Log reuse of an already consumed refresh token.

    Args:
        user_id: Owner of the reused token
        revoked: Number of outstanding tokens revoked as a consequence
    """
    logger.warning(
        "Refresh token reuse detected",
        event="auth.refresh.reuse",
        subject_id=user_id,
        revoked=revoked,
    )


def log_logout(user_id: str, revoked: int) -> None:
    logger.info("Logout", event="auth.logout", subject_id=user_id, revoked=revoked)


def log_unknown_constraint(constraint: str | None, func_name: str) -> None:
    """Log an integrity violation that has no domain mapping yet."""
    logger.error(
        "Unmapped constraint violation",
        event="db.constraint.unknown",
        constraint=constraint or "<unknown>",
        function=func_name,
    )
