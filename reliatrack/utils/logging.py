"""
structlog setup and the loggers shared by routes and services.

Every line carries the ``request_id`` bound by the HTTP middleware, so the
access log, service events and audit events of one request can be joined.
"""

import logging
import sys
from typing import Any
from uuid import uuid4

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from reliatrack.config.settings import settings
from reliatrack.utils.security import mask_email

# Libraries that log every statement or request on their own
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "stripe")


def drop_empty_fields(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    return {key: value for key, value in event_dict.items() if value is not None}


def setup_logging() -> None:
    """JSON lines when LOG_FORMAT=json, colored console output otherwise."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        drop_empty_fields,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        renderers: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class RequestLogger:
    """Access log for the HTTP middleware."""

    def __init__(self):
        self.logger = get_logger("request")

    def bind(self, request_id: str | None = None) -> str:
        """
        Start a fresh log context for one request.

        Args:
            request_id: Incoming ``X-Request-ID``; a new one is generated if missing

        Returns:
            The request id now attached to every log line
        """
        request_id = request_id or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        return request_id

    def log_request(self, method: str, path: str, client_ip: str | None = None) -> None:
        self.logger.info("request_received", method=method, path=path, client_ip=client_ip)

    def log_response(self, method: str, path: str, status_code: int, duration_ms: float) -> None:
        log_method = self.logger.info if status_code < 400 else self.logger.warning
        log_method(
            "request_completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
        )


class AuditLogger:
    """
    Audit trail: logins, deletes, membership and role changes, claims and
    billing events. Emails are masked before they are written.
    """

    def __init__(self):
        self.logger = get_logger("audit")

    def log_action(
        self,
        action: str,
        user_id: str | None,
        organization_id: str | None,
        resource_type: str,
        resource_id: str | None = None,
        old_values: dict | None = None,
        new_values: dict | None = None,
        metadata: dict | None = None,
    ) -> None:
        """
        Record a change to an asset, organization, membership or listing.

        Args:
            action: What happened (delete, status_change, role_change, claim, ...)
            user_id: Acting user
            organization_id: Organization the resource belongs to, if any
            resource_type: asset, organization, member, invitation, provider ...
            resource_id: Affected row
            old_values: Fields before the change
            new_values: Fields after the change
            metadata: Anything else worth keeping
        """
        self.logger.info(
            "audit_event",
            action=action,
            user_id=user_id,
            organization_id=organization_id,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
            metadata=metadata,
        )

    def log_login(
        self,
        email: str,
        success: bool,
        user_id: str | None = None,
        reason: str | None = None,
    ) -> None:
        log_method = self.logger.info if success else self.logger.warning
        log_method(
            "login_attempt",
            email=mask_email(email),
            user_id=user_id,
            success=success,
            reason=reason,
        )

    def log_permission_denied(
        self,
        user_id: str,
        organization_id: str | None,
        resource_type: str,
        action: str,
        reason: str | None = None,
    ) -> None:
        self.logger.warning(
            "permission_denied",
            user_id=user_id,
            organization_id=organization_id,
            resource_type=resource_type,
            action=action,
            reason=reason,
        )

    def log_billing_event(
        self,
        event_type: str,
        event_id: str | None,
        user_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Stripe webhook or subscription change; ``event_id`` is None for API-initiated ones."""
        self.logger.info(
            "billing_event",
            event_type=event_type,
            event_id=event_id,
            user_id=user_id,
            **kwargs,
        )


class ServiceLogger:
    """Events named ``<operation>_started|_completed|_failed`` under ``service.<name>``."""

    def __init__(self, service_name: str):
        self.logger = get_logger(f"service.{service_name}")
        self.service_name = service_name

    def log_operation_start(self, operation: str, user_id: str | None = None, **kwargs: Any) -> None:
        self.logger.info(
            f"{operation}_started",
            service=self.service_name,
            user_id=user_id,
            **kwargs,
        )

    def log_operation_complete(
        self,
        operation: str,
        user_id: str | None = None,
        duration_ms: float | None = None,
        **kwargs: Any,
    ) -> None:
        if duration_ms is not None:
            duration_ms = round(duration_ms, 2)
        self.logger.info(
            f"{operation}_completed",
            service=self.service_name,
            user_id=user_id,
            duration_ms=duration_ms,
            **kwargs,
        )

    def log_operation_failed(
        self,
        operation: str,
        error: Exception,
        user_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.logger.error(
            f"{operation}_failed",
            service=self.service_name,
            user_id=user_id,
            error_type=type(error).__name__,
            error_message=str(error),
            **kwargs,
        )

    def log_warning(self, event: str, **kwargs: Any) -> None:
        self.logger.warning(event, service=self.service_name, **kwargs)


request_logger = RequestLogger()
audit_logger = AuditLogger()
