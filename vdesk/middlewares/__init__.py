from vdesk.middlewares.sentry import init_sentry
from vdesk.middlewares.security import SecurityHeadersMiddleware

__all__ = ["init_sentry", "SecurityHeadersMiddleware"]
