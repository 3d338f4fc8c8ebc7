# authflow/services/_shared/base.py
from __future__ import annotations

from authflow.core import errors as api_errors
from authflow.services._shared.errors import ServiceError


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Centralize error translation.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work
      (directly or through a port adapter).
    """

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        Every :class:`ServiceError` already carries its HTTP-equivalent status
        and stable code, so the translation is a straight copy.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=exc.status_code,
                code=exc.code,
                details=exc.details() or None,
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
