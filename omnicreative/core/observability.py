"""
Logfire observability configuration for OmniCreative.

Provides tracing for generation lifecycles and capability calls.

Usage:
    # At app startup (streamlit app or CLI)
    from omnicreative.core.observability import setup_logfire
    setup_logfire()

    # In services
    import logfire

    with logfire.span("generation_lifecycle", mode=mode.value):
        ...

Environment Variables:
    LOGFIRE_TOKEN: Your Logfire write token (required to send traces)
    LOGFIRE_ENVIRONMENT: Environment name (development, staging, production)
"""

import os
import logging
from typing import Optional

import logfire

logger = logging.getLogger(__name__)

# None until setup_logfire() has run; then whether traces are exported
_logfire_mode: Optional[bool] = None


def setup_logfire(
    environment: Optional[str] = None,
    service_name: str = "omnicreative"
) -> bool:
    """
    Configure Logfire for observability.

    Without a token, Logfire is configured locally (no export) so spans
    stay cheap no-ops.

    Args:
        environment: Environment name (or LOGFIRE_ENVIRONMENT env var)
        service_name: Service name for tracing

    Returns:
        True if traces are sent to Logfire, False if configured locally only
    """
    global _logfire_mode

    if _logfire_mode is not None:
        logger.debug("Logfire already configured")
        return _logfire_mode

    token = os.environ.get("LOGFIRE_TOKEN")
    env = environment or os.environ.get("LOGFIRE_ENVIRONMENT", "development")

    if not token:
        logger.info("LOGFIRE_TOKEN not set, tracing stays local")
        logfire.configure(
            service_name=service_name,
            environment=env,
            send_to_logfire=False,
            console=False,
        )
        _logfire_mode = False
        return False

    try:
        logfire.configure(
            token=token,
            service_name=service_name,
            environment=env,
            send_to_logfire=True,
        )

        # Instrument Pydantic for validation tracing
        logfire.instrument_pydantic()

        _logfire_mode = True
        logger.info(f"Logfire configured: service={service_name}, environment={env}")
        return True

    except Exception as e:
        logger.error(f"Failed to configure Logfire: {e}")
        return False
