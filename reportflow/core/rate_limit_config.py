"""
Rate limiting configuration for the ReportFlow API
"""

from fastapi import Request
from slowapi.util import get_remote_address


def get_real_ip(request: Request) -> str:
    """
    Get the client IP address, honouring proxy headers.

    The API runs behind the application's load balancer, so the direct
    peer address is usually the proxy.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


RATE_LIMIT_TIERS = {
    "default": {
        "open_session": "30/minute",     # New validation conversations
        "record_attempt": "60/minute",   # Officer answers to missing-field prompts
        "read": "120/minute",            # State, results, guidance lookups
        "sweep": "6/minute",             # Manual sweeps
    },
    "internal": {  # Service-to-service traffic from report handlers
        "open_session": "300/minute",
        "record_attempt": "600/minute",
        "read": "1200/minute",
        "sweep": "30/minute",
    }
}

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment and try again."
