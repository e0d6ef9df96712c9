"""
Request Utility - client address helpers for logging.

Behind the load balancer the real client is the first entry of
X-Forwarded-For; request.client only sees the proxy.
"""

from typing import List, Optional
from fastapi import Request


def get_client_ips(request: Request) -> List[str]:
    """Addresses listed in X-Forwarded-For (client first)."""
    forwarded = request.headers.get("x-forwarded-for", "")
    return [ip.strip() for ip in forwarded.split(",") if ip.strip()]


def get_client_ip(request: Request) -> Optional[str]:
    ips = get_client_ips(request)
    if ips:
        return ips[0]
    if request.client is not None:
        return request.client.host
    return None
