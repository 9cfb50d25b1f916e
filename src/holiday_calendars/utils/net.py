"""Network address helpers."""

import ipaddress
from typing import Optional


def public_ip_or_none(ip: Optional[str]) -> Optional[str]:
    """
    Return ``ip`` if it is a usable public address, else None.

    Loopback, RFC1918, link-local and other non-global ranges carry no
    geo information. Unparseable input is treated the same way.

    Args:
        ip: Client IP address as text

    Returns:
        The stripped address, or None
    """
    if not ip:
        return None
    candidate = ip.strip()
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return None
    if address.is_private or address.is_loopback or address.is_link_local:
        return None
    if address.is_unspecified or address.is_reserved or address.is_multicast:
        return None
    return candidate
