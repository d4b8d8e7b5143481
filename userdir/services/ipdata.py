"""
Classification of a requester's network origin.

Uses an ipdata-compatible IP intelligence API to decide whether a request
comes through a proxy, VPN, Tor exit, or hosting provider. The lookup is
best-effort: if the service cannot be reached the origin is treated as
unclassified, and registration is not blocked.
"""

from typing import Any, Dict, Iterable, Optional
import ipaddress
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = 'https://api.ipdata.co'

THREAT_SIGNALS = ('is_tor', 'is_proxy', 'is_anonymous', 'is_known_attacker',
                  'is_known_abuser', 'is_threat', 'is_bogon')
"""Keys of the ``threat`` section that mark an origin as a proxy."""


def is_proxy(analysis: Optional[Dict[str, Any]],
             exempt_asns: Iterable[str] = ()) -> bool:
    """
    Decide whether an analysis describes a proxy origin.

    Parameters
    ----------
    analysis : dict or None
        Response body from the IP intelligence API.
    exempt_asns : iterable
        Autonomous system numbers (without the ``AS`` prefix) that are never
        treated as proxies, e.g. a corporate network.

    Returns
    -------
    bool
        ``False`` if the analysis is missing or incomplete.

    """
    if not analysis or not analysis.get('asn') or not analysis.get('threat'):
        return False
    asn = str(analysis['asn'].get('asn', ''))
    if asn.upper().startswith('AS'):
        asn = asn[2:]
    if asn in set(exempt_asns):
        return False
    if analysis['asn'].get('type') == 'hosting':
        return True
    threat = analysis['threat']
    return any(bool(threat.get(signal)) for signal in THREAT_SIGNALS)


class OriginClassifier:
    """Client for the IP intelligence API."""

    def __init__(self, api_key: Optional[str],
                 endpoint: str = DEFAULT_ENDPOINT,
                 exempt_asns: Iterable[str] = (),
                 timeout: float = 5.0,
                 session: Optional[requests.Session] = None) -> None:
        self.api_key = api_key
        self.endpoint = endpoint.rstrip('/')
        self.exempt_asns = tuple(exempt_asns)
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'OriginClassifier':
        """Build a classifier from a Flask-style configuration mapping."""
        exempt = config.get('PROXY_EXEMPT_ASNS') or ()
        if isinstance(exempt, str):
            exempt = exempt.replace(',', ' ').split()
        return cls(config.get('IPDATA_API_KEY'),
                   endpoint=config.get('IPDATA_ENDPOINT', DEFAULT_ENDPOINT),
                   exempt_asns=exempt)

    def lookup(self, ip: str) -> Optional[Dict[str, Any]]:
        """Get the analysis for an address, or ``None`` if unavailable."""
        if not self.api_key:
            logger.debug('No IP intelligence API key; not classifying %s', ip)
            return None
        try:
            if not ipaddress.ip_address(ip).is_global:
                return None
        except ValueError:
            logger.warning('Not an IP address: %r', ip)
            return None
        try:
            response = self._session.get(f'{self.endpoint}/{ip}',
                                         params={'api-key': self.api_key},
                                         timeout=self.timeout)
            response.raise_for_status()
            data: Dict[str, Any] = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning('IP lookup for %s failed: %s', ip, e)
            return None
        return data

    def is_proxy(self, ip: Optional[str]) -> bool:
        """Whether ``ip`` is classified as a proxy origin."""
        if not ip:
            return False
        return is_proxy(self.lookup(ip), self.exempt_asns)
