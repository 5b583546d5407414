"""
sender.net API Client
=====================

Thin wrapper around the sender.net v2 REST API.
Docs: https://api.sender.net/#introduction

Every call is made exactly once with a fixed timeout. A rejected key or a
missing subscriber is an ordinary result; only transport failures, timeouts,
5xx responses and unreadable bodies raise ProviderError.
"""

import re
import logging
from urllib.parse import urljoin, urlparse, quote

import requests

from ..core.exceptions import ProviderError
from ..core.models import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15

# Tokens are opaque but never contain whitespace or control characters
_TOKEN_RE = re.compile(r'^[^\s\x00-\x1f\x7f]+$')

# Guards pagination against a provider that keeps returning the same link
_MAX_PAGES = 100


def is_well_formed_key(key):
    """True when key looks like a token worth sending to the provider"""
    if not key or not isinstance(key, str):
        return False
    return _TOKEN_RE.match(key.strip()) is not None


class SenderNetApi:
    """sender.net client -- one instance per base URL."""

    def __init__(self, base_url=DEFAULT_BASE_URL, timeout=DEFAULT_TIMEOUT, session=None):
        base_url = (base_url or DEFAULT_BASE_URL).strip()
        if not base_url.endswith('/'):
            base_url += '/'
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, key):
        return {
            "Authorization": f"Bearer {key.strip()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _url(self, path):
        if path.startswith('http://') or path.startswith('https://'):
            # The Bearer token only goes to the configured host
            target, base = urlparse(path), urlparse(self.base_url)
            if (target.scheme, target.netloc.lower()) != (base.scheme, base.netloc.lower()):
                raise ProviderError(f"sender.net returned a link to another host: {path}")
            return path
        return urljoin(self.base_url, path)

    def _request(self, method, path, key, **kwargs):
        """Send one request; raise ProviderError on transport failure or 5xx."""
        url = self._url(path)
        try:
            resp = self.session.request(
                method,
                url,
                headers=self._headers(key),
                timeout=self.timeout,
                **kwargs
            )
        except requests.Timeout as e:
            raise ProviderError(f"sender.net request timed out after {self.timeout}s: {method} {url}: {e}") from e
        except requests.RequestException as e:
            raise ProviderError(f"sender.net request failed: {method} {url}: {e}") from e

        logger.debug(f"sender.net {method} {url} - Status: {resp.status_code}")

        if resp.status_code >= 500:
            raise ProviderError(
                f"sender.net server error {resp.status_code}: {method} {url}: {resp.text[:500]}",
                status_code=resp.status_code
            )
        return resp

    @staticmethod
    def _json(resp):
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"sender.net returned invalid JSON: {e}", status_code=resp.status_code) from e

    def check_api_key(self, key):
        """
        Validate an access token with a one-item group listing.

        Returns:
            True if sender.net accepts the key, False for an empty, malformed
            or rejected key.

        Raises:
            ProviderError: sender.net could not be reached.
        """
        if not is_well_formed_key(key):
            return False

        resp = self._request('GET', 'groups', key, params={'limit': 1})
        if 200 <= resp.status_code < 300:
            return True
        if resp.status_code in (401, 403):
            logger.info("sender.net rejected API access token")
        else:
            logger.warning(f"sender.net key check returned {resp.status_code}")
        return False

    def list_all_groups(self, key):
        """
        Fetch every group visible to the key, following pagination links.

        Returns:
            list of {'id': str, 'title': str}
        """
        groups = []
        seen = set()
        next_url = 'groups'

        while next_url:
            if next_url in seen or len(seen) >= _MAX_PAGES:
                raise ProviderError(f"sender.net pagination did not terminate at {next_url}")
            seen.add(next_url)

            resp = self._request('GET', next_url, key)
            if resp.status_code != 200:
                raise ProviderError(
                    f"sender.net group listing failed with status {resp.status_code}",
                    status_code=resp.status_code
                )

            body = self._json(resp)
            data = body.get('data') if isinstance(body, dict) else None
            if not isinstance(data, list):
                raise ProviderError("sender.net group listing has no data array")

            for item in data:
                try:
                    groups.append({'id': str(item['id']), 'title': str(item['title'])})
                except (KeyError, TypeError) as e:
                    raise ProviderError(f"sender.net group entry is malformed: {item!r}") from e

            links = body.get('links') or {}
            next_url = links.get('next') if isinstance(links, dict) else None

        return groups

    def get_subscriber_by_email(self, key, email):
        """
        Look up a subscriber.

        Returns:
            The subscriber id, or None when sender.net has no such subscriber.
        """
        resp = self._request('GET', f"subscribers/{quote(email, safe='@')}", key)
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise ProviderError(
                f"sender.net subscriber lookup failed with status {resp.status_code}",
                status_code=resp.status_code
            )

        body = self._json(resp)
        data = body.get('data') if isinstance(body, dict) else None
        if not data:
            return None
        if not isinstance(data, dict):
            raise ProviderError("sender.net subscriber lookup returned unexpected data")
        return str(data.get('id') or data.get('email') or email)

    def create_subscriber(self, key, subscription):
        """
        Create a subscriber tagged with the request's groups.

        Not idempotent: callers check get_subscriber_by_email() first.

        Returns:
            True if sender.net accepted the subscriber, False if it rejected
            the request body.
        """
        resp = self._request('POST', 'subscribers', key, json=subscription.to_payload())

        if not 200 <= resp.status_code < 300:
            logger.warning(f"sender.net rejected subscriber {subscription.email}: "
                           f"{resp.status_code} {resp.text[:500]}")
            return False

        try:
            body = resp.json()
        except ValueError:
            # Accepted with an empty or non-JSON body
            return True
        if isinstance(body, dict) and body.get('success') is False:
            logger.warning(f"sender.net did not create subscriber {subscription.email}: {body.get('message')}")
            return False
        return True
