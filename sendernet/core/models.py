"""
Plugin Models
=============

Plain value objects passed between the settings store, the API client and
the subscription service. Groups travel as {'id': ..., 'title': ...} dicts.
"""

from typing import Iterable, Optional

DEFAULT_BASE_URL = 'https://api.sender.net/v2/'


class ProviderSettings:
    """Immutable snapshot of the plugin configuration."""

    __slots__ = ('credential', 'base_url', 'selected_group_ids')

    def __init__(self, credential: str = '', base_url: str = DEFAULT_BASE_URL,
                 selected_group_ids: Optional[Iterable[str]] = None):
        object.__setattr__(self, 'credential', (credential or '').strip())
        object.__setattr__(self, 'base_url', (base_url or DEFAULT_BASE_URL).strip())
        object.__setattr__(self, 'selected_group_ids',
                           frozenset(str(g) for g in (selected_group_ids or ()) if str(g)))

    def __setattr__(self, name, value):
        raise AttributeError('ProviderSettings is read-only')

    def __eq__(self, other):
        if not isinstance(other, ProviderSettings):
            return NotImplemented
        return (self.credential, self.base_url, self.selected_group_ids) == \
            (other.credential, other.base_url, other.selected_group_ids)

    def __hash__(self):
        return hash((self.credential, self.base_url, self.selected_group_ids))

    def __repr__(self):
        return (f"ProviderSettings(base_url={self.base_url!r}, "
                f"groups={sorted(self.selected_group_ids)!r}, "
                f"has_credential={bool(self.credential)})")

    @property
    def is_configured(self):
        return bool(self.credential)


class SubscriptionRequest:
    """One visitor submission, built fresh for every call."""

    def __init__(self, email, first_name=None, last_name=None, group_ids=None):
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.group_ids = frozenset(group_ids or ())

    def to_payload(self):
        """Render the JSON body for POST /subscribers"""
        payload = {
            'email': self.email,
            'groups': sorted(self.group_ids),
        }
        if self.first_name is not None:
            payload['firstname'] = self.first_name
            payload['lastname'] = self.last_name or ''
        return payload


class SubscriptionOutcome:
    """Result of a single subscribe() call."""

    CREATED = 'created'
    ALREADY_EXISTS = 'already_exists'
    FAILED = 'failed'

    def __init__(self, status, reason=None):
        self.status = status
        self.reason = reason

    @classmethod
    def created(cls):
        return cls(cls.CREATED)

    @classmethod
    def already_exists(cls):
        return cls(cls.ALREADY_EXISTS)

    @classmethod
    def failed(cls, reason):
        return cls(cls.FAILED, reason)

    def __eq__(self, other):
        if not isinstance(other, SubscriptionOutcome):
            return NotImplemented
        return (self.status, self.reason) == (other.status, other.reason)

    def __repr__(self):
        if self.reason:
            return f"SubscriptionOutcome({self.status!r}, {self.reason!r})"
        return f"SubscriptionOutcome({self.status!r})"

    def to_dict(self):
        return {'status': self.status, 'reason': self.reason}
