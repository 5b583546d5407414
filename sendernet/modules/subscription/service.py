"""
Subscription Service
====================

Forwards a visitor's email to sender.net unless it is already subscribed:

    lookup user -> check existing -> already exists
                                  -> create -> created | failed

Each remote call is made once. Provider failures become a FAILED outcome
with a generic notice for the visitor and the detail in the operator log.
"""

from ...core import notifications
from ...core.exceptions import ProviderError
from ...core.models import SubscriptionOutcome, SubscriptionRequest

FAILED_MESSAGE = 'Unable to complete your subscription right now. Please try again later.'


def already_exists_message(email):
    return f"Subscriber with email '{email}' already exists."


def subscribed_message(email):
    return f"{email} email is subscribed."


class SubscriptionService:

    def __init__(self, api_factory, settings_store, user_directory, notifier, log,
                 source='sender_net'):
        self.api_factory = api_factory
        self.settings_store = settings_store
        self.user_directory = user_directory
        self.notifier = notifier
        self.log = log
        self.source = source

    def build_request(self, email, group_ids):
        """Assemble the request, pre-filling the name for registered users"""
        subscription = SubscriptionRequest(email, group_ids=group_ids)
        account = self.user_directory.find_by_email(email)
        if account:
            subscription.first_name = account.get('display_name') or ''
            subscription.last_name = ''
        return subscription

    def _fail(self, notifier, email, reason, details=None):
        self.log.error(self.source, f"Subscription failed for {email}: {reason}", details)
        notifier.notify(notifications.ERROR, FAILED_MESSAGE)
        return SubscriptionOutcome.failed(reason)

    def subscribe(self, email, notifier=None):
        if notifier is None:
            notifier = self.notifier
        # One snapshot for the whole call
        settings = self.settings_store.read()
        if not settings.is_configured:
            return self._fail(notifier, email, 'not configured')

        api = self.api_factory(settings.base_url)
        key = settings.credential
        subscription = self.build_request(email, settings.selected_group_ids)

        try:
            existing = api.get_subscriber_by_email(key, email)
        except ProviderError as e:
            return self._fail(notifier, email, str(e), {'step': 'lookup', 'error': str(e)})

        if existing:
            msg = already_exists_message(email)
            self.log.warning(self.source, msg, {'subscriber_id': existing})
            notifier.notify(notifications.ERROR, msg)
            return SubscriptionOutcome.already_exists()

        try:
            created = api.create_subscriber(key, subscription)
        except ProviderError as e:
            return self._fail(notifier, email, str(e), {'step': 'create', 'error': str(e)})

        if not created:
            return self._fail(notifier, email, 'rejected by provider', {'step': 'create'})

        self.log.info(self.source, f"New subscriber: {email}",
                      {'groups': sorted(subscription.group_ids)})
        notifier.notify(notifications.STATUS, subscribed_message(email))
        return SubscriptionOutcome.created()
