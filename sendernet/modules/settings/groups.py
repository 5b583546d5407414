"""
Group options for the settings form.

resolve() is called for the stored credential when the form is first built
and again for the in-flight value every time the operator edits the token
field. Provider trouble never blocks the form: the options just come back
empty.
"""

from collections import OrderedDict

from ...core import notifications
from ...core.exceptions import ProviderError

LOAD_FAILED_MESSAGE = 'Unable to load groups. Please check your API access token and try again.'


class GroupOptionsResolver:
    """Turn a candidate access token into {group_id: title} checkbox options"""

    def __init__(self, api_factory, settings_store, notifier, log, source='sender_net'):
        self.api_factory = api_factory
        self.settings_store = settings_store
        self.notifier = notifier
        self.log = log
        self.source = source

    def resolve(self, candidate_key, base_url=None, notifier=None):
        if notifier is None:
            notifier = self.notifier
        options = OrderedDict()
        candidate_key = (candidate_key or '').strip()
        if not candidate_key:
            return options

        api = self.api_factory(base_url or self.settings_store.read().base_url)

        try:
            if not api.check_api_key(candidate_key):
                return options
        except ProviderError as e:
            self.log.warning(self.source, f"Could not validate API access token: {e}",
                             {'error': str(e)})
            return options

        try:
            groups = api.list_all_groups(candidate_key)
        except ProviderError as e:
            notifier.notify(notifications.ERROR, LOAD_FAILED_MESSAGE)
            self.log.error(self.source, f"Error loading groups: {e}", {'error': str(e)})
            return options

        for group in sorted(groups, key=lambda g: (g['title'], g['id'])):
            options[group['id']] = group['title']
        return options
