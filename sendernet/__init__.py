"""
sender.net for Flask
====================

Connects a Flask site to the sender.net email-marketing API:
- Admin settings form (access token, base URL, groups)
- Public subscription form that tags new subscribers with the chosen groups

Usage:
    from sendernet import SenderNet

    sender_net = SenderNet(app)

    # or, with only the public form
    sender_net = SenderNet(app, {'features': {'settings': False}})
"""

__version__ = '0.1.0'

import logging
import os

from .api import SenderNetApi
from .core import Config, FlashNotifier, LoggingService, UserDirectory
from .modules.settings import settings_bp, SettingsStore, GroupOptionsResolver
from .modules.subscription import subscription_bp, SubscriptionService

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = {
    'settings': True,
    'subscription': True,
}


class SenderNet:
    """
    Flask extension wiring the sender.net services together.

    Collaborators can be swapped for tests or for a host app with its own
    user table:
        api_factory(base_url) -> object with the SenderNetApi methods
        user_directory        -> object with find_by_email(email)
        notifier              -> object with notify(level, message)
        log                   -> object with info/warning/error(source, message, details)
    """

    def __init__(self, app=None, config=None, api_factory=None, user_directory=None,
                 notifier=None, log=None):
        self._config = config or {}
        self._api_factory = api_factory
        self._user_directory = user_directory
        self._notifier = notifier
        self._log = log
        self._registered = []

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Read configuration, build the services and register blueprints"""
        self.config = Config.from_app(app)

        db_dir = os.path.dirname(self.config['SENDER_NET_DB'])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self.log = self._log if self._log is not None else LoggingService(self.config['SENDER_NET_LOG_DB'])
        self.notifier = self._notifier if self._notifier is not None else FlashNotifier()
        self.user_directory = (self._user_directory if self._user_directory is not None
                               else UserDirectory(self.config['USER_DB']))
        self.api_factory = api_factory = self._api_factory or self.api

        self.settings_store = SettingsStore(
            self.config['SENDER_NET_DB'],
            api_factory,
            secret_key=self.config['SECRET_KEY'],
            default_base_url=self.config['SENDER_NET_API_BASE_URL']
        )
        self.settings_store.init_db()

        self.group_options = GroupOptionsResolver(api_factory, self.settings_store, self.notifier, self.log)
        self.subscriptions = SubscriptionService(
            api_factory, self.settings_store, self.user_directory, self.notifier, self.log
        )

        features = dict(DEFAULT_FEATURES)
        features.update(self._config.get('features', {}))

        if features['settings']:
            app.register_blueprint(settings_bp)
            self._registered.append('settings')
        if features['subscription']:
            app.register_blueprint(subscription_bp)
            self._registered.append('subscription')

        app.extensions['sender_net'] = self
        logger.info(f"sender.net initialised (modules: {', '.join(self._registered) or 'none'})")

    def api(self, base_url=None):
        """Build an API client for base_url (defaults to the configured URL)"""
        return SenderNetApi(base_url or self.config['SENDER_NET_API_BASE_URL'],
                            timeout=self.config['SENDER_NET_TIMEOUT'])

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['SenderNet', 'SenderNetApi', 'SettingsStore', 'GroupOptionsResolver', 'SubscriptionService']
