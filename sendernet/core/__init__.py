"""
sender.net Core
===============

Configuration, models, errors and the collaborators (user directory,
notices, operator log) shared by the settings and subscription modules.
"""

from .config import Config
from .exceptions import SenderNetError, ValidationError, ProviderError
from .identity import UserDirectory
from .logging_service import LoggingService
from .models import ProviderSettings, SubscriptionRequest, SubscriptionOutcome, DEFAULT_BASE_URL
from .notifications import FlashNotifier, MessageList

__all__ = [
    'Config', 'SenderNetError', 'ValidationError', 'ProviderError', 'UserDirectory',
    'LoggingService', 'ProviderSettings', 'SubscriptionRequest', 'SubscriptionOutcome',
    'DEFAULT_BASE_URL', 'FlashNotifier', 'MessageList',
]
