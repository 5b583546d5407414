"""
Subscription Module
===================

Provides:
- GET  /sender-net/subscribe      -- public subscription form
- POST /sender-net/subscribe      -- form submit (flash + redirect)
- POST /sender-net/subscribe/api  -- JSON submit for embedded forms (CORS)
"""

from flask import Blueprint

subscription_bp = Blueprint(
    'sender_net_subscription',
    __name__,
    url_prefix='/sender-net/subscribe',
    template_folder='templates'
)

from .service import SubscriptionService
from . import routes

__all__ = ['subscription_bp', 'SubscriptionService']
