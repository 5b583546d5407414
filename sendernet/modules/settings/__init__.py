"""
Settings Module
===============

Admin form for the sender.net access token, API base URL and the groups new
subscribers are tagged with. The token is encrypted at rest.
"""

from flask import Blueprint
import os

_template_dir = os.path.join(os.path.dirname(__file__), 'templates')

settings_bp = Blueprint('sender_net_settings', __name__,
                        url_prefix='/admin/sender-net/settings',
                        template_folder=_template_dir)

from .store import SettingsStore
from .groups import GroupOptionsResolver
from . import routes

__all__ = ['settings_bp', 'SettingsStore', 'GroupOptionsResolver']
