"""
sender.net Modules
==================

Flask blueprints registered by SenderNet.init_app().
"""

__all__ = ['settings', 'subscription']
