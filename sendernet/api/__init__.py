"""
sender.net API
==============

HTTP client for the sender.net v2 REST API (groups and subscribers).
"""

from .client import SenderNetApi, is_well_formed_key

__all__ = ['SenderNetApi', 'is_well_formed_key']
