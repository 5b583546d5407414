"""
Settings Store with Encryption
==============================

Holds the sender.net credential, base URL and selected groups in a single
SQLite row. The credential is encrypted at rest with Fernet (AES-128-CBC)
using a key derived from the Flask SECRET_KEY.

A write replaces the whole row in one transaction, so readers see either the
previous settings or the new ones, never a mix.
"""

import base64
import hashlib
import json
import logging
import os
import sqlite3
import threading
from datetime import datetime

from cryptography.fernet import Fernet, InvalidToken

from ...core.config import Config
from ...core.exceptions import ValidationError
from ...core.models import ProviderSettings

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = 'Invalid API access token.'


def get_encryption_key(secret):
    """
    Derive a Fernet-compatible key (32 bytes, base64 encoded) from the
    app secret.
    """
    if not secret:
        logger.warning("SECRET_KEY not configured - using insecure default for credential encryption")
        secret = 'default-insecure-key'

    # Derive a 32-byte key using SHA256
    key_bytes = hashlib.sha256(secret.encode()).digest()
    return base64.urlsafe_b64encode(key_bytes)


def mask_secret(value):
    """Show only the last 4 characters of a secret"""
    if not value:
        return ''
    if len(value) <= 4:
        return '****'
    return '*' * (len(value) - 4) + value[-4:]


class SettingsStore:
    """
    Persisted ProviderSettings.

    api_factory(base_url) must return an object with check_api_key(key);
    the candidate credential is validated against the candidate base URL.
    """

    _write_lock = threading.Lock()

    def __init__(self, db_path, api_factory, secret_key=None,
                 default_base_url=Config.SENDER_NET_API_BASE_URL,
                 table=Config.SETTINGS_TABLE):
        self.db_path = db_path
        self.api_factory = api_factory
        self.default_base_url = default_base_url
        self.table = table
        self._fernet = Fernet(get_encryption_key(secret_key))

    def _connect(self):
        return sqlite3.connect(self.db_path)

    def init_db(self):
        """Create the settings table (single row, id = 1)"""
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        with self._connect() as conn:
            conn.execute(f'''
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    api_access_tokens TEXT NOT NULL,
                    api_base_url TEXT NOT NULL,
                    user_group TEXT NOT NULL DEFAULT '[]',
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            conn.commit()
        return self.db_path

    def _encrypt(self, value):
        return self._fernet.encrypt(value.encode()).decode()

    def _decrypt(self, value):
        try:
            return self._fernet.decrypt(value.encode()).decode()
        except InvalidToken:
            logger.error("Stored sender.net credential cannot be decrypted - was SECRET_KEY changed?")
            return ''

    def defaults(self):
        return ProviderSettings(base_url=self.default_base_url)

    def read(self):
        """Return the current settings snapshot (defaults if never saved)"""
        if not os.path.exists(self.db_path):
            return self.defaults()

        try:
            with self._connect() as conn:
                row = conn.execute(
                    f'SELECT api_access_tokens, api_base_url, user_group FROM {self.table} WHERE id = 1'
                ).fetchone()
        except sqlite3.OperationalError as e:
            if 'no such table' not in str(e):
                raise
            return self.defaults()

        if not row:
            return self.defaults()

        credential, base_url, groups_json = row
        return ProviderSettings(
            credential=self._decrypt(credential),
            base_url=base_url,
            selected_group_ids=json.loads(groups_json or '[]')
        )

    def write(self, candidate):
        """
        Validate and persist all three settings at once.

        Raises:
            ValidationError: the provider rejects candidate.credential.
                Nothing is written.
            ProviderError: the provider could not be reached to validate.
        """
        api = self.api_factory(candidate.base_url)
        if not api.check_api_key(candidate.credential):
            raise ValidationError('api_access_tokens', INVALID_TOKEN_MESSAGE)

        with self._write_lock:
            self.init_db()
            with self._connect() as conn:
                conn.execute(f'''
                    INSERT INTO {self.table} (id, api_access_tokens, api_base_url, user_group, updated_at)
                    VALUES (1, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        api_access_tokens = excluded.api_access_tokens,
                        api_base_url = excluded.api_base_url,
                        user_group = excluded.user_group,
                        updated_at = excluded.updated_at
                ''', (
                    self._encrypt(candidate.credential),
                    candidate.base_url,
                    json.dumps(sorted(candidate.selected_group_ids)),
                    datetime.now().isoformat()
                ))
                conn.commit()

        logger.info(f"sender.net settings saved ({len(candidate.selected_group_ids)} groups selected)")

    def masked_credential(self):
        """Current credential with all but the last 4 characters hidden"""
        return mask_secret(self.read().credential)
