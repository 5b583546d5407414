"""
Host user directory lookup.

The subscription form pre-fills the subscriber's name when the email belongs
to a registered site user. Any object with find_by_email(email) returning
None or {'display_name': ...} can stand in for UserDirectory.
"""

import os
import sqlite3
import logging

from .config import Config

logger = logging.getLogger(__name__)


class UserDirectory:
    """Reads display names from the host app's users table"""

    def __init__(self, db_path, table=Config.USERS_TABLE):
        self.db_path = db_path
        self.table = table

    def _get_connection(self):
        """Get database connection"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def find_by_email(self, email):
        """Get the display name of an active user, or None"""
        if not self.db_path or not os.path.exists(self.db_path):
            return None

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"""
                SELECT first_name, last_name FROM {self.table}
                WHERE lower(email) = lower(?) AND is_active = 1
            """, (email,))
            row = cursor.fetchone()
        except sqlite3.OperationalError as e:
            # Host app has no users table yet
            logger.debug(f"User lookup skipped: {e}")
            return None
        except sqlite3.DatabaseError as e:
            logger.warning(f"User lookup failed, subscribing without a name: {self.db_path}: {e}")
            return None
        finally:
            conn.close()

        if not row:
            return None

        parts = [row['first_name'] or '', row['last_name'] or '']
        return {'display_name': ' '.join(p.strip() for p in parts if p and p.strip())}
