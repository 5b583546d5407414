"""
Operator-facing logging for the sender.net plugin.
Every entry goes to the standard logging module; when a log database is
configured the entry is also stored in the app_logs table so admins can
review it later. Nothing logged here is ever shown to visitors.
"""

import sqlite3
import json
import logging
from datetime import datetime
from flask import request, has_request_context
from .config import Config


class LoggingService:
    """Structured log sink shared by the settings and subscription modules"""

    LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

    def __init__(self, db_path=None, table=Config.LOGS_TABLE):
        self.db_path = db_path
        self.table = table
        self._table_ready = False

    def _ensure_logs_table(self, conn):
        """Ensure the app_logs table exists"""
        if self._table_ready:
            return
        cursor = conn.cursor()
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                source TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT,
                ip_address TEXT,
                request_path TEXT
            )
        """)
        cursor.execute(f"""
            CREATE INDEX IF NOT EXISTS idx_{self.table}_timestamp
            ON {self.table}(timestamp DESC)
        """)
        conn.commit()
        self._table_ready = True

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        return ip_address, request.path

    def log(self, level, source, message, details=None):
        """
        Log a message.

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (sender_net, settings, ...)
            message (str): Main log message
            details (dict): Additional context, JSON-encoded when stored
        """
        level = level.upper()
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        std_logger = logging.getLogger(f"sendernet.{source}")
        if details:
            std_logger.log(getattr(logging, level), "%s %s", message, details)
        else:
            std_logger.log(getattr(logging, level), "%s", message)

        if not self.db_path:
            return

        ip_address, request_path = self._get_request_context()
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        try:
            with sqlite3.connect(self.db_path) as conn:
                self._ensure_logs_table(conn)
                conn.execute(f"""
                    INSERT INTO {self.table}
                    (timestamp, level, source, message, details, ip_address, request_path)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level, source, message, details,
                    ip_address, request_path
                ))
                conn.commit()
        except sqlite3.Error as e:
            # Stdout copy above already has the entry
            logging.getLogger(__name__).warning(f"Could not store log entry: {e}")

    def debug(self, source, message, details=None):
        """Log debug message"""
        self.log('DEBUG', source, message, details)

    def info(self, source, message, details=None):
        """Log info message"""
        self.log('INFO', source, message, details)

    def warning(self, source, message, details=None):
        """Log warning message"""
        self.log('WARNING', source, message, details)

    def error(self, source, message, details=None):
        """Log error message"""
        self.log('ERROR', source, message, details)

    def recent(self, limit=50, level=None):
        """Return the newest stored entries, newest first"""
        if not self.db_path:
            return []
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            self._ensure_logs_table(conn)
            if level:
                rows = conn.execute(
                    f"SELECT * FROM {self.table} WHERE level = ? ORDER BY id DESC LIMIT ?",
                    (level.upper(), limit)
                ).fetchall()
            else:
                rows = conn.execute(
                    f"SELECT * FROM {self.table} ORDER BY id DESC LIMIT ?", (limit,)
                ).fetchall()
        return [dict(row) for row in rows]
