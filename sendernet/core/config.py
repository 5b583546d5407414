import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the sender.net plugin.
    Values come from environment variables; the host Flask app.config
    overrides any of them before SenderNet.init_app() runs.
    """
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # sender.net API
    SENDER_NET_API_BASE_URL = os.getenv('SENDER_NET_API_BASE_URL', 'https://api.sender.net/v2/')
    SENDER_NET_TIMEOUT = float(os.getenv('SENDER_NET_TIMEOUT', '15'))

    # Database paths - use environment variables or fallback to DB_DIR
    SENDER_NET_DB = os.getenv('SENDER_NET_DB', os.path.join(DB_DIR, 'sender_net.db'))
    SENDER_NET_LOG_DB = os.getenv('SENDER_NET_LOG_DB')
    USER_DB = os.getenv('USER_DB', os.path.join(DB_DIR, 'users.db'))

    # Table names
    SETTINGS_TABLE = 'sender_net_settings'
    USERS_TABLE = 'users'
    LOGS_TABLE = 'app_logs'

    # Sites allowed to embed the public subscription API
    SENDER_NET_ALLOWED_ORIGINS = [
        o.strip() for o in os.getenv('SENDER_NET_ALLOWED_ORIGINS', '*').split(',') if o.strip()
    ]

    # Endpoint unauthenticated admins are sent to
    SENDER_NET_LOGIN_ENDPOINT = os.getenv('SENDER_NET_LOGIN_ENDPOINT', 'admin.login')

    # Keys copied from app.config by SenderNet.init_app()
    APP_KEYS = (
        'SECRET_KEY',
        'SENDER_NET_API_BASE_URL',
        'SENDER_NET_TIMEOUT',
        'SENDER_NET_DB',
        'SENDER_NET_LOG_DB',
        'USER_DB',
        'SENDER_NET_LOGIN_ENDPOINT',
    )

    @classmethod
    def from_app(cls, app):
        """Resolve plugin settings: app.config > environment > defaults."""
        resolved = {}
        for key in cls.APP_KEYS:
            val = app.config.get(key)
            resolved[key] = val if val not in (None, '') else getattr(cls, key)
        resolved['SENDER_NET_TIMEOUT'] = float(resolved['SENDER_NET_TIMEOUT'])
        return resolved
