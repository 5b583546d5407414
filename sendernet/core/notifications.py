"""
User-facing notices.

Levels follow the CMS messenger: status, warning, error. FlashNotifier
hands them to Flask's flash() so the next rendered page shows them;
MessageList keeps them in memory for JSON responses.
"""

from flask import flash

STATUS = 'status'
WARNING = 'warning'
ERROR = 'error'

LEVELS = (STATUS, WARNING, ERROR)

# flash() categories used by the templates
FLASH_CATEGORIES = {
    STATUS: 'success',
    WARNING: 'warning',
    ERROR: 'error',
}


def _check_level(level):
    if level not in LEVELS:
        raise ValueError(f"Unknown notice level: {level}")


class FlashNotifier:
    """Send notices through the Flask session"""

    def notify(self, level, message):
        _check_level(level)
        flash(message, FLASH_CATEGORIES[level])


class MessageList:
    """Collect notices for the current call"""

    def __init__(self):
        self.messages = []

    def notify(self, level, message):
        _check_level(level)
        self.messages.append({'level': level, 'message': message})

    def __iter__(self):
        return iter(self.messages)

    def __len__(self):
        return len(self.messages)

    def by_level(self, level):
        return [m['message'] for m in self.messages if m['level'] == level]
