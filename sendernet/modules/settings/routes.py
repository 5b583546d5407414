"""
Settings Admin Routes
=====================

Admin interface for the sender.net connection settings.

- GET  /                 -- settings form
- POST /                 -- validate and save
- POST /groups           -- group options for an in-flight token (AJAX)
- GET  /test-connection  -- check the stored token against sender.net
"""

import logging
from functools import wraps

from flask import render_template, request, redirect, url_for, session, jsonify, flash, current_app
from werkzeug.routing import BuildError

from . import settings_bp
from ...core.exceptions import ValidationError, ProviderError
from ...core.models import ProviderSettings
from ...core.notifications import MessageList, FLASH_CATEGORIES

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    'api_access_tokens': 'API access token',
    'api_base_url': 'Base URL',
}

SAVED_MESSAGE = 'The configuration options have been saved.'
UNREACHABLE_MESSAGE = 'Unable to reach sender.net to validate the API access token. Please try again later.'


def _sender_net():
    return current_app.extensions['sender_net']


def admin_required(f):
    """Decorator to require admin login"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            endpoint = _sender_net().config['SENDER_NET_LOGIN_ENDPOINT']
            try:
                login_url = url_for(endpoint, next=request.path)
            except BuildError:
                login_url = f"/admin/login?next={request.path}"
            return redirect(login_url)
        return f(*args, **kwargs)
    return decorated_function


def _render_form(values, errors=None, status=200):
    ext = _sender_net()
    options = ext.group_options.resolve(values['api_access_tokens_raw'], values['api_base_url'])
    return render_template('sender_net/settings.html',
                           values=values,
                           options=options,
                           errors=errors or {}), status


@settings_bp.route('/', methods=['GET'])
@admin_required
def settings_page():
    """Main settings page"""
    ext = _sender_net()
    current = ext.settings_store.read()

    values = {
        'api_access_tokens': ext.settings_store.masked_credential(),
        'api_access_tokens_raw': current.credential,
        'api_base_url': current.base_url,
        'user_group': sorted(current.selected_group_ids),
    }
    return _render_form(values)


@settings_bp.route('/', methods=['POST'])
@admin_required
def save_settings():
    """Validate the submitted token and save all settings at once"""
    ext = _sender_net()
    current = ext.settings_store.read()
    form = request.form

    token = form.get('api_access_tokens', '').strip()
    # Don't overwrite the stored token with its masked value
    if token and token.startswith('*') and current.credential:
        token = current.credential

    values = {
        'api_access_tokens': form.get('api_access_tokens', '').strip(),
        'api_access_tokens_raw': token,
        'api_base_url': form.get('api_base_url', '').strip(),
        'user_group': [g for g in form.getlist('user_group') if g],
    }

    errors = {}
    for field, label in FIELD_LABELS.items():
        if not values[field]:
            errors[field] = f"{label} field is required."
    if errors:
        return _render_form(values, errors, 400)

    candidate = ProviderSettings(
        credential=token,
        base_url=values['api_base_url'],
        selected_group_ids=values['user_group']
    )

    try:
        ext.settings_store.write(candidate)
    except ValidationError as e:
        return _render_form(values, {e.field: e.message}, 400)
    except ProviderError as e:
        ext.log.error('sender_net', f"Could not validate API access token: {e}", {'error': str(e)})
        return _render_form(values, {'api_access_tokens': UNREACHABLE_MESSAGE}, 503)

    ext.log.info('sender_net', 'Settings saved', {
        'api_base_url': candidate.base_url,
        'user_group': sorted(candidate.selected_group_ids),
    })
    flash(SAVED_MESSAGE, 'success')
    return redirect(url_for('sender_net_settings.settings_page'))


@settings_bp.route('/groups', methods=['POST'])
@admin_required
def group_options():
    """Recompute group options whenever the token field changes"""
    ext = _sender_net()
    # Token travels in the POST body so it stays out of access logs
    token = request.form.get('api_access_tokens', '').strip()
    base_url = request.form.get('api_base_url', '').strip() or None

    current = ext.settings_store.read()
    if token.startswith('*') and current.credential:
        token = current.credential

    messages = MessageList()
    options = ext.group_options.resolve(token, base_url, notifier=messages)

    return jsonify({
        'success': True,
        'options': [{'id': group_id, 'title': title} for group_id, title in options.items()],
        # category matches the flashed messages so the page can style them alike
        'messages': [dict(m, category=FLASH_CATEGORIES[m['level']]) for m in messages],
    })


@settings_bp.route('/test-connection')
@admin_required
def test_connection():
    """Test sender.net API connection with the stored token"""
    ext = _sender_net()
    current = ext.settings_store.read()

    if not current.credential:
        return jsonify({'success': False, 'error': 'sender.net API access token not configured'})

    try:
        accepted = ext.api_factory(current.base_url).check_api_key(current.credential)
    except ProviderError as e:
        return jsonify({'success': False, 'error': str(e)})

    if not accepted:
        return jsonify({'success': False, 'error': 'sender.net rejected the stored API access token'})
    return jsonify({'success': True, 'message': 'sender.net connection successful'})
