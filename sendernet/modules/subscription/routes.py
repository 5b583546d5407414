"""
Subscription Routes
===================

Public sign-up form. The form post shows its notice on the next page load;
the JSON endpoint returns the notices in the response body instead.
"""

import re
import logging

from flask import request, jsonify, render_template, redirect, url_for, current_app
from flask_cors import cross_origin

from . import subscription_bp
from ...core import notifications
from ...core.config import Config
from ...core.models import SubscriptionOutcome
from ...core.notifications import MessageList

# Email validation regex: rejects consecutive dots, leading/trailing dots
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')

INVALID_EMAIL_MESSAGE = 'Please enter a valid email address.'

# HTTP status per outcome for the JSON endpoint
OUTCOME_STATUS = {
    SubscriptionOutcome.CREATED: 201,
    SubscriptionOutcome.ALREADY_EXISTS: 200,
    SubscriptionOutcome.FAILED: 502,
}

logger = logging.getLogger(__name__)


def validate_email(email):
    """Validate email format"""
    if not email or len(email) > 255:
        return False
    return EMAIL_REGEX.match(email) is not None


@subscription_bp.route('', methods=['GET'])
def subscription_form():
    """Show the subscription form"""
    return render_template('sender_net/subscribe.html')


@subscription_bp.route('', methods=['POST'])
def subscribe():
    """Handle the subscription form post"""
    ext = current_app.extensions['sender_net']
    email = request.form.get('email', '').strip()

    if not validate_email(email):
        ext.notifier.notify(notifications.ERROR, INVALID_EMAIL_MESSAGE)
        return render_template('sender_net/subscribe.html', email=email), 400

    outcome = ext.subscriptions.subscribe(email)
    logger.info(f"Subscription form handled for {email}: {outcome.status}")
    return redirect(url_for('sender_net_subscription.subscription_form'))


@subscription_bp.route('/api', methods=['POST', 'OPTIONS'])
@cross_origin(origins=Config.SENDER_NET_ALLOWED_ORIGINS, supports_credentials=False)
def subscribe_api():
    """
    JSON subscription endpoint for forms embedded on other sites.

    Body: { "email": "..." }

    Returns JSON:
        { "success": bool, "outcome": {"status", "reason"}, "messages": [...] }
    """
    ext = current_app.extensions['sender_net']
    data = request.get_json(silent=True) or {}
    email = str(data.get('email', '')).strip()

    if not validate_email(email):
        return jsonify({
            'success': False,
            'error': INVALID_EMAIL_MESSAGE,
            'messages': [{'level': notifications.ERROR, 'message': INVALID_EMAIL_MESSAGE}],
        }), 400

    messages = MessageList()
    outcome = ext.subscriptions.subscribe(email, notifier=messages)

    outcome_dict = outcome.to_dict()
    if outcome.status == SubscriptionOutcome.FAILED:
        # Failure detail is for the operator log only
        outcome_dict['reason'] = None

    return jsonify({
        'success': outcome.status != SubscriptionOutcome.FAILED,
        'outcome': outcome_dict,
        'messages': list(messages),
    }), OUTCOME_STATUS[outcome.status]
