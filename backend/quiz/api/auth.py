from flask import Blueprint, current_app, jsonify, request

from quiz.services import get_services

auth = Blueprint('auth', __name__)


@auth.route('/validate-email', methods=['POST'])
def validate_email():
    """
    Step 1 of login: check the identity and hand out a temporary credential.
    """
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    if not email:
        return jsonify({'error': 'Email is required'}), 400

    services = get_services()
    if not services.oracle.exists(email):
        current_app.logger.info(f"[login] unknown identity {email}")
        return jsonify({'error': 'Email not found in our records. Please contact support.'}), 403

    temp_token = services.tokens.issue_pending(email)
    return jsonify({'tempToken': temp_token, 'message': 'Email validated. Please proceed to step 2.'})


@auth.route('/token', methods=['POST'])
def issue_token():
    """
    Step 2 of login: check the start period and issue the session token.
    """
    data = request.get_json(silent=True) or {}
    temp_token = data.get('tempToken')
    month_year = data.get('monthYear')
    if not all([temp_token, month_year]):
        return jsonify({'error': 'Temporary token and month/year are required'}), 400

    services = get_services()
    email = services.tokens.pending_identity(temp_token)
    if email is None:
        return jsonify({'error': 'Invalid or expired temporary token'}), 400

    if not services.oracle.matches_period(email, month_year):
        return jsonify({'error': 'Invalid month/year. Please check your start month and year.'}), 403

    token = services.tokens.issue(email)
    services.tokens.discard_pending(temp_token)
    current_app.logger.info(f"[login] token issued for {email}")
    return jsonify({'token': token})


@auth.route('/verify', methods=['POST'])
def verify_token():
    data = request.get_json(silent=True) or {}
    if get_services().tokens.is_valid(data.get('token')):
        return jsonify({'valid': True})
    return jsonify({'valid': False}), 401
