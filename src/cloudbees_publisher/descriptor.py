"""
Configuration UI Blueprint.

Routes:
- /cloudbees/accounts - Configured account names
- /cloudbees/configure - Replace and save the account list
- /cloudbees/check/<field> - Form field checks
- /cloudbees/autocomplete/applications - Application id candidates
- /cloudbees/publisher - Bind job settings from the job form
"""
import logging

from flask import Blueprint, current_app, jsonify, request

from .accounts import AccountStoreError
from .bees_client import BeesClientError
from .models import FORM_PREFIX, Account, DeploymentSettings
from .publisher import DISPLAY_NAME

logger = logging.getLogger(__name__)

descriptor_bp = Blueprint('cloudbees', __name__, url_prefix='/cloudbees')


def _registry():
    return current_app.config['account_registry']


def _validation():
    return current_app.config['validation_service']


@descriptor_bp.route('/accounts')
def accounts():
    """Configured account names (keys are never returned)."""
    return jsonify({
        'displayName': DISPLAY_NAME,
        'accounts': _registry().names(),
    })


@descriptor_bp.route('/configure', methods=['POST'])
def configure():
    """Replace the whole account list with the submitted one."""
    names = request.form.getlist(FORM_PREFIX + 'name')
    api_keys = request.form.getlist(FORM_PREFIX + 'apiKey')
    secret_keys = request.form.getlist(FORM_PREFIX + 'secretKey')

    if not (len(names) == len(api_keys) == len(secret_keys)):
        return jsonify({'error': 'name, apiKey and secretKey lists differ in length'}), 400

    account_list = [
        Account(name=name.strip(), api_key=api_key.strip(), secret_key=secret_key.strip())
        for name, api_key, secret_key in zip(names, api_keys, secret_keys)
    ]

    try:
        _registry().configure(account_list)
    except AccountStoreError as e:
        logger.error(f"Failed to save CloudBees accounts: {e}")
        return jsonify({'error': str(e)}), 500

    logger.info(f"CloudBees accounts configured: {[a.name for a in account_list]}")
    return jsonify({'ok': True, 'accounts': len(account_list)})


@descriptor_bp.route('/check/name')
def check_name():
    return jsonify(_validation().check_name(request.args.get('name')).to_dict())


@descriptor_bp.route('/check/apiKey')
def check_api_key():
    return jsonify(_validation().check_api_key(request.args.get('apiKey')).to_dict())


@descriptor_bp.route('/check/secretKey')
def check_secret_key():
    """Check both keys, then ping the platform with them."""
    result = _validation().check_connectivity(
        request.args.get('apiKey'),
        request.args.get('secretKey'),
    )
    return jsonify(result.to_dict())


@descriptor_bp.route('/check/applicationId')
def check_application_id():
    result = _validation().check_application_id(
        request.args.get('applicationId'),
        request.args.get('cloudbeesAccountName') or None,
    )
    return jsonify(result.to_dict())


@descriptor_bp.route('/autocomplete/applications')
def autocomplete_applications():
    value = request.args.get('value', '')
    account_name = request.args.get('cloudbeesAccountName') or None

    try:
        candidates = _validation().autocomplete(value, account_name)
    except BeesClientError as e:
        logger.error(f"Autocompletion of application ids failed: {e}")
        candidates = []

    return jsonify({'suggestions': [{'name': candidate} for candidate in candidates]})


@descriptor_bp.route('/publisher', methods=['POST'])
def new_publisher():
    """Bind job settings; no publisher when no account can be determined."""
    settings = DeploymentSettings.from_form(request.form, _registry())
    return jsonify({'publisher': settings.to_dict() if settings else None})
