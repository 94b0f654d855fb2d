"""
Flask Application Factory for the publisher configuration UI.
"""
import logging
import os
from typing import Optional

from flask import Flask, jsonify

from .accounts import AccountRegistry, AccountStore
from .bees_client import RemoteDeployClient
from .bees_client_mock import get_bees_client
from .config_defaults import get_default, get_setting
from .descriptor import descriptor_bp
from .validation import ValidationService

logger = logging.getLogger(__name__)


def create_app(accounts_path: Optional[str] = None,
               client: Optional[RemoteDeployClient] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        accounts_path: Accounts YAML file (defaults to CLOUDBEES_ACCOUNTS_FILE)
        client: Remote client to use (defaults to get_bees_client())

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY') or get_default('SECRET_KEY') or os.urandom(32).hex()

    # Configuration bodies are tiny
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH', 1024 * 1024))

    accounts_path = accounts_path or get_setting('CLOUDBEES_ACCOUNTS_FILE', 'cloudbees_accounts.yaml')
    registry = AccountRegistry.from_store(AccountStore(accounts_path))
    if client is None:
        client = get_bees_client()

    app.config['account_registry'] = registry
    app.config['validation_service'] = ValidationService(registry, client)

    app.register_blueprint(descriptor_bp)

    @app.route('/health')
    def health():
        """Health check endpoint"""
        return jsonify({'status': 'ok', 'accounts': len(registry)})

    logger.info(f"Publisher configuration app ready with {len(registry)} accounts from {accounts_path}")
    return app
