import logging
import os

from flask import Flask, jsonify, request

from .config import config
from .errors import InvalidTenantID, StoreError, UnsupportedOperation
from .instance_manager import InstanceManager

logger = logging.getLogger(__name__)

# Public messages for store failures; the cause only goes to the log
STORE_ERROR_MESSAGES = {
    'instances.create_instance': 'failed to create instance',
    'instances.get_instance': 'failed to retrieve instance',
    'instances.delete_instance': 'failed to delete instance',
    'instances.stop_instance': 'failed to stop instance',
}


def create_app(config_name: str = None, manager: InstanceManager = None) -> Flask:
    """Application factory for the provisioner service."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))

    # Cluster credentials are resolved once; failure here stops startup
    if manager is None:
        manager = InstanceManager.from_config(app.config)
    app.instances = manager

    register_routes(app)
    register_error_handlers(app)

    from .routes import instances
    app.register_blueprint(instances.bp)

    return app


def register_routes(app: Flask):

    @app.route('/health')
    def health_check():
        """Health check endpoint."""
        return jsonify({'status': 'ok'})


def register_error_handlers(app: Flask):

    @app.errorhandler(InvalidTenantID)
    def handle_invalid_tenant(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(StoreError)
    def handle_store_error(e):
        logger.error(f"{request.method} {request.path} failed: {e}")
        message = STORE_ERROR_MESSAGES.get(request.endpoint, 'cluster request failed')
        return jsonify({'error': message}), 500

    @app.errorhandler(UnsupportedOperation)
    def handle_unsupported(e):
        return jsonify({'error': str(e)}), 501
