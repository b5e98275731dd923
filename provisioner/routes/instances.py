import logging

from flask import Blueprint, current_app, jsonify, request

from ..naming import validate_tenant_id

bp = Blueprint('instances', __name__)

logger = logging.getLogger(__name__)


def get_manager():
    return current_app.instances


@bp.route('/tenants/<tenant_id>/instance', methods=['POST'])
def create_instance(tenant_id):
    """Provision a new instance for the tenant."""
    validate_tenant_id(tenant_id)

    # Body is decoded whatever the Content-Type; anything unusable means "generate one"
    data = request.get_json(force=True, silent=True)
    gateway_token = data.get('gateway_token') if isinstance(data, dict) else None
    if not isinstance(gateway_token, str):
        gateway_token = None

    logger.info(f"CreateInstance: tenant={tenant_id}")
    info = get_manager().create_instance(tenant_id, gateway_token)

    return jsonify(info.to_dict(include_token=False)), 201


@bp.route('/tenants/<tenant_id>/instance', methods=['GET'])
def get_instance(tenant_id):
    """Current status and endpoint of the tenant's instance."""
    validate_tenant_id(tenant_id)
    logger.info(f"GetInstance: tenant={tenant_id}")
    info = get_manager().get_instance(tenant_id)
    if info is None:
        return jsonify({'error': 'instance not found'}), 404

    return jsonify(info.to_dict())


@bp.route('/tenants/<tenant_id>/instance', methods=['DELETE'])
def delete_instance(tenant_id):
    """Tear down all instances of the tenant."""
    validate_tenant_id(tenant_id)
    logger.info(f"DeleteInstance: tenant={tenant_id}")
    get_manager().delete_instance(tenant_id)
    return '', 204


@bp.route('/tenants/<tenant_id>/instance/stop', methods=['POST'])
def stop_instance(tenant_id):
    validate_tenant_id(tenant_id)
    logger.info(f"StopInstance: tenant={tenant_id}")
    get_manager().stop_instance(tenant_id)
    return '', 204


@bp.route('/tenants/<tenant_id>/instance/start', methods=['POST'])
def start_instance(tenant_id):
    validate_tenant_id(tenant_id)
    logger.info(f"StartInstance: tenant={tenant_id}")
    get_manager().start_instance(tenant_id)
    return '', 204
