#!/usr/bin/env python3
"""
Entry point for the Tenant Instance Provisioner.

Usage:
    python run.py

Environment Variables:
    FLASK_ENV: development or production (default: development)
    PORT: Port to listen on (default: 8080)
    TENANT_NAMESPACE: Namespace for tenant instances (default: tenants)
    TENANT_DOMAIN: Public domain suffix (default: wareit.ai)
    TENANT_INTERNAL_DOMAIN: Internal domain suffix (default: internal.<TENANT_DOMAIN>)
    KUBECONFIG_BASE64: Base64 encoded kubeconfig, tried before in-cluster credentials
"""
import logging
import os
import sys

from provisioner.config import parse_port
from provisioner.errors import ConfigurationError


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    logger = logging.getLogger('provisioner')

    from provisioner.app import create_app

    try:
        app = create_app()
        port = parse_port(app.config['PORT'])
    except ConfigurationError as e:
        logger.critical(f"Failed to start: {e}")
        sys.exit(1)

    settings = app.instances.settings
    logger.info(
        f"config: namespace={settings.namespace} domain={settings.domain} "
        f"internal_domain={settings.internal_domain} port={port}"
    )

    debug = os.getenv('FLASK_ENV', 'development') == 'development'
    app.run(host='0.0.0.0', port=port, debug=debug, threaded=True)


if __name__ == '__main__':
    main()
