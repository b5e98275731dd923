"""
Tenant Instance Provisioner

Responsibilities:
- Validate tenant identifiers
- Declare per-tenant OpenClawInstance custom resources
- Look up, project and tear down tenant instances by label
- Serve the tenant instance REST API
"""
