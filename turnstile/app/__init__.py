"""
Turnstile - MCP Key-Proxy Gateway

Lets operators put many MCP servers behind one endpoint:
- Control Plane: projects, server registration (tools/list handshake),
  proxy keys with allow-lists and blacklists, audit log queries
- Gateway: key authentication, target resolution, policy checks, forwarding
- Data Layer: PostgreSQL (SQLAlchemy async + Alembic)
"""

__version__ = "0.1.0"
