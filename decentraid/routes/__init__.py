"""
DecentraID API Routes Package
Provides identity, verification, credential, and audit endpoints.
"""

from decentraid.routes import identity, verification, credentials, audit

__all__ = ['identity', 'verification', 'credentials', 'audit']
