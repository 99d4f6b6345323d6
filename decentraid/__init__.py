"""
DecentraID Identity Custody Service

Off-chain custody and selective disclosure for decentralized identities:
- AES-256-CBC encrypted personal data, referenced by a content handle
- Gasless identities that a wallet can later anchor on-chain
- Verifier requests answered with purpose-filtered disclosures
- Append-only audit trail

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "DecentraID Team"
