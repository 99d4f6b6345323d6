"""
DecentraID Services Package
Provides encryption, content addressing, audit, identity custody,
consent and credential services.
"""

from dataclasses import dataclass

from decentraid.config import Config
from decentraid.database import Database
from decentraid.services.audit import AuditLogger
from decentraid.services.consent import ConsentBroker
from decentraid.services.credentials import CredentialIssuer
from decentraid.services.disclosure import DisclosureEngine
from decentraid.services.encryption import EncryptionService
from decentraid.services.identity_vault import IdentityVault
from decentraid.services.ipfs import ContentAddresser


@dataclass
class Services:
    """All services wired to one configuration."""
    config: Config
    database: Database
    encryption: EncryptionService
    addresser: ContentAddresser
    audit: AuditLogger
    vault: IdentityVault
    consent: ConsentBroker
    credentials: CredentialIssuer


def build_services(config: Config) -> Services:
    """
    Validate configuration and wire the services.

    Fails fast with ConfigurationError on an unusable key.
    """
    config.validate()
    config.ensure_data_dir()

    database = Database(config.DB_PATH)
    database.init_schema()

    encryption = EncryptionService(config.get_master_key())
    addresser = ContentAddresser(config.CONTENT_HANDLE_PREFIX, config.CONTENT_HANDLE_LENGTH)
    audit = AuditLogger(database)

    vault = IdentityVault(
        database, encryption, addresser, audit,
        share_link=config.get_share_link,
        id_attempts=config.ID_GENERATION_ATTEMPTS,
    )
    consent = ConsentBroker(
        database, encryption, audit, DisclosureEngine(),
        request_id_range=(config.REQUEST_ID_MIN, config.REQUEST_ID_MAX),
        id_attempts=config.ID_GENERATION_ATTEMPTS,
    )
    credentials = CredentialIssuer(encryption, addresser, audit)

    return Services(
        config=config,
        database=database,
        encryption=encryption,
        addresser=addresser,
        audit=audit,
        vault=vault,
        consent=consent,
        credentials=credentials,
    )


__all__ = [
    'Services',
    'build_services',
    'AuditLogger',
    'ConsentBroker',
    'CredentialIssuer',
    'DisclosureEngine',
    'EncryptionService',
    'IdentityVault',
    'ContentAddresser',
]
