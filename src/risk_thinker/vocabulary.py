"""
Enumerated domain vocabulary for Risk Thinker

Every value is a plain string in the input file. ``parse`` trims and lower-cases
before matching and raises ``ValueError`` for anything unknown.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional


class Vocabulary(str, Enum):
    """Base class for textual enumerations."""

    @classmethod
    def parse(cls, value: Optional[str], default: Optional["Vocabulary"] = None):
        text = (value or "").strip().lower()
        if not text and default is not None:
            return default
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"Unable to parse into type {cls.__name__}: {value}")

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    def __str__(self) -> str:
        return self.value


class OrderedVocabulary(Vocabulary):
    """Enumeration whose declaration order is its severity order."""

    @property
    def rank(self) -> int:
        return type(self)._member_names_.index(self.name)

    def _check(self, other) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot compare {type(self).__name__} with {type(other).__name__}"
            )

    def __lt__(self, other):
        self._check(other)
        return self.rank < other.rank

    def __le__(self, other):
        self._check(other)
        return self.rank <= other.rank

    def __gt__(self, other):
        self._check(other)
        return self.rank > other.rank

    def __ge__(self, other):
        self._check(other)
        return self.rank >= other.rank


class Criticality(OrderedVocabulary):
    ARCHIVE = "archive"
    OPERATIONAL = "operational"
    IMPORTANT = "important"
    CRITICAL = "critical"
    MISSION_CRITICAL = "mission-critical"


class Confidentiality(OrderedVocabulary):
    PUBLIC = "public"
    INTERNAL = "internal"
    RESTRICTED = "restricted"
    CONFIDENTIAL = "confidential"
    STRICTLY_CONFIDENTIAL = "strictly-confidential"


class Usage(Vocabulary):
    BUSINESS = "business"
    DEVOPS = "devops"


class Quantity(OrderedVocabulary):
    VERY_FEW = "very-few"
    FEW = "few"
    MANY = "many"
    VERY_MANY = "very-many"


class TechnicalAssetType(Vocabulary):
    EXTERNAL_ENTITY = "external-entity"
    PROCESS = "process"
    DATASTORE = "datastore"


class TechnicalAssetSize(Vocabulary):
    SYSTEM = "system"
    SERVICE = "service"
    APPLICATION = "application"
    COMPONENT = "component"


class TechnicalAssetMachine(Vocabulary):
    PHYSICAL = "physical"
    VIRTUAL = "virtual"
    CONTAINER = "container"
    SERVERLESS = "serverless"


class EncryptionStyle(Vocabulary):
    NONE = "none"
    TRANSPARENT = "transparent"
    DATA_WITH_SYMMETRIC_SHARED_KEY = "data-with-symmetric-shared-key"
    DATA_WITH_ASYMMETRIC_SHARED_KEY = "data-with-asymmetric-shared-key"
    DATA_WITH_ENDUSER_INDIVIDUAL_KEY = "data-with-enduser-individual-key"


class Authentication(Vocabulary):
    NONE = "none"
    CREDENTIALS = "credentials"
    SESSION_ID = "session-id"
    TOKEN = "token"
    CLIENT_CERTIFICATE = "client-certificate"
    TWO_FACTOR = "two-factor"
    EXTERNALIZED = "externalized"


class Authorization(Vocabulary):
    NONE = "none"
    TECHNICAL_USER = "technical-user"
    ENDUSER_IDENTITY_PROPAGATION = "enduser-identity-propagation"


class DataFormat(Vocabulary):
    JSON = "json"
    XML = "xml"
    SERIALIZATION = "serialization"
    FILE = "file"
    CSV = "csv"


class Protocol(Vocabulary):
    UNKNOWN = "unknown-protocol"
    HTTP = "http"
    HTTPS = "https"
    WS = "ws"
    WSS = "wss"
    REVERSE_PROXY_WEB_PROTOCOL = "reverse-proxy-web-protocol"
    REVERSE_PROXY_WEB_PROTOCOL_ENCRYPTED = "reverse-proxy-web-protocol-encrypted"
    MQTT = "mqtt"
    JDBC = "jdbc"
    JDBC_ENCRYPTED = "jdbc-encrypted"
    ODBC = "odbc"
    ODBC_ENCRYPTED = "odbc-encrypted"
    SQL_ACCESS_PROTOCOL = "sql-access-protocol"
    SQL_ACCESS_PROTOCOL_ENCRYPTED = "sql-access-protocol-encrypted"
    NOSQL_ACCESS_PROTOCOL = "nosql-access-protocol"
    NOSQL_ACCESS_PROTOCOL_ENCRYPTED = "nosql-access-protocol-encrypted"
    BINARY = "binary"
    BINARY_ENCRYPTED = "binary-encrypted"
    TEXT = "text"
    TEXT_ENCRYPTED = "text-encrypted"
    SSH = "ssh"
    SSH_TUNNEL = "ssh-tunnel"
    SMTP = "smtp"
    SMTP_ENCRYPTED = "smtp-encrypted"
    POP3 = "pop3"
    POP3_ENCRYPTED = "pop3-encrypted"
    IMAP = "imap"
    IMAP_ENCRYPTED = "imap-encrypted"
    FTP = "ftp"
    FTPS = "ftps"
    SFTP = "sftp"
    SCP = "scp"
    LDAP = "ldap"
    LDAPS = "ldaps"
    JMS = "jms"
    NFS = "nfs"
    SMB = "smb"
    SMB_ENCRYPTED = "smb-encrypted"
    LOCAL_FILE_ACCESS = "local-file-access"
    NRPE = "nrpe"
    XMPP = "xmpp"
    IIOP = "iiop"
    IIOP_ENCRYPTED = "iiop-encrypted"
    JRMP = "jrmp"
    JRMP_ENCRYPTED = "jrmp-encrypted"
    IN_PROCESS_LIBRARY_CALL = "in-process-library-call"
    CONTAINER_SPAWNING = "container-spawning"

    @property
    def is_encrypted(self) -> bool:
        return self.value.endswith("-encrypted") or self in _ENCRYPTED_PROTOCOLS

    @property
    def is_process_local(self) -> bool:
        return self in _PROCESS_LOCAL_PROTOCOLS


_ENCRYPTED_PROTOCOLS = frozenset(
    {
        Protocol.HTTPS,
        Protocol.WSS,
        Protocol.SSH,
        Protocol.SSH_TUNNEL,
        Protocol.FTPS,
        Protocol.SFTP,
        Protocol.SCP,
        Protocol.LDAPS,
    }
)

_PROCESS_LOCAL_PROTOCOLS = frozenset(
    {
        Protocol.IN_PROCESS_LIBRARY_CALL,
        Protocol.LOCAL_FILE_ACCESS,
        Protocol.CONTAINER_SPAWNING,
    }
)


class TechnicalAssetTechnology(Vocabulary):
    UNKNOWN = "unknown-technology"
    CLIENT_SYSTEM = "client-system"
    BROWSER = "browser"
    DESKTOP = "desktop"
    MOBILE_APP = "mobile-app"
    DEVOPS_CLIENT = "devops-client"
    WEB_SERVER = "web-server"
    WEB_APPLICATION = "web-application"
    APPLICATION_SERVER = "application-server"
    DATABASE = "database"
    FILE_SERVER = "file-server"
    LOCAL_FILE_SYSTEM = "local-file-system"
    ERP = "erp"
    CMS = "cms"
    WEB_SERVICE_REST = "web-service-rest"
    WEB_SERVICE_SOAP = "web-service-soap"
    EJB = "ejb"
    SEARCH_INDEX = "search-index"
    SEARCH_ENGINE = "search-engine"
    SERVICE_REGISTRY = "service-registry"
    REVERSE_PROXY = "reverse-proxy"
    LOAD_BALANCER = "load-balancer"
    BUILD_PIPELINE = "build-pipeline"
    SOURCECODE_REPOSITORY = "sourcecode-repository"
    ARTIFACT_REGISTRY = "artifact-registry"
    CODE_INSPECTION_PLATFORM = "code-inspection-platform"
    MONITORING = "monitoring"
    LDAP_SERVER = "ldap-server"
    CONTAINER_PLATFORM = "container-platform"
    BATCH_PROCESSING = "batch-processing"
    EVENT_LISTENER = "event-listener"
    IDENTITY_PROVIDER = "identity-provider"
    IDENTITY_STORE_LDAP = "identity-store-ldap"
    IDENTITY_STORE_DATABASE = "identity-store-database"
    TOOL = "tool"
    CLI = "cli"
    TASK = "task"
    FUNCTION = "function"
    GATEWAY = "gateway"
    IOT_DEVICE = "iot-device"
    MESSAGE_QUEUE = "message-queue"
    STREAM_PROCESSING = "stream-processing"
    SERVICE_MESH = "service-mesh"
    DATA_LAKE = "data-lake"
    BIG_DATA_PLATFORM = "big-data-platform"
    REPORT_ENGINE = "report-engine"
    AI = "ai"
    MAIL_SERVER = "mail-server"
    VAULT = "vault"
    HSM = "hsm"
    WAF = "waf"
    IDS = "ids"
    IPS = "ips"
    SCHEDULER = "scheduler"
    MAINFRAME = "mainframe"
    BLOCK_STORAGE = "block-storage"
    LIBRARY = "library"

    @property
    def is_unprotected_communications_tolerated(self) -> bool:
        return self in (
            TechnicalAssetTechnology.MONITORING,
            TechnicalAssetTechnology.IDS,
            TechnicalAssetTechnology.IPS,
        )

    @property
    def is_identity_store(self) -> bool:
        return self in (
            TechnicalAssetTechnology.IDENTITY_STORE_LDAP,
            TechnicalAssetTechnology.IDENTITY_STORE_DATABASE,
        )

    @property
    def is_traffic_forwarding(self) -> bool:
        return self in (
            TechnicalAssetTechnology.LOAD_BALANCER,
            TechnicalAssetTechnology.REVERSE_PROXY,
            TechnicalAssetTechnology.SERVICE_REGISTRY,
            TechnicalAssetTechnology.WAF,
            TechnicalAssetTechnology.IDS,
            TechnicalAssetTechnology.IPS,
        )


class TrustBoundaryType(Vocabulary):
    NETWORK_ON_PREM = "network-on-prem"
    NETWORK_DEDICATED_HOSTER = "network-dedicated-hoster"
    NETWORK_VIRTUAL_LAN = "network-virtual-lan"
    NETWORK_CLOUD_PROVIDER = "network-cloud-provider"
    NETWORK_CLOUD_SECURITY_GROUP = "network-cloud-security-group"
    NETWORK_POLICY_NAMESPACE_ISOLATION = "network-policy-namespace-isolation"
    EXECUTION_ENVIRONMENT = "execution-environment"

    @property
    def is_network_boundary(self) -> bool:
        return self.value.startswith("network-")

    @property
    def is_within_cloud(self) -> bool:
        return self in (
            TrustBoundaryType.NETWORK_CLOUD_PROVIDER,
            TrustBoundaryType.NETWORK_CLOUD_SECURITY_GROUP,
        )


class STRIDE(Vocabulary):
    SPOOFING = "spoofing"
    TAMPERING = "tampering"
    REPUDIATION = "repudiation"
    INFORMATION_DISCLOSURE = "information-disclosure"
    DENIAL_OF_SERVICE = "denial-of-service"
    ELEVATION_OF_PRIVILEGE = "elevation-of-privilege"


class RiskFunction(Vocabulary):
    BUSINESS_SIDE = "business-side"
    ARCHITECTURE = "architecture"
    DEVELOPMENT = "development"
    OPERATIONS = "operations"


class RiskSeverity(OrderedVocabulary):
    LOW = "low"
    MEDIUM = "medium"
    ELEVATED = "elevated"
    HIGH = "high"
    CRITICAL = "critical"


class RiskExploitationLikelihood(OrderedVocabulary):
    UNLIKELY = "unlikely"
    LIKELY = "likely"
    VERY_LIKELY = "very-likely"
    FREQUENT = "frequent"


class RiskExploitationImpact(OrderedVocabulary):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"


class DataBreachProbability(OrderedVocabulary):
    IMPROBABLE = "improbable"
    POSSIBLE = "possible"
    PROBABLE = "probable"


class RiskStatus(OrderedVocabulary):
    UNCHECKED = "unchecked"
    IN_DISCUSSION = "in-discussion"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    MITIGATED = "mitigated"
    FALSE_POSITIVE = "false-positive"

    @property
    def is_still_at_risk(self) -> bool:
        return self not in (RiskStatus.MITIGATED, RiskStatus.FALSE_POSITIVE)


ALL_VOCABULARIES = [
    Criticality,
    Confidentiality,
    Usage,
    Quantity,
    TechnicalAssetType,
    TechnicalAssetSize,
    TechnicalAssetMachine,
    EncryptionStyle,
    Authentication,
    Authorization,
    DataFormat,
    Protocol,
    TechnicalAssetTechnology,
    TrustBoundaryType,
    STRIDE,
    RiskFunction,
    RiskSeverity,
    RiskExploitationLikelihood,
    RiskExploitationImpact,
    DataBreachProbability,
    RiskStatus,
]
