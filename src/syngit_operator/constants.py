"""Constants for the Syngit RemoteUser Operator."""

# API Group
API_GROUP = "syngit.io"
API_VERSION = "v1beta2"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_REMOTE_USER = "RemoteUser"
KIND_SECRET = "Secret"
PLURAL_REMOTE_USERS = "remoteusers"

# Annotations
ANNOTATION_AUTH_TEST = "github.syngit.io/auth.test"

# Secret keys
SECRET_KEY_PASSWORD = "password"

# Field Manager
FIELD_MANAGER = "syngit-remoteuser-operator"

# Connexion status values
CONNEXION_STATUS_CONNECTED = "Connected"

# Condition Types
COND_AUTHENTICATED = "Authenticated"

# Condition Reasons
REASON_AUTHENTICATION_SUCCEEDED = "AuthenticationSucceeded"
REASON_AUTHENTICATION_FAILED = "AuthenticationFailed"

# Condition Statuses
CONDITION_TRUE = "True"
CONDITION_FALSE = "False"

# Status write
STATUS_WRITE_RETRIES = 2

# Event Reasons
EVENT_REASON_AUTHENTICATION_SUCCEEDED = "AuthenticationSucceeded"
EVENT_REASON_AUTHENTICATION_FAILED = "AuthenticationFailed"
EVENT_REASON_STATUS_UPDATE_FAILED = "StatusUpdateFailed"
