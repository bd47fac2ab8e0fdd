"""Common API types shared by managed resources, provider configs and targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from xpkit.conditions import ConditionedStatus

RESOURCE_CREDENTIALS_SECRET_ENDPOINT_KEY = "endpoint"
RESOURCE_CREDENTIALS_SECRET_PORT_KEY = "port"
RESOURCE_CREDENTIALS_SECRET_USER_KEY = "username"
RESOURCE_CREDENTIALS_SECRET_PASSWORD_KEY = "password"
RESOURCE_CREDENTIALS_SECRET_CA_KEY = "clusterCA"
RESOURCE_CREDENTIALS_SECRET_CLIENT_CERT_KEY = "clientCert"
RESOURCE_CREDENTIALS_SECRET_CLIENT_KEY_KEY = "clientKey"
RESOURCE_CREDENTIALS_SECRET_TOKEN_KEY = "token"
RESOURCE_CREDENTIALS_SECRET_KUBECONFIG_KEY = "kubeconfig"

LABEL_KEY_PROVIDER_NAME = "crossplane.io/provider-config"


class DeletionPolicy(str, Enum):
    """What happens to the external resource when its managed resource is deleted."""

    ORPHAN = "Orphan"
    DELETE = "Delete"


class UpdatePolicy(str, Enum):
    """Whether something is updated automatically or manually."""

    AUTOMATIC = "Automatic"
    MANUAL = "Manual"


class CredentialsSource(str, Enum):
    """A source from which provider credentials may be acquired."""

    NONE = "None"
    SECRET = "Secret"
    INJECTED_IDENTITY = "InjectedIdentity"
    ENVIRONMENT = "Environment"
    FILESYSTEM = "Filesystem"


@dataclass(frozen=True)
class GroupVersionKind:
    """An API group, version and kind."""

    group: str = ""
    version: str = ""
    kind: str = ""

    def to_api_version_and_kind(self) -> tuple[str, str]:
        """Return the ``apiVersion`` string and the kind."""
        if not self.group:
            return self.version, self.kind
        return f"{self.group}/{self.version}", self.kind


def _parse_group_version(api_version: str) -> tuple[str, str]:
    if api_version in ("", "/"):
        return "", ""
    parts = api_version.split("/")
    if len(parts) == 1:
        return "", parts[0]
    if len(parts) == 2:
        return parts[0], parts[1]
    raise ValueError(f"unexpected GroupVersion string: {api_version}")


def from_api_version_and_kind(api_version: str, kind: str) -> GroupVersionKind:
    """Build a GroupVersionKind; an unparseable apiVersion yields only the kind."""
    try:
        group, version = _parse_group_version(api_version)
    except ValueError:
        return GroupVersionKind(kind=kind)
    return GroupVersionKind(group=group, version=version, kind=kind)


@dataclass
class ObjectReference:
    """A reference to an object in an arbitrary namespace."""

    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""
    api_version: str = ""
    resource_version: str = ""
    field_path: str = ""


@dataclass
class LocalSecretReference:
    """A reference to a secret in the same namespace as the referencer."""

    name: str


@dataclass
class SecretReference:
    """A reference to a secret in an arbitrary namespace."""

    name: str
    namespace: str


@dataclass
class SecretKeySelector(SecretReference):
    """A reference to a key of a secret in an arbitrary namespace."""

    key: str = ""


@dataclass
class Reference:
    """A reference to a named object."""

    name: str


@dataclass
class TypedReference:
    """A reference to an object by name, kind and apiVersion."""

    api_version: str = ""
    kind: str = ""
    name: str = ""
    uid: str = ""

    def set_group_version_kind(self, gvk: GroupVersionKind) -> None:
        """Set the apiVersion and kind from ``gvk``."""
        self.api_version, self.kind = gvk.to_api_version_and_kind()

    def group_version_kind(self) -> GroupVersionKind:
        """Return the group, version and kind of the referenced object."""
        return from_api_version_and_kind(self.api_version, self.kind)


@dataclass
class Selector:
    """Selects an object by labels and/or controller reference."""

    match_labels: dict[str, str] = field(default_factory=dict)
    match_controller_ref: bool | None = None


@dataclass
class ResourceSpec:
    """The desired state common to managed resources."""

    write_connection_secret_to_reference: SecretReference | None = None
    provider_config_reference: Reference | None = None
    provider_reference: Reference | None = None
    deletion_policy: DeletionPolicy = DeletionPolicy.DELETE


@dataclass
class ResourceStatus(ConditionedStatus):
    """The observed state of a managed resource."""


@dataclass
class EnvSelector:
    """Selects an environment variable."""

    name: str


@dataclass
class FsSelector:
    """Selects a filesystem location."""

    path: str


@dataclass
class CommonCredentialSelectors:
    """Common selectors for extracting credentials."""

    fs: FsSelector | None = None
    env: EnvSelector | None = None
    secret_ref: SecretKeySelector | None = None


@dataclass
class ProviderConfigStatus(ConditionedStatus):
    """The observed status of a provider config."""

    users: int = 0


@dataclass
class ProviderConfigUsage:
    """Records that a managed resource uses a provider config."""

    provider_config_reference: Reference
    resource_reference: TypedReference


@dataclass
class TargetSpec:
    """Common fields of objects that expose infrastructure to workloads."""

    write_connection_secret_to_reference: LocalSecretReference | None = None
    resource_reference: ObjectReference | None = None


@dataclass
class TargetStatus(ConditionedStatus):
    """The observed status of a target."""