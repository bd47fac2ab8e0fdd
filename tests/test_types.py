import pytest

from xpkit.conditions import ConditionType, available, reconcile_success
from xpkit.types import (
    LABEL_KEY_PROVIDER_NAME,
    RESOURCE_CREDENTIALS_SECRET_ENDPOINT_KEY,
    CommonCredentialSelectors,
    DeletionPolicy,
    GroupVersionKind,
    ProviderConfigStatus,
    ResourceSpec,
    ResourceStatus,
    SecretKeySelector,
    TypedReference,
    UpdatePolicy,
    from_api_version_and_kind,
)


def test_enum_values():
    assert DeletionPolicy("Orphan") is DeletionPolicy.ORPHAN
    assert UpdatePolicy("Manual") is UpdatePolicy.MANUAL
    assert LABEL_KEY_PROVIDER_NAME == "crossplane.io/provider-config"
    assert RESOURCE_CREDENTIALS_SECRET_ENDPOINT_KEY == "endpoint"


def test_gvk_with_group():
    gvk = GroupVersionKind(group="coolstuff", version="v1", kind="coolresource")
    assert gvk.to_api_version_and_kind() == ("coolstuff/v1", "coolresource")


def test_gvk_core_group_has_no_slash():
    gvk = GroupVersionKind(version="v1", kind="Pod")
    assert gvk.to_api_version_and_kind() == ("v1", "Pod")


@pytest.mark.parametrize(
    "gvk",
    [
        GroupVersionKind("coolstuff", "v1", "coolresource"),
        GroupVersionKind("", "v1", "Pod"),
    ],
)
def test_gvk_round_trip(gvk):
    assert from_api_version_and_kind(*gvk.to_api_version_and_kind()) == gvk


def test_from_api_version_too_many_slashes_keeps_only_kind():
    got = from_api_version_and_kind("a/b/c", "K")
    assert got == GroupVersionKind(kind="K")


def test_from_empty_api_version():
    assert from_api_version_and_kind("", "K") == GroupVersionKind(kind="K")


def test_typed_reference_gvk_round_trip():
    ref = TypedReference(name="cool")
    gvk = GroupVersionKind("coolstuff", "v1", "coolresource")
    ref.set_group_version_kind(gvk)
    assert ref.api_version == "coolstuff/v1"
    assert ref.kind == "coolresource"
    assert ref.group_version_kind() == gvk


def test_resource_spec_defaults_to_delete():
    assert ResourceSpec().deletion_policy is DeletionPolicy.DELETE


def test_resource_status_behaves_as_conditioned_status():
    status = ResourceStatus()
    status.set_conditions(available(), reconcile_success())
    assert len(status.conditions) == 2
    assert status.get_condition(ConditionType.READY).equal(available())


def test_provider_config_status_users():
    status = ProviderConfigStatus(users=3)
    assert status.users == 3
    assert status.conditions == []


def test_secret_key_selector_carries_reference():
    sel = SecretKeySelector(name="creds", namespace="ns", key="key")
    selectors = CommonCredentialSelectors(secret_ref=sel)
    assert selectors.secret_ref.namespace == "ns"
    assert selectors.fs is None