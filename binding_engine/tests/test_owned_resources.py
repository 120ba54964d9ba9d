"""
Tests for owned resource discovery.
"""

import base64

import pytest

from binding_engine.binding.handlers import CONFIGMAPS, SECRETS
from binding_engine.context import find_owned_resource_contexts
from binding_engine.core import GroupVersionResource, OwnedResourceListError, OwnedResourceQuery
from binding_engine.tests.fakes import DATABASES, FakeCluster, FakeTypeLookup, RecordingLogger, database, secret

TEMPLATE = "{{ .service.kind | upper }}_{{ .name | upper }}"
SERVICES = GroupVersionResource("", "v1", "services")


def owned_fixture():
    cluster = FakeCluster()
    cluster.add(DATABASES, database("db1", uid="uid-db1"))
    cluster.add(SECRETS, secret("db1-creds", {"password": "pw"}, owner_uid="uid-db1"))
    cluster.add(CONFIGMAPS, {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": "db1-config",
            "namespace": "default",
            "uid": "uid-db1-config",
            "ownerReferences": [{"uid": "uid-db1"}],
        },
        "data": {"port": "5432"},
    })
    cluster.add(SERVICES, {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": "db1-svc",
            "namespace": "default",
            "uid": "uid-db1-svc",
            "ownerReferences": [{"uid": "uid-db1"}],
        },
        "spec": {"clusterIP": "10.0.0.7"},
    })
    cluster.add(SECRETS, secret("unrelated", {"x": "y"}, owner_uid="uid-other"))
    return cluster


def find(cluster, owner_uid="uid-db1"):
    return find_owned_resource_contexts(
        cluster,
        FakeTypeLookup(),
        OwnedResourceQuery(namespace="default", owner_uid=owner_uid),
        TEMPLATE,
        False,
        RecordingLogger(),
    )


def test_owned_resources_get_contexts():
    contexts = find(owned_fixture())

    by_name = {ctx.name: ctx for ctx in contexts}
    assert set(by_name) == {"db1-creds", "db1-config", "db1-svc"}
    assert by_name["db1-creds"].env_vars == {"password": "pw"}
    assert by_name["db1-config"].env_vars == {"port": "5432"}
    assert by_name["db1-svc"].env_vars == {"clusterIP": "10.0.0.7"}
    assert all(ctx.owned_by == "uid-db1" for ctx in contexts)


def test_owned_prefixes_follow_kind():
    contexts = find(owned_fixture())

    prefixes = {ctx.kind: ctx.name_prefix for ctx in contexts}
    assert prefixes == {"Secret": "Secret", "ConfigMap": "ConfigMap", "Service": "Service"}
    assert "Database" not in prefixes.values()


def test_no_owned_resources():
    assert list(find(owned_fixture(), owner_uid="uid-nobody")) == []


def test_owned_secret_own_annotations_override_defaults():
    cluster = FakeCluster()
    creds = secret("db1-creds", {"password": "pw"}, owner_uid="uid-db1")
    creds["metadata"]["annotations"] = {"service.binding": "path={.metadata.name}"}
    cluster.add(SECRETS, creds)

    (ctx,) = find(cluster)

    assert ctx.env_vars == {"name": "db1-creds"}


def test_listing_failure_is_fatal():
    cluster = owned_fixture()
    cluster.list_error = OwnedResourceListError("boom")

    with pytest.raises(OwnedResourceListError):
        find(cluster)


def test_only_one_owner_level():
    cluster = owned_fixture()
    # owned by the Secret, not by the Database
    cluster.add(CONFIGMAPS, {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": "grandchild",
            "namespace": "default",
            "uid": "uid-grandchild",
            "ownerReferences": [{"uid": "uid-db1-creds"}],
        },
        "data": {},
    })

    names = [ctx.name for ctx in find(cluster)]

    assert "grandchild" not in names


def test_owned_secret_with_binary_value_keeps_other_keys():
    """A value that is not UTF-8 text stays base64 encoded; the rest of the Secret is still bound."""
    cluster = FakeCluster()
    creds = secret("db1-creds", {"password": "pw"}, owner_uid="uid-db1")
    keystore = base64.b64encode(b"\xfe\xed\xfe\xed\x00\x02").decode("ascii")
    creds["data"]["keystore.jks"] = keystore
    cluster.add(SECRETS, creds)

    (ctx,) = find(cluster)

    assert ctx.env_vars == {"password": "pw", "keystore.jks": keystore}
