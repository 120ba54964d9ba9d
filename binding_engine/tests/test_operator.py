"""
Tests for operator-side glue: configuration, reconciliation summaries and
OLM lookups. Cluster access is replaced by the in-memory fakes.
"""

import pytest

from binding_engine.binding.handlers import SECRETS
from binding_engine.core import GroupVersionKind, GroupVersionResource, TypeNotFoundError
from binding_operator.cluster import owned_by
from binding_operator.olm import find_crd_description
from binding_operator.reconcile import binding_references, reconcile_binding, selectors_from_spec
from binding_operator.settings import DEFAULT_NAMING_TEMPLATE, OperatorConfig
from binding_engine.tests.fakes import DATABASE, DATABASES, FakeCluster, FakeTypeLookup, RecordingLogger, database, secret


def test_config_defaults(monkeypatch):
    for var in ("SBO_NAMING_TEMPLATE", "SBO_OWNED_RESOURCE_TYPES", "SBO_REQUEUE_DELAY_SECONDS",
                "METRICS_ENABLED", "METRICS_PORT"):
        monkeypatch.delenv(var, raising=False)

    config = OperatorConfig.from_env()

    assert config.naming_template == DEFAULT_NAMING_TEMPLATE
    assert GroupVersionResource("", "v1", "secrets") in config.owned_resource_types
    assert config.requeue_delay_seconds == 30
    assert config.metrics_enabled is False
    assert config.metrics_port == 8080


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("SBO_NAMING_TEMPLATE", "{{ .name }}")
    monkeypatch.setenv("SBO_OWNED_RESOURCE_TYPES", "v1/secrets, route.openshift.io/v1/routes")
    monkeypatch.setenv("SBO_REQUEUE_DELAY_SECONDS", "5")
    monkeypatch.setenv("METRICS_ENABLED", "TRUE")
    monkeypatch.setenv("METRICS_PORT", "9090")

    config = OperatorConfig.from_env()

    assert config.naming_template == "{{ .name }}"
    assert config.owned_resource_types == (
        GroupVersionResource("", "v1", "secrets"),
        GroupVersionResource("route.openshift.io", "v1", "routes"),
    )
    assert config.requeue_delay_seconds == 5
    assert config.metrics_enabled is True
    assert config.metrics_port == 9090


def test_config_rejects_bad_resource_type(monkeypatch):
    monkeypatch.setenv("SBO_OWNED_RESOURCE_TYPES", "secrets")

    with pytest.raises(ValueError):
        OperatorConfig.from_env()


def binding_spec(**extra):
    spec = {
        "services": [
            {"group": "postgresql.example.com", "version": "v1alpha1", "kind": "Database", "name": "db1"},
        ],
    }
    spec.update(extra)
    return spec


def test_selectors_from_spec():
    (selector,) = selectors_from_spec(binding_spec())

    assert selector.name == "db1"
    assert selector.kind == "Database"
    assert selector.namespace is None
    assert selectors_from_spec({}) == []


def test_reconcile_summary_hides_values():
    cluster = FakeCluster()
    cluster.add(DATABASES, database(
        "db1",
        {"service.binding": "path={.spec.credentials},objectType=Secret"},
        credentials="db1-creds",
    ))
    cluster.add(SECRETS, secret("db1-creds", {"username": "admin", "password": "s3cr3t"}, owner_uid="uid-db1"))
    logger = RecordingLogger()

    status = reconcile_binding(
        binding_spec(detectBindingResources=True), "binding", "default",
        cluster, FakeTypeLookup(), OperatorConfig(), logger,
    )

    assert status["services"] == [
        {"kind": "Database", "name": "db1", "namespace": "default", "prefix": "Database",
         "variables": ["password", "username"]},
        {"kind": "Secret", "name": "db1-creds", "namespace": "default", "prefix": "Secret",
         "variables": ["password", "username"]},
    ]
    assert status["skippedSelectors"] == []
    assert "s3cr3t" not in repr(status)
    assert any("built 2 service contexts" in m for m in logger.messages("info"))


def test_reconcile_propagates_fatal_errors():
    spec = {"services": [{"group": "example.com", "version": "v1", "kind": "Unknown", "name": "x"}]}

    with pytest.raises(TypeNotFoundError):
        reconcile_binding(spec, "binding", "default", FakeCluster(), FakeTypeLookup(), OperatorConfig(), RecordingLogger())


def test_binding_references():
    spec = binding_spec()
    lookup = FakeTypeLookup()

    assert binding_references(spec, "default", DATABASE, "default", "db1", lookup)
    assert not binding_references(spec, "default", DATABASE, "default", "db2", lookup)
    assert not binding_references(spec, "default", DATABASE, "other", "db1", lookup)
    assert not binding_references(spec, "default", GroupVersionKind("", "v1", "Secret"), "default", "db1", lookup)


def test_binding_references_by_resource():
    spec = {"services": [
        {"group": "postgresql.example.com", "version": "v1alpha1", "resource": "databases", "name": "db1"},
        {"group": "example.com", "version": "v1", "resource": "unknowns", "name": "db1"},
    ]}
    lookup = FakeTypeLookup()

    assert binding_references(spec, "default", DATABASE, "default", "db1", lookup)
    assert not binding_references(spec, "default", GroupVersionKind("", "v1", "Secret"), "default", "db1", lookup)


def test_find_crd_description():
    description = {"name": "databases.postgresql.example.com", "version": "v1alpha1", "kind": "Database"}
    csvs = [
        {"spec": {}},
        {"spec": {"customresourcedefinitions": {"owned": [
            {"name": "backups.postgresql.example.com", "version": "v1alpha1", "kind": "Backup"},
            description,
        ]}}},
    ]

    assert find_crd_description(csvs, "databases.postgresql.example.com", DATABASE) is description
    assert find_crd_description(csvs, "databases.other.io", DATABASE) is None
    assert find_crd_description([{"spec": None}], "databases.postgresql.example.com", DATABASE) is None


def test_owned_by():
    obj = secret("s", {}, owner_uid="uid-db1")

    assert owned_by(obj, "uid-db1")
    assert not owned_by(obj, "uid-db2")
    assert not owned_by({"metadata": {}}, "uid-db1")
