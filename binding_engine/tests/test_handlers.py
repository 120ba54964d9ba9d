"""
Tests for annotation parsing and handler variants.
"""

import pytest

from binding_engine.binding import (
    AttributeHandler,
    MapHandler,
    ResourceHandler,
    SliceOfMapsHandler,
    SliceOfStringsHandler,
    new_handler,
    parse_annotation_name,
    parse_annotation_value,
    parse_path,
)
from binding_engine.core import (
    EmptyAnnotationNameError,
    HandlerExecutionError,
    HandlerNotFoundError,
    InvalidAnnotationValueError,
    is_skippable_selector_error,
)
from binding_engine.tests.fakes import FakeCluster, database, secret
from binding_engine.binding.handlers import CONFIGMAPS, SECRETS


def test_parse_annotation_name():
    assert parse_annotation_name("service.binding/username") == "username"
    assert parse_annotation_name("service.binding") == ""


def test_parse_annotation_name_errors():
    with pytest.raises(EmptyAnnotationNameError):
        parse_annotation_name("service.binding/")
    with pytest.raises(HandlerNotFoundError):
        parse_annotation_name("kubectl.kubernetes.io/last-applied-configuration")


def test_selector_skippable_errors():
    assert is_skippable_selector_error(EmptyAnnotationNameError("x"))
    assert is_skippable_selector_error(HandlerNotFoundError("x"))
    assert not is_skippable_selector_error(HandlerExecutionError("x"))


def test_parse_annotation_value():
    opts = parse_annotation_value("path={.status.secret}, objectType=Secret")
    assert opts == {"path": "{.status.secret}", "objectType": "Secret"}


@pytest.mark.parametrize("value", ["", "   ", "objectType=Secret", "path={.a},color=red", "path"])
def test_parse_annotation_value_invalid(value):
    with pytest.raises(InvalidAnnotationValueError):
        parse_annotation_value(value)


def test_parse_path_forms():
    assert parse_path("{.status.dbCredentials}") == ["status", "dbCredentials"]
    assert parse_path(".spec.host") == ["spec", "host"]
    assert parse_path("{.data['tls.crt']}") == ["data", "tls.crt"]


@pytest.mark.parametrize("expr", ["spec.host", "{.}", "{.a..b}", "{.a[}"])
def test_parse_path_invalid(expr):
    with pytest.raises(InvalidAnnotationValueError):
        parse_path(expr)


def test_dispatch_selects_variant():
    cluster = FakeCluster()
    obj = database("db1")
    cases = [
        ("path={.spec.x}", AttributeHandler),
        ("path={.spec.x},elementType=map", MapHandler),
        ("path={.spec.x},elementType=sliceOfMaps,sourceKey=k,sourceValue=v", SliceOfMapsHandler),
        ("path={.spec.x},elementType=sliceOfStrings", SliceOfStringsHandler),
        ("path={.spec.x},objectType=Secret", ResourceHandler),
        ("path={.spec.x},objectType=ConfigMap", ResourceHandler),
    ]
    for value, cls in cases:
        assert type(new_handler(cluster, "service.binding/x", value, obj)) is cls


def test_dispatch_unknown_types():
    cluster = FakeCluster()
    with pytest.raises(HandlerNotFoundError):
        new_handler(cluster, "service.binding/x", "path={.spec.x},objectType=Pod", {})
    with pytest.raises(HandlerNotFoundError):
        new_handler(cluster, "service.binding/x", "path={.spec.x},elementType=tree", {})


def test_attribute_handler():
    obj = database("db1", connectionString="postgres://db1")
    result = new_handler(FakeCluster(), "service.binding/connectionString", "path={.spec.connectionString}", obj).handle()

    assert result.data == {"connectionString": "postgres://db1"}
    assert result.raw_data == {}


def test_attribute_handler_unnamed_uses_last_segment():
    obj = database("db1", host="db1.svc")
    result = new_handler(FakeCluster(), "service.binding", "path={.spec.host}", obj).handle()

    assert result.data == {"host": "db1.svc"}


def test_attribute_handler_missing_field():
    obj = database("db1")
    handler = new_handler(FakeCluster(), "service.binding/x", "path={.spec.missing}", obj)
    with pytest.raises(HandlerExecutionError, match=".spec.missing"):
        handler.handle()


def test_map_handler_spreads_unnamed():
    obj = database("db1", labels={"a": "1", "b": "2"})
    result = new_handler(FakeCluster(), "service.binding", "path={.spec.labels},elementType=map", obj).handle()

    assert result.data == {"a": "1", "b": "2"}


def test_map_handler_rejects_non_map():
    obj = database("db1", labels="nope")
    handler = new_handler(FakeCluster(), "service.binding/l", "path={.spec.labels},elementType=map", obj)
    with pytest.raises(HandlerExecutionError):
        handler.handle()


def test_map_handler_base64():
    obj = secret("s1", {"user": "admin"})
    handler = new_handler(FakeCluster(), "service.binding", "path={.data},elementType=map,valueEncoding=base64", obj)

    assert handler.handle().data == {"user": "admin"}


def test_slice_of_maps_handler():
    obj = database("db1", endpoints=[{"type": "primary", "url": "a"}, {"type": "replica", "url": "b"}])
    result = new_handler(
        FakeCluster(),
        "service.binding/urls",
        "path={.spec.endpoints},elementType=sliceOfMaps,sourceKey=type,sourceValue=url",
        obj,
    ).handle()

    assert result.data == {"urls": {"primary": "a", "replica": "b"}}


def test_slice_of_maps_handler_requires_keys():
    obj = database("db1", endpoints=[{"type": "primary"}])
    handler = new_handler(
        FakeCluster(),
        "service.binding/urls",
        "path={.spec.endpoints},elementType=sliceOfMaps,sourceKey=type,sourceValue=url",
        obj,
    )
    with pytest.raises(HandlerExecutionError):
        handler.handle()


def test_slice_of_strings_handler():
    obj = database("db1", hosts=["a", "b"], endpoints=[{"url": "x"}, {"url": "y"}])
    cluster = FakeCluster()

    plain = new_handler(cluster, "service.binding/hosts", "path={.spec.hosts},elementType=sliceOfStrings", obj).handle()
    picked = new_handler(
        cluster, "service.binding/urls", "path={.spec.endpoints},elementType=sliceOfStrings,sourceValue=url", obj
    ).handle()

    assert plain.data == {"hosts": ["a", "b"]}
    assert picked.data == {"urls": ["x", "y"]}


def test_resource_handler_secret():
    cluster = FakeCluster()
    cluster.add(SECRETS, secret("db1-creds", {"username": "admin", "password": "s3cr3t"}))
    obj = database("db1", credentials="db1-creds")

    result = new_handler(cluster, "service.binding", "path={.spec.credentials},objectType=Secret", obj).handle()

    assert result.data == {"username": "admin", "password": "s3cr3t"}
    assert result.raw_data == {"spec": {"credentials": {"username": "admin", "password": "s3cr3t"}}}
    assert cluster.fetch_calls == [("default", SECRETS, "db1-creds")]


def test_resource_handler_configmap_named():
    cluster = FakeCluster()
    cluster.add(CONFIGMAPS, {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "db1-config", "namespace": "default"},
        "data": {"port": "5432"},
    })
    obj = database("db1", config="db1-config")

    result = new_handler(cluster, "service.binding/config", "path={.spec.config},objectType=ConfigMap", obj).handle()

    assert result.data == {"config": {"port": "5432"}}


def test_resource_handler_missing_resource():
    obj = database("db1", credentials="absent")
    handler = new_handler(FakeCluster(), "service.binding", "path={.spec.credentials},objectType=Secret", obj)
    with pytest.raises(HandlerExecutionError, match="absent"):
        handler.handle()


def test_resource_handler_keeps_undecodable_secret_values():
    cluster = FakeCluster()
    creds = secret("db1-creds", {"username": "admin"})
    creds["data"]["broken"] = "not base64!"
    cluster.add(SECRETS, creds)
    obj = database("db1", credentials="db1-creds")

    result = new_handler(cluster, "service.binding", "path={.spec.credentials},objectType=Secret", obj).handle()

    assert result.data == {"username": "admin", "broken": "not base64!"}
