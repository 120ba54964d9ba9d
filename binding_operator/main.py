import kopf
import kubernetes
from kubernetes import client

from binding_engine.core import BindingError, GroupVersionKind
from binding_engine.watch import CSVWatchMapper, WatchRegistry
from .cluster import DynamicCluster
from .logging_config import get_logger, setup_logging
from .metrics import start_metrics_server, track_watch_registered
from .reconcile import binding_references, reconcile_binding
from .settings import (
    BINDING_GROUP,
    BINDING_PLURAL,
    BINDING_VERSION,
    CSV_PLURAL,
    OLM_GROUP,
    OLM_VERSION,
    OperatorConfig,
)
from .type_lookup import K8sTypeLookup

config = OperatorConfig.from_env()

# Try in-cluster config first, fallback to kubeconfig for local development
try:
    kubernetes.config.load_incluster_config()
except kubernetes.config.ConfigException:
    kubernetes.config.load_kube_config()

cluster = DynamicCluster.from_api_client()
type_lookup = K8sTypeLookup(cluster.dyn)
watch_registry = WatchRegistry()


def on_backing_service_event(body, name, namespace, type, **_):
    """Re-run the bindings of a namespace that select the changed backing service."""
    if type is None or not namespace:
        return
    gvk = GroupVersionKind.from_object(body)
    logger = get_logger(__name__, trace_id=f"{namespace}/{name}")
    custom_api = client.CustomObjectsApi()

    try:
        bindings = custom_api.list_namespaced_custom_object(
            group=BINDING_GROUP,
            version=BINDING_VERSION,
            namespace=namespace,
            plural=BINDING_PLURAL,
        )
    except client.exceptions.ApiException as e:
        logger.error(f"Failed to list ServiceBindings in {namespace}: {e}")
        return

    for binding in bindings.get("items", []):
        spec = binding.get("spec", {})
        binding_name = binding["metadata"]["name"]
        if not binding_references(spec, namespace, gvk, namespace, name, type_lookup):
            continue
        logger.info(f"{gvk.kind} {namespace}/{name} changed ({type}), refreshing ServiceBinding {binding_name}")
        try:
            status = reconcile_binding(spec, binding_name, namespace, cluster, type_lookup, config, logger)
        except BindingError as e:
            logger.error(f"Failed to refresh ServiceBinding {namespace}/{binding_name}: {e}")
            continue
        try:
            custom_api.patch_namespaced_custom_object_status(
                group=BINDING_GROUP,
                version=BINDING_VERSION,
                namespace=namespace,
                plural=BINDING_PLURAL,
                name=binding_name,
                body={"status": {"binding_reconcile": status}},
            )
        except client.exceptions.ApiException as e:
            logger.error(f"Failed to patch ServiceBinding {namespace}/{binding_name} status: {e}")


def _start_backing_service_watch(gvk: GroupVersionKind) -> None:
    # Only registers the handler. kopf starts watching gvk the next time its
    # resource observer rescans (on CRD changes), not when this returns.
    kopf.on.event(
        group=gvk.group,
        version=gvk.version,
        kind=gvk.kind,
        id=f"backing-service/{gvk.kind}.{gvk.group}",
    )(on_backing_service_event)
    track_watch_registered()


csv_mapper = CSVWatchMapper(
    registry=watch_registry,
    cluster=cluster,
    start_watch=_start_backing_service_watch,
    logger=get_logger("binding_operator.watch"),
)


@kopf.on.startup()
def _startup(settings: kopf.OperatorSettings, **_):
    setup_logging()
    start_metrics_server(enabled=config.metrics_enabled, port=config.metrics_port)

    logger = get_logger(__name__)
    logger.info("Operator startup complete", extra={
        "metrics_enabled": config.metrics_enabled,
        "metrics_port": config.metrics_port,
        "naming_template": config.naming_template,
    })


@kopf.on.create(BINDING_GROUP, BINDING_VERSION, BINDING_PLURAL)
@kopf.on.update(BINDING_GROUP, BINDING_VERSION, BINDING_PLURAL)
def binding_reconcile(spec, name, namespace, **_):
    logger = get_logger(__name__, trace_id=f"{namespace}/{name}")
    try:
        return reconcile_binding(dict(spec), name, namespace, cluster, type_lookup, config, logger)
    except BindingError as e:
        logger.error(f"Failed to build service contexts for ServiceBinding {namespace}/{name}: {e}")
        raise kopf.TemporaryError(str(e), delay=config.requeue_delay_seconds)


@kopf.on.event(OLM_GROUP, OLM_VERSION, CSV_PLURAL)
def csv_event(name, namespace, type, **_):
    if type == "DELETED":
        return
    csv_mapper.map(namespace, name)
