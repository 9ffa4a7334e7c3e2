import asyncio
import kopf
from logging import Logger
from collections import defaultdict
from typing import Dict, Mapping, Optional, Tuple
from kubernetes_asyncio.client import V1Deployment
from webapp.common.constants import GROUP_NAME, GROUP_VERSION, KIND, PLURAL_NAME
from webapp.common.models.labels import Labels
from webapp.resources import WebApp, build_owner_reference
from webapp.sensors import OperatorSensor
from webapp.types.models import Action, WebAppSpec, WebAppStatus
from webapp.types.schemas import WebAppSpecSchema, WebAppStatusSchema
from webapp.types.settings import ERROR_RETRY_DELAY_SECONDS, RESYNC_INTERVAL_SECONDS
from webapp.utils.errors import describe_error

# What started a reconcile attempt
TRIGGER_EVENT = "event"
TRIGGER_OWNED = "owned"
TRIGGER_TIMER = "timer"

Identity = Tuple[str, str]

# Serializes reconciles of one (namespace, name)
reconciliation_locks: Dict[Identity, asyncio.Lock] = defaultdict(asyncio.Lock)

MANAGED_LABELS = Labels.managed_selector().as_dict()


def get_sensor() -> OperatorSensor:
    return WebApp.sensor


def identity(body: Mapping) -> Identity:
    metadata = body.get("metadata") or {}
    return metadata.get("namespace") or "default", metadata.get("name")


def ready_replicas_of(deployment: Optional[V1Deployment]) -> int:
    status = getattr(deployment, "status", None)
    return getattr(status, "ready_replicas", None) or 0


def controller_owner_name(body: Mapping) -> Optional[str]:
    """Name of the WebApp controlling the object described by `body`."""
    api_version = f"{GROUP_NAME}/{GROUP_VERSION}"
    for ref in (body.get("metadata") or {}).get("ownerReferences") or []:
        if (
            ref.get("controller")
            and ref.get("kind") == KIND
            and ref.get("apiVersion") == api_version
        ):
            return ref.get("name")
    return None


async def reconcile(body: Mapping, logger: Logger) -> Action:
    """Drive the dependent objects of one WebApp toward its spec.

    Store errors propagate to the caller, which hands them to `error_policy`.
    """
    namespace, name = identity(body)
    metadata = body.get("metadata") or {}

    if metadata.get("deletionTimestamp"):
        app = WebApp(name, namespace, logger=logger)
        await app.cleanup()
        await app.remove_finalizer(metadata.get("finalizers"))
        logger.info(f"Cleaned up {KIND}/{name} in {namespace} namespace.")
        return Action.await_change()

    owner_reference = build_owner_reference(body)
    spec_model: WebAppSpec = WebAppSpecSchema().load(body.get("spec") or {})
    app = WebApp.from_spec(name, namespace, spec_model, owner_reference, logger=logger)

    await app.ensure_finalizer(metadata.get("finalizers"))
    deployment = await app.synchronize()

    current: WebAppStatus = WebAppStatusSchema().load(body.get("status") or {})
    status = app.prepare_status(current, ready_replicas_of(deployment))
    if status != current:
        await app.patch_status(status)
        logger.debug(f"Updated status of {KIND}/{name}.")

    logger.info(f"reconciled {name}")
    return Action.requeue(app.conf.resync_interval_seconds)


def error_policy(body: Optional[Mapping], error: Exception, logger: Logger) -> Action:
    """Log a failed attempt and retry after the error delay."""
    name = identity(body)[1] if body else None
    logger.error(
        f"reconcile failed for {KIND}/{name}: {describe_error(error)}", exc_info=error
    )
    return Action.requeue(WebApp.conf.error_retry_delay_seconds)


def forget(key: Identity):
    """Drop every piece of state kept for a resource that no longer exists."""
    reconciliation_locks.pop(key, None)


async def run_reconcile(
    namespace: str,
    name: str,
    logger: Logger,
    trigger_source: str,
    body: Optional[Mapping] = None,
) -> Optional[Action]:
    """Run one reconcile attempt of (namespace, name).

    Without `body`, the resource is read from the cluster first; when it is
    gone nothing runs. A failed attempt goes through `error_policy` and is
    reported to kopf as a temporary error carrying the retry delay.
    """
    key = (namespace, name)
    sensor = get_sensor()
    error = None
    async with reconciliation_locks[key]:
        sensor_state = sensor.on_reconcile_start(name, namespace, trigger_source)
        try:
            if body is None:
                body = await WebApp(name, namespace, logger=logger).fetch(
                    name, namespace
                )
            if body is None:
                logger.debug(f"{KIND}/{name} in {namespace} namespace is gone.")
                action = None
            else:
                action = await reconcile(body, logger)
        except Exception as e:
            error = e
            action = error_policy(body, e, logger)
        finally:
            sensor.on_reconcile_complete(
                name, namespace, sensor_state, error is None, error
            )

    if action is None:
        forget(key)
        return None
    if action.requeue_requested:
        sensor.on_reconcile_requeued(name, namespace, action.requeue_after)
    if error is not None:
        raise kopf.TemporaryError(
            f"{KIND}/{name}: {describe_error(error)}", delay=action.requeue_after
        ) from error
    return action


@kopf.on.event(GROUP_NAME, GROUP_VERSION, PLURAL_NAME)
async def on_webapp_event(event, body, logger: Logger, **kwargs):
    """Reconcile a WebApp on every change the cluster reports."""
    key = identity(body)
    if event.get("type") == "DELETED":
        forget(key)
        logger.debug(f"{KIND}/{key[1]} in {key[0]} namespace was removed.")
        return
    await run_reconcile(*key, logger, TRIGGER_EVENT, body=body)


@kopf.on.event("apps", "v1", "deployments", labels=MANAGED_LABELS)
@kopf.on.event("v1", "services", labels=MANAGED_LABELS)
@kopf.on.event("v1", "configmaps", labels=MANAGED_LABELS)
@kopf.on.event("networking.k8s.io", "v1", "ingresses", labels=MANAGED_LABELS)
async def on_owned_event(body, logger: Logger, **kwargs):
    """Reconcile the WebApp controlling a changed dependent object."""
    owner = controller_owner_name(body)
    if owner is None:
        return
    namespace, _ = identity(body)
    await run_reconcile(namespace, owner, logger, TRIGGER_OWNED)


@kopf.timer(
    GROUP_NAME,
    GROUP_VERSION,
    PLURAL_NAME,
    interval=RESYNC_INTERVAL_SECONDS,
    backoff=ERROR_RETRY_DELAY_SECONDS,
)
async def periodic_reconciliation(body, logger: Logger, **kwargs):
    """Repair drift of a WebApp; failed runs are retried after the error delay."""
    namespace, name = identity(body)
    await run_reconcile(namespace, name, logger, TRIGGER_TIMER, body=body)
