import kopf
import logging
from logging import Logger
from typing import Dict, List, Mapping, Optional
from webapp.common.constants import (
    CONTAINER_NAME,
    FINALIZER,
    GROUP_NAME,
    GROUP_VERSION,
    HTML_MOUNT_PATH,
    HTML_VOLUME_NAME,
    HTTP_PORT,
    INDEX_FILE_NAME,
    KIND,
    PLACEHOLDER_HTML,
    PLURAL_NAME,
    READY_CONDITION,
    REASON_PODS_AVAILABLE,
    REASON_SCALING,
    ROLLOUT_HASH_ANNOTATION,
)
from webapp.common.models.labels import Labels
from webapp.resources.base import BaseResource
from webapp.types.models import Condition, WebAppResources, WebAppSpec, WebAppStatus
from webapp.types.schemas import WebAppStatusSchema
from webapp.types.settings import Settings
from webapp.sensors import OperatorSensor
from webapp.utils.errors import OwnerReferenceError
from webapp.utils.helpers import is_blank, upsert_condition
from webapp.utils.objects import cached_property
from kubernetes_asyncio.client import (
    AppsV1Api,
    CoreV1Api,
    CustomObjectsApi,
    NetworkingV1Api,
    V1ConfigMap,
    V1ConfigMapVolumeSource,
    V1Container,
    V1ContainerPort,
    V1Deployment,
    V1DeploymentSpec,
    V1HTTPIngressPath,
    V1HTTPIngressRuleValue,
    V1Ingress,
    V1IngressBackend,
    V1IngressRule,
    V1IngressServiceBackend,
    V1IngressSpec,
    V1IngressTLS,
    V1LabelSelector,
    V1ObjectMeta,
    V1OwnerReference,
    V1PodSpec,
    V1PodTemplateSpec,
    V1Service,
    V1ServiceBackendPort,
    V1ServicePort,
    V1ServiceSpec,
    V1Volume,
    V1VolumeMount,
)
from kubernetes_asyncio.client.api_client import ApiClient


def build_owner_reference(body: Mapping) -> V1OwnerReference:
    """Controller owner reference pointing at the resource described by `body`.

    Raises OwnerReferenceError when the body lacks one of the fields the
    reference is made of.
    """
    metadata = body.get("metadata") or {}
    missing = [field for field in ("apiVersion", "kind") if not body.get(field)]
    missing += [field for field in ("name", "uid") if not metadata.get(field)]
    if missing:
        raise OwnerReferenceError(
            f"Cannot build owner reference, resource has no {', '.join(missing)}."
        )
    ref = kopf.build_owner_reference(body, controller=True, block_owner_deletion=True)
    return V1OwnerReference(
        api_version=ref["apiVersion"],
        kind=ref["kind"],
        name=ref["name"],
        uid=ref["uid"],
        controller=ref["controller"],
        block_owner_deletion=ref["blockOwnerDeletion"],
    )


class WebApp(BaseResource):
    """WebApp kubernetes resource."""

    logger: Logger
    conf: Settings
    sensor: OperatorSensor
    shared_api_client: ApiClient = None  # Shared across all WebApp instances

    KIND = KIND
    GROUP_NAME = GROUP_NAME
    GROUP_VERSION = GROUP_VERSION
    PLURAL_NAME = PLURAL_NAME
    WEB_PORT_NAME = "http"

    config_map_name: str
    deployment_name: str
    service_name: str
    ingress_name: str

    message: str
    html: str
    replicas: int
    service_type: str
    ingress_host: str
    tls_secret_name: str
    owner_reference: Optional[V1OwnerReference] = None

    def __init__(self, name: str, namespace: str, logger: Logger = None):
        super().__init__(
            name=name,
            namespace=namespace,
            labels=Labels.generate_default_labels(name),
        )
        self.logger = logger or logging.getLogger(__name__)
        self.config_map_name = WebAppResources.config_map_name(name)
        self.deployment_name = WebAppResources.deployment_name(name)
        self.service_name = WebAppResources.service_name(name)
        self.ingress_name = WebAppResources.ingress_name(name)

    @classmethod
    def from_spec(
        self,
        name: str,
        namespace: str,
        spec: WebAppSpec,
        owner_reference: Optional[V1OwnerReference] = None,
        logger: Logger = None,
    ) -> "WebApp":
        app = WebApp(name, namespace, logger=logger)
        app.message = spec.message
        app.html = spec.html or ""
        app.replicas = spec.replicas
        app.service_type = spec.service_type
        app.ingress_host = spec.ingress_host or ""
        app.tls_secret_name = spec.tls_secret_name or ""
        app.owner_reference = owner_reference
        return app

    @property
    def ingress_enabled(self) -> bool:
        return not is_blank(self.ingress_host)

    @property
    def tls_enabled(self) -> bool:
        return self.tls_secret_name != ""

    async def synchronize(self) -> V1Deployment:
        """Apply every dependent object and return the Deployment as stored."""
        await self.apply_config_map(self.core_v1_api, self.namespace, self.config_map)
        deployment = await self.apply_deployment(
            self.apps_v1_api, self.namespace, self.deployment
        )
        await self.apply_service(self.core_v1_api, self.namespace, self.service)
        await self.sync_ingress()
        return deployment

    async def sync_ingress(self):
        if self.ingress is not None:
            await self.apply_ingress(self.networking_v1_api, self.namespace, self.ingress)
        else:
            await self.delete_ingress(
                self.networking_v1_api, self.ingress_name, self.namespace
            )

    async def cleanup(self):
        """Delete the Deployment, Service and ConfigMap, ignoring failures.

        The Ingress is left to the garbage collector through its owner
        reference.
        """
        await self.delete_deployment(
            self.apps_v1_api, self.deployment_name, self.namespace
        )
        await self.delete_service(self.core_v1_api, self.service_name, self.namespace)
        await self.delete_config_map(
            self.core_v1_api, self.config_map_name, self.namespace
        )

    async def ensure_finalizer(self, finalizers: Optional[List[str]]) -> bool:
        """Add the finalizer unless present. Returns True when a write was made."""
        if FINALIZER in (finalizers or []):
            return False
        await self.apply_custom_object(
            self.custom_objects_api,
            namespace=self.namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
            name=self.name,
            body=self.prepare_finalizer_patch(),
        )
        self.logger.debug(f"Added finalizer {FINALIZER}.")
        return True

    async def remove_finalizer(self, finalizers: Optional[List[str]]) -> bool:
        """Drop the finalizer, keeping any other. Returns True when a write was made."""
        finalizers = list(finalizers or [])
        if FINALIZER not in finalizers:
            return False
        await self.merge_patch_custom_object(
            self.custom_objects_api,
            namespace=self.namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
            name=self.name,
            body={"metadata": {"finalizers": [f for f in finalizers if f != FINALIZER]}},
        )
        self.logger.debug(f"Removed finalizer {FINALIZER}.")
        return True

    async def patch_status(self, status: WebAppStatus):
        body = {"status": WebAppStatusSchema().dump(status)}
        await self.merge_patch_custom_object_status(
            self.custom_objects_api,
            namespace=self.namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
            name=self.name,
            body=body,
        )
        self.sensor.on_status_update(self.name, self.namespace, list(body["status"]))

    async def fetch(self, name: str, namespace: str) -> Optional[Dict]:
        """Fetch actual WebApp in kubernetes, None when it is gone."""
        return await self.get_custom_object(
            self.custom_objects_api,
            namespace=namespace,
            group=self.GROUP_NAME,
            version=self.GROUP_VERSION,
            plural=self.PLURAL_NAME,
            name=name,
        )

    def prepare_finalizer_patch(self) -> Dict:
        return {
            "apiVersion": f"{self.GROUP_NAME}/{self.GROUP_VERSION}",
            "kind": self.KIND,
            "metadata": {"name": self.name, "finalizers": [FINALIZER]},
        }

    def prepare_metadata(self, name: str, annotations: Dict[str, str] = None) -> V1ObjectMeta:
        return V1ObjectMeta(
            name=name,
            namespace=self.namespace,
            labels=self.labels.as_dict(),
            annotations=annotations,
            owner_references=[self.owner_reference] if self.owner_reference else None,
        )

    def prepare_content(self) -> str:
        """Page served by the web server."""
        return self.html if not is_blank(self.html) else PLACEHOLDER_HTML

    def prepare_rollout_hash(self) -> str:
        """Fingerprint that changes only when the page changes."""
        return self.compute_hash({"html": self.html})

    def prepare_config_map(self) -> V1ConfigMap:
        return V1ConfigMap(
            api_version="v1",
            kind="ConfigMap",
            metadata=self.prepare_metadata(self.config_map_name),
            data={INDEX_FILE_NAME: self.prepare_content()},
        )

    def prepare_container(self) -> V1Container:
        return V1Container(
            name=CONTAINER_NAME,
            image=self.conf.image,
            ports=[V1ContainerPort(container_port=HTTP_PORT, name=self.WEB_PORT_NAME)],
            volume_mounts=[
                V1VolumeMount(
                    name=HTML_VOLUME_NAME, mount_path=HTML_MOUNT_PATH, read_only=True
                )
            ],
        )

    def prepare_pod_template(self) -> V1PodTemplateSpec:
        return V1PodTemplateSpec(
            metadata=V1ObjectMeta(
                labels=self.labels.as_dict(),
                annotations={ROLLOUT_HASH_ANNOTATION: self.rollout_hash},
            ),
            spec=V1PodSpec(
                containers=[self.prepare_container()],
                volumes=[
                    V1Volume(
                        name=HTML_VOLUME_NAME,
                        config_map=V1ConfigMapVolumeSource(name=self.config_map_name),
                    )
                ],
            ),
        )

    def prepare_deployment(self) -> V1Deployment:
        return V1Deployment(
            api_version="apps/v1",
            kind="Deployment",
            metadata=self.prepare_metadata(self.deployment_name),
            spec=V1DeploymentSpec(
                replicas=self.replicas,
                selector=V1LabelSelector(match_labels=self.labels.as_dict()),
                template=self.prepare_pod_template(),
            ),
        )

    def prepare_service(self) -> V1Service:
        return V1Service(
            api_version="v1",
            kind="Service",
            metadata=self.prepare_metadata(self.service_name),
            spec=V1ServiceSpec(
                selector=self.labels.as_dict(),
                type=self.service_type,
                ports=[
                    V1ServicePort(
                        name=self.WEB_PORT_NAME,
                        protocol="TCP",
                        port=HTTP_PORT,
                        target_port=HTTP_PORT,
                    )
                ],
            ),
        )

    def prepare_ingress(self) -> Optional[V1Ingress]:
        """Build ingress resource, None when no host is requested."""
        if not self.ingress_enabled:
            return None
        tls = None
        if self.tls_enabled:
            tls = [V1IngressTLS(hosts=[self.ingress_host], secret_name=self.tls_secret_name)]
        return V1Ingress(
            api_version="networking.k8s.io/v1",
            kind="Ingress",
            metadata=self.prepare_metadata(self.ingress_name),
            spec=V1IngressSpec(
                rules=[
                    V1IngressRule(
                        host=self.ingress_host,
                        http=V1HTTPIngressRuleValue(
                            paths=[
                                V1HTTPIngressPath(
                                    path="/",
                                    path_type="Prefix",
                                    backend=V1IngressBackend(
                                        service=V1IngressServiceBackend(
                                            name=self.service_name,
                                            port=V1ServiceBackendPort(number=HTTP_PORT),
                                        )
                                    ),
                                )
                            ]
                        ),
                    )
                ],
                tls=tls,
            ),
        )

    def prepare_ready_condition(self, ready_replicas: int) -> Condition:
        ready = ready_replicas > 0
        return Condition(
            type=READY_CONDITION,
            status="True" if ready else "False",
            reason=REASON_PODS_AVAILABLE if ready else REASON_SCALING,
            message=f"ready_replicas={ready_replicas}",
            last_transition_time=None,
        )

    def prepare_status(self, current: WebAppStatus, ready_replicas: int) -> WebAppStatus:
        """Status to report given the stored one and the observed ready count."""
        return current.copy(
            observed_message=self.message,
            ready_replicas=ready_replicas,
            conditions=upsert_condition(
                current.conditions, self.prepare_ready_condition(ready_replicas)
            ),
        )

    @cached_property
    def api_client(self) -> ApiClient:
        # Use the shared API client if available, otherwise create a new one
        if self.shared_api_client is not None:
            return self.shared_api_client
        return ApiClient()

    @cached_property
    def apps_v1_api(self) -> AppsV1Api:
        return AppsV1Api(self.api_client)

    @cached_property
    def core_v1_api(self) -> CoreV1Api:
        return CoreV1Api(self.api_client)

    @cached_property
    def networking_v1_api(self) -> NetworkingV1Api:
        return NetworkingV1Api(self.api_client)

    @cached_property
    def custom_objects_api(self) -> CustomObjectsApi:
        return CustomObjectsApi(self.api_client)

    @cached_property
    def rollout_hash(self) -> str:
        return self.prepare_rollout_hash()

    @cached_property
    def config_map(self) -> V1ConfigMap:
        return self.prepare_config_map()

    @cached_property
    def deployment(self) -> V1Deployment:
        return self.prepare_deployment()

    @cached_property
    def service(self) -> V1Service:
        return self.prepare_service()

    @cached_property
    def ingress(self) -> Optional[V1Ingress]:
        return self.prepare_ingress()
