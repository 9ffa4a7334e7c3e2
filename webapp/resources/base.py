import hashlib
import logging
from logging import Logger
from typing import Any, Dict, Optional
from webapp.common.models.labels import Labels
from webapp.sensors import OperatorSensor
from webapp.types.settings import Settings
from webapp.utils.errors import STORE_ERRORS, not_found_error, describe_error
from webapp.utils.helpers import canonicalize_dict
from kubernetes_asyncio.client import (
    AppsV1Api,
    CoreV1Api,
    CustomObjectsApi,
    NetworkingV1Api,
    V1ConfigMap,
    V1Deployment,
    V1Ingress,
    V1Service,
)

APPLY_PATCH = "application/apply-patch+yaml"
MERGE_PATCH = "application/merge-patch+json"


class BaseResource:
    """Base resource model."""

    conf: Settings = Settings()
    sensor: OperatorSensor = OperatorSensor()
    logger: Logger

    _name: str
    _namespace: str
    _labels: Labels

    def __init__(self, name: str, namespace: str, labels: Labels):
        self._name = name
        self._namespace = namespace
        self._labels = labels
        self.logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def labels(self) -> Labels:
        return self._labels

    def compute_hash(self, data: Any) -> str:
        """Compute a SHA-256 hex digest of the canonical JSON form of `data`."""
        if isinstance(data, dict):
            _data = canonicalize_dict(data).encode("utf-8")
        elif isinstance(data, str):
            _data = data.encode("utf-8")
        else:
            raise ValueError(f"Hash of {type(data)} is not supported.")
        return hashlib.sha256(_data).hexdigest()

    # ------------------------------------------------------------------
    # Server-side apply of dependent objects
    # ------------------------------------------------------------------

    async def apply_config_map(
        self, core_v1_api: CoreV1Api, namespace: str, config_map: V1ConfigMap
    ) -> V1ConfigMap:
        return await self._instrumented(
            "configmap",
            config_map.metadata.name,
            "apply",
            core_v1_api.patch_namespaced_config_map(
                name=config_map.metadata.name,
                namespace=namespace,
                body=config_map,
                field_manager=self.conf.field_manager,
                force=True,
                _content_type=APPLY_PATCH,
            ),
        )

    async def apply_deployment(
        self, apps_v1_api: AppsV1Api, namespace: str, deployment: V1Deployment
    ) -> V1Deployment:
        return await self._instrumented(
            "deployment",
            deployment.metadata.name,
            "apply",
            apps_v1_api.patch_namespaced_deployment(
                name=deployment.metadata.name,
                namespace=namespace,
                body=deployment,
                field_manager=self.conf.field_manager,
                force=True,
                _content_type=APPLY_PATCH,
            ),
        )

    async def apply_service(
        self, core_v1_api: CoreV1Api, namespace: str, service: V1Service
    ) -> V1Service:
        return await self._instrumented(
            "service",
            service.metadata.name,
            "apply",
            core_v1_api.patch_namespaced_service(
                name=service.metadata.name,
                namespace=namespace,
                body=service,
                field_manager=self.conf.field_manager,
                force=True,
                _content_type=APPLY_PATCH,
            ),
        )

    async def apply_ingress(
        self, networking_v1_api: NetworkingV1Api, namespace: str, ingress: V1Ingress
    ) -> V1Ingress:
        return await self._instrumented(
            "ingress",
            ingress.metadata.name,
            "apply",
            networking_v1_api.patch_namespaced_ingress(
                name=ingress.metadata.name,
                namespace=namespace,
                body=ingress,
                field_manager=self.conf.field_manager,
                force=True,
                _content_type=APPLY_PATCH,
            ),
        )

    # ------------------------------------------------------------------
    # Best-effort deletes; absence is the desired state
    # ------------------------------------------------------------------

    async def delete_config_map(self, core_v1_api: CoreV1Api, name: str, namespace: str):
        await self._delete_ignoring_errors(
            "configmap",
            name,
            core_v1_api.delete_namespaced_config_map(name=name, namespace=namespace),
        )

    async def delete_deployment(self, apps_v1_api: AppsV1Api, name: str, namespace: str):
        await self._delete_ignoring_errors(
            "deployment",
            name,
            apps_v1_api.delete_namespaced_deployment(name=name, namespace=namespace),
        )

    async def delete_service(self, core_v1_api: CoreV1Api, name: str, namespace: str):
        await self._delete_ignoring_errors(
            "service",
            name,
            core_v1_api.delete_namespaced_service(name=name, namespace=namespace),
        )

    async def delete_ingress(
        self, networking_v1_api: NetworkingV1Api, name: str, namespace: str
    ):
        await self._delete_ignoring_errors(
            "ingress",
            name,
            networking_v1_api.delete_namespaced_ingress(name=name, namespace=namespace),
        )

    # ------------------------------------------------------------------
    # Custom resource access
    # ------------------------------------------------------------------

    async def get_custom_object(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
    ) -> Optional[Dict]:
        try:
            return await custom_objects_api.get_namespaced_custom_object(
                group=group,
                version=version,
                namespace=namespace,
                plural=plural,
                name=name,
            )
        except STORE_ERRORS as ex:
            if not_found_error(ex):
                return None
            raise

    async def apply_custom_object(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
        body: Dict,
    ) -> Dict:
        return await custom_objects_api.patch_namespaced_custom_object(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
            field_manager=self.conf.field_manager,
            force=True,
            _content_type=APPLY_PATCH,
        )

    async def merge_patch_custom_object(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
        body: Dict,
    ) -> Dict:
        return await custom_objects_api.patch_namespaced_custom_object(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
            _content_type=MERGE_PATCH,
        )

    async def merge_patch_custom_object_status(
        self,
        custom_objects_api: CustomObjectsApi,
        namespace: str,
        group: str,
        version: str,
        plural: str,
        name: str,
        body: Dict,
    ) -> Dict:
        return await custom_objects_api.patch_namespaced_custom_object_status(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
            _content_type=MERGE_PATCH,
        )

    async def _instrumented(self, resource_type: str, name: str, operation: str, call):
        sensor_state = self.sensor.on_resource_sync_start(
            self.name, name, self.namespace, resource_type
        )
        success = True
        try:
            return await call
        except Exception:
            success = False
            raise
        finally:
            self.sensor.on_resource_sync_complete(
                self.name,
                name,
                self.namespace,
                resource_type,
                sensor_state,
                operation,
                success,
            )

    async def _delete_ignoring_errors(self, resource_type: str, name: str, call):
        try:
            await self._instrumented(resource_type, name, "delete", call)
        except STORE_ERRORS as ex:
            if not_found_error(ex):
                self.logger.debug(f"{resource_type} {self.namespace}/{name} already absent.")
            else:
                self.logger.debug(
                    f"Ignoring failed delete of {resource_type} {self.namespace}/{name}: "
                    f"{describe_error(ex)}"
                )
