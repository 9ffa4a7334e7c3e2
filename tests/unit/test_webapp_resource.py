"""Unit tests for building the dependent objects of a WebApp."""

import hashlib
import pytest
from unittest.mock import patch
from webapp.common.constants import (
    FINALIZER,
    PLACEHOLDER_HTML,
    ROLLOUT_HASH_ANNOTATION,
)
from webapp.resources.webapp import WebApp, build_owner_reference
from webapp.types.models import WebAppSpec, WebAppResources
from webapp.types.settings import Settings
from webapp.utils.errors import OwnerReferenceError

SHARED_LABELS = {
    "app.kubernetes.io/name": "webapp",
    "app.kubernetes.io/instance": "site",
}


def make_spec(**overrides) -> WebAppSpec:
    fields = dict(
        message="hi",
        html="",
        replicas=1,
        service_type="ClusterIP",
        ingress_host="",
        tls_secret_name="",
    )
    fields.update(overrides)
    return WebAppSpec(**fields)


@pytest.fixture
def body():
    return {
        "apiVersion": "rootster.xyz/v1",
        "kind": "RustOperator",
        "metadata": {"name": "site", "namespace": "web", "uid": "1234"},
    }


@pytest.fixture
def owner_reference(body):
    return build_owner_reference(body)


@pytest.fixture
def build(owner_reference):
    def _build(**overrides) -> WebApp:
        return WebApp.from_spec(
            "site", "web", make_spec(**overrides), owner_reference=owner_reference
        )

    with patch.object(WebApp, "conf", Settings(image="nginx:latest")):
        yield _build


class TestNaming:
    def test_dependent_object_names(self):
        assert WebAppResources.config_map_name("site") == "site"
        assert WebAppResources.deployment_name("site") == "site"
        assert WebAppResources.service_name("site") == "site-service"
        assert WebAppResources.ingress_name("site") == "site"

    def test_finalizer_token(self):
        assert FINALIZER == "rustoperators.rootster.xyz/finalizer"

    def test_resource_identity(self, build):
        app = build()
        assert app.name == "site"
        assert app.namespace == "web"
        assert app.labels.as_dict() == SHARED_LABELS

    def test_every_object_carries_labels_and_owner(self, build):
        app = build(ingress_host="example.com")
        objects = [app.config_map, app.deployment, app.service, app.ingress]
        for obj in objects:
            assert obj.metadata.labels == SHARED_LABELS
            assert obj.metadata.namespace == "web"
            assert len(obj.metadata.owner_references) == 1
            ref = obj.metadata.owner_references[0]
            assert ref.uid == "1234"
            assert ref.controller is True


class TestOwnerReference:
    def test_reference_points_at_resource(self, owner_reference):
        assert owner_reference.api_version == "rootster.xyz/v1"
        assert owner_reference.kind == "RustOperator"
        assert owner_reference.name == "site"
        assert owner_reference.block_owner_deletion is True

    def test_missing_uid_is_typed_error(self, body):
        del body["metadata"]["uid"]
        with pytest.raises(OwnerReferenceError, match="uid"):
            build_owner_reference(body)

    def test_missing_kind_is_typed_error(self, body):
        del body["kind"]
        with pytest.raises(OwnerReferenceError):
            build_owner_reference(body)


class TestConfigMap:
    def test_blank_html_uses_placeholder(self, build):
        assert build(html="").config_map.data == {"index.html": PLACEHOLDER_HTML}
        assert build(html="  \n ").config_map.data == {"index.html": PLACEHOLDER_HTML}

    def test_html_is_served_verbatim(self, build):
        html = "<h1>custom</h1>"
        assert build(html=html).config_map.data == {"index.html": html}


class TestDeployment:
    def test_pod_template(self, build):
        deployment = build(replicas=3).deployment
        assert deployment.metadata.name == "site"
        assert deployment.spec.replicas == 3
        assert deployment.spec.selector.match_labels == SHARED_LABELS
        assert deployment.spec.template.metadata.labels == SHARED_LABELS

        pod = deployment.spec.template.spec
        assert len(pod.containers) == 1
        container = pod.containers[0]
        assert container.name == "nginx"
        assert container.image == "nginx:latest"
        assert container.ports[0].container_port == 80
        mount = container.volume_mounts[0]
        assert mount.name == "html"
        assert mount.mount_path == "/usr/share/nginx/html"
        assert mount.read_only is True
        assert pod.volumes[0].name == "html"
        assert pod.volumes[0].config_map.name == "site"

    def test_replicas_passed_through(self, build):
        assert build(replicas=0).deployment.spec.replicas == 0

    def test_image_from_settings(self, build):
        with patch.object(WebApp, "conf", Settings(image="nginx:1.27")):
            deployment = build().deployment
        assert deployment.spec.template.spec.containers[0].image == "nginx:1.27"

    def test_rollout_hash_annotation(self, build):
        deployment = build(html="").deployment
        annotations = deployment.spec.template.metadata.annotations
        assert annotations[ROLLOUT_HASH_ANNOTATION] == (
            hashlib.sha256(b'{"html":""}').hexdigest()
        )


class TestRolloutHash:
    def test_changes_with_html(self, build):
        assert build(html="a").rollout_hash != build(html="b").rollout_hash

    def test_non_ascii_html_hashed_as_utf8(self, build):
        expected = hashlib.sha256('{"html":"é"}'.encode("utf-8")).hexdigest()
        assert build(html="é").rollout_hash == expected

    @pytest.mark.parametrize(
        "overrides",
        [
            {"replicas": 5},
            {"service_type": "NodePort"},
            {"ingress_host": "example.com"},
            {"tls_secret_name": "tls-secret"},
            {"message": "bye"},
        ],
    )
    def test_ignores_other_fields(self, build, overrides):
        assert build(**overrides).rollout_hash == build().rollout_hash


class TestService:
    def test_service(self, build):
        service = build(service_type="NodePort").service
        assert service.metadata.name == "site-service"
        assert service.spec.type == "NodePort"
        assert service.spec.selector == SHARED_LABELS
        assert len(service.spec.ports) == 1
        assert service.spec.ports[0].port == 80
        assert service.spec.ports[0].target_port == 80


class TestIngress:
    @pytest.mark.parametrize("host", ["", " ", "\t\n"])
    def test_absent_for_blank_host(self, build, host):
        assert build(ingress_host=host).ingress is None

    def test_routes_root_to_service(self, build):
        ingress = build(ingress_host="example.com").ingress
        assert ingress.metadata.name == "site"
        rule = ingress.spec.rules[0]
        assert rule.host == "example.com"
        path = rule.http.paths[0]
        assert path.path == "/"
        assert path.path_type == "Prefix"
        assert path.backend.service.name == "site-service"
        assert path.backend.service.port.number == 80
        assert ingress.spec.tls is None

    def test_tls_block(self, build):
        ingress = build(ingress_host="example.com", tls_secret_name="tls-secret").ingress
        assert len(ingress.spec.tls) == 1
        assert ingress.spec.tls[0].hosts == ["example.com"]
        assert ingress.spec.tls[0].secret_name == "tls-secret"


class TestIdempotence:
    def test_same_spec_same_manifests(self, build):
        overrides = dict(html="<p>x</p>", ingress_host="example.com", tls_secret_name="t")
        first, second = build(**overrides), build(**overrides)
        assert first.config_map.to_dict() == second.config_map.to_dict()
        assert first.deployment.to_dict() == second.deployment.to_dict()
        assert first.service.to_dict() == second.service.to_dict()
        assert first.ingress.to_dict() == second.ingress.to_dict()
