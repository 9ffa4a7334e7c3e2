"""CustomResourceDefinition of the WebApp resource."""

import yaml
from typing import Any, Dict
from webapp.common.constants import (
    GROUP_NAME,
    GROUP_VERSION,
    KIND,
    PLURAL_NAME,
    SINGULAR_NAME,
)


def _string(description: str, default: str = None, **extra) -> Dict[str, Any]:
    prop = {"type": "string", "description": description}
    if default is not None:
        prop["default"] = default
    prop.update(extra)
    return prop


def _int32(description: str, default: int = None, **extra) -> Dict[str, Any]:
    prop = {"type": "integer", "format": "int32", "description": description}
    if default is not None:
        prop["default"] = default
    prop.update(extra)
    return prop


def spec_schema() -> Dict[str, Any]:
    return {
        "type": "object",
        "required": ["message"],
        "properties": {
            "message": _string("Echoed into status"),
            "html": _string("Inline HTML served as index.html", default=""),
            "replicas": _int32("Web server replicas", default=1, minimum=0),
            "serviceType": _string(
                "Type of the Service", default="ClusterIP", enum=["ClusterIP", "NodePort"]
            ),
            "ingressHost": _string(
                "Host of the Ingress, no Ingress when empty", default=""
            ),
            "tlsSecretName": _string(
                "Secret holding the Ingress TLS certificate, no TLS when empty",
                default="",
            ),
        },
    }


def status_schema() -> Dict[str, Any]:
    condition = {
        "type": "object",
        "required": ["type", "status"],
        "properties": {
            "type": _string("Type of the condition"),
            "status": _string("True, False or Unknown"),
            "reason": _string("Machine readable reason", nullable=True),
            "message": _string("Human readable message", nullable=True),
            "lastTransitionTime": _string(
                "Last time the status flipped", format="date-time", nullable=True
            ),
        },
    }
    return {
        "type": "object",
        "nullable": True,
        "properties": {
            "observedMessage": _string("Last message seen", nullable=True),
            "readyReplicas": _int32("Ready web server replicas", nullable=True),
            "conditions": {"type": "array", "nullable": True, "items": condition},
        },
    }


def build_crd() -> Dict[str, Any]:
    """CustomResourceDefinition as a plain dict."""
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": f"{PLURAL_NAME}.{GROUP_NAME}"},
        "spec": {
            "group": GROUP_NAME,
            "names": {
                "kind": KIND,
                "plural": PLURAL_NAME,
                "singular": SINGULAR_NAME,
                "categories": [],
                "shortNames": [],
            },
            "scope": "Namespaced",
            "versions": [
                {
                    "name": GROUP_VERSION,
                    "served": True,
                    "storage": True,
                    "subresources": {"status": {}},
                    "additionalPrinterColumns": [
                        {
                            "name": "Replicas",
                            "type": "integer",
                            "jsonPath": ".spec.replicas",
                        },
                        {
                            "name": "Ready",
                            "type": "integer",
                            "jsonPath": ".status.readyReplicas",
                        },
                        {
                            "name": "Host",
                            "type": "string",
                            "jsonPath": ".spec.ingressHost",
                        },
                        {
                            "name": "Age",
                            "type": "date",
                            "jsonPath": ".metadata.creationTimestamp",
                        },
                    ],
                    "schema": {
                        "openAPIV3Schema": {
                            "type": "object",
                            "title": KIND,
                            "required": ["spec"],
                            "properties": {
                                "spec": spec_schema(),
                                "status": status_schema(),
                            },
                        }
                    },
                }
            ],
        },
    }


def strip_format_keys(value: Any) -> Any:
    """Copy of `value` without any "format" key, at any depth."""
    if isinstance(value, dict):
        return {k: strip_format_keys(v) for k, v in value.items() if k != "format"}
    elif isinstance(value, list):
        return [strip_format_keys(item) for item in value]
    else:
        return value


def render_crd() -> str:
    return yaml.dump(
        strip_format_keys(build_crd()),
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        Dumper=yaml.SafeDumper,
    )


def print_crd():
    print(render_crd())
