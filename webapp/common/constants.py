"""Naming contract shared with the cluster.

These values are part of the wire contract of the operator: resources created
by earlier releases are found and cleaned up through them, so they must not
change.
"""

GROUP_NAME = "rootster.xyz"
GROUP_VERSION = "v1"
KIND = "RustOperator"
PLURAL_NAME = "rustoperators"
SINGULAR_NAME = "rustoperator"

#: Token placed on every managed resource until its children are cleaned up
FINALIZER = f"{PLURAL_NAME}.{GROUP_NAME}/finalizer"

#: Pod template annotation holding the rollout fingerprint
ROLLOUT_HASH_ANNOTATION = f"{GROUP_NAME}/rollout-hash"

#: Value of app.kubernetes.io/name on every dependent object
APPLICATION_NAME = "webapp"

#: Data key of the rendered page in the content ConfigMap
INDEX_FILE_NAME = "index.html"

PLACEHOLDER_HTML = (
    "<!doctype html><html><body><h1>Hello from the WebApp operator</h1></body></html>"
)

HTTP_PORT = 80
CONTAINER_NAME = "nginx"
HTML_VOLUME_NAME = "html"
HTML_MOUNT_PATH = "/usr/share/nginx/html"

READY_CONDITION = "Ready"
REASON_PODS_AVAILABLE = "PodsAvailable"
REASON_SCALING = "Scaling"
