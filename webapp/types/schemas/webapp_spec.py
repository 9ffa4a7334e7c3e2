from marshmallow import fields
from webapp.types.base import BaseSchema
from webapp.types.models import WebAppSpec, WebAppStatus, Condition


class WebAppSpecSchema(BaseSchema):
    __model__ = WebAppSpec

    message = fields.String(data_key="message", required=True)
    html = fields.String(data_key="html", allow_none=False, load_default="")
    replicas = fields.Integer(data_key="replicas", allow_none=False, load_default=1)
    service_type = fields.String(
        data_key="serviceType", allow_none=False, load_default="ClusterIP"
    )
    ingress_host = fields.String(
        data_key="ingressHost", allow_none=False, load_default=""
    )
    tls_secret_name = fields.String(
        data_key="tlsSecretName", allow_none=False, load_default=""
    )


class ConditionSchema(BaseSchema):
    __model__ = Condition

    type = fields.String(data_key="type", required=True)
    status = fields.String(data_key="status", required=True)
    reason = fields.String(data_key="reason", allow_none=True, load_default=None)
    message = fields.String(data_key="message", allow_none=True, load_default=None)
    last_transition_time = fields.String(
        data_key="lastTransitionTime", allow_none=True, load_default=None
    )


class WebAppStatusSchema(BaseSchema):
    __model__ = WebAppStatus

    observed_message = fields.String(
        data_key="observedMessage", allow_none=True, load_default=None
    )
    ready_replicas = fields.Integer(
        data_key="readyReplicas", allow_none=True, load_default=None
    )
    conditions = fields.List(
        fields.Nested(ConditionSchema()),
        data_key="conditions",
        allow_none=True,
        load_default=list,
    )
