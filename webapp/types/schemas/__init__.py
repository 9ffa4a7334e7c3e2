from .webapp_spec import WebAppSpecSchema, WebAppStatusSchema, ConditionSchema

__all__ = [
    "WebAppSpecSchema",
    "WebAppStatusSchema",
    "ConditionSchema",
]
