from .webapp_spec import WebAppSpec, WebAppStatus, Condition
from .webapp_resources import WebAppResources
from .action import Action

__all__ = [
    "WebAppSpec",
    "WebAppStatus",
    "Condition",
    "WebAppResources",
    "Action",
]
