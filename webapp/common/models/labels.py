from typing import Dict
from webapp.common.constants import APPLICATION_NAME


class Labels:
    KUBERNETES_DOMAIN = "app.kubernetes.io/"

    KUBERNETES_NAME_LABEL = KUBERNETES_DOMAIN + "name"

    KUBERNETES_INSTANCE_LABEL = KUBERNETES_DOMAIN + "instance"

    APPLICATION_NAME = APPLICATION_NAME

    _labels: Dict[str, str]

    def __init__(self, labels: Dict[str, str] = None) -> None:
        self._labels = labels if labels else dict()

    def update(self, labels: Dict[str, str]) -> "Labels":
        self._labels.update(labels.copy())
        return self

    def as_dict(self) -> Dict[str, str]:
        """Return labels as dictionary."""
        return self._labels.copy()

    def include(self, label: str, value: str) -> "Labels":
        self.update({label: value})
        return self

    def include_kubernetes_name(self, name: str) -> "Labels":
        return self.include(self.KUBERNETES_NAME_LABEL, name)

    def include_kubernetes_instance(self, instance_name: str) -> "Labels":
        return self.include(self.KUBERNETES_INSTANCE_LABEL, instance_name)

    @classmethod
    def generate_default_labels(cls, resource_name: str) -> "Labels":
        """Labels carried by every object created for a resource.

        They double as the selector of the workload pods, so the set must stay
        stable for the lifetime of the resource.
        """
        labels = Labels()
        return labels.include_kubernetes_name(cls.APPLICATION_NAME).include_kubernetes_instance(
            resource_name
        )

    @classmethod
    def managed_selector(cls) -> "Labels":
        """Selector matching every object managed by this operator."""
        return Labels().include_kubernetes_name(cls.APPLICATION_NAME)
