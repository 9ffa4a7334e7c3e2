class WebAppResources:
    """Encapsulates the naming scheme used for the resources which the operator manages
    for a WebApp resource."""

    @classmethod
    def config_map_name(self, name: str):
        """Returns the name of the ConfigMap holding the page content."""
        return name

    @classmethod
    def deployment_name(self, name: str):
        return name

    @classmethod
    def service_name(self, name: str):
        """Returns the name of the HTTP service for a WebApp of the given name."""
        return f"{name}-service"

    @classmethod
    def ingress_name(self, name: str):
        return name
