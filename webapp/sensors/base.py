"""Base sensor classes for operator monitoring.

This module defines the base OperatorSensor class that provides lifecycle hooks
for monitoring operator events. All hooks are no-ops by default, allowing
subclasses to override only the events they care about.

- Hooks come in pairs: on_X_start() and on_X_complete()
- Start hooks return an optional state dict for tracking multi-phase operations
- Complete hooks receive the state dict from their corresponding start hook
"""

from typing import Dict, List, Optional, Any


class OperatorSensor:
    """Base sensor class for WebApp operator monitoring.

    Hooks cover two areas:
    1. Reconciliation lifecycle (one run of the engine for one resource)
    2. Resource operations (apply/delete of dependent objects, status writes)

    All methods are no-ops by default.
    """

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        name: str,
        namespace: str,
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        """Called when a reconcile attempt begins.

        Args:
            name: WebApp resource name
            namespace: Kubernetes namespace
            trigger_source: What triggered reconciliation (event, owned, timer)

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when a reconcile attempt completes.

        Args:
            name: WebApp resource name
            namespace: Kubernetes namespace
            state: State dict returned from on_reconcile_start
            success: Whether reconciliation succeeded
            error: Exception if reconciliation failed
        """
        pass

    def on_reconcile_requeued(
        self,
        name: str,
        namespace: str,
        delay: float,
    ) -> None:
        """Called when another reconcile is scheduled after `delay` seconds."""
        pass

    # =============================================================================
    # Resource Operation Hooks
    # =============================================================================

    def on_resource_sync_start(
        self,
        app_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
    ) -> Optional[Dict[str, Any]]:
        """Called before a dependent object is applied or deleted.

        Args:
            app_name: Owning WebApp resource name
            resource_name: Name of the dependent object
            namespace: Kubernetes namespace
            resource_type: configmap, deployment, service or ingress

        Returns:
            Optional state dict passed to on_resource_sync_complete
        """
        pass

    def on_resource_sync_complete(
        self,
        app_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        state: Optional[Dict[str, Any]],
        operation: str,
        success: bool,
    ) -> None:
        """Called after a dependent object is applied or deleted.

        Args:
            operation: apply or delete
            success: Whether the call to the API server succeeded
        """
        pass

    def on_status_update(
        self,
        name: str,
        namespace: str,
        update_fields: List[str],
    ) -> None:
        """Called after the status of a resource has been written."""
        pass
