from typing import Optional
from webapp.types.base import BaseModel


class Action(BaseModel):
    """What the scheduler should do once a reconcile attempt is over.

    `requeue_after` is the delay in seconds before the next run, or None to
    wait for the next change reported by the cluster.
    """

    requeue_after: Optional[float]

    @classmethod
    def requeue(cls, delay: float) -> "Action":
        return cls(requeue_after=float(delay))

    @classmethod
    def await_change(cls) -> "Action":
        return cls(requeue_after=None)

    @property
    def requeue_requested(self) -> bool:
        return self.requeue_after is not None
