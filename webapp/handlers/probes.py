import kopf
from webapp.utils.helpers import now


# Liveness probe
@kopf.on.probe(id="now")
def get_current_timestamp(**kwargs):
    return now()
