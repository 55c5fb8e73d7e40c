"""Route bundles for the grokstat API."""
from . import protocols, query, system

ROUTERS = [
    protocols.router,
    query.router,
    system.router,
]
