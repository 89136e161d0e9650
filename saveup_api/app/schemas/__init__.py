"""
Pydantic schemas used by the API.

Entity bodies and records are generated from the entity registry in
``store.entities`` (see ``resources``); accounts, authentication,
action payloads, errors and the health check have hand-written models.
"""
