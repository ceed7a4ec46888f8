"""
Router Dependencies
===================

Gives the endpoints access to the datastore and the services built on it.

The store is created once when the app starts and kept on `app.state`;
every request gets fresh (cheap) service objects wrapped around it.
"""

from fastapi import Depends, HTTPException, Request

from app.config import Settings
from app.services import (
    AggregateReconciler,
    HistoryQuery,
    ReadingIngestor,
    RetentionPolicy,
)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request):
    """
    Get the datastore client for use in endpoints.

    Every endpoint function that needs the database uses this.
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return store


def get_ingestor(store=Depends(get_store), settings: Settings = Depends(get_app_settings)) -> ReadingIngestor:
    return ReadingIngestor(
        store,
        reading_mode=settings.reading_mode,
        timestamp_source=settings.timestamp_source,
    )


def get_retention_policy(store=Depends(get_store), settings: Settings = Depends(get_app_settings)) -> RetentionPolicy:
    return RetentionPolicy(store, keep=settings.retention_limit, mode=settings.compaction_mode)


def get_reconciler(store=Depends(get_store)) -> AggregateReconciler:
    return AggregateReconciler(store)


def get_history(store=Depends(get_store), settings: Settings = Depends(get_app_settings)) -> HistoryQuery:
    return HistoryQuery(store, recent_limit=settings.recent_limit)
