"""HTTP routes for scoped values, groups and group members.

Handlers are plain `def` so FastAPI runs the blocking backend calls in its
threadpool.
"""
from typing import Any, Optional
import logging

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel

from datamanager_lib.services.resolver import resolve_data_manager
from datamanager_lib.storage.codec import DecodeError, value_type_from

from .scopes import player_key, scope_for

router = APIRouter()
logger = logging.getLogger(__name__)


class ValuePayload(BaseModel):
    value: Any
    player: Optional[str] = None
    group: Optional[str] = None


def _scope(plugin: str, player: Optional[str], group: Optional[str]):
    try:
        return scope_for(plugin, player=player, group=group)
    except ValueError as e:
        raise HTTPException(status_code=422, detail={'error': 'invalid_player', 'message': str(e)})


def _value_type(name: str):
    try:
        return value_type_from(name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail={'error': 'invalid_value_type', 'message': str(e)})


def _player(player: str) -> str:
    try:
        return player_key(player)
    except ValueError as e:
        raise HTTPException(status_code=422, detail={'error': 'invalid_player', 'message': str(e)})


@router.put('/v1/data/{plugin}/{value_type}/{data_key}')
def api_set_value(request: Request, plugin: str, value_type: str, data_key: str, payload: ValuePayload = Body(...)):
    vt = _value_type(value_type)
    scope = _scope(plugin, payload.player, payload.group)
    dm = resolve_data_manager(request)
    ok = dm.set(scope, data_key, payload.value, vt)
    logger.debug("Set %s/%s (%s) for %s: ok=%s", plugin, data_key, vt.value, scope.kind.value, ok)
    return {'ok': ok}


@router.get('/v1/data/{plugin}/{value_type}/{data_key}')
def api_get_value(request: Request, plugin: str, value_type: str, data_key: str,
                  player: Optional[str] = None, group: Optional[str] = None):
    vt = _value_type(value_type)
    scope = _scope(plugin, player, group)
    dm = resolve_data_manager(request)
    try:
        value = dm.get(scope, data_key, vt)
    except DecodeError as e:
        logger.error("Corrupt value for %s/%s: %s", plugin, data_key, e)
        raise HTTPException(status_code=500, detail={'error': 'corrupt_value', 'message': str(e)})
    if value is None:
        raise HTTPException(status_code=404, detail={'error': 'not_found', 'message': f"No {vt.value} value for {data_key!r}"})
    return {'value': value}


@router.delete('/v1/data/{plugin}/{value_type}/{data_key}')
def api_delete_value(request: Request, plugin: str, value_type: str, data_key: str,
                     player: Optional[str] = None, group: Optional[str] = None):
    vt = _value_type(value_type)
    scope = _scope(plugin, player, group)
    dm = resolve_data_manager(request)
    return {'ok': dm.delete(scope, data_key, vt)}


@router.get('/v1/groups/{plugin}')
def api_list_groups(request: Request, plugin: str, player: Optional[str] = None):
    dm = resolve_data_manager(request)
    if player is not None:
        return dm.get_groups(plugin, _player(player))
    return dm.get_groups(plugin)


@router.get('/v1/groups/{plugin}/{group}')
def api_is_group(request: Request, plugin: str, group: str):
    dm = resolve_data_manager(request)
    return {'exists': dm.is_group(group, plugin)}


@router.put('/v1/groups/{plugin}/{group}')
def api_add_group(request: Request, plugin: str, group: str):
    dm = resolve_data_manager(request)
    return {'ok': dm.add_group(group, plugin)}


@router.delete('/v1/groups/{plugin}/{group}')
def api_delete_group(request: Request, plugin: str, group: str):
    dm = resolve_data_manager(request)
    return {'ok': dm.delete_group(group, plugin)}


@router.get('/v1/groups/{plugin}/{group}/members')
def api_member_ids(request: Request, plugin: str, group: str):
    dm = resolve_data_manager(request)
    ids = dm.get_member_ids(group, plugin)
    if ids is None:
        raise HTTPException(status_code=404, detail={'error': 'not_found', 'message': f"No members recorded for {group!r}"})
    return [str(i) for i in ids]


@router.get('/v1/groups/{plugin}/{group}/members/{player}')
def api_is_member(request: Request, plugin: str, group: str, player: str):
    dm = resolve_data_manager(request)
    return {'member': dm.is_member(_player(player), group, plugin)}


@router.put('/v1/groups/{plugin}/{group}/members/{player}')
def api_add_member(request: Request, plugin: str, group: str, player: str):
    dm = resolve_data_manager(request)
    return {'ok': dm.add_member(_player(player), group, plugin)}


@router.delete('/v1/groups/{plugin}/{group}/members/{player}')
def api_remove_member(request: Request, plugin: str, group: str, player: str):
    dm = resolve_data_manager(request)
    return {'ok': dm.remove_member(_player(player), group, plugin)}
