from fastapi import APIRouter, Request

from .health import get_health

router = APIRouter()


@router.get('/health')
async def api_health(request: Request):
    container = getattr(request.app.state, 'container', None)
    backend = None
    if container is not None and 'storage' in container:
        backend = getattr(container.get('storage'), 'name', None)
    return get_health(backend)
