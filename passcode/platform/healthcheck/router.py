from fastapi import APIRouter, Response
from sqlalchemy import text
from starlette import status

router = APIRouter()


@router.get('/api')
def status_get(response: Response) -> str:
    """
    Fast check to ensure API is running.
    Used by load balancers and deploy scripts, keep it cheap.
    """
    response.headers['Content-Type'] = 'text/html; charset=utf-8'

    return '🔐 Passcodes are ready'


@router.get('/database')
def database_health_check(response: Response) -> str:
    """
    Fast check to ensure database connectivity.
    """
    from passcode.network.database.session import db

    response.headers['Content-Type'] = 'text/html; charset=utf-8'
    try:
        with db():
            db.session.execute(text('SELECT 1'))
    except Exception as e:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return f'❌ DB is sad: {str(e)}'

    response.status_code = status.HTTP_200_OK
    return '✅ DB is happy'
