import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from campus_events.core import config
from campus_events.create_admin import seed_default_admin
from campus_events.database import Base, SessionLocal, engine, ensure_schema
from campus_events.models import admin, event, registration, student  # noqa: F401
from campus_events.routes import auth_routes, event_routes, student_routes

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='Campus Event Management API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_schema()
        db = SessionLocal()
        try:
            seed_default_admin(db)
        finally:
            db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={'error': 'Internal server error'})


@app.get('/')
def root():
    return {'status': 'Campus Event Management API Running'}


@app.get('/health')
def health():
    return {'status': 'OK', 'message': 'Campus Event Management API is running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(event_routes.router, prefix='/events')
app.include_router(student_routes.router, prefix='/students')
