import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from bistro.core import config
from bistro.database import create_tables
from bistro.routes import (
    admin_routes,
    auth_routes,
    cart_routes,
    menu_routes,
    payment_routes,
    review_routes,
    user_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

logger = logging.getLogger(__name__)

app = FastAPI(title='Bistro API', debug=config.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials='*' not in config.CORS_ALLOW_ORIGINS,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        create_tables()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Bistro API Running'}


app.include_router(auth_routes.router)
app.include_router(user_routes.router)
app.include_router(menu_routes.router)
app.include_router(review_routes.router)
app.include_router(cart_routes.router)
app.include_router(payment_routes.router)
app.include_router(admin_routes.router)


def serve() -> None:
    logger.info('Bistro API listening on port %s', config.PORT)
    uvicorn.run(app, host='0.0.0.0', port=config.PORT)


if __name__ == '__main__':
    serve()
