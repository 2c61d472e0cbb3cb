from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import ContactError
from app.api.router import api_router


#Configure logging to output to console
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


#Create application instance
app = FastAPI(title="Contact Relay API")


#configure CORS from the comma separated CORS_ORIGIN allow list
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


#Render contact errors as {success: false, error}, detail stays in the logs
@app.exception_handler(ContactError)
def contact_error_handler(request: Request, exc: ContactError):
    if exc.status_code >= 500:
        logger.error("Contact error: %s", exc, exc_info=exc)
    else:
        logger.info("Contact request rejected (%s): %s", exc.status_code, exc.public_message)

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.public_message},
    )


#Malformed JSON or non-string fields never reach the validator
@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body."},
    )


#Register all API routes under the main application
app.include_router(api_router)


#Serve the static site last so it never shadows an API route
if settings.STATIC_DIR:
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")


def run():
    import uvicorn

    logger.info("Contact backend running on http://localhost:%s", settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
