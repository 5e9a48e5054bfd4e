"""
FastAPI routes for quick note parsing.
Auth is checked before the request body is read.
"""
import asyncio
from typing import Optional

from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.config import get_settings
from core.exceptions import InvalidInputError, NoteIngestException, UnexpectedError
from core.logger import setup_logger
from core.schema import ErrorResponse, ParseNoteRequest, ParseNoteResponse
from services.auth_service import IdentityVerifier
from services.note_service import NoteIngestService

logger = setup_logger(__name__)
settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title="Quick Note Ingest",
    description="Turn free-text finance notes into structured transactions",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Service instances
identity_verifier = IdentityVerifier()
note_service = NoteIngestService()


@app.exception_handler(NoteIngestException)
async def note_ingest_exception_handler(request: Request, exc: NoteIngestException):
    """Render request-level failures as {"error": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump()
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Render anything else as a 500 in the same {"error": message} shape."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=str(exc) or "Internal server error").model_dump()
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "note_ingest",
        "version": "1.0.0"
    }


async def read_parse_note_request(request: Request) -> ParseNoteRequest:
    """
    Read and validate the request body.

    Raises:
        InvalidInputError: If the body is not JSON or has the wrong shape
    """
    try:
        body = await request.json()
    except ValueError:
        raise InvalidInputError("Invalid JSON body")

    try:
        return ParseNoteRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidInputError("Invalid request body", details={"errors": e.errors()})


@app.post("/parse-note", response_model=ParseNoteResponse)
async def parse_note(request: Request, authorization: Optional[str] = Header(default=None)):
    """
    Parse a quick note into transactions.

    Args:
        request: Incoming request with a ParseNoteRequest JSON body
        authorization: Bearer credential

    Returns:
        ParseNoteResponse with accepted transactions
    """
    loop = asyncio.get_event_loop()

    try:
        user_id = await loop.run_in_executor(None, identity_verifier.verify, authorization)
        logger.info(f"Processing note for user: {user_id}")

        payload = await read_parse_note_request(request)

        # Blocking provider exchange runs in the thread pool
        result = await loop.run_in_executor(None, note_service.parse, payload.to_parse_request())

    except NoteIngestException:
        raise

    except Exception as e:
        logger.error(f"Parse note error: {e}", exc_info=True)
        raise UnexpectedError(str(e) or "Internal server error")

    return ParseNoteResponse.from_result(result)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
