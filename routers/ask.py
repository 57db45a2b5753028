from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from core.config import Settings
from core.errors import describe_provider_error
from core.log import get_logger
from dependencies.services import get_config_store, get_llm_service, get_settings
from rag_services.llm import LLMService
from schemas.ask import AskRequest, AskResponse
from services.config_store import ConfigStore

router = APIRouter()
logger = get_logger("ask")

PUBLIC_ERROR = "Sorry, there was a server error."


async def read_ask_payload(request: Request) -> AskRequest:
    """Missing, malformed or non-object bodies fall back to the defaults."""
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}
    return AskRequest.model_validate(body)


@router.post("/api/ask", response_model=AskResponse)
async def ask(
    payload: AskRequest = Depends(read_ask_payload),
    settings: Settings = Depends(get_settings),
    config_store: ConfigStore = Depends(get_config_store),
    llm: LLMService = Depends(get_llm_service),
):
    """
    Answer a student question.

    Request body (all fields optional):
    ```json
    {"question": "What is reframing?", "course": "ENGAGING-CULTURE", "mode": "socratic"}
    ```

    Response:
    ```json
    {"answer": "...", "citations": []}
    ```
    """
    question = "" if payload.question is None else str(payload.question)
    course = str(payload.course) if payload.course else settings.default_course
    vector_store_id = config_store.get_vector_store_id()

    try:
        answer = await llm.generate_answer(question, course, payload.mode, vector_store_id)
    except Exception as e:
        report = describe_provider_error(e, PUBLIC_ERROR)
        logger.exception("Ask failed: %s", report.log_detail)
        return JSONResponse(status_code=500, content={"answer": report.public_message, "citations": []})

    return AskResponse(answer=answer, citations=[])
