# shopassist/api/v1/routers/assistant.py
from fastapi import APIRouter, Depends
import time
import logging

from shopassist.api.deps import assistant_dep
from shopassist.api.v1.schemas.assistant import AskOut
from shopassist.domain.models.actions import AssistantResponse
from shopassist.domain.models.intents import AssistantInput, ParsedIntent
from shopassist.domain.services.assistant_svc import Assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["assistant"])


@router.post("/parse", response_model=ParsedIntent)
async def parse_input(body: AssistantInput, assistant: Assistant = Depends(assistant_dep)):
    """Classify raw text / image input into a ParsedIntent."""
    return await assistant.parser.parse(body)


@router.post("/handle", response_model=AssistantResponse)
async def handle_intent(body: ParsedIntent, assistant: Assistant = Depends(assistant_dep)):
    """
    Route an already-built intent (e.g. from a UI action or a voice pipeline)
    to a single user-facing action.
    """
    return await assistant.orchestrator.handle(body)


@router.post("/ask", response_model=AskOut)
async def ask(body: AssistantInput, assistant: Assistant = Depends(assistant_dep)):
    """Parse + handle in one round trip."""
    logger.info("Request: ask text=%r image=%s locale=%s", body.text, bool(body.image_uri), body.locale)
    start_time = time.perf_counter()

    intent, res = await assistant.ask(body)

    logger.info(
        "Response: ask intent=%s action=%s elapsed_time=%.4fs",
        intent.intent.value, res.action.type, time.perf_counter() - start_time,
    )
    return AskOut(intent=intent, action=res.action)
