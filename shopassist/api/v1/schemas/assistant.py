# api/v1/schemas/assistant.py
from pydantic import BaseModel
from typing import List, Optional

from shopassist.domain.models.actions import AssistantAction
from shopassist.domain.models.intents import ParsedIntent, ProductCandidate, ProductFilter


class SearchTextIn(BaseModel):
    query: str = ""
    filters: Optional[ProductFilter] = None

class SearchTextOut(BaseModel):
    results: List[ProductCandidate]
    count: int

class AskOut(BaseModel):
    intent: ParsedIntent
    action: AssistantAction
