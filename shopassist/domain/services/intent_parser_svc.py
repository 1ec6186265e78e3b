import logging

from shopassist.domain.models.intents import AssistantInput, AssistantIntent, ParsedIntent

logger = logging.getLogger(__name__)


class IntentParser:
    """
    Rule-cascade intent classifier (first match wins, on lowercased text):

      image_uri present     -> FIND_BY_IMAGE
      contains "similar"    -> FIND_SIMILAR   (query = original text)
      starts with "add "    -> ADD_TO_CART    (query = original text)
      contains "track"      -> TRACK_ORDER
      contains "help"       -> HELP
      otherwise             -> FIND_PRODUCT   (query = original text)

    Never raises. VOICE_QUERY, UPDATE_QUANTITY, REPLACE_ITEM and SPLIT_BASKET
    have no text trigger: voice pipelines and UI actions build those intents
    directly. A statistical classifier can replace this class as long as it
    keeps returning a ParsedIntent for every input.
    """

    async def parse(self, data: AssistantInput) -> ParsedIntent:
        text = data.text or ""
        t = text.lower()
        locale = data.locale

        if data.image_uri:
            parsed = ParsedIntent(intent=AssistantIntent.FIND_BY_IMAGE, image_uri=data.image_uri, locale=locale)
        elif "similar" in t:
            parsed = ParsedIntent(intent=AssistantIntent.FIND_SIMILAR, query=text, locale=locale)
        elif t.startswith("add "):
            parsed = ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query=text, locale=locale)
        elif "track" in t:
            parsed = ParsedIntent(intent=AssistantIntent.TRACK_ORDER, locale=locale)
        elif "help" in t:
            parsed = ParsedIntent(intent=AssistantIntent.HELP, locale=locale)
        else:
            parsed = ParsedIntent(intent=AssistantIntent.FIND_PRODUCT, query=text, locale=locale)

        logger.debug("parse text=%r image=%s -> %s", text, bool(data.image_uri), parsed.intent.value)
        return parsed
