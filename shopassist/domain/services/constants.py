
# Text search ranking
SEARCH_MAX_RESULTS = 50  # hard cap on candidates returned by one search

SCORE_PHRASE_MATCH = 5.0  # whole normalized query found in searchable_text
SCORE_TOKEN_MATCH = 2.0  # per query token found in searchable_text
SCORE_CATEGORY_MATCH = 1.5  # a query token equals the product category
SCORE_IN_STOCK = 0.5
RATING_PIVOT = 3.5  # ratings above this pull a product up, below it push it down
RATING_WEIGHT = 0.5
RATING_MAX_BOOST = 1.5

CONFIDENCE_DECIMALS = 3

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "for", "to", "of", "in", "on", "with", "by",
    "at", "is", "are", "it", "this", "that", "these", "those",
})

# Assistant replies
MSG_NOT_FOUND = "I could not find that item."
MSG_FALLBACK = "Working on that capability..."
MSG_EMPTY_CART = "Your cart is empty."
MSG_SEARCH_FAILED = "Sorry, I can't search the catalog right now. Please try again in a moment."
MSG_CART_FAILED = "Sorry, I couldn't update your cart right now. Please try again."
MSG_SPLIT_FAILED = "Sorry, I couldn't split your basket right now. Please try again."
