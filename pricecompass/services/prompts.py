from enum import StrEnum

from pricecompass.platforms import price_roster

MIN_AUTOCOMPLETE_LENGTH = 2
MAX_SUGGESTIONS = 5


class TaskKind(StrEnum):
    AUTOCOMPLETE = "autocomplete"
    ITEM_ANALYSIS = "item_analysis"
    PRICE_LOOKUP = "price_lookup"


class InvalidQuery(ValueError):
    """Query is empty or too short to be worth a model call."""


AUTOCOMPLETE_PROMPT = """Task: Autocomplete product titles (video games, consoles, accessories, collectibles).
Input: "{query}"
Output: JSON Array of up to {limit} short strings. No markdown, no explanation.

Example: "poke" -> ["Pokemon Red", "Pokemon Emerald", "Pokemon Switch", "Pokemon Cards", "Pokemon Plush"]"""

ITEM_ANALYSIS_PROMPT = """Analyze item: "{query}".
Tasks:
1. Identify the exact Name, Category, and a short Description.
2. Estimate Market Value in {currency} strictly based on search results.
3. Generate 3 smart alternative Search Keywords.
4. Research Language Support for the JP, US, and ASIA versions.

CRITICAL - SOURCE OF TRUTH:
- You MUST use the web_search tool. Do not answer from memory.
- For Language Support, ONLY trust official sources: publisher or platform-holder sites such as nintendo.co.jp, nintendo.com, nintendo.com.hk, playstation.com.
- Do NOT use wikis, forums or reddit.
- "sourceUrl" MUST be the direct link to the specific game/product page found in search, never a home page or a general site.
- Only include the three regions JP, US and ASIA.

Output JSON ONLY. No markdown.
{{
  "name": "Full Exact Name",
  "category": "Console/Game/Accessory",
  "description": "Short accurate description (max 20 words).",
  "estimatedValue": "{currency} XX",
  "searchTips": ["Tag1", "Tag2", "Tag3"],
  "versions": [
    {{ "region": "JP", "languages": "Supported Languages", "sourceUrl": "https://www.nintendo.co.jp/..." }},
    {{ "region": "US", "languages": "Supported Languages", "sourceUrl": "https://www.nintendo.com/..." }},
    {{ "region": "ASIA", "languages": "Supported Languages", "sourceUrl": "https://..." }}
  ]
}}"""

PRICE_LOOKUP_PROMPT = """Task: Find REAL-TIME market prices for "{query}" in {currency}.

Strict Rules:
1. USE the web_search tool.
2. If the search result does not explicitly show a price for this item, DO NOT INVENT ONE.
3. If no price is found for a platform, set status to "Check Website" and price to "---".
4. Do not estimate currency conversions unless the search result provides them.
5. Return exactly one entry per target, in the order listed.

Targets:
{targets}

Output JSON ONLY. No markdown.
{{
  "prices": [
{example_rows}
  ],
  "overview": "One sentence factual summary. If data is missing, say so."
}}"""


def _price_targets() -> tuple[str, str]:
    roster = price_roster()
    targets = "\n".join(
        f"{i}. {p.price_label} ({p.price_hint})." for i, p in enumerate(roster, start=1)
    )
    rows = ",\n".join(
        f'    {{{{ "platform": "{p.price_label}", "price": "{{currency}} XX", "status": "{p.price_status}" }}}}'
        for p in roster
    )
    return targets, rows


def build_prompt(task: TaskKind, query: str, currency: str | None = None) -> str:
    """Return the exact instruction text for one model call."""
    query = (query or "").strip()
    if not query:
        raise InvalidQuery("query is empty")

    if task == TaskKind.AUTOCOMPLETE:
        if len(query) < MIN_AUTOCOMPLETE_LENGTH:
            raise InvalidQuery(f"autocomplete needs at least {MIN_AUTOCOMPLETE_LENGTH} characters")
        return AUTOCOMPLETE_PROMPT.format(query=query, limit=MAX_SUGGESTIONS)

    if not currency:
        raise InvalidQuery(f"{task} needs a currency")

    if task == TaskKind.ITEM_ANALYSIS:
        return ITEM_ANALYSIS_PROMPT.format(query=query, currency=currency)

    if task == TaskKind.PRICE_LOOKUP:
        targets, rows = _price_targets()
        example_rows = rows.format(currency=currency)
        return PRICE_LOOKUP_PROMPT.format(
            query=query, currency=currency, targets=targets, example_rows=example_rows
        )

    raise ValueError(f"Unknown task kind: {task}")
