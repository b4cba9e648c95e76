IMAGE_PROMPT_TEMPLATE = (
    "A high-resolution, detailed, digital art illustration of a {name} monster "
    "in a bold fantasy trading card art style. Complete background."
)

FLAVOR_TEXT_PROMPT = (
    "Generate epic trading card flavor text for this character in 1-2 dramatic sentences. "
    "Make it mysterious, evocative, and memorable. Focus on their power, presence, or legend. "
    "Return only the flavor text, without quotes or commentary."
)

DEFAULT_CUSTOM_PROMPTS = (
    "A mystical dragon warrior in epic fantasy art style",
    "A cyberpunk hacker with neon aesthetics",
    "An ancient forest guardian made of living wood",
)
