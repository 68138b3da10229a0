"""Fixed prompts and generation parameters."""

STORY_MAX_TOKENS = 1000
STORY_TEMPERATURE = 0.9

IMAGE_PROMPT_PREFIX = "Dreamlike surreal scene: "
IMAGE_SIZE = 512
IMAGE_STEPS = 30
IMAGE_CFG_SCALE = 7
IMAGE_SAMPLES = 1

STORY_PROMPT_TEMPLATE = """You are a skilled dream interpreter and storyteller. Transform the following dream into a compelling narrative.

Dream Title: "{title}"
Dream Description: "{description}"

Please provide a response in exactly this format:

INTERPRETATION:
One paragraph on why this dream might have occurred: possible symbolic meanings, emotional triggers or subconscious messages. Keep it insightful but concise.

STORY:
Rewrite the dream as a vivid, immersive story in 3-4 paragraphs with rich sensory detail and dreamlike imagery. Write in second person ("You find yourself...").

Important: Do not use markdown formatting, headers, or special characters. Write in plain text with natural paragraph breaks."""


def build_story_prompt(title: str, description: str) -> str:
    return STORY_PROMPT_TEMPLATE.format(title=title, description=description)


def build_image_prompt(description: str) -> str:
    return f"{IMAGE_PROMPT_PREFIX}{description}"
