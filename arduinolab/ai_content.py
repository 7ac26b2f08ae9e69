"""
AI-assisted authoring: expand a short summary into a multilingual title and
description, and fill in missing translations of a step.

The model is reached through the OpenAI client pointed at any compatible
endpoint (Groq by default). Its answer is expected to be a bare JSON object
but is cleaned up first because models like to add fences and preambles.
"""
import json
import logging
import re
from collections.abc import Mapping

from openai import OpenAI, APIError, RateLimitError

from arduinolab.config import Config
from arduinolab.models import LANGS, LANG_NAMES

logger = logging.getLogger(__name__)

TECH_TERMS = 'Arduino, Breadboard, GND, VCC, LED, Resistor, I2C, SPI, PWM, GPIO, Jumper wire'

GENERATE_PROMPT = f"""You are an expert technical translator and writer for an Arduino projects library.
The user will provide a short summary of an Arduino/electronics project.
Your task is to expand it into a professional title and description, then translate into English, French, and Arabic.

STRICT RULES:
1. Technical keywords MUST remain in English across ALL languages. Examples: {TECH_TERMS}.
2. Return ONLY a valid JSON object with NO markdown formatting, NO code blocks, NO extra text, just the raw JSON:
{{"title_en":"...","title_fr":"...","title_ar":"...","description_en":"...","description_fr":"...","description_ar":"..."}}"""

GENERATED_KEYS = tuple(f'{part}_{lang}' for part in ('title', 'description') for lang in LANGS)

JSON_OBJECT = re.compile(r'\{[\s\S]*\}')


class AIContentError(Exception):
    def __init__(self, message, status=500):
        super().__init__(message)
        self.message = message
        self.status = status


def get_llm_client(api_key=None, base_url=None):
    api_key = api_key or Config.LLM_API_KEY
    if not api_key:
        raise AIContentError("LLM API key is not configured", status=500)
    return OpenAI(api_key=api_key, base_url=base_url or Config.LLM_BASE_URL)


def extract_json(text):
    """Parse the first {...} block of a model reply, ignoring fences and preamble"""
    cleaned = (text or '').strip()
    if '```json' in cleaned:
        cleaned = re.sub(r'```json\n?', '', cleaned)
        cleaned = re.sub(r'\n?```', '', cleaned)
    elif '```' in cleaned:
        cleaned = re.sub(r'```\n?', '', cleaned)

    match = JSON_OBJECT.search(cleaned)
    if not match:
        logger.error("No JSON found in model response: %s", cleaned[:200])
        raise AIContentError("Could not parse AI response. Please try again.")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in model response: %s", e)
        raise AIContentError("Could not parse AI response. Please try again.") from e
    if not isinstance(parsed, dict):
        raise AIContentError("Could not parse AI response. Please try again.")
    return parsed


def _complete(client, model, messages, temperature, max_tokens):
    try:
        completion = client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except RateLimitError as e:
        raise AIContentError("Rate limit reached. Please wait a moment and try again.",
                             status=429) from e
    except APIError as e:
        logger.error("LLM request failed: %s", e)
        raise AIContentError("Failed to generate content. Please try again later.") from e

    if not completion.choices:
        return ''
    return completion.choices[0].message.content or ''


def generate_project_content(client, summary, model=None):
    """Title and description in en/fr/ar from a short summary"""
    if not isinstance(summary, str) or not summary.strip():
        raise AIContentError("Summary is required", status=400)

    text = _complete(
        client,
        model or Config.LLM_MODEL,
        [
            {"role": "system", "content": GENERATE_PROMPT},
            {"role": "user", "content": summary},
        ],
        temperature=0.7,
        max_tokens=1024,
    )
    parsed = extract_json(text)
    return {key: parsed.get(key, '') for key in GENERATED_KEYS}


def _filled(value):
    return bool(value and str(value).strip())


def detect_source_language(title, content):
    for lang in LANGS:
        if _filled(title.get(lang)) or _filled(content.get(lang)):
            return lang
    return None


def translate_step(client, title, content, model=None):
    """Fill the empty language slots of a step from the first filled language.

    Returns ``(title, content)``; existing values are never overwritten.
    """
    for name, value in (('title', title), ('content', content)):
        if value is not None and not isinstance(value, Mapping):
            raise AIContentError(f"Step {name} must be an object keyed by language.", status=400)
    title = dict(title or {})
    content = dict(content or {})

    source = detect_source_language(title, content)
    if source is None:
        raise AIContentError("No source content found in any language.", status=400)

    targets = [lang for lang in LANGS
               if lang != source and (not _filled(title.get(lang)) or not _filled(content.get(lang)))]
    if not targets:
        return title, content

    target_names = ' and '.join(LANG_NAMES[lang] for lang in targets)
    shape = {f'title_{lang}': f'...translated title in {LANG_NAMES[lang]}...' for lang in targets}
    shape.update({f'content_{lang}': f'...translated content in {LANG_NAMES[lang]}...'
                  for lang in targets})
    system_prompt = f"""You are an expert technical translator for an Arduino projects library.
Translate the given step title and step content into {target_names}.

STRICT RULES:
1. DO NOT modify the source content, only translate it.
2. Technical keywords MUST remain in English in all languages: {TECH_TERMS}, etc.
3. Preserve ALL markdown formatting exactly (**, *, `code`, ##, -, numbered lists, etc.).
4. Return ONLY a raw JSON object with NO preamble, NO markdown code blocks:
{json.dumps(shape, ensure_ascii=False)}"""

    user_prompt = (
        f"Source language: {LANG_NAMES[source]}\n\n"
        f"Title:\n{title.get(source) or ''}\n\n"
        f"Content:\n{content.get(source) or ''}"
    )
    text = _complete(
        client,
        model or Config.LLM_MODEL,
        [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=0.3,
        max_tokens=2048,
    )
    translated = extract_json(text)

    for lang in targets:
        if not _filled(title.get(lang)) and translated.get(f'title_{lang}'):
            title[lang] = translated[f'title_{lang}']
        if not _filled(content.get(lang)) and translated.get(f'content_{lang}'):
            content[lang] = translated[f'content_{lang}']
    return title, content
