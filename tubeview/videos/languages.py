"""Language code helpers shared by the audio and subtitle selection code."""
import re
from urllib.parse import unquote

LANGUAGE_NAMES = {
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "es-419": "Spanish (Latin America)",
    "id": "Indonesian",
    "pt": "Portuguese",
    "pt-BR": "Portuguese (Brazil)",
    "ru": "Russian",
    "fr": "French",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "zh-CN": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)",
    "ar": "Arabic",
    "hi": "Hindi",
    "und": "Unknown",
    "original": "Original",
}

_LANG_PARAM_RE = re.compile(r"lang(?:%3D|=)([^&]+)", re.IGNORECASE)


def normalize_language_code(language_code: str | None) -> str:
    """
    Normalize a language code to BCP 47 form.

    Underscores become hyphens and the primary subtag is lowercased, so
    'es_419' -> 'es-419' and 'EN-US' -> 'en-US'. Empty input maps to 'und'.
    """
    if not language_code:
        return "und"
    parts = language_code.replace("_", "-").split("-")
    parts[0] = parts[0].lower()
    return "-".join(parts)


def get_language_name(language_code: str | None) -> str:
    """Return a display name for a language code, or the upper-cased code."""
    normalized = normalize_language_code(language_code)
    return LANGUAGE_NAMES.get(normalized) or normalized.upper()


def extract_language_from_url(url: str | None) -> str | None:
    """Return the value of a (possibly URL-encoded) ``lang`` parameter in url."""
    if not url:
        return None
    match = _LANG_PARAM_RE.search(url)
    return unquote(match.group(1)) if match else None


def get_language_priority(language_code: str | None) -> int:
    """
    Sort priority for a language: original/undetermined audio first,
    English second, everything else after.
    """
    normalized = normalize_language_code(language_code)
    if normalized in ("und", "original"):
        return 0
    if normalized == "en":
        return 1
    return 2


def language_sort_key(language_code: str | None) -> tuple:
    return (get_language_priority(language_code), normalize_language_code(language_code))


def compare_language_priority(lang_a: str | None, lang_b: str | None) -> int:
    """Three-way comparison of two language codes by preference."""
    key_a = language_sort_key(lang_a)
    key_b = language_sort_key(lang_b)
    return (key_a > key_b) - (key_a < key_b)
