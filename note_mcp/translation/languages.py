"""Language names and the file-name suffixes used for parallel translations."""

import re
import unicodedata

# English and native names mapped to ISO 639-1 codes
LANGUAGE_CODES = {
    "arabic": "ar",
    "العربية": "ar",
    "chinese": "zh",
    "中文": "zh",
    "简体中文": "zh",
    "繁體中文": "zh",
    "dutch": "nl",
    "nederlands": "nl",
    "english": "en",
    "french": "fr",
    "français": "fr",
    "german": "de",
    "deutsch": "de",
    "hindi": "hi",
    "हिन्दी": "hi",
    "italian": "it",
    "italiano": "it",
    "japanese": "ja",
    "日本語": "ja",
    "korean": "ko",
    "한국어": "ko",
    "polish": "pl",
    "polski": "pl",
    "portuguese": "pt",
    "português": "pt",
    "russian": "ru",
    "русский": "ru",
    "spanish": "es",
    "español": "es",
    "swedish": "sv",
    "svenska": "sv",
    "turkish": "tr",
    "türkçe": "tr",
    "ukrainian": "uk",
    "українська": "uk",
    "vietnamese": "vi",
    "tiếng việt": "vi",
}

_ISO_CODE = re.compile(r"^[a-z]{2}(?:-[a-z]{2,4})?$")


def language_suffix(target_language: str) -> str:
    """File-name suffix for a translation into ``target_language``.

    Known language names map to their ISO 639-1 code, values that already
    look like a code are kept, and anything else becomes a lowercase slug.
    """
    name = unicodedata.normalize("NFC", target_language.strip()).lower()
    if name in LANGUAGE_CODES:
        return LANGUAGE_CODES[name]
    if _ISO_CODE.match(name):
        return name

    slug = re.sub(r"[^\w]+", "-", name).strip("-_")
    return slug or "translated"
