"""Language codes accepted by the translation endpoints.

Must stay in sync with:
  frontend: src/components/TranslateButton.jsx
"""

# Closed set of concrete codes; these are the only values ever stored
SUPPORTED_LANGUAGES = ('en', 'zh-CN', 'zh-TW')

# Request-only sentinel, resolved by language detection before use
AUTO_DETECT = 'auto'


def is_valid_language(code) -> bool:
    """Check whether code is one of the concrete supported languages."""
    return isinstance(code, str) and code in SUPPORTED_LANGUAGES


def is_valid_source_language(code) -> bool:
    """Source languages additionally accept the 'auto' sentinel."""
    return code == AUTO_DETECT or is_valid_language(code)
