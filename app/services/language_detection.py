"""Heuristic source-language detection for chat messages.

Decides between English and Chinese only, by looking for CJK Unified
Ideographs (U+4E00 to U+9FFF). This is not a classifier with confidence:

- Simplified and traditional Chinese cannot be told apart; any CJK
  ideograph yields 'zh-CN'.
- Mixed text counts as Chinese as soon as one ideograph is present,
  regardless of position or ratio.
- Empty, whitespace-only or non-string input defaults to 'en'.
"""
import re

CHINESE_CHAR_PATTERN = re.compile(r'[\u4e00-\u9fff]')


def detect_language(text) -> str:
    """Return 'zh-CN' if text contains a CJK ideograph, otherwise 'en'."""
    if not isinstance(text, str) or not text.strip():
        return 'en'
    
    if CHINESE_CHAR_PATTERN.search(text):
        return 'zh-CN'
    
    return 'en'
