import re
from typing import Optional


class MarkdownNormalizer:
    """
    Strips lightweight markdown from generated text so the chat UI can render
    it as plain prose.
    """

    # Order matters: bold before italic, fenced code before inline code.
    _PATTERNS = [
        (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
        (re.compile(r"__([^_]+)__"), r"\1"),
        (re.compile(r"^#{1,6}[ \t]+(.+)$", re.MULTILINE), r"\1"),
        (re.compile(r"\*([^*]+)\*"), r"\1"),
        (re.compile(r"_([^_]+)_"), r"\1"),
        (re.compile(r"```([\s\S]*?)```"), r"\1"),
        (re.compile(r"`([^`]+)`"), r"\1"),
        (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    ]

    @staticmethod
    def _single_pass(text: str) -> str:
        for pattern, replacement in MarkdownNormalizer._PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    @staticmethod
    def strip(text: Optional[str]) -> Optional[str]:
        """
        Removes emphasis, heading, code and link markup.

        Passes repeat until the text stops changing, so the result is a fixed
        point and stripping twice equals stripping once. Every substitution
        shortens the text, which bounds the loop.
        """
        if not text:
            return text

        previous = None
        while text != previous:
            previous = text
            text = MarkdownNormalizer._single_pass(text)
        return text


def clean_markdown_formatting(text: Optional[str]) -> Optional[str]:
    return MarkdownNormalizer.strip(text)
