"""
text_preprocessor.py

Deterministic normalisation of extracted document text before term
extraction: lowercasing, metadata/noise removal, punctuation stripping,
whitespace collapsing and a short-token pass.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .lexicon import DEFAULT_LEXICON, Lexicon


class TextPreprocessor:
    """
    Pure text normaliser.

    Pipeline of :meth:`preprocess`:

    1. Lowercase.
    2. Remove denylisted metadata tokens (PDF artifacts, encoding names,
       document-structure boilerplate) by whole-word match.
    3. Replace every character that is not a (Unicode) letter or digit
       with a space; underscores count as separators.
    4. Collapse whitespace.
    5. Drop tokens shorter than ``min_token_length`` unless whitelisted.

    Very short inputs (below ~50 chars) pass through fine but usually yield
    no terms downstream; the caller drops such documents.
    """

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        min_token_length: int = 3,
    ) -> None:
        if min_token_length < 1:
            raise ValueError("min_token_length must be >= 1.")
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.min_token_length = min_token_length

        denylist = sorted(self.lexicon.metadata_denylist, key=len, reverse=True)
        self._denylist_re = (
            re.compile(r"\b(?:" + "|".join(re.escape(w) for w in denylist) + r")\b")
            if denylist
            else None
        )
        self._non_alnum_re = re.compile(r"(?:[^\w\s]|_)+")
        self._whitespace_re = re.compile(r"\s+")

    def preprocess(self, text: str) -> str:
        if not text:
            return ""
        clean = text.lower()
        if self._denylist_re is not None:
            clean = self._denylist_re.sub(" ", clean)
        clean = self._non_alnum_re.sub(" ", clean)
        clean = self._whitespace_re.sub(" ", clean).strip()
        return " ".join(self._filter_short_tokens(clean.split(" ")))

    def tokenize(self, text: str) -> List[str]:
        """Preprocess and split on whitespace."""
        processed = self.preprocess(text)
        return processed.split(" ") if processed else []

    def _filter_short_tokens(self, tokens: List[str]) -> List[str]:
        whitelist = self.lexicon.short_word_whitelist
        return [
            tok
            for tok in tokens
            if tok and (len(tok) >= self.min_token_length or tok in whitelist)
        ]
