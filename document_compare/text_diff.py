"""
Text Diff Primitive v2.0.0
==========================
Character-level diff with semantic cleanup, a word-granularity variant
for inline markup, plus the similarity score and text normalization
used by block alignment.

Uses diff-match-patch for the minimal-edit diff and its semantic
cleanup pass, which folds runs of single-character edits separated by
short equalities into readable chunks.
"""

import re
from typing import List, Optional, Sequence

import diff_match_patch as dmp_module

from config_logging import get_config, get_logger, AppConfig
from .models import DiffOp, DiffOperation

logger = get_logger('document_compare.text_diff')

_WHITESPACE_RUN = re.compile(r'\s+')
_TOKEN = re.compile(r'\w+|\s+|[^\w\s]+')


def normalize_text(text: Optional[str]) -> str:
    """Trim, collapse internal whitespace runs to one space, lowercase."""
    if not text:
        return ""
    return _WHITESPACE_RUN.sub(' ', text.strip()).lower()


def texts_equal(a: Optional[str], b: Optional[str]) -> bool:
    """Exact equality on normalized text."""
    return normalize_text(a) == normalize_text(b)


def left_text(ops: Sequence[DiffOp]) -> str:
    """Reconstruct the left input from EQUAL and DELETE spans."""
    return ''.join(d.text for d in ops if d.op != DiffOperation.INSERT)


def right_text(ops: Sequence[DiffOp]) -> str:
    """Reconstruct the right input from EQUAL and INSERT spans."""
    return ''.join(d.text for d in ops if d.op != DiffOperation.DELETE)


class TextDiffer:
    """
    Wrapper around a configured diff_match_patch instance.

    Args:
        timeout: Max seconds per diff (0 = unlimited)
        edit_cost: Cost of an empty edit, used by efficiency cleanup
    """

    def __init__(self, timeout: float, edit_cost: int):
        self.dmp = dmp_module.diff_match_patch()
        self.dmp.Diff_Timeout = timeout
        self.dmp.Diff_EditCost = edit_cost

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> 'TextDiffer':
        config = config or get_config()
        return cls(timeout=config.diff_timeout, edit_cost=config.diff_edit_cost)

    def diff(self, a: Optional[str], b: Optional[str], cleanup: bool = True) -> List[DiffOp]:
        """
        Diff two strings into EQUAL/INSERT/DELETE spans.

        Never raises for string input. Both empty yields []; one empty
        yields a single INSERT or DELETE.
        """
        a = a or ""
        b = b or ""
        diffs = self.dmp.diff_main(a, b)
        if cleanup:
            self.dmp.diff_cleanupSemantic(diffs)
        return [DiffOp(DiffOperation(op), text) for op, text in diffs if text]

    def diff_words(self, a: Optional[str], b: Optional[str]) -> List[DiffOp]:
        """
        Diff at word granularity: words, whitespace runs and punctuation
        runs are atomic, so a changed number shows as one deleted and one
        inserted token instead of single characters.
        """
        a = a or ""
        b = b or ""
        tokens: List[str] = ['']  # index 0 unused, mirrors diff_linesToChars
        token_hash = {}
        chars_a = self._tokens_to_chars(a, tokens, token_hash)
        chars_b = self._tokens_to_chars(b, tokens, token_hash)
        diffs = self.dmp.diff_main(chars_a, chars_b, False)
        self.dmp.diff_charsToLines(diffs, tokens)
        self.dmp.diff_cleanupSemantic(diffs)
        return [DiffOp(DiffOperation(op), text) for op, text in diffs if text]

    @staticmethod
    def _tokens_to_chars(text: str, tokens: List[str], token_hash: dict) -> str:
        chars = []
        for token in _TOKEN.findall(text):
            if token not in token_hash:
                tokens.append(token)
                token_hash[token] = len(tokens) - 1
            chars.append(chr(token_hash[token]))
        return ''.join(chars)

    def similarity(self, a: Optional[str], b: Optional[str]) -> float:
        """
        Overlap ratio in [0, 1]: equal characters over the longer length.
        """
        if not a and not b:
            return 1.0
        if not a or not b:
            return 0.0
        unchanged = sum(len(d.text) for d in self.diff(a, b) if d.op == DiffOperation.EQUAL)
        return unchanged / max(len(a), len(b))


_default_differ: Optional[TextDiffer] = None


def _get_default_differ() -> TextDiffer:
    global _default_differ
    if _default_differ is None:
        _default_differ = TextDiffer.from_config()
        logger.debug("Text differ initialized",
                     diff_timeout=_default_differ.dmp.Diff_Timeout,
                     diff_edit_cost=_default_differ.dmp.Diff_EditCost)
    return _default_differ


def reset_default_differ():
    """Drop the cached differ so the next call rereads configuration."""
    global _default_differ
    _default_differ = None


def diff_text(a: Optional[str], b: Optional[str]) -> List[DiffOp]:
    """Diff with the process-wide differ built from configuration."""
    return _get_default_differ().diff(a, b)


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Similarity with the process-wide differ built from configuration."""
    return _get_default_differ().similarity(a, b)


def diff_words(a: Optional[str], b: Optional[str]) -> List[DiffOp]:
    """Word-granularity diff with the process-wide differ."""
    return _get_default_differ().diff_words(a, b)
