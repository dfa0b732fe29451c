"""Tag suggestion from note text."""

import random
import re
from collections import Counter
from typing import Protocol

from liquidnotes.domain.note import Note

ATTACHMENT_MARKER_PATTERN = re.compile(r"\[\[ATTACH:[^\]]+\]\]")
# Words, plus the punctuation that ends a run of capitalized words
TOKEN_PATTERN = re.compile(r"[A-Za-z][A-Za-z'\-]*|[.!?,;:()\n]")
SENTENCE_END = {".", "!", "?", "\n"}

MIN_NAME_LENGTH = 3
MIN_WORD_LENGTH = 4

STOPWORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
        "her", "was", "one", "our", "out", "has", "have", "been", "some", "them",
        "then", "this", "that", "with", "from", "will", "would", "there", "their",
        "what", "about", "which", "when", "make", "like", "time", "just", "know",
        "take", "come", "could", "good", "most", "also", "into", "year", "your",
        "over", "such", "than", "first", "made", "find", "here", "thing", "things",
        "note", "notes", "text", "content",
    }
)  # fmt: skip


class ConfidenceGenerator(Protocol):
    def __call__(self, tags: list[str]) -> list[float]:
        """Return one confidence per suggested tag."""
        ...


def random_confidences(
    low: float = 0.7, high: float = 0.95, rng: random.Random | None = None
) -> ConfidenceGenerator:
    """Confidence generator drawing uniform values from ``[low, high]``.

    There is no classifier behind tag suggestions, so confidences are synthetic.
    """
    rng = rng or random.Random()

    def generate(tags: list[str]) -> list[float]:
        return [rng.uniform(low, high) for _ in tags]

    return generate


def extract_plain_text(note: Note) -> str:
    """Title and body, on separate lines, with attachment markers removed."""
    cleaned = ATTACHMENT_MARKER_PATTERN.sub("", note.body)
    return f"{note.title}\n{cleaned}"


def extract_entities(text: str, limit: int = 5) -> list[str]:
    """Extract candidate tags from free text.

    Two kinds of candidates are counted together:
      - names: runs of capitalized words (a single capitalized word only counts
        when it does not start a sentence)
      - content words: lowercase words of four letters or more that are not stopwords

    Args:
        text: Plain text to analyze
        limit: Maximum number of tags to return

    Returns:
        Title-cased candidates, most frequent first, ties in order of first appearance
    """
    counts: Counter[str] = Counter()
    run: list[str] = []
    run_starts_sentence = True
    at_sentence_start = True

    def close_run() -> None:
        if not run:
            return
        if len(run) > 1 or not run_starts_sentence:
            _count_name(" ".join(run), counts)
        else:
            _count_word(run[0], counts)
        run.clear()

    for token in TOKEN_PATTERN.findall(text):
        if not token[0].isalpha():
            close_run()
            if token in SENTENCE_END:
                at_sentence_start = True
            continue

        if token[0].isupper():
            if not run:
                run_starts_sentence = at_sentence_start
            run.append(token)
        else:
            close_run()
            _count_word(token, counts)
        at_sentence_start = False

    close_run()

    # stable sort: equal counts keep first-seen order
    ranked = sorted(counts.items(), key=lambda x: x[1], reverse=True)
    return [tag for tag, _ in ranked[:limit]]


def _count_name(name: str, counts: Counter[str]) -> None:
    if len(name) < MIN_NAME_LENGTH or name.lower() in STOPWORDS:
        return
    counts[_title_case(name)] += 1


def _count_word(word: str, counts: Counter[str]) -> None:
    word = word.lower()
    if len(word) < MIN_WORD_LENGTH or word in STOPWORDS:
        return
    counts[_title_case(word)] += 1


def _title_case(value: str) -> str:
    return " ".join(part.capitalize() for part in value.split())
