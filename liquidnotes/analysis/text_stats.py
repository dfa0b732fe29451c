"""Descriptive statistics and light clean-up for note text."""

import re

from pydantic import BaseModel

from liquidnotes.analysis.tagging import STOPWORDS

WORDS_PER_MINUTE = 200.0
SENTENCE_ENDERS = ".!?"
KEY_SENTENCE_MARKERS = ("important", "key", "main", "summary", "conclusion")
VOWELS = set("aeiouy")

READABILITY_LEVELS = [
    (90.0, "Very Easy"),
    (80.0, "Easy"),
    (70.0, "Fairly Easy"),
    (60.0, "Standard"),
    (50.0, "Fairly Difficult"),
    (30.0, "Difficult"),
]


class TextStatistics(BaseModel):
    word_count: int
    sentence_count: int
    paragraph_count: int
    character_count: int  # non-whitespace characters
    reading_time_minutes: float
    average_words_per_sentence: float


def analyze_text_statistics(text: str) -> TextStatistics:
    """Count words, sentences and paragraphs and estimate reading time.

    Sentence and paragraph counts never go below one.
    """
    word_count = len(re.findall(r"\w+(?:['’]\w+)*", text))

    sentence_count = sum(1 for char in text if char in SENTENCE_ENDERS)
    if sentence_count == 0 and word_count > 0:
        sentence_count = 1

    paragraph_count = len([p for p in text.split("\n\n") if p.strip()])
    character_count = sum(1 for char in text if not char.isspace())

    return TextStatistics(
        word_count=word_count,
        sentence_count=max(1, sentence_count),
        paragraph_count=max(1, paragraph_count),
        character_count=character_count,
        reading_time_minutes=word_count / WORDS_PER_MINUTE,
        average_words_per_sentence=(
            word_count / sentence_count if sentence_count > 0 else float(word_count)
        ),
    )


def extract_key_sentences(text: str, count: int = 3) -> list[str]:
    """Pick the sentences that best summarize a text.

    Sentences score a point per content word, three more when they contain a
    summary keyword, and two more when they open or close the text.

    Args:
        text: Text to summarize
        count: Number of sentences to return

    Returns:
        Highest scoring sentences, best first
    """
    sentences = [
        s.strip() for s in re.split(r"(?<=[.!?])\s+|\n+", text) if len(s.strip()) > 10
    ]
    if not sentences:
        return []

    scored = []
    for sentence in sentences:
        score = 0.0
        for word in sentence.lower().split():
            if word not in STOPWORDS and len(word) > 3:
                score += 1
        if any(marker in sentence for marker in KEY_SENTENCE_MARKERS):
            score += 3
        if sentence in (sentences[0], sentences[-1]):
            score += 2
        scored.append((sentence, score))

    scored.sort(key=lambda x: x[1], reverse=True)
    return [sentence for sentence, _ in scored[:count]]


def readability_score(text: str) -> tuple[float, str]:
    """Flesch reading ease, clamped to 0-100, with its difficulty label."""
    stats = analyze_text_statistics(text)
    if stats.word_count == 0:
        return 0.0, "Not enough text"

    syllables = _count_syllables(text)
    score = (
        206.835
        - 1.015 * (stats.word_count / stats.sentence_count)
        - 84.6 * (syllables / stats.word_count)
    )
    score = max(0.0, min(100.0, score))

    for floor, level in READABILITY_LEVELS:
        if score >= floor:
            return score, level
    return score, "Very Difficult"


def cleanup_text(text: str) -> str:
    """Collapse runs of spaces and blank lines and fix spacing before punctuation."""
    result = re.sub(r" {2,}", " ", text)
    result = re.sub(r"\n{3,}", "\n\n", result)
    result = re.sub(r" +\n", "\n", result)
    result = re.sub(r"\n +", "\n", result)
    result = re.sub(r" ([,.!?])", r"\1", result)
    return result.strip()


def _count_syllables(text: str) -> int:
    words = [w for w in text.lower().split() if w]
    return max(1, sum(_count_syllables_in_word(word) for word in words))


def _count_syllables_in_word(word: str) -> int:
    count = 0
    last_was_vowel = False
    for char in word:
        is_vowel = char in VOWELS
        if is_vowel and not last_was_vowel:
            count += 1
        last_was_vowel = is_vowel

    if word.endswith("e") and count > 1:
        count -= 1

    return max(1, count)
