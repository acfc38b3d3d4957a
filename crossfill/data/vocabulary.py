"""Word list loading and filtering."""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..core.exceptions import VocabularyLoadError
from ..utils.logger import get_logger
from .normalization import clean_word


LOGGER = get_logger(__name__)


@dataclass
class VocabularyConfig:
    """Configuration for word list loading and filtering."""

    path: Path | str
    min_length: int = 2
    max_length: Optional[int] = None


def normalize_words(
    words: Iterable[str],
    min_length: int = 2,
    max_length: Optional[int] = None,
) -> List[str]:
    """Clean, length-filter and de-duplicate ``words`` keeping first occurrences."""

    seen: Dict[str, None] = {}
    for raw in words:
        word = clean_word(raw)
        if len(word) < min_length:
            continue
        if max_length is not None and len(word) > max_length:
            continue
        seen.setdefault(word, None)
    return list(seen)


def parse_vocabulary_text(text: str) -> List[str]:
    """Extract raw entries from a JSON payload or a word-per-line listing."""

    stripped = text.lstrip()
    if stripped.startswith(("{", "[")):
        try:
            payload: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise VocabularyLoadError(f"Invalid JSON word list: {exc}") from exc
        if isinstance(payload, dict):
            payload = payload.get("vocab", payload.get("words"))
        if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
            raise VocabularyLoadError("JSON word list must be a list of strings or {'vocab': [...]}")
        return list(payload)

    entries: List[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.append(line)
    return entries


def load_vocabulary(config: VocabularyConfig) -> List[str]:
    """Read the word list described by ``config``."""

    source = Path(config.path)
    if not source.exists():
        raise VocabularyLoadError(f"Missing word list: {source}")
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise VocabularyLoadError(f"Cannot read word list {source}: {exc}") from exc

    words = normalize_words(
        parse_vocabulary_text(text),
        min_length=config.min_length,
        max_length=config.max_length,
    )
    LOGGER.info("Loaded %d words from %s", len(words), source)
    return words


def length_histogram(words: Iterable[str]) -> Dict[int, int]:
    counts: Dict[int, int] = defaultdict(int)
    for word in words:
        counts[len(word)] += 1
    return dict(sorted(counts.items()))
