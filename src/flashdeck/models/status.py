"""Session-scoped card status records."""
from dataclasses import dataclass, field
from typing import List, Sequence, Union


def rolling_complete(history: Sequence[bool], window: int = 3) -> bool:
    """True when the last `window` answers exist and are all correct."""
    return len(history) >= window and all(history[-window:])


def all_passed(history: Sequence[bool]) -> bool:
    """True when no answer in the history was wrong."""
    return all(history)


@dataclass
class VocabStatus:
    """Status of a vocab card while it is in the hand."""
    completed: bool = False
    passed: bool = False
    history: List[bool] = field(default_factory=list)


@dataclass
class LangVocabStatus:
    """Status of a lang_vocab card; one history per tested direction."""
    completed: bool = False
    passed: bool = False
    history: List[List[bool]] = field(default_factory=lambda: [[], []])
    l1: int = 0  # direction under test

    @property
    def l2(self) -> int:
        """Side holding the expected answer."""
        return 1 - self.l1


@dataclass
class QuoteStatus:
    """Status of a quote card."""
    completed: bool = False
    passed: bool = False


CardStatus = Union[VocabStatus, LangVocabStatus, QuoteStatus]
