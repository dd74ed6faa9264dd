# ac.py
import logging
from collections import deque
from typing import Dict, Iterable, Iterator, List, Tuple, Union

from .model import Category, Match, Pattern

logger = logging.getLogger(__name__)

PatternLike = Union[Pattern, Tuple[str, float]]


def _fold(ch: str) -> str:
    """Lower-case one character without changing its length ('İ'.lower() is two chars)."""
    low = ch.lower()
    return low if len(low) == 1 else ch


class Aho:
    """
    Aho-Corasick automaton over one category's patterns.

    State 0 is the root. Tables are built once and frozen into tuples; scanning
    only reads them and keeps its cursor in a local variable, so one instance
    can be shared by concurrent scans.
    """

    def __init__(self, patterns: Iterable[PatternLike], category: Union[Category, str]):
        self.category = Category.parse(category)
        goto: List[Dict[str, int]] = [dict()]
        own:  List[int]            = [-1]     # pattern id ending exactly here
        self.pats: List[Pattern]   = []

        for p in patterns:
            if not isinstance(p, Pattern):
                p = Pattern(*p)
            self._insert(goto, own, p)

        fail, out, depth = self._build(goto, own)
        self.goto:  Tuple[Dict[str, int], ...]  = tuple(goto)
        self.fail:  Tuple[int, ...]             = tuple(fail)
        self.out:   Tuple[Tuple[int, ...], ...] = tuple(tuple(o) for o in out)
        self.depth: Tuple[int, ...]             = tuple(depth)
        self.pats = tuple(self.pats)
        logger.debug("Built %s automaton: %d patterns, %d states",
                     self.category.name, len(self.pats), len(self.goto))

    def __len__(self) -> int:
        return len(self.goto)

    def _insert(self, goto: List[Dict[str, int]], own: List[int], pat: Pattern) -> None:
        s = 0
        for ch in pat.keyword:
            ch = _fold(ch)
            if ch not in goto[s]:
                goto[s][ch] = len(goto)
                goto.append(dict())
                own.append(-1)
            s = goto[s][ch]
        if own[s] >= 0:
            # same keyword twice: one output, max weight
            if pat.weight > self.pats[own[s]].weight:
                self.pats[own[s]] = pat
            return
        own[s] = len(self.pats)
        self.pats.append(pat)

    @staticmethod
    def _build(goto: List[Dict[str, int]], own: List[int]):
        n = len(goto)
        fail:  List[int]       = [0] * n
        depth: List[int]       = [0] * n
        out:   List[List[int]] = [[pid] if pid >= 0 else [] for pid in own]
        q = deque()
        for _, s in goto[0].items():
            fail[s] = 0
            depth[s] = 1
            q.append(s)
        while q:
            r = q.popleft()
            for ch, s in goto[r].items():
                q.append(s)
                depth[s] = depth[r] + 1
                f = fail[r]
                while f and ch not in goto[f]:
                    f = fail[f]
                fail[s] = goto[f].get(ch, 0)
                # suffix patterns ("alert" inside "bank alert") ride along the failure link
                out[s].extend(out[fail[s]])
        return fail, out, depth

    def finditer(self, text: str) -> Iterator[Match]:
        goto, fail, out, pats = self.goto, self.fail, self.out, self.pats
        s = 0
        for i, ch in enumerate(text):
            ch = _fold(ch)
            while s and ch not in goto[s]:
                s = fail[s]
            s = goto[s].get(ch, 0)
            if out[s]:
                for pid in out[s]:
                    pat = pats[pid]
                    yield Match(pat.keyword, pat.weight, self.category, i + 1 - len(pat.keyword), i + 1)

    def scan(self, text: str) -> List[Match]:
        if not text:
            return []
        return list(self.finditer(text))


def build_automaton(patterns: Iterable[PatternLike], category: Union[Category, str]) -> Aho:
    return Aho(patterns, category)


def scan(automaton: Aho, text: str) -> List[Match]:
    return automaton.scan(text)
