# url_dfa.py
"""
Incremental recognizer for URL-shaped substrings.

An optional protocol is consumed, then the walk moves through
DOMAIN -> PATH -> QUERY one character at a time. An attempt that never reaches
a valid domain is dropped and the walk restarts at the next token start. All
walking state lives in locals of `_attempt`; the recognizer itself only holds
read-only lookup tables.
"""
import logging
import re
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from . import config
from .model import Category, UrlMatch

logger = logging.getLogger(__name__)


class State(Enum):
    DOMAIN = "domain"
    PATH = "path"
    QUERY = "query"

URL_TYPES = {State.DOMAIN: "domain", State.PATH: "path", State.QUERY: "param"}


SUSPICIOUS_TLDS = frozenset(["tk", "ml", "ga", "gq", "cf", "xyz", "top", "click", "online", "site"])
SHORTENERS = frozenset(["bit.ly", "tinyurl.com", "tinyurl", "t.co", "goo.gl", "cutt.ly", "rb.gy", "ow.ly", "is.gd"])
FINANCIAL_BRANDS = ("gcash", "bpi", "bdo", "bank", "paymaya", "metrobank", "unionbank", "security-bank")
SUSPICIOUS_PATHS = ("verify", "login", "secure", "account", "update", "confirm", "auth")
SUSPICIOUS_PARAMS = ("verify", "token", "otp", "confirm", "code", "auth", "validate")

# Official sites; opt in with UrlRecognizer(trusted_domains=TRUSTED_DOMAINS)
TRUSTED_DOMAINS = frozenset([
    # banks
    "bpi.com.ph", "bdo.com.ph", "metrobank.com.ph", "unionbank.com", "securitybank.com.ph",
    "landbank.com.ph", "pnb.com.ph", "rcbc.com.ph",
    # e-wallets
    "gcash.com", "paymaya.com", "coins.ph", "grab.com", "grabpay.ph",
    # government
    "bsp.gov.ph", "bir.gov.ph", "sss.gov.ph", "philhealth.gov.ph", "pagibigfund.gov.ph",
    # telcos
    "smart.com.ph", "globe.com.ph", "pldt.com.ph", "dito.ph",
])

PROTOCOL_PAT = re.compile(r"https?://", re.IGNORECASE)
URL_CHAR_PAT = re.compile(r"[a-z0-9.\-_~/?#@!$&'()*+,;=%]", re.IGNORECASE)
IPV4_PAT     = re.compile(r"\d{1,3}(?:\.\d{1,3}){3}")
PATH_PAT     = re.compile(r"/(?:%s)(?:[/?#]|$)" % "|".join(SUSPICIOUS_PATHS), re.IGNORECASE)
PARAM_PAT    = re.compile(r"[?&](?:%s)=" % "|".join(SUSPICIOUS_PARAMS), re.IGNORECASE)

STOP_CHARS = set("<>\"']")
TRAILING_PUNCT = ".,!?;:"
CLOSERS = {")": "(", "]": "["}


def _is_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()

def _inside_token(text: str, i: int) -> bool:
    prev = text[i - 1]
    if _is_alnum(prev):
        return True
    if i < 2:
        return False
    # "gcash-ph" continues a token, a leading "-" bullet does not
    if prev == "-":
        return _is_alnum(text[i - 2])
    return prev == "." and (_is_alnum(text[i - 2]) or text[i - 2] == "-")

def _is_url_char(ch: str) -> bool:
    return ch not in STOP_CHARS and not ch.isspace() and bool(URL_CHAR_PAT.fullmatch(ch))

def _trim_end(text: str, start: int, end: int, floor: int) -> int:
    """Drop sentence punctuation and unbalanced closing brackets from the tail."""
    opens  = {c: text.count(o, start, end) for c, o in CLOSERS.items()}
    closes = {c: text.count(c, start, end) for c in CLOSERS}
    while end > floor:
        ch = text[end - 1]
        if ch in TRAILING_PUNCT:
            end -= 1
        elif ch in CLOSERS and closes[ch] > opens[ch]:
            closes[ch] -= 1
            end -= 1
        else:
            break
    return end

def valid_domain(host: str) -> bool:
    """>=2 labels, alphanumeric TLD of length >=2 with a letter; bare digits only as a dotted quad."""
    if IPV4_PAT.fullmatch(host):
        return True
    labels = host.split(".")
    if len(labels) < 2 or not all(labels):
        return False
    tld = labels[-1]
    if len(tld) < 2 or not all(_is_alnum(c) for c in tld) or not any(c.isalpha() for c in tld):
        return False
    return any(any(c.isalpha() for c in lab) for lab in labels)


class _HostWalk:
    """
    Running label summary of a host being read left to right.

    `valid()` gives the same answer as `valid_domain` on the host read so far,
    in constant time, so the DOMAIN walk stays linear on long dotted runs.
    """
    __slots__ = ("labels", "empty_label", "octets_ok", "cur_len", "cur_digits", "cur_alpha", "cur_hyphen")

    def __init__(self):
        self.labels = 1
        self.empty_label = False
        self.octets_ok = True     # every finished label is 1-3 digits
        self.cur_len = self.cur_digits = 0
        self.cur_alpha = self.cur_hyphen = False

    def feed(self, ch: str) -> None:
        if ch == ".":
            if not self.cur_len:
                self.empty_label = True
            self.octets_ok = self.octets_ok and 0 < self.cur_len == self.cur_digits <= 3
            self.labels += 1
            self.cur_len = self.cur_digits = 0
            self.cur_alpha = self.cur_hyphen = False
            return
        self.cur_len += 1
        if ch == "-":
            self.cur_hyphen = True
        elif ch.isdigit():
            self.cur_digits += 1
        else:
            self.cur_alpha = True

    def is_quad(self) -> bool:
        return self.octets_ok and self.labels == 4 and 0 < self.cur_len == self.cur_digits <= 3

    def valid(self) -> bool:
        if self.is_quad():
            return True
        # the current label is the TLD
        return (self.labels >= 2 and not self.empty_label and self.cur_len >= 2
                and not self.cur_hyphen and self.cur_alpha)


def _longest_non_overlapping(hits: Sequence[UrlMatch]) -> List[UrlMatch]:
    """Prefer earlier, then longer spans; drop anything overlapping a kept span."""
    hits = sorted(hits, key=lambda h: (h.start, -(h.end - h.start)))
    out, cur_end = [], -1
    for h in hits:
        if h.start >= cur_end:
            out.append(h)
            cur_end = h.end
    return out


class UrlRecognizer:

    def __init__(self,
                 shorteners: Iterable[str] = SHORTENERS,
                 suspicious_tlds: Iterable[str] = SUSPICIOUS_TLDS,
                 financial_brands: Iterable[str] = FINANCIAL_BRANDS,
                 weights: Optional[dict] = None,
                 base_weight: float = config.URL_BASE_WEIGHT,
                 trusted_domains: Iterable[str] = ()):
        self.shorteners: FrozenSet[str] = frozenset(s.lower() for s in shorteners)
        self.suspicious_tlds: FrozenSet[str] = frozenset(t.lower().lstrip(".") for t in suspicious_tlds)
        self.financial_brands: Tuple[str, ...] = tuple(b.lower() for b in financial_brands)
        self.weights = dict(config.URL_WEIGHTS, **(weights or {}))
        self.base_weight = base_weight
        self.trusted_domains: FrozenSet[str] = frozenset(d.lower() for d in trusted_domains)

    # ---- walking ---------------------------------------------------------------
    def _attempt(self, text: str, start: int) -> Optional[Tuple[int, str, int, int, str]]:
        """Return (end, protocol, host_start, host_end, url_type) or None."""
        n = len(text)
        i = start
        protocol = ""
        url_type = "domain"

        m = PROTOCOL_PAT.match(text, i)
        if m:
            protocol = m.group(0).lower()
            url_type = "protocol"
            i = m.end()
            if i >= n or not _is_alnum(text[i]):
                return None
        elif not _is_alnum(text[i]):
            return None
        elif text[i].isdigit():
            url_type = "ip"

        # DOMAIN: remember the last position where the host was valid
        state = State.DOMAIN
        host_start = i
        accept, accept_quad = -1, False
        walk = _HostWalk()
        while i < n and (_is_alnum(text[i]) or text[i] in ".-"):
            walk.feed(text[i])
            i += 1
            if _is_alnum(text[i - 1]) and (i == n or not _is_alnum(text[i])) and walk.valid():
                accept, accept_quad = i, walk.is_quad()
        if accept < 0:
            return None
        if accept_quad:
            if accept != i:
                # 1.2.3.4.5 is not an address
                return None
            url_type = "ip"
        elif url_type == "ip":
            url_type = "domain"

        end = accept
        if accept == i and i < n and text[i] in "/?":
            state = State.PATH if text[i] == "/" else State.QUERY
            while i < n and _is_url_char(text[i]):
                if text[i] == "?" and state is State.PATH:
                    state = State.QUERY
                i += 1
            end = _trim_end(text, start, i, accept)
        if url_type == "domain":
            url_type = URL_TYPES[state]
        return end, protocol, host_start, accept, url_type

    # ---- weighting -------------------------------------------------------------
    def characteristics(self, url: str, protocol: str, host: str) -> Tuple[str, ...]:
        url_l, host_l = url.lower(), host.lower()
        found = []
        if IPV4_PAT.fullmatch(host_l):
            found.append("ip_address")
        if protocol == "http://" and any(b in url_l for b in self.financial_brands):
            found.append("http_financial")
        if self._is_shortener(host_l):
            found.append("url_shortener")
        if host_l.rsplit(".", 1)[-1] in self.suspicious_tlds:
            found.append("suspicious_tld")
        if PARAM_PAT.search(url_l):
            found.append("suspicious_param")
        if PATH_PAT.search(url_l):
            found.append("suspicious_path")
        if protocol == "http://":
            found.append("plain_http")
        return tuple(found)

    def _is_shortener(self, host: str) -> bool:
        if host.startswith("www."):
            host = host[4:]
        return any(host == s or host.endswith("." + s) for s in self.shorteners)

    def is_trusted(self, host: str) -> bool:
        """Host is a trusted domain or one of its subdomains."""
        host = host.lower()
        return any(host == d or host.endswith("." + d) for d in self.trusted_domains)

    def weigh(self, characteristics: Iterable[str]) -> float:
        w = self.base_weight
        for c in characteristics:
            w = max(w, self.weights.get(c, 0.0))
        return round(w, 2)

    # ---- public ----------------------------------------------------------------
    def scan(self, text: str) -> List[UrlMatch]:
        if not text:
            return []
        hits: List[UrlMatch] = []
        n, i = len(text), 0
        while i < n:
            # attempts begin at token starts only
            if i and _inside_token(text, i):
                i += 1
                continue
            res = self._attempt(text, i)
            if res is None:
                i += 1
                continue
            end, protocol, h0, h1, url_type = res
            if self.is_trusted(text[h0:h1]):
                i = end
                continue
            url = text[i:end]
            chars = self.characteristics(url, protocol, text[h0:h1])
            shown = url[:config.URL_DISPLAY_CHARS] + ("..." if len(url) > config.URL_DISPLAY_CHARS else "")
            hits.append(UrlMatch(shown, self.weigh(chars), Category.URL, i, end,
                                 url_type=url_type, characteristics=chars))
            i = end
        kept = _longest_non_overlapping(hits)
        if kept:
            logger.debug("URL recognizer kept %d of %d candidates", len(kept), len(hits))
        return kept
