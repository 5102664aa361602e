"""
Tolerant JSON Extractor
=======================
Model completions are asked for strict JSON but regularly come back wrapped
in prose, fenced in Markdown, single-quoted, or cut off by max_tokens.

Strategies, tried in order:
  strict  → json.loads on the whole text
  braces  → json.loads on text[first "{" : last "}"]
  repair  → re-tokenise leniently (trailing commas, bare keys, single
            quotes, Python literals, missing commas, truncated tails)
            and json.loads the rebuilt text

If all three fail, MalformedModelOutput is raised with the raw text
attached. Whether that degrades or becomes a 502 is up to the caller.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from ..errors import MalformedModelOutput

logger = logging.getLogger(__name__)

STRICT = "strict"
BRACES = "braces"
REPAIR = "repair"

_FENCE = re.compile(r"```[a-zA-Z]*")
_IDENT = re.compile(r"[A-Za-z_$][\w$-]*")
_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_JSON_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][-+]?\d+)?")
_LITERALS = {
    "true": "true",
    "false": "false",
    "null": "null",
    "True": "true",
    "False": "false",
    "None": "null",
}
_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t"}
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")


@dataclass
class Extraction:
    value: Any
    strategy: str


def parse_strict(text: str) -> Any:
    return json.loads(text)


def parse_braces(text: str) -> Any:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise ValueError("no brace-delimited object in text")
    return json.loads(text[start:end + 1])


def parse_repaired(text: str) -> Any:
    return json.loads(repair_json(text))


STRATEGIES = (
    (STRICT, parse_strict),
    (BRACES, parse_braces),
    (REPAIR, parse_repaired),
)


def extract(text: str) -> Extraction:
    """Run the strategies in order and report which one succeeded."""
    raw = text or ""
    for name, strategy in STRATEGIES:
        try:
            value = strategy(raw)
        except ValueError:
            continue
        if name != STRICT:
            logger.debug("[extract] recovered JSON via %s", name)
        return Extraction(value=value, strategy=name)

    logger.warning("[extract] no strategy recovered JSON from: %r", raw[:200])
    raise MalformedModelOutput(raw)


def extract_json(text: str) -> Any:
    return extract(text).value


# ── Repair pass ──────────────────────────────────────────────────────────────

def repair_json(text: str) -> str:
    """
    Rebuild the first JSON-like structure in `text` as strict JSON.

    Scanning starts at the first "{" (or "[" when there is no object) and
    stops once that outermost structure closes, so trailing prose is ignored.
    Anything still open at end of input is closed.
    """
    text = _FENCE.sub("", text)
    start = text.find("{")
    if start < 0:
        start = text.find("[")
    if start < 0:
        raise ValueError("no JSON structure found")

    out: list[str] = []
    stack: list[str] = []
    i, n = start, len(text)

    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
        elif ch in "{[":
            _emit_value(out, ch)
            stack.append(ch)
            i += 1
        elif ch in "}]":
            i += 1
            opener = "{" if ch == "}" else "["
            if opener not in stack:
                continue
            while stack:
                _trim_dangling(out, stack)
                top = stack.pop()
                out.append("}" if top == "{" else "]")
                if top == opener:
                    break
            if not stack:
                break
        elif ch == ",":
            if out and out[-1] not in "{[,:":
                out.append(",")
            i += 1
        elif ch == ":":
            if out and out[-1] not in "{[,:":
                out.append(":")
            i += 1
        elif ch in "\"'":
            token, i = _read_string(text, i)
            _emit_value(out, token)
        elif ch.isdigit() or (ch in "-+." and _NUMBER.match(text, i)):
            match = _NUMBER.match(text, i)
            _emit_value(out, _normalize_number(match.group()))
            i = match.end()
        else:
            match = _IDENT.match(text, i)
            if not match:
                i += 1
                continue
            word = match.group()
            if word in _LITERALS and not _expecting_key(out, stack):
                _emit_value(out, _LITERALS[word])
            else:
                _emit_value(out, json.dumps(word))
            i = match.end()

    while stack:
        _trim_dangling(out, stack)
        out.append("}" if stack.pop() == "{" else "]")

    return "".join(out)


def _expecting_key(out: list[str], stack: list[str]) -> bool:
    return bool(stack) and stack[-1] == "{" and (not out or out[-1] in "{,")


def _emit_value(out: list[str], token: str) -> None:
    # Two adjacent values/keys are missing a separating comma
    if out and out[-1] not in "{[,:":
        out.append(",")
    out.append(token)


def _trim_dangling(out: list[str], stack: list[str]) -> None:
    """Drop tokens that cannot legally precede the closer of stack[-1]."""
    while out:
        last = out[-1]
        if last == ",":
            out.pop()
        elif last == ":":
            out.append("null")
            return
        elif stack[-1] == "{" and last.startswith('"') and len(out) >= 2 and out[-2] in "{,":
            # A key with no value yet
            out.pop()
        else:
            return


def _read_string(text: str, i: int) -> tuple[str, int]:
    """Read a single- or double-quoted string starting at text[i].

    Returns the string re-encoded as a JSON literal and the index just past
    the closing quote (or end of text if the string was truncated)."""
    quote = text[i]
    buf = []
    j, n = i + 1, len(text)
    while j < n:
        c = text[j]
        if c == "\\" and j + 1 < n:
            nxt = text[j + 1]
            if nxt in _ESCAPES:
                buf.append(_ESCAPES[nxt])
                j += 2
            elif nxt == "u" and _HEX4.fullmatch(text, j + 2, j + 6):
                buf.append(chr(int(text[j + 2:j + 6], 16)))
                j += 6
            else:
                buf.append(nxt)
                j += 2
        elif c == quote:
            return json.dumps("".join(buf)), j + 1
        else:
            buf.append(c)
            j += 1
    return json.dumps("".join(buf)), n


def _normalize_number(raw: str) -> str:
    raw = raw.lstrip("+")
    if _JSON_NUMBER.fullmatch(raw):
        return raw
    value = float(raw)
    if value.is_integer() and not any(c in raw for c in ".eE"):
        return str(int(value))
    return repr(value)
