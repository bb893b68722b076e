"""XPath → CSS selector translation.

Rule files describe the interesting part of a page with an XPath expression,
service records store CSS selectors. Only the location-path subset that rule
files actually use is supported:

- `/` and `//` axes, element names and `*`
- predicates on attributes (`@a`, `@a='v'`, `contains(@a,'v')`,
  `starts-with(@a,'v')`) combined with `and`
- positional predicates (`[2]`, `[last()]`)
- unions with `|`

Anything else (text(), parent steps, functions on text, ...) raises
`InvalidSelector` rather than producing a selector matching something else.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from docimport.errors import InvalidSelector


DEFAULT_SELECTOR = "body"

_NAME_RE = re.compile(r"\*|[A-Za-z_][\w\-.]*")
_QUOTED = r"(?:'([^']*)'|\"([^\"]*)\")"
_ATTR = r"@([A-Za-z_][\w\-.:]*)"
_PRESENT_RE = re.compile(rf"^{_ATTR}$")
_EQUALS_RE = re.compile(rf"^{_ATTR}\s*=\s*{_QUOTED}$")
_FUNC_RE = re.compile(rf"^(contains|starts-with)\(\s*{_ATTR}\s*,\s*{_QUOTED}\s*\)$")
_INDEX_RE = re.compile(r"^(\d+)$")
_AND_RE = re.compile(r"\s+and\s+")
_UNION_RE = re.compile(r"\|")
_CSS_IDENT_RE = re.compile(r"^-?[A-Za-z_][\w-]*$")


def _css_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _is_ident(value: str) -> bool:
    return bool(_CSS_IDENT_RE.match(value))


def _split_top_level(expr: str, sep: "re.Pattern[str]") -> List[str]:
    """Split on matches of `sep` outside of quotes and brackets."""
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    start = 0
    i = 0
    while i < len(expr):
        ch = expr[i]
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch in "[(":
            depth += 1
        elif ch in "])":
            depth -= 1
        elif depth == 0:
            m = sep.match(expr, i)
            if m and m.end() > i:
                parts.append(expr[start:i])
                start = i = m.end()
                continue
        i += 1
    parts.append(expr[start:])
    return parts


def _predicate_to_css(xpath: str, predicate: str) -> str:
    out = []
    for clause in _split_top_level(predicate.strip(), _AND_RE):
        clause = clause.strip()
        m = _INDEX_RE.match(clause)
        if m:
            out.append(f":nth-of-type({int(m.group(1))})")
            continue
        if clause == "last()":
            out.append(":last-of-type")
            continue
        m = _PRESENT_RE.match(clause)
        if m:
            out.append(f"[{m.group(1)}]")
            continue
        m = _EQUALS_RE.match(clause)
        if m:
            attr = m.group(1)
            value = m.group(2) if m.group(2) is not None else m.group(3)
            if attr == "id" and _is_ident(value):
                out.append(f"#{value}")
            elif attr == "class" and value.split() and all(_is_ident(c) for c in value.split()):
                out.append("".join(f".{c}" for c in value.split()))
            else:
                out.append(f"[{attr}={_css_string(value)}]")
            continue
        m = _FUNC_RE.match(clause)
        if m:
            func, attr = m.group(1), m.group(2)
            value = m.group(3) if m.group(3) is not None else m.group(4)
            if func == "contains" and attr == "class" and _is_ident(value):
                out.append(f".{value}")
            else:
                op = "*=" if func == "contains" else "^="
                out.append(f"[{attr}{op}{_css_string(value)}]")
            continue
        raise InvalidSelector(xpath, f"unsupported predicate [{clause}]")
    return "".join(out)


def _tokenize_path(xpath: str, path: str) -> List[Tuple[str, str]]:
    """Return (axis, step) pairs where axis is '/' or '//'."""
    steps: List[Tuple[str, str]] = []
    i = 0
    n = len(path)
    axis = ""
    while i < n:
        if path.startswith("//", i):
            axis = "//"
            i += 2
        elif path[i] == "/":
            axis = "/"
            i += 1
        start = i
        depth = 0
        quote: Optional[str] = None
        while i < n:
            ch = path[i]
            if quote:
                if ch == quote:
                    quote = None
            elif ch in ("'", '"'):
                quote = ch
            elif ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
            elif ch == "/" and depth == 0:
                break
            i += 1
        step = path[start:i].strip()
        if not step:
            raise InvalidSelector(xpath, "empty location step")
        steps.append((axis, step))
        axis = ""
    return steps


def _closing_bracket(xpath: str, text: str) -> int:
    """Index of the `]` closing the predicate that opens at text[0]."""
    depth = 0
    quote: Optional[str] = None
    for i, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i
    raise InvalidSelector(xpath, "unterminated predicate")


def _step_to_css(xpath: str, step: str) -> str:
    m = _NAME_RE.match(step)
    if not m:
        raise InvalidSelector(xpath, f"unsupported step {step!r}")
    name = m.group(0)
    rest = step[m.end():]
    if rest.startswith("("):
        # node(), text(), ...
        raise InvalidSelector(xpath, f"unsupported step {step!r}")
    preds = []
    while rest:
        if not rest.startswith("["):
            raise InvalidSelector(xpath, f"unexpected {rest!r}")
        end = _closing_bracket(xpath, rest)
        preds.append(_predicate_to_css(xpath, rest[1:end]))
        rest = rest[end + 1:].strip()
    if name == "*" and preds:
        name = ""
    return name + "".join(preds)


def _path_to_css(xpath: str, path: str) -> str:
    out = ""
    for idx, (axis, step) in enumerate(_tokenize_path(xpath, path.strip())):
        css = _step_to_css(xpath, step)
        if idx == 0:
            out = css
        elif axis == "//":
            out += " " + css
        else:
            out += " > " + css
    return out


def xpath_to_css(xpath: str) -> str:
    """Translate an XPath location path into an equivalent CSS selector."""
    expr = (xpath or "").strip()
    if not expr:
        raise InvalidSelector(xpath or "", "empty expression")
    return ", ".join(_path_to_css(expr, part) for part in _split_top_level(expr, _UNION_RE))
