from __future__ import annotations

import re
import textwrap
from typing import Dict, List, Optional, Tuple

from .model import Op, Program


DIALOGUE_QUOTE_RE = re.compile(r"[「“](.*?)[」”]$")
QUOTES = ('"', '“', '”', '「', '」')


def _strip_comments(line: str) -> str:
    # Remove trailing comments starting with #, but not inside quotes
    in_quote = False
    buf: List[str] = []
    for ch in line:
        if ch in QUOTES:
            in_quote = not in_quote
        if ch == '#' and not in_quote:
            break
        buf.append(ch)
    return ''.join(buf).rstrip()


def _collect_block(lines: List[str], start: int) -> Tuple[List[str], int]:
    """Collect the indented body of a multi-line SCRIPT directive.

    Returns the raw block lines and the index of the first line after it.
    """
    block: List[str] = []
    j = start
    while j < len(lines):
        raw = lines[j]
        if raw.lstrip().startswith(('>', '*', '?')):
            break
        if raw.strip() == '' or raw.startswith((' ', '\t')):
            block.append(raw)
            j += 1
            continue
        break
    return block, j


def _parse_command(body: str, lines: List[str], idx: int) -> Tuple[Optional[Op], int]:
    name, *rest = body.split(None, 1)
    args = rest[0] if rest else ""
    if name.upper() == 'SCRIPT' and args.strip() == '':
        block, nxt = _collect_block(lines, idx + 1)
        # trailing blank lines are not part of the statement's span
        last = idx
        for k, raw in enumerate(block):
            if raw.strip():
                last = idx + 1 + k
        code = textwrap.dedent("\n".join(block)).strip("\n")
        if not code:
            return None, nxt
        return Op("script", {"code": code, "line": idx + 1, "end_line": last + 1}), nxt
    if name.upper() == 'SCRIPT':
        return Op("script", {"code": args, "line": idx + 1}), idx + 1
    return Op("command", {"name": name, "args": args, "line": idx + 1}), idx + 1


def _parse_choice(stripped: str, line: int) -> Op:
    # ? text -> target
    try:
        q, arrow = stripped[1:].split('->', 1)
    except ValueError:
        return Op("narration", {"text": stripped, "line": line})
    return Op("choice", {"text": q.strip(), "target": arrow.strip(), "line": line})


def _parse_text(stripped: str, line: int) -> Op:
    # Leading ':' forces narration
    if stripped.startswith(':'):
        return Op("narration", {"text": stripped[1:].strip(), "line": line})
    parts = stripped.split(None, 1)
    if len(parts) == 2:
        left, right = parts
        m = DIALOGUE_QUOTE_RE.search(right)
        if m:
            return _dialogue(left, m.group(1), line)
    if ':' in stripped:
        a, t = stripped.split(':', 1)
        return _dialogue(a.strip(), t.strip(), line)
    return Op("narration", {"text": stripped, "line": line})


def _dialogue(left: str, text: str, line: int) -> Op:
    actor, alias, emotion, effect = _parse_actor_left(left)
    return Op("dialogue", {
        "actor": actor,
        "alias": alias,
        "emotion": emotion,
        "effect": effect,
        "text": text,
        "line": line,
    })


def parse_script(source: str) -> Program:
    """Parse VNS source into a flat op list.

    Every op payload carries its 1-based source ``line``; multi-line
    statements also carry ``end_line``.
    """
    ops: List[Op] = []
    labels: Dict[str, int] = {}
    lines = source.splitlines()
    i = 0

    while i < len(lines):
        idx = i
        stripped = _strip_comments(lines[i]).strip()
        if not stripped:
            i += 1
            continue
        # Priority: command > label/choice > dialogue > narration
        if stripped.startswith('♪'):
            body = stripped[1:].strip()
            if (body.startswith('「') and body.endswith('」')) or (body.startswith('“') and body.endswith('”')):
                body = body[1:-1].strip()
            ops.append(Op("command", {"name": "BGM", "args": body, "line": idx + 1}))
            i += 1
            continue
        if stripped.startswith('>'):
            body = stripped[1:].strip()
            if not body:
                ops.append(Op("command", {"name": "", "args": "", "line": idx + 1}))
                i += 1
                continue
            op, i = _parse_command(body, lines, idx)
            if op is not None:
                ops.append(op)
            continue
        if stripped.startswith('*'):
            label = stripped[1:].strip()
            labels[label] = len(ops)
            ops.append(Op("label", {"name": label, "line": idx + 1}))
            i += 1
            continue
        if stripped.startswith('?'):
            ops.append(_parse_choice(stripped, idx + 1))
            i += 1
            continue
        ops.append(_parse_text(stripped, idx + 1))
        i += 1

    return Program(ops, labels)


def _parse_actor_left(s: str) -> Tuple[str, str | None, str | None, str | None]:
    # "张鹏|学长(happy)[gray]" -> actor, alias, emotion, effect
    alias = None
    actor = s
    if '|' in s:
        a, b = s.split('|', 1)
        actor = a.strip()
        alias = re.sub(r"[(\[].*$", "", b).strip() or None
    m = re.search(r"\(([^)]+)\)", s)
    emotion = m.group(1).strip() if m else None
    m2 = re.search(r"\[([^\]]+)\]", s)
    effect = m2.group(1).strip() if m2 else None
    actor = re.sub(r"(\|.*)$", "", actor)
    actor = re.sub(r"\(.*\)", "", actor)
    actor = re.sub(r"\[.*\]", "", actor)
    return actor.strip(), alias, emotion, effect
