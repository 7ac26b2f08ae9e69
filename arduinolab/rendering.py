"""
Comment content renderer.

Turns a raw comment string into a list of render nodes that the UI maps to
markup. Supported subset:

    ```code```      fenced code block (never style-parsed)
    [label](url)    link (label kept literal)
    **text**        bold
    __text__        underline
    *text*          italic

Fences are resolved first. Each prose segment between fences is tokenized
and parsed with the priority links > bold > underline > italic; every level
pairs its markers across the whole segment before the next level looks at
what is left. Unbalanced markers and an unterminated fence stay literal
text, so every input has an output.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple, Union

FENCE = '```'

LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')
MARK_PATTERN = re.compile(r'\*\*|__|\*')


@dataclass
class TextRun:
    type: ClassVar[str] = 'text'
    text: str


@dataclass
class Bold:
    type: ClassVar[str] = 'bold'
    children: list = field(default_factory=list)


@dataclass
class Italic:
    type: ClassVar[str] = 'italic'
    children: list = field(default_factory=list)


@dataclass
class Underline:
    type: ClassVar[str] = 'underline'
    children: list = field(default_factory=list)


@dataclass
class Link:
    type: ClassVar[str] = 'link'
    label: str
    url: str


@dataclass
class CodeBlock:
    type: ClassVar[str] = 'code_block'
    code: str


RenderNode = Union[TextRun, Bold, Italic, Underline, Link, CodeBlock]


class TokenKind(Enum):
    TEXT = 'text'
    BOLD_MARK = '**'
    UNDERLINE_MARK = '__'
    ITALIC_MARK = '*'
    LINK = 'link'


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    url: Optional[str] = None


_MARK_KINDS = {
    '**': TokenKind.BOLD_MARK,
    '__': TokenKind.UNDERLINE_MARK,
    '*': TokenKind.ITALIC_MARK,
}

# Style levels in priority order; the children of a level are parsed with
# the levels after it only.
_STYLE_LEVELS = (
    (TokenKind.BOLD_MARK, Bold),
    (TokenKind.UNDERLINE_MARK, Underline),
    (TokenKind.ITALIC_MARK, Italic),
)


def split_fences(content: str) -> Iterator[Tuple[bool, str]]:
    """Yield ``(is_code, text)`` segments in source order.

    Fences pair left to right. A trailing fence without a partner is left
    in the last prose segment, backticks included.
    """
    pos = 0
    while True:
        open_at = content.find(FENCE, pos)
        if open_at == -1:
            break
        close_at = content.find(FENCE, open_at + len(FENCE))
        if close_at == -1:
            break
        yield False, content[pos:open_at]
        yield True, content[open_at + len(FENCE):close_at]
        pos = close_at + len(FENCE)
    yield False, content[pos:]


def _mark_tokens(text: str) -> Iterator[Token]:
    pos = 0
    for match in MARK_PATTERN.finditer(text):
        if match.start() > pos:
            yield Token(TokenKind.TEXT, text[pos:match.start()])
        yield Token(_MARK_KINDS[match.group()], match.group())
        pos = match.end()
    if pos < len(text):
        yield Token(TokenKind.TEXT, text[pos:])


def tokenize(text: str) -> List[Token]:
    """Tokenize one prose segment (no fences)"""
    tokens = []
    pos = 0
    for match in LINK_PATTERN.finditer(text):
        tokens.extend(_mark_tokens(text[pos:match.start()]))
        tokens.append(Token(TokenKind.LINK, match.group(1), match.group(2)))
        pos = match.end()
    tokens.extend(_mark_tokens(text[pos:]))
    return tokens


def _merge_text(nodes: List[RenderNode]) -> List[RenderNode]:
    merged = []
    for node in nodes:
        if isinstance(node, TextRun):
            if not node.text:
                continue
            if merged and isinstance(merged[-1], TextRun):
                merged[-1] = TextRun(merged[-1].text + node.text)
                continue
        merged.append(node)
    return merged


def _find_close(tokens: List[Token], start: int, kind: TokenKind) -> Optional[int]:
    # Markers do not pair across a line break, and an empty span is not a style.
    for index in range(start + 1, len(tokens)):
        token = tokens[index]
        if token.kind is kind:
            return index if index > start + 1 else None
        if token.kind is TokenKind.TEXT and '\n' in token.text:
            return None
    return None


def _split_bold_marks(tokens: List[Token]) -> List[Token]:
    # A '**' left over after the bold level is two italic markers.
    result = []
    for token in tokens:
        if token.kind is TokenKind.BOLD_MARK:
            result.append(Token(TokenKind.ITALIC_MARK, '*'))
            result.append(Token(TokenKind.ITALIC_MARK, '*'))
        else:
            result.append(token)
    return result


def _parse_styles(tokens: List[Token], level: int = 0) -> List[RenderNode]:
    if level == len(_STYLE_LEVELS):
        return [TextRun(token.text) for token in tokens]

    kind, node_class = _STYLE_LEVELS[level]
    if kind is TokenKind.ITALIC_MARK:
        tokens = _split_bold_marks(tokens)

    nodes: List[RenderNode] = []
    pending: List[Token] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token.kind is kind:
            close = _find_close(tokens, index, kind)
            if close is not None:
                nodes.extend(_parse_styles(pending, level + 1))
                pending = []
                children = _merge_text(_parse_styles(tokens[index + 1:close], level + 1))
                nodes.append(node_class(children))
                index = close + 1
                continue
        pending.append(token)
        index += 1
    nodes.extend(_parse_styles(pending, level + 1))
    return nodes


def parse_prose(tokens: List[Token]) -> List[RenderNode]:
    """Links first; the text around each link is style-parsed on its own"""
    nodes: List[RenderNode] = []
    run: List[Token] = []
    for token in tokens:
        if token.kind is TokenKind.LINK:
            nodes.extend(_parse_styles(run))
            run = []
            nodes.append(Link(token.text, token.url))
        else:
            run.append(token)
    nodes.extend(_parse_styles(run))
    return _merge_text(nodes)


def render(content: str) -> List[RenderNode]:
    """Render a comment body into top-level nodes; ``[]`` for empty input"""
    if not content:
        return []
    nodes: List[RenderNode] = []
    for is_code, text in split_fences(content):
        if is_code:
            nodes.append(CodeBlock(text.strip()))
        elif text:
            nodes.extend(parse_prose(tokenize(text)))
    return nodes


def to_dict(node: RenderNode) -> Dict:
    """JSON-ready form of a node, e.g. ``{"type": "bold", "children": [...]}``"""
    if isinstance(node, TextRun):
        return {'type': node.type, 'text': node.text}
    if isinstance(node, Link):
        return {'type': node.type, 'label': node.label, 'url': node.url}
    if isinstance(node, CodeBlock):
        return {'type': node.type, 'code': node.code}
    return {'type': node.type, 'children': [to_dict(child) for child in node.children]}


def render_to_dicts(content: str) -> List[Dict]:
    return [to_dict(node) for node in render(content)]
