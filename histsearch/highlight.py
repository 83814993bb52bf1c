# ============================================================================
# COMMAND HIGHLIGHTING
# ============================================================================

from __future__ import annotations

import re
from collections.abc import Iterable

from pygments.lexer import RegexLexer, include
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
    Token,
)
from rich.style import Style
from rich.syntax import Syntax, SyntaxTheme
from rich.text import Text as RichText

# Custom token types so Rich and Pygments agree on them
Name.Argument = Token.Name.Argument
Name.Variable.Magic = Token.Name.Variable.Magic


class ShellCommandLexer(RegexLexer):
    """
    Lexer for one-line commands as they appear in bash, zsh and fish history.

    Not a full shell grammar: it only needs to make a results list readable.
    The first word after a separator is the command, flags and arguments follow.
    """

    name = "Shell command"
    aliases = ["shell-command"]
    filenames = []

    tokens = {
        "_common": [
            (r"\\.", String.Escape),
            (r"\$\(", String.Interpol, "substitution"),
            (r"\$\{[^}]*\}", Name.Variable.Magic),
            (r"\$[a-zA-Z0-9_@*#?$!-]+", Name.Variable),
            (r"'[^']*'?", String.Single),
            (r'"(\\.|[^"\\])*"?', String.Double),
            (r"`[^`]*`?", String.Backtick),
        ],
        "root": [
            (r"\s+", Text),
            (r"#.*$", Comment.Single),
            (r"(&&|\|\||;|\||&)", Operator),
            (r"[(){}]", Punctuation),
            (
                r"\b(if|then|else|elif|fi|for|while|until|do|done|case|esac|function"
                r"|begin|end|and|or|not|switch)\b",
                Keyword.Reserved,
            ),
            (
                r"\b(cd|echo|printf|export|set|unset|source|alias|exec|eval|exit|return"
                r"|builtin|command|sudo|time)\b",
                Name.Builtin,
                "arguments",
            ),
            (r"[a-zA-Z_][a-zA-Z0-9_]*=", Name.Variable, "assignment"),
            include("_common"),
            (r"[^\s;&|(){}$'\"`\\]+", Name.Function, "arguments"),
        ],
        "assignment": [
            (r"(?=\s)", Text, "#pop"),
            include("_common"),
            (r"[^\s;&|$'\"`\\]+", String),
            (r"", Text, "#pop"),
        ],
        "arguments": [
            (r"(?=&&|\|\||[;|&)])", Text, "#pop"),
            (r"\s+", Text),
            (r"(?:--?|\+)[a-zA-Z0-9][\w-]*", Name.Attribute),
            (r"[<>]+&?[0-9]*", Operator),
            (r"=", Operator),
            (r"\b[0-9]+\b", Number.Integer),
            include("_common"),
            (r"[^=\s;&|()<>$'\"`\\]+", Name.Argument),
        ],
        "substitution": [
            (r"\)", String.Interpol, "#pop"),
            include("root"),
        ],
    }


class HistoryTheme(SyntaxTheme):
    """Monokai-flavoured colours, tuned to sit on the terminal's own background."""

    _RED = "#ff6188"
    _GREEN = "#a9dc76"
    _YELLOW = "#ffd866"
    _ORANGE = "#fc9867"
    _PURPLE = "#ab9df2"
    _CYAN = "#78dce8"
    _GRAY = "#727072"

    default_style = Style()

    styles = {
        Name.Function: Style(color=_GREEN, bold=True),
        Name.Builtin: Style(color=_CYAN, italic=True),
        Name.Attribute: Style(color=_ORANGE),
        Name.Argument: Style(color=_PURPLE),
        Name.Variable: Style(color=_PURPLE),
        Name.Variable.Magic: Style(color=_PURPLE, bold=True),
        Keyword.Reserved: Style(color=_RED, bold=True),
        Operator: Style(color=_RED),
        Punctuation: Style(),
        Number.Integer: Style(color=_CYAN),
        String: Style(color=_YELLOW),
        String.Single: Style(color=_YELLOW),
        String.Double: Style(color=_YELLOW),
        String.Backtick: Style(color=_YELLOW),
        String.Escape: Style(color=_PURPLE),
        String.Interpol: Style(color=_PURPLE, bold=True),
        Comment.Single: Style(color=_GRAY, italic=True),
        Text: Style(),
    }

    @classmethod
    def get_style_for_token(cls, t):
        # Walk up the token hierarchy so subtypes inherit their parent's colour
        while t not in cls.styles and t.parent is not None:
            t = t.parent
        return cls.styles.get(t, cls.default_style)

    @classmethod
    def get_background_style(cls):
        return Style()


_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

MATCH_STYLE = Style(bold=True, underline=True, color="#fcfcfa", bgcolor="#5b595c")

_LEXER = ShellCommandLexer()
_THEME = HistoryTheme()


def highlight_command(command: str, filters: Iterable[str] = ()) -> RichText:
    """→ Syntax-coloured command with every filter match emphasised"""
    command = _CONTROL_RE.sub("", command)
    syntax = Syntax(command, _LEXER, theme=_THEME, background_color="default")
    text = syntax.highlight(command)
    # the lexer always ends on a newline; a results row must stay one line
    text.remove_suffix("\n")
    words = [f for f in filters if f]
    if words:
        text.highlight_words(words, MATCH_STYLE, case_sensitive=False)
    return text

