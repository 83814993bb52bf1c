from pygments.token import Name, Operator, String

from histsearch.highlight import MATCH_STYLE, HistoryTheme, ShellCommandLexer, highlight_command


def tokens(command):
    return [(token, value) for token, value in ShellCommandLexer().get_tokens(command) if value.strip()]


def test_command_flags_and_arguments():
    toks = tokens("git commit --amend file.txt")
    assert toks[0] == (Name.Function, "git")
    assert (Name.Argument, "commit") in toks
    assert (Name.Attribute, "--amend") in toks


def test_pipeline_resets_to_command():
    toks = tokens("cat log | grep -i error")
    assert (Operator, "|") in toks
    assert (Name.Function, "grep") in toks


def test_strings_and_variables():
    toks = tokens("echo \"$HOME\" 'x'")
    assert toks[0] == (Name.Builtin, "echo")
    assert (String.Double, '"$HOME"') in toks
    assert (String.Single, "'x'") in toks


def test_theme_falls_back_to_parent_token():
    assert HistoryTheme.get_style_for_token(String.Heredoc) == HistoryTheme.styles[String]


def test_highlight_preserves_text():
    text = highlight_command("ls -la /tmp")
    assert text.plain == "ls -la /tmp"


def test_highlight_marks_filter_matches_case_insensitively():
    text = highlight_command("ls -la /TMP", ["tmp", ""])
    matched = [text.plain[span.start : span.end] for span in text.spans if span.style == MATCH_STYLE]
    assert matched == ["TMP"]


def test_control_characters_stripped():
    assert highlight_command("echo \x1b[31mred").plain == "echo [31mred"


def test_highlight_is_a_single_line():
    text = highlight_command("git log --oneline | head", ["log"])
    assert "\n" not in text.plain
    assert text.plain == "git log --oneline | head"
