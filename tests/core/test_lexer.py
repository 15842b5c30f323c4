# tests/core/test_lexer.py
import pytest

from cmdlang_shell.core.command_registry import CommandRegistry
from cmdlang_shell.core.errors import LexError
from cmdlang_shell.core.lexer import TokenKind, Tokenizer, lex, tokenize
from cmdlang_shell.model import CommandDefinition


@pytest.fixture
def registry():
    """Een registry met alleen 'print' (alias 'echo')."""
    reg = CommandRegistry()
    reg.register(CommandDefinition(
        name="print", callback=lambda kwargs, ctx: kwargs["msg"],
        args=["-::m:msg::1::The message"], aliases=["echo"],
    ))
    return reg


def kinds(tokens):
    return [t.kind for t in tokens]


def test_tokenize_keeps_trailing_blanks():
    """De ruwe fragmenten behouden de spaties erna (nodig voor offsets)."""
    assert tokenize("print -m 'Hello world'") == ["print ", "-m ", "'Hello world'"]


def test_tokenize_is_restartable():
    """Twee keer dezelfde invoer tokenizen geeft exact hetzelfde resultaat."""
    data = "print -m hi; $x = 5 // commentaar"
    assert tokenize(data) == tokenize(data)


def test_tokenize_strips_comments():
    """Commentaar na '//' wordt genegeerd, per regel."""
    fragments = [text.strip(" ") for text in tokenize("print hi // dit niet\nprint bye")]
    assert fragments == ["print", "hi", "\n", "print", "bye"]


def test_tokenizer_without_comment_stripping():
    """Zonder commentaar-patroon blijft '//' gewoon invoer."""
    tokenizer = Tokenizer(comment_pattern=None)
    assert tokenizer.strip_comments("a // b") == "a // b"


def test_lex_command_with_flag_and_string(registry):
    """Commando, korte vlag en een string met aanhalingstekens."""
    tokens = lex("print -m 'This is a test!'", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.ARGUMENT_SHORT, TokenKind.STRING]
    assert tokens[1].value == "m"
    assert tokens[2].value == "This is a test!"
    assert tokens[2].raw == "'This is a test!'"


def test_lex_offsets_follow_raw_slices(registry):
    """Offsets tellen de ruwe slices (inclusief spaties)."""
    tokens = lex("print  -m hi", registered_cmds=registry)
    assert [(t.start, t.end) for t in tokens] == [(0, 7), (7, 10), (10, 12)]
    assert all(t.start < t.end for t in tokens)


def test_lex_long_argument_and_number(registry):
    tokens = lex("print --msg 12.5", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.ARGUMENT_LONG, TokenKind.NUMBER]
    assert tokens[1].value == "msg"


def test_lex_operators_and_delimiters(registry):
    """'+', '=' en ';' krijgen hun eigen soort."""
    tokens = lex("$x = 'a' + 'b'; print $x", registered_cmds=registry)
    assert kinds(tokens) == [
        TokenKind.NAME, TokenKind.ASSIGNMENT, TokenKind.STRING, TokenKind.BINARY_ADD,
        TokenKind.STRING, TokenKind.DELIMITER, TokenKind.NAME, TokenKind.NAME,
    ]
    assert tokens[0].value == "x"


def test_lex_array_versus_data_attribute(registry):
    """Een los '[...]' is een array, direct na een naam is het attribuut-toegang."""
    tokens = lex("print [1,2] $x[0]", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.ARRAY, TokenKind.NAME, TokenKind.DATA_ATTRIBUTE]
    assert tokens[1].value == "[1,2]"
    assert tokens[3].value == "0"


def test_lex_dictionary_and_sub_eval(registry):
    tokens = lex("print {\"a\": 1} $(print hi) ${print bye}", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.DICTIONARY, TokenKind.SUB_EVAL, TokenKind.SUB_EVAL]
    assert tokens[2].value == "print hi"
    assert tokens[3].value == "print bye"


def test_lex_simple_json_string(registry):
    """Een string met key=value paren wordt DICTIONARY_SIMPLE."""
    tokens = lex("print \"a=1 b='two words'\"", registered_cmds=registry)
    assert tokens[1].kind is TokenKind.DICTIONARY_SIMPLE
    assert tokens[1].value == "a=1 b='two words'"


def test_lex_names_versus_strings(registry):
    """Alleen eerste woorden, bekende variabelen en commando's zijn namen."""
    tokens = lex("print hello known echo", registered_names=["known"], registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.STRING, TokenKind.NAME, TokenKind.NAME]


def test_lex_first_word_of_each_statement_is_a_name(registry):
    tokens = lex("foo; bar baz", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.DELIMITER, TokenKind.NAME, TokenKind.STRING]


def test_lex_unbalanced_quote_raises(registry):
    """Een open aanhalingsteken geeft een LexError met positie."""
    with pytest.raises(LexError) as exc_info:
        lex("print 'abc", registered_cmds=registry)
    assert exc_info.value.start == 6


def test_lex_negative_number_is_not_an_argument(registry):
    tokens = lex("print -1 -m", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.NUMBER, TokenKind.ARGUMENT_SHORT]
    assert tokens[1].value == "-1"


def test_lex_nested_sub_eval_of_any_depth(registry):
    """Een $(...) mag willekeurig diep genest worden; alleen de buitenste is een token."""
    tokens = lex("print $(print $(print $(print hi))) end", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.SUB_EVAL, TokenKind.STRING]
    assert tokens[1].value == "print $(print $(print hi))"
    assert tokens[1].raw == "$(print $(print $(print hi))) "


def test_lex_sub_eval_skips_quoted_parentheses(registry):
    """Haakjes binnen aanhalingstekens tellen niet mee."""
    tokens = lex("print $(print ')' \"(\")", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.NAME, TokenKind.SUB_EVAL]
    assert tokens[1].value == "print ')' \"(\""


def test_lex_unclosed_sub_eval_raises(registry):
    """Een open $( wordt niet stilzwijgend weggelaten."""
    with pytest.raises(LexError) as exc_info:
        lex("$x = $(print hi", registered_cmds=registry)
    assert exc_info.value.start == 5


def test_lex_stray_parenthesis_raises(registry):
    with pytest.raises(LexError) as exc_info:
        lex("print hi)", registered_cmds=registry)
    assert exc_info.value.start == 8


def test_lex_backtick_string(registry):
    """Backticks zijn net als ' en \" een string."""
    tokens = lex("`some text`; print `a b`", registered_cmds=registry)
    assert kinds(tokens) == [TokenKind.STRING, TokenKind.DELIMITER, TokenKind.NAME, TokenKind.STRING]
    assert tokens[0].value == "some text"
    assert tokens[3].value == "a b"
