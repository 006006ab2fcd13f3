import pytest
from monkey.monkey_lexer import Lexer, Token, TokenType, tokenize

T = TokenType


def kinds(source):
    return [(tok.type, tok.literal) for tok in tokenize(source)]


def test_single_char_tokens():
    assert kinds("=+(){},;") == [
        (T.ASSIGN, "="), (T.PLUS, "+"), (T.LPAREN, "("), (T.RPAREN, ")"),
        (T.LBRACE, "{"), (T.RBRACE, "}"), (T.COMMA, ","), (T.SEMICOLON, ";"),
        (T.EOF, ""),
    ]


def test_full_program():
    source = """let five = 5;
    let ten = 10;

    let add = fn(x, y) {
        x + y;
    };

    let result = add(five, ten);
    !-/*5;
    5 < 10 > 5;

    if (5 < 10) {
        return true;
    } else {
        return false;
    }

    10 == 10;
    10 != 9;
    "foobar"
    "foo bar"
    [1, 2];
    {"foo": "bar"}
    """
    expected = [
        (T.LET, "let"), (T.IDENT, "five"), (T.ASSIGN, "="), (T.INT, "5"), (T.SEMICOLON, ";"),
        (T.LET, "let"), (T.IDENT, "ten"), (T.ASSIGN, "="), (T.INT, "10"), (T.SEMICOLON, ";"),
        (T.LET, "let"), (T.IDENT, "add"), (T.ASSIGN, "="), (T.FUNCTION, "fn"), (T.LPAREN, "("),
        (T.IDENT, "x"), (T.COMMA, ","), (T.IDENT, "y"), (T.RPAREN, ")"), (T.LBRACE, "{"),
        (T.IDENT, "x"), (T.PLUS, "+"), (T.IDENT, "y"), (T.SEMICOLON, ";"),
        (T.RBRACE, "}"), (T.SEMICOLON, ";"),
        (T.LET, "let"), (T.IDENT, "result"), (T.ASSIGN, "="), (T.IDENT, "add"), (T.LPAREN, "("),
        (T.IDENT, "five"), (T.COMMA, ","), (T.IDENT, "ten"), (T.RPAREN, ")"), (T.SEMICOLON, ";"),
        (T.BANG, "!"), (T.MINUS, "-"), (T.SLASH, "/"), (T.ASTERISK, "*"), (T.INT, "5"), (T.SEMICOLON, ";"),
        (T.INT, "5"), (T.LT, "<"), (T.INT, "10"), (T.GT, ">"), (T.INT, "5"), (T.SEMICOLON, ";"),
        (T.IF, "if"), (T.LPAREN, "("), (T.INT, "5"), (T.LT, "<"), (T.INT, "10"), (T.RPAREN, ")"),
        (T.LBRACE, "{"), (T.RETURN, "return"), (T.TRUE, "true"), (T.SEMICOLON, ";"), (T.RBRACE, "}"),
        (T.ELSE, "else"), (T.LBRACE, "{"), (T.RETURN, "return"), (T.FALSE, "false"), (T.SEMICOLON, ";"),
        (T.RBRACE, "}"),
        (T.INT, "10"), (T.EQ, "=="), (T.INT, "10"), (T.SEMICOLON, ";"),
        (T.INT, "10"), (T.NOT_EQ, "!="), (T.INT, "9"), (T.SEMICOLON, ";"),
        (T.STRING, "foobar"),
        (T.STRING, "foo bar"),
        (T.LBRACKET, "["), (T.INT, "1"), (T.COMMA, ","), (T.INT, "2"), (T.RBRACKET, "]"), (T.SEMICOLON, ";"),
        (T.LBRACE, "{"), (T.STRING, "foo"), (T.COLON, ":"), (T.STRING, "bar"), (T.RBRACE, "}"),
        (T.EOF, ""),
    ]
    assert kinds(source) == expected


def test_keywords_are_checked_after_full_identifier():
    assert kinds("letter fnord iffy return_value") == [
        (T.IDENT, "letter"), (T.IDENT, "fnord"), (T.IDENT, "iffy"), (T.IDENT, "return_value"),
        (T.EOF, ""),
    ]


def test_two_char_operators_fall_back_to_single():
    assert kinds("= == ! != =!") == [
        (T.ASSIGN, "="), (T.EQ, "=="), (T.BANG, "!"), (T.NOT_EQ, "!="),
        (T.ASSIGN, "="), (T.BANG, "!"), (T.EOF, ""),
    ]


def test_unknown_character_is_illegal_token():
    assert kinds("5 @ 3") == [
        (T.INT, "5"), (T.ILLEGAL, "@"), (T.INT, "3"), (T.EOF, ""),
    ]


def test_unterminated_string_is_illegal_token():
    assert kinds('let s = "abc') == [
        (T.LET, "let"), (T.IDENT, "s"), (T.ASSIGN, "="), (T.ILLEGAL, '"abc'), (T.EOF, ""),
    ]


def test_positions_are_one_based_lines_and_columns():
    toks = tokenize("let x = 1;\n  x + 2")
    assert (toks[0].line, toks[0].col) == (1, 1)
    assert (toks[1].line, toks[1].col) == (1, 5)
    x = toks[5]
    assert x.literal == "x"
    assert (x.line, x.col) == (2, 3)
    plus = toks[6]
    assert (plus.line, plus.col) == (2, 5)


def test_multiline_string_advances_line_count():
    toks = tokenize('"a\nbc" x')
    assert toks[0].type is T.STRING
    assert toks[0].literal == "a\nbc"
    assert (toks[1].line, toks[1].col) == (2, 5)


def test_iteration_is_restartable():
    lexer = Lexer("1 + 2")
    first = list(lexer)
    second = list(lexer)
    assert first == second
    assert [t.type for t in first] == [T.INT, T.PLUS, T.INT, T.EOF]


def test_next_token_keeps_returning_eof():
    lexer = Lexer("x")
    assert lexer.next_token().type is T.IDENT
    assert lexer.next_token().type is T.EOF
    assert lexer.next_token().type is T.EOF
    assert lexer.next_token().type is T.EOF


@pytest.mark.parametrize("source", [
    "",
    "   \n\t  ",
    "@#$%^&~`",
    '"',
    '"""',
    "fn fn fn (((",
    "12abc34",
    "éè 中文",
    "let x = [1, {2: 3}];;;",
])
def test_lexing_is_total(source):
    toks = tokenize(source)
    assert toks
    assert toks[-1].type is T.EOF
    assert all(t.type is not T.EOF for t in toks[:-1])


def test_digits_end_an_identifier():
    assert kinds("abc12") == [(T.IDENT, "abc"), (T.INT, "12"), (T.EOF, "")]


def test_token_repr():
    assert repr(Token(T.INT, "5", 1, 2)) == "Token(INT, '5', 1:2)"
