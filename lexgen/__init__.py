"""
    lexgen
    ~~~~~~

    A lexer generator. Lex-style rules, each pairing a pattern with a token
    name, are compiled into a single NFA, turned into a DFA by subset
    construction and used to split text into tokens, always taking the
    longest match. When rules accept the same longest lexeme the one declared
    first wins.

    Patterns support literals, ``\\s``, escapes, character classes (``[a-z]``,
    ``[^"]``), groups, alternation and the ``*``, ``+`` and ``?`` operators.

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
