"""
    lexgen.tokenizer
    ~~~~~~~~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
import logging

from lexgen.fa import NFA
from lexgen.parser import DEFAULT_LANGUAGE
from lexgen.rules import load_rules


logger = logging.getLogger(__name__)


#: Tokens with this name are recognized but not emitted.
SKIP = ";"


class LexError(Exception):
    def __init__(self, reason, position, character):
        Exception.__init__(self, reason, position, character)
        self.reason = reason
        self.position = position
        self.character = character

    def __str__(self):
        return self.reason


class Token(object):
    def __init__(self, type, lexeme, span):
        self.type = type
        self.lexeme = lexeme
        self.span = span

    def __iter__(self):
        return iter((self.type, self.lexeme))

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return (
                self.type == other.type and
                self.lexeme == other.lexeme and
                self.span == other.span
            )
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "%s(%r, %r, %r)" % (
            self.__class__.__name__, self.type, self.lexeme, self.span
        )


class Tokenizer(object):
    """
    Splits strings into tokens, always taking the longest prefix the DFA
    accepts.

    Characters no rule matches are skipped unless `strict` is set, in which
    case a :exc:`LexError` is raised.
    """
    def __init__(self, dfa, skip=SKIP, strict=False):
        self.dfa = dfa
        self.skip = skip
        self.strict = strict

    @classmethod
    def from_rules(cls, rules, minimize=False, language=DEFAULT_LANGUAGE,
                   **options):
        dfa = NFA.from_rules(rules, language).to_dfa()
        if minimize:
            dfa = dfa.minimize()
        return cls(dfa, **options)

    @classmethod
    def from_file(cls, path, **options):
        return cls.from_rules(load_rules(path), **options)

    def __call__(self, string):
        index = 0
        while index < len(string):
            match = self.dfa.match(string, index)
            if match is None:
                if self.strict:
                    raise LexError(
                        "no rule matches %r at position %d" % (
                            string[index], index
                        ),
                        index,
                        string[index]
                    )
                logger.debug(
                    "skipping unmatched %r at position %d",
                    string[index], index
                )
                index += 1
                continue
            if match.name != self.skip:
                yield Token(
                    match.name,
                    match.group(string).strip(),
                    match.span
                )
            index = match.span.end

    def lex(self, string):
        return [(token.type, token.lexeme) for token in self(string)]
