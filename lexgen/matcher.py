"""
    lexgen.matcher
    ~~~~~~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
from collections import namedtuple


Span = namedtuple("Span", ["start", "end"])


class Match(namedtuple("Match", ["name", "span"])):
    """
    The longest prefix an automaton accepted, `name` is the token it was
    accepted as.
    """
    __slots__ = ()

    def group(self, string):
        return string[self.span.start:self.span.end]


class MatcherBase(object):
    def match(self, string, offset=0):
        """
        Returns `None` or a :class:`Match` for the longest non-empty prefix
        of ``string[offset:]`` that reaches an accepting state.
        """
        raise NotImplementedError()

    def find(self, string, offset=0):
        """
        Returns the first :class:`Match` at or after `offset` or `None`.
        """
        while offset < len(string):
            match = self.match(string, offset)
            if match is not None:
                return match
            offset += 1

    def find_all(self, string, offset=0):
        """
        Yields non-overlapping matches from left to right.
        """
        match = self.find(string, offset)
        while match is not None:
            yield match
            match = self.find(string, match.span.end)
