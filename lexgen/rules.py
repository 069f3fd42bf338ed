"""
    lexgen.rules
    ~~~~~~~~~~~~

    Reads lex-style rule files. Every line pairs a pattern with the name of
    the token it produces, the name being the last whitespace separated
    field::

        %%
        if          "IF"
        [a-z]+      "ID"
        \\s+         ;
        %%

    Lines starting with ``%%`` and blank lines are ignored.

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
from collections import namedtuple


Rule = namedtuple("Rule", ["pattern", "name"])


SECTION_MARKER = "%%"


class RuleFileError(Exception):
    def __init__(self, reason, line, lineno, filename="<rules>"):
        Exception.__init__(self, reason, line, lineno, filename)
        self.reason = reason
        self.line = line
        self.lineno = lineno
        self.filename = filename

    def __str__(self):
        return "%s:%d: %s\n%s" % (
            self.filename, self.lineno, self.reason, self.line
        )


def parse_rules(source, filename="<rules>"):
    rules = []
    for lineno, line in enumerate(source.splitlines(), 1):
        if line.startswith(SECTION_MARKER) or not line.strip():
            continue
        fields = line.split()
        if len(fields) < 2:
            raise RuleFileError(
                "missing token name", line, lineno, filename
            )
        name = fields[-1].strip('"')
        if not name:
            raise RuleFileError("empty token name", line, lineno, filename)
        rules.append(Rule(" ".join(fields[:-1]), name))
    return rules


def load_rules(path):
    with open(path, encoding="utf-8") as file:
        return parse_rules(file.read(), filename=str(path))
