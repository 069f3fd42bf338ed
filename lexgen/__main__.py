import sys
import logging
import unittest

from docopt import docopt

from lexgen.fa import NFA
from lexgen.parser import RegexException
from lexgen.rules import RuleFileError, load_rules
from lexgen.tokenizer import LexError, Tokenizer


def main(argv=sys.argv):
    """
    Usage:
      lexgen tokenize [options] <rules> <source>
      lexgen dot [options] (nfa | dfa) <rules>
      lexgen test [<args>...]
      lexgen -h | --help

    Options:
      -h --help             Show this.
      --minimize            Minimize the DFA.
      --strict              Fail on characters no rule matches.
      --skip=<name>         Token name whose matches are dropped [default: ;].
      -o --output=<file>    Write the graph to <file> instead of stdout.
      -v --verbose          Log what is being built.
    """
    arguments = docopt(main.__doc__, argv[1:], help=True)
    if arguments["test"]:
        import lexgen.tests
        unittest.main(
            module=lexgen.tests,
            argv=argv[0:1] + arguments["<args>"],
            buffer=True
        )
        return 0
    logging.basicConfig(
        level=logging.DEBUG if arguments["--verbose"] else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )
    try:
        if arguments["tokenize"]:
            return tokenize(arguments)
        return dot(arguments)
    except (RegexException, RuleFileError, LexError, OSError) as error:
        print("error: %s" % error, file=sys.stderr)
        return 1


def tokenize(arguments):
    tokenizer = Tokenizer.from_file(
        arguments["<rules>"],
        minimize=arguments["--minimize"],
        skip=arguments["--skip"],
        strict=arguments["--strict"]
    )
    with open(arguments["<source>"], encoding="utf-8") as file:
        source = file.read()
    for type, lexeme in tokenizer.lex(source):
        print("%-15s %s" % (type, lexeme))
    return 0


def dot(arguments):
    automaton = NFA.from_rules(load_rules(arguments["<rules>"]))
    if arguments["dfa"]:
        automaton = automaton.to_dfa()
        if arguments["--minimize"]:
            automaton = automaton.minimize()
    if arguments["--output"] is None:
        sys.stdout.write(automaton.to_dot())
    else:
        with open(arguments["--output"], "w", encoding="utf-8") as file:
            file.write(automaton.to_dot())
    return 0


if __name__ == "__main__":
    sys.exit(main())
