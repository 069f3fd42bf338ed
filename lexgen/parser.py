"""
    lexgen.parser
    ~~~~~~~~~~~~~

    Compiles patterns directly into automaton fragments on a
    :class:`~lexgen.graph.Graph`.

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
from lexgen.graph import EPSILON


#: Characters a negated character class is taken from.
PRINTABLE = frozenset(chr(i) for i in range(ord(" "), ord("~") + 1))

#: Characters matched by ``\s``.
WHITESPACE = frozenset(" \t\n\r")


class RegexException(Exception):
    pass


class PatternError(RegexException):
    def __init__(self, reason, annotation=None, rule=None):
        RegexException.__init__(self, reason, annotation)
        self.reason = reason
        self.annotation = annotation
        self.rule = rule

    def __str__(self):
        message = self.reason
        if self.rule is not None:
            message = "%s in rule %s (pattern %r)" % (
                message, self.rule.name, self.rule.pattern
            )
        if self.annotation is not None:
            message = "%s\n%s" % (message, self.annotation)
        return message


class Language(object):
    def __init__(self,
                 escape="\\",
                 union="|",
                 group_begin="(", group_end=")",
                 either_begin="[", either_end="]",
                 neither_indicator="^",
                 zero_or_more="*", one_or_more="+", zero_or_one="?",
                 range="-",
                 whitespace="s"
                 ):
        self.escape = escape
        self.union = union
        self.group_begin = group_begin
        self.group_end = group_end
        self.either_begin = either_begin
        self.either_end = either_end
        self.neither_indicator = neither_indicator
        self.zero_or_more = zero_or_more
        self.one_or_more = one_or_more
        self.zero_or_one = zero_or_one
        self.range = range
        self.whitespace = whitespace

    @property
    def repetition_characters(self):
        return frozenset([
            self.zero_or_more, self.one_or_more, self.zero_or_one
        ])

    @property
    def looping_characters(self):
        return frozenset([self.zero_or_more, self.one_or_more])


DEFAULT_LANGUAGE = Language()


class Input(object):
    def __init__(self, string):
        self.string = string
        self.position = -1

    @property
    def is_consumed(self):
        return self.position + 1 >= len(self.string)

    def lookahead(self, n=1):
        index = self.position + n
        if index < len(self.string):
            return self.string[index]
        return None

    def next(self, reason="unexpected end of pattern"):
        if self.is_consumed:
            raise PatternError(reason, self.annotated(self.position + 1))
        self.position += 1
        return self.string[self.position]

    def annotated(self, position=None):
        position = self.position if position is None else position
        annotation = [" "] * (position + 1)
        annotation[position] = "^"
        return "%s\n%s" % (self.string, "".join(annotation))

    def annotated_range(self, start=None, end=None):
        start = self.position if start is None else start
        end = self.position if end is None else end
        annotation = [" "] * (end + 1)
        annotation[start] = annotation[end] = "^"
        for position in range(start + 1, end):
            annotation[position] = "-"
        return "%s\n%s" % (self.string, "".join(annotation))


class Compiler(object):
    """
    Turns patterns into NFA fragments.

    Fragments are built on a stack of node ids: every atom pushes the node it
    ends in, postfix operators rewire the two topmost entries and alternation
    restarts the stack at the start node.
    """
    def __init__(self, graph, language=DEFAULT_LANGUAGE):
        self.graph = graph
        self.language = language

    def compile(self, pattern, name, start, mark_ending=False, rule=0):
        """
        Compiles `pattern` starting at the node `start` and returns the id of
        the node the pattern ends in. With `mark_ending` that node becomes
        terminal for the token `name`.
        """
        input = Input(pattern)
        end = self.compile_expression(input, name, start)
        if not input.is_consumed:
            character = input.next()
            raise PatternError(
                "found unmatched %s" % character,
                input.annotated()
            )
        if mark_ending:
            if end == start:
                raise PatternError("empty pattern")
            self.graph.mark_terminal(end, name, rule)
        return end

    def compile_expression(self, input, name, start):
        language = self.language
        alternatives = []
        stack = [start]
        while True:
            character = input.lookahead()
            if character is None or character == language.group_end:
                break
            if character == language.union:
                input.next()
                alternatives.append(stack[-1])
                stack = [start]
            elif character in language.repetition_characters:
                input.next()
                if len(stack) < 2:
                    raise PatternError(
                        "%s is not preceded by a repeatable expression" % (
                            character
                        ),
                        input.annotated()
                    )
                self.compile_repetition(character, stack, name)
            else:
                if self.is_looped(input):
                    entry = self.graph.add_node(name)
                    self.graph.add_edge(stack[-1], entry, EPSILON)
                    stack.append(entry)
                stack.append(self.compile_atom(input, name, stack[-1]))
        if alternatives:
            alternatives.append(stack[-1])
            merge = self.graph.add_node(name)
            for end in alternatives:
                self.graph.add_edge(end, merge, EPSILON)
            return merge
        return stack[-1]

    def compile_atom(self, input, name, start):
        character = input.lookahead()
        if character == self.language.escape:
            return self.compile_escape(input, name, start)
        elif character == self.language.either_begin:
            return self.compile_either(input, name, start)
        elif character == self.language.group_begin:
            return self.compile_group(input, name, start)
        input.next()
        return self.add_transition(start, name, frozenset(character))

    def add_transition(self, start, name, characters):
        end = self.graph.add_node(name)
        self.graph.add_edge(start, end, characters)
        return end

    def compile_escape(self, input, name, start):
        input.next()
        character = input.next(
            "unexpected end of pattern, following escape character"
        )
        if character == self.language.whitespace:
            return self.add_transition(start, name, WHITESPACE)
        return self.add_transition(start, name, frozenset(character))

    def compile_either(self, input, name, start):
        language = self.language
        input.next()
        begin = input.position
        negated = input.lookahead() == language.neither_indicator
        if negated:
            input.next()
        characters = set()
        previous = None
        while True:
            character = input.lookahead()
            if character is None:
                raise PatternError(
                    "unexpected end of pattern, expected %s corresponding "
                    "to %s" % (language.either_end, language.either_begin),
                    input.annotated_range(begin, input.position + 1)
                )
            input.next()
            if character == language.either_end:
                break
            if character == language.escape:
                character = input.next(
                    "unexpected end of pattern, following escape character"
                )
                if character == language.whitespace:
                    characters.update(WHITESPACE)
                    previous = None
                    continue
            elif (character == language.range and previous is not None and
                  input.lookahead() not in (None, language.either_end)):
                range_begin = input.position - 1
                end = input.next()
                if end == language.escape:
                    end = input.next(
                        "unexpected end of pattern, following escape "
                        "character"
                    )
                if ord(end) < ord(previous):
                    raise PatternError(
                        "range %s-%s is out of order" % (previous, end),
                        input.annotated_range(range_begin, input.position)
                    )
                characters.update(
                    chr(i) for i in range(ord(previous), ord(end) + 1)
                )
                previous = None
                continue
            characters.add(character)
            previous = character
        if negated:
            characters = PRINTABLE - characters
        if not characters:
            raise PatternError(
                "character class matches nothing",
                input.annotated_range(begin, input.position)
            )
        return self.add_transition(start, name, frozenset(characters))

    def compile_group(self, input, name, start):
        input.next()
        begin = input.position
        group = self.graph.add_node(name)
        self.graph.add_edge(start, group, EPSILON)
        end = self.compile_expression(input, name, group)
        if input.lookahead() != self.language.group_end:
            raise PatternError(
                "unexpected end of pattern, expected %s corresponding to %s" % (
                    self.language.group_end, self.language.group_begin
                ),
                input.annotated_range(begin, input.position + 1)
            )
        input.next()
        return end

    def compile_repetition(self, operator, stack, name):
        repeated = stack.pop()
        previous = stack[-1]
        if operator == self.language.one_or_more:
            self.graph.add_edge(repeated, previous, EPSILON)
            stack.append(repeated)
            return
        merge = self.graph.add_node(name)
        self.graph.add_edge(previous, merge, EPSILON)
        self.graph.add_edge(repeated, merge, EPSILON)
        if operator == self.language.zero_or_more:
            self.graph.add_edge(merge, previous, EPSILON)
        stack.append(merge)

    def is_looped(self, input):
        """
        Tells whether the run of postfix operators following the atom at the
        current position contains ``*`` or ``+``. Such atoms get an entry node
        of their own, the loop would otherwise lead back into whatever
        precedes the atom.
        """
        string = input.string
        index = self.skip_atom(string, input.position + 1)
        while (index < len(string) and
               string[index] in self.language.repetition_characters):
            if string[index] in self.language.looping_characters:
                return True
            index += 1
        return False

    def skip_atom(self, string, index):
        language = self.language
        character = string[index]
        if character == language.escape:
            return index + 2
        elif character == language.either_begin:
            index += 1
            if index < len(string) and string[index] == language.neither_indicator:
                index += 1
            while index < len(string) and string[index] != language.either_end:
                index += 2 if string[index] == language.escape else 1
            return index + 1
        elif character == language.group_begin:
            index += 1
            while index < len(string) and string[index] != language.group_end:
                index = self.skip_atom(string, index)
            return index + 1
        return index + 1
