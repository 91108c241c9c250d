class ParseError(RuntimeError):
    def __init__(self, message, *, text, line=None, column=None):
        super().__init__(message)
        self.text = text
        self.line = line
        self.column = column

    @classmethod
    def from_pyparsing(cls, what, e, **kw):
        """
        Wraps a pyparsing.ParseException, marking the position of
        the failure in the offending input with "@@@".
        """
        message = "Error parsing {} at \"@@@\": {} ({})".format(
            what,
            e.mark_input_line("@@@"),
            e.msg
        )
        return cls(message, text=e.pstr, line=e.lineno, column=e.col, **kw)


class TaglineError(ParseError):
    def __init__(self, message, *, path=None, **kw):
        super().__init__(message, **kw)
        self.path = path


class QuerySyntaxError(ParseError):
    pass


class CommandError(RuntimeError):
    pass
