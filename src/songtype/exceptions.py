class SongtypeError(Exception):
    """Base exception for songtype."""


class ParseError(SongtypeError):
    """Raised when the markup text is malformed."""

    def __init__(self, message: str, line: int, column: int):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"Parse error at line {line}, column {column}: {message}")


class TranslationError(SongtypeError):
    """Raised when a parsed document breaks a rule of the markup language.

    ``keyword`` and ``sexp`` identify the offending form when there is one.
    """

    def __init__(self, message: str, keyword: str | None = None, sexp=None):
        self.message = message
        self.keyword = keyword
        self.sexp = sexp
        super().__init__(f"Translation error: {message}")


class EmptyDocumentError(TranslationError):
    """Raised when the document has no metadata block."""

    def __init__(self):
        super().__init__("Document is empty; a metadata block is required")


class TextInMetadataError(TranslationError):
    """Raised for bare text in the metadata block."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Text not permitted in metadata block: {text!r}")


class UnrecognizedKeywordError(TranslationError):
    """Raised for a metadata keyword outside the known tables."""

    def __init__(self, keyword: str, sexp):
        super().__init__(f"Unrecognized meta keyword {keyword!r} in {sexp}", keyword, sexp)


class UnrecognizedFormattingError(TranslationError):
    """Raised for an inline formatting command that is not supported."""

    def __init__(self, keyword: str, sexp):
        super().__init__(f"Unrecognized formatting command {sexp}", keyword, sexp)


class ArityError(TranslationError):
    """Raised when a form has the wrong number of arguments."""

    def __init__(self, keyword: str, sexp, expected: str):
        self.expected = expected
        super().__init__(f"⟦{keyword}⟧ takes {expected}: {sexp}", keyword, sexp)


class ArgumentTypeError(TranslationError):
    """Raised when a form requires a plain-text argument but got a nested form."""

    def __init__(self, keyword: str, sexp):
        super().__init__(f"Expected string argument in {sexp}", keyword, sexp)


class MissingTitleError(TranslationError):
    """Raised when the metadata block has no title."""

    def __init__(self):
        super().__init__("Song requires a title", "title")


class DuplicateTitleError(TranslationError):
    """Raised when the metadata block declares more than one title."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Song must have exactly one title, found {count}", "title")


class LayoutError(SongtypeError):
    """Raised when a layout request cannot be honoured at all.

    Content that merely does not fit the page is not an error; see
    :func:`songtype.layout.fit_and_render`.
    """
