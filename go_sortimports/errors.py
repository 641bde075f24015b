"""Exceptions raised by go-sortimports."""


class SortImportsError(Exception):
    """Base class for all go-sortimports errors."""


class ImportBlockError(SortImportsError):
    """The import block of a file could not be parsed."""


class MalformedImportBlock(ImportBlockError):
    """An import block was opened but its interior cannot be scanned."""


class DanglingComment(ImportBlockError):
    """A run of comments is not followed by an import line."""


class InvalidImportLine(ImportBlockError):
    """An import line does not have the form ``[alias] "path"``."""


class UnquotableImportPath(ImportBlockError):
    """The path token of an import line is not a valid string literal."""


class FormatError(SortImportsError):
    """The external code formatter rejected or could not process the source."""


class BuildMetadataError(SortImportsError):
    """Package or module metadata could not be determined."""


class ConfigError(SortImportsError):
    """The configuration file holds an invalid value."""
