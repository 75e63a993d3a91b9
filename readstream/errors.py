"""
    Exceptions raised by readstream.

    Configuration and resource errors are fatal for the object under construction, stream errors are fatal for
    the running iteration. Invalid region queries are not exceptions: set_region() returns False.
"""


class ReadStreamError(Exception):
    """ Base class of all readstream errors """
    pass


class ConfigurationError(ReadStreamError, ValueError):
    """ Invalid reader configuration, e.g., no sources or an unknown merge type """
    pass


class IncompatibleReferencesError(ConfigurationError):
    """ Sources with differing sequence dictionaries were combined """
    pass


class ResourceError(ReadStreamError, OSError):
    """ A source could not be opened. The offending file is available via the `path` attribute """

    def __init__(self, msg, path=None):
        super().__init__(msg)
        self.path = path


class MissingFileError(ResourceError):
    pass


class MissingReferenceError(ResourceError):
    pass


class MissingIndexError(ResourceError):
    pass


class HeaderReadError(ResourceError):
    pass


class IndexLoadError(ResourceError):
    pass


class StreamError(ReadStreamError):
    """ A malformed record was encountered while iterating a source """

    def __init__(self, msg, path=None):
        super().__init__(msg)
        self.path = path
