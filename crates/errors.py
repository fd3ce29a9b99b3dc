"""
Exceptions raised by the cratesdocs build and ingest pipeline.

Library exceptions (OSError, JSON/TOML decode errors, requests and tarfile
errors, Django database errors) are wrapped into these at the boundary where
they happen, with the original kept as ``__cause__``.
"""


class CratesDocsError(Exception):
    """Base class for all cratesdocs errors"""
    pass


class CrateIndexError(CratesDocsError):
    """Raised when a crate cannot be resolved from the mirrored index"""
    pass


class IndexFileNotFound(CrateIndexError):
    """No index file exists for the requested crate name"""
    pass


class IndexParseError(CrateIndexError):
    """An index line is not valid JSON"""
    pass


class IndexShapeError(CrateIndexError):
    """An index line is not an object or lacks a required string field"""
    pass


class FilesystemError(CratesDocsError):
    """Reading, writing, copying or removing files failed"""
    pass


class ManifestError(CratesDocsError):
    """Cargo.toml is missing, unparsable, or does not describe a package"""
    pass


class FetchError(CratesDocsError):
    """An HTTP fetch (crate archive or registry API) failed"""
    pass


class ArchiveError(CratesDocsError):
    """A downloaded .crate archive could not be extracted"""
    pass


class RegistryError(CratesDocsError):
    """The registry API returned JSON of an unexpected shape"""
    pass


class CommandFailure(CratesDocsError):
    """
    An external command exited with a non-zero status or could not be run.

    The combined stdout/stderr is available as ``log``.
    """

    def __init__(self, message, log=''):
        super().__init__(message)
        self.log = log


class BuildFailed(CommandFailure):
    """cargo doc did not succeed for a crate"""
    pass


class StagingError(CratesDocsError):
    """Local path dependencies of a crate could not be staged"""
    pass


class DependencyResolutionError(StagingError):
    """A path dependency is not in the index or no version matches its requirement"""
    pass


class MissingRelocationTarget(StagingError):
    """The extracted dependency directory does not exist after extraction"""
    pass


class DatabaseError(CratesDocsError):
    """A query against the relational store failed"""
    pass


class EncodingError(CratesDocsError):
    """A structured release field could not be serialized to JSON"""
    pass
