"""
Deployment exceptions.

Fatal failures of a deployment attempt, each with an actionable message.
Expected negative outcomes (no device, no package) are NOT exceptions; they
come back as a DeploymentResult with exit code 1.
"""


class DeploymentError(Exception):
    """
    Raised when a deployment attempt cannot continue.

    Examples:
        - Bridge tool could not be started
        - Download failed
        - Archive is corrupt or tries to escape its extraction root
    """
    pass


class ProcessSpawnError(DeploymentError):
    """The bridge tool executable could not be started."""
    pass


class ProcessStreamError(DeploymentError):
    """The bridge tool's output could not be read to completion."""
    pass


class FetchError(DeploymentError):
    """
    Raised when the artifact cannot be downloaded into the cache.

    Covers HTTP client construction, the request itself, reading the
    response body and writing the cached file.
    """
    pass


class ExtractionError(DeploymentError):
    """Raised when a cached archive cannot be expanded."""
    pass


class PathTraversalError(ExtractionError):
    """An archive entry would be written outside its extraction root."""

    def __init__(self, entry_name: str, extraction_root):
        self.entry_name = entry_name
        self.extraction_root = extraction_root
        super().__init__(
            f"Archive entry '{entry_name}' resolves outside extraction root "
            f"{extraction_root}; refusing to extract"
        )
