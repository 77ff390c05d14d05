"""
Error kinds shared by the RSSHub client, the search core and the tool layer.
"""


class RSSHubMCPError(Exception):
    """Base class for all errors reported back to MCP clients."""


class NotFoundError(RSSHubMCPError):
    """Unknown namespace, radar rule, category or feed path."""


class InvalidArgumentError(RSSHubMCPError):
    """Malformed tool arguments (missing name, negative limit, ...)."""


class UpstreamUnavailableError(RSSHubMCPError):
    """RSSHub could not be reached or answered with a server error."""


class UpstreamParseError(RSSHubMCPError):
    """RSSHub answered with a body that is not the expected JSON."""
