class ReaperError(Exception):
    """
    Base class for every error raised by pod-reaper.
    """


class ConfigurationError(ReaperError):
    """
    A configuration value is missing, malformed, or leaves no rule active.

    Fatal: raised before the first cycle runs.
    """


class RetrievalError(ReaperError):
    """
    Listing pods from the cluster failed.

    Fatal for the running cycle: an incomplete view of the fleet is never
    treated as an empty one.
    """


class ReapError(ReaperError):
    """
    A delete or eviction request was rejected or failed.

    Recoverable: logged by the reaper, the cycle moves on to the next pod.
    """

    def __init__(self, message: str, namespace: str = "", name: str = ""):
        super().__init__(message)
        self.namespace = namespace
        self.name = name
