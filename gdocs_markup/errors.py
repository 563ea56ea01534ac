class StructuralError(Exception):
    """Error raised when a document cannot be converted without silently corrupting the output."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class MalformedLinkError(StructuralError):
    """Error raised when an anchor href does not have the expected redirect-wrapped shape."""

    def __init__(self, href: str, reason: str):
        self.href = href
        self.reason = reason
        super().__init__(f"Unexpected link shape - {reason}: {href!r}")


class InternalInconsistencyError(StructuralError):
    """Error raised when an element closes without a matching open context."""

    def __init__(self, tag: str, detail: str = "no matching open element"):
        self.tag = tag
        super().__init__(f"Parser state is inconsistent at </{tag}>: {detail}.")
