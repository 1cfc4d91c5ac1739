"""Rate table errors."""


class MalformedTableError(ValueError):
    """
    Raised when a carrier's raw rate data cannot be turned into a RateTable.

    Scoped to one carrier: the remaining carriers still load.
    """

    def __init__(self, carrier, reason):
        self.carrier = carrier
        self.reason = reason
        self.message = f"{carrier} rate table is malformed: {reason}"
        super().__init__(self.message)

    def __str__(self):
        return self.message
