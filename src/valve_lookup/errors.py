"""
Error taxonomy for loading and joining the valve data.

All of these are fatal for the request that hit them. Orphaned Zone Sheet
rows are not errors (see joiner.join_valve_data).
"""


class ValveLookupError(RuntimeError):
    """Base class. Carries a kind + human message for the API boundary."""

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_record(self) -> dict:
        return {"error": self.kind, "message": str(self)}


class SchemaError(ValveLookupError):
    """A required column is missing from a source table."""


class EmptySourceError(ValveLookupError):
    """The Valve Sheet has no data rows."""


class JoinError(ValveLookupError):
    """Fetching a source table failed while building the graph."""


class DataSourceError(ValveLookupError):
    """Refresh failed and there is no cached data to fall back on."""

    def to_record(self) -> dict:
        rec = super().to_record()
        # keep the kind of the underlying failure (SchemaError, JoinError, ...)
        cause = self.__cause__
        rec["cause"] = type(cause).__name__ if cause is not None else None
        return rec
