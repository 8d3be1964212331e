import attrs


@attrs.define(frozen=True)
class SelectionResult:
    seat_id: str
    selected: bool  # True when the toggle selected the seat, False when it released it
    selection: tuple[str, ...]


@attrs.define(frozen=True)
class MergeOutcome:
    """What a live event or snapshot reconcile actually changed."""

    changed: tuple[str, ...] = ()
    evicted: tuple[str, ...] = ()  # seats removed from the local selection by the server

    @property
    def is_noop(self) -> bool:
        return not self.changed
