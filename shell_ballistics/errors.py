"""Exceptions raised by the ballistics engine and its orchestration."""


class BallisticsError(Exception):
    """Base class for all shell_ballistics errors."""


class InvalidShellError(BallisticsError):
    """Shell parameters that cannot describe a physical shell."""


class UnreachableRangeError(BallisticsError):
    """Target range lies beyond the maximum range of the search bracket."""

    def __init__(self, target_range: float, max_range: float):
        self.target_range = target_range
        self.max_range = max_range
        super().__init__(
            f"Target range {target_range:.1f} m exceeds maximum range "
            f"{max_range:.1f} m"
        )


class UnknownVehicleClassError(BallisticsError, ValueError):
    """Vehicle class string not present in VehicleClass."""
