from __future__ import annotations

from ..application import SolarPumpApplication


def get_application_service() -> SolarPumpApplication:
    """
    Provide a SolarPumpApplication configured for API usage.
    """
    # API does not write exports to disk
    return SolarPumpApplication(
        save_outputs=False,
        result_builder=None,
    )
