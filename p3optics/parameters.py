"""
Configuration for the P3 cloud optics scheme

Date: 2025-01-10
"""

from dataclasses import dataclass

from .constants import N_SW_BANDS, REFERENCE_SW_BAND, REFF_ICE_FILL


@dataclass(frozen=True)
class CloudOpticsParameters:
    """Configuration parameters for P3 cloud optics"""

    # Whether the ice size from microphysics is already a generalized
    # effective size (Dge). Otherwise it is an effective radius and is
    # converted with Dge = 2/sqrt(3) * r_eff.
    reff_ice_holds_dge: bool = True

    # Shortwave band whose optical depth weights the diagnostic ice size
    reference_band: int = REFERENCE_SW_BAND

    # Diagnostic ice effective radius where there is no ice (microns)
    reff_ice_fill: float = REFF_ICE_FILL

    # Cloud-free levels appended on top to match the radiation grid
    n_pad_levels: int = 1

    def __post_init__(self):
        if not 0 <= self.reference_band < N_SW_BANDS:
            raise ValueError(
                f"Invalid reference band: {self.reference_band}. "
                f"Must be in [0, {N_SW_BANDS})."
            )
        if self.n_pad_levels < 0:
            raise ValueError(f"Invalid number of pad levels: {self.n_pad_levels}")

    @classmethod
    def default(cls, **kwargs) -> 'CloudOpticsParameters':
        """Return default cloud optics parameters"""
        return cls(**kwargs)
