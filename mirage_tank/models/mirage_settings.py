from __future__ import annotations
from dataclasses import dataclass
import math
import os

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class MirageSettings:
    """
    Value-object holding the knobs of the mirage recipe.

    light_ratio lifts the white-background image toward mid-gray,
    dark_ratio pulls the black-background image down toward it.
    """
    scale: float = 1.0          # (0, +inf)
    light_ratio: float = 0.5    # [-1 , +1]
    dark_ratio: float = -0.5    # [-1 , +1]

    def __post_init__(self):
        if not (math.isfinite(self.scale) and self.scale > 0):
            raise ConfigurationError(f"Scale must be a finite number > 0, got {self.scale}")
        for name in ("light_ratio", "dark_ratio"):
            value = getattr(self, name)
            if not -1.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be in [-1, 1], got {value}")

    @classmethod
    def from_env(cls, **overrides) -> "MirageSettings":
        """
        Build settings from MIRAGE_* env vars; keyword overrides that are
        not None win over the environment.
        """
        values = {
            "scale": os.getenv("MIRAGE_SCALE", "1.0"),
            "light_ratio": os.getenv("MIRAGE_LIGHT_RATIO", "0.5"),
            "dark_ratio": os.getenv("MIRAGE_DARK_RATIO", "-0.5"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**{k: float(v) for k, v in values.items()})
        except ValueError as err:
            raise ConfigurationError(f"Invalid mirage setting: {err}") from err
