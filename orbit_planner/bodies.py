import csv
import math
from pathlib import Path

import pydantic
from pydantic import ConfigDict, Field

from orbit_planner.constants import DEFAULT_ORBIT_ALTITUDE_FACTOR, DEFAULT_ORBIT_ROUNDING


class GravitationalBody(pydantic.BaseModel):
    """
    Central body that an orbit is defined around.

    Bodies are immutable and compare (and hash) by value, so two bodies loaded
    from different sources are interchangeable when their fields agree.

    Attributes:
        name: Name of the body (e.g., "Kerbin", "Earth")
        mu: Gravitational parameter GM (m^3/s^2), strictly positive
        radius: Physical radius of the body (m)
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    name: str
    mu: float = Field(gt=0.0)
    radius: float = Field(default=0.0, ge=0.0)

    def default_orbit(self):
        """
        Circular equatorial parking orbit just above the surface.

        The periapsis radius is 5% above the surface, rounded up to the next
        multiple of 25 km.

        Returns:
            Orbit with all angular elements and the time of periapsis at zero.
        """
        from orbit_planner.orbit import Orbit

        rpe = math.ceil(self.radius * DEFAULT_ORBIT_ALTITUDE_FACTOR / DEFAULT_ORBIT_ROUNDING) * DEFAULT_ORBIT_ROUNDING
        return Orbit(rpe, 0.0, 0.0, 0.0, 0.0, 0.0, self)

    def zero_orbit(self):
        """Orbit around this body with every element set to zero."""
        from orbit_planner.orbit import Orbit

        return Orbit(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, self)

    def __repr__(self) -> str:
        return f"GravitationalBody(name='{self.name}', mu={self.mu}, radius={self.radius})"

    def __str__(self) -> str:
        return self.name


def load_bodies_data() -> dict[str, GravitationalBody]:
    """
    Load the body catalogue from CSV.

    Returns:
        Dictionary mapping body name to GravitationalBody, in catalogue id order
    """
    filepath = Path(__file__).parent / 'data' / 'bodies.csv'
    rows = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            body_id = int(row['# Body ID'])
            body = GravitationalBody(
                name=row['Name'],
                mu=float(row['GM (m^3/s^2)']),
                radius=float(row['Radius (m)']),
            )
            rows.append((body_id, body))

    rows.sort(key=lambda entry: entry[0])
    return {body.name: body for _, body in rows}


def get_body(name: str) -> GravitationalBody:
    """Look up a catalogue body by name."""
    try:
        return bodies_data[name]
    except KeyError:
        raise KeyError(f"Unknown body '{name}'. Known bodies: {', '.join(bodies_data)}") from None


bodies_data = load_bodies_data()

# The Kerbol system in catalogue id order
KSP_BODY_NAMES = (
    "Kerbol", "Kerbin", "Mun", "Minmus", "Moho", "Eve", "Duna", "Ike", "Jool",
    "Laythe", "Vall", "Bop", "Tylo", "Gilly", "Pol", "Dres", "Eeloo",
)
