"""City membership test used to keep resolutions inside the target city."""

from __future__ import annotations

from typing import Optional

from ..domain.models import MUNICIPALITY_ADCODE_PREFIXES, CityConstraint


def is_in_city(
    constraint: CityConstraint,
    district_code: Optional[str] = None,
    city_name: Optional[str] = None,
    address: Optional[str] = None,
) -> bool:
    """Decide whether a candidate lies in the constrained city.

    When the constraint has an adcode prefix and the candidate has an
    adcode, the prefix alone decides. Otherwise the city hint is matched
    against the candidate's city name and address, then against the
    municipality table. A constraint without prefix or hint admits
    everything.
    """
    code = (district_code or "").strip()
    if constraint.adcode_prefix and code:
        return code.startswith(constraint.adcode_prefix)

    hint = (constraint.city_hint or "").strip()
    if not hint:
        return True

    city = (city_name or "").strip()
    if city and (hint in city or city in hint):
        return True
    if address and hint in address:
        return True

    for municipality, prefix in MUNICIPALITY_ADCODE_PREFIXES.items():
        if municipality in hint and code.startswith(prefix):
            return True

    return False
